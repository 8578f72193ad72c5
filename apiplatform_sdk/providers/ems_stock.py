"""Ems-Stock API. Public, so no authentication is performed."""

from __future__ import annotations

from apiplatform_sdk.clients import ApiPlatformClient
from apiplatform_sdk.core.config import EmsStockSettings
from apiplatform_sdk.models import ApiResponse, ProviderConfig, QueryString


def build_config(
    settings: EmsStockSettings,
    *,
    verify_tls: bool = True,
    timeout_seconds: float = 30.0,
) -> ProviderConfig:
    return ProviderConfig(
        name="ems_stock",
        base_url=settings.api_url,
        format="jsonld",
        has_authentication=False,
        verify_tls=verify_tls,
        timeout_seconds=timeout_seconds,
    )


class EmsStockClient:
    def __init__(self, api: ApiPlatformClient) -> None:
        self._api = api

    @property
    def api(self) -> ApiPlatformClient:
        return self._api

    def get_brands(self, page: int = 1) -> ApiResponse:
        query = QueryString().with_page(page).with_order("name", "asc")
        return self._api.get("brands", query)

    def get_products(self, page: int = 1) -> ApiResponse:
        query = QueryString().with_page(page).with_order("createdAt", "desc")
        return self._api.get("products", query)


__all__ = ["EmsStockClient", "build_config"]
