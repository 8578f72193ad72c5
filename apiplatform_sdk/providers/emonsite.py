"""E-monsite CMS API: store orders and blog posts of a site."""

from __future__ import annotations

from typing import Optional

from apiplatform_sdk.clients import ApiPlatformClient
from apiplatform_sdk.core.config import EmonsiteSettings
from apiplatform_sdk.models import ApiResponse, AuthMethod, ProviderConfig, QueryString


def build_config(
    settings: EmonsiteSettings,
    *,
    verify_tls: bool = True,
    timeout_seconds: float = 30.0,
) -> ProviderConfig:
    return ProviderConfig(
        name="emonsite",
        base_url=settings.api_url,
        format="jsonld",
        has_authentication=settings.has_authentication,
        auth_method=AuthMethod.JWT,
        login=settings.login,
        password=settings.password,
        verify_tls=verify_tls,
        timeout_seconds=timeout_seconds,
    )


class EmonsiteClient:
    def __init__(self, api: ApiPlatformClient, site_id: Optional[str] = None) -> None:
        self._api = api
        self.site_id = site_id

    @property
    def api(self) -> ApiPlatformClient:
        return self._api

    def _site_query(self, page: int, order_property: str) -> QueryString:
        return (
            QueryString()
            .with_page(page)
            .with_order(order_property, "desc")
            .add("site_id", self.site_id)
        )

    def get_eco_orders(self, page: int = 1) -> ApiResponse:
        """Store orders, newest first."""
        return self._api.get("eco_orders", self._site_query(page, "addDt"))

    def get_blog_posts(self, page: int = 1) -> ApiResponse:
        """Blog posts, most recently published first."""
        return self._api.get("blog_posts", self._site_query(page, "publishFrom"))


__all__ = ["EmonsiteClient", "build_config"]
