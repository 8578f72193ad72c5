"""
Cegid (Acumatica) ERP REST API.

Uses the OAuth 2.0 password grant against the company identity server and
OData-style ``$top`` / ``$skip`` paging instead of ``?page=N``.
"""

from __future__ import annotations

from typing import Iterable, Optional

from apiplatform_sdk.clients import ApiPlatformClient
from apiplatform_sdk.core.config import CegidSettings
from apiplatform_sdk.models import ApiResponse, AuthMethod, ProviderConfig, QueryString

JSON_MIME_TYPE = "application/json"


def build_config(
    settings: CegidSettings,
    *,
    verify_tls: bool = True,
    timeout_seconds: float = 30.0,
) -> ProviderConfig:
    return ProviderConfig(
        name="cegid",
        base_url=settings.api_url,
        format="json",
        concat_format=False,
        accept=JSON_MIME_TYPE,
        content_type=JSON_MIME_TYPE,
        has_authentication=True,
        auth_method=AuthMethod.OAUTH2,
        auth_uri=f"{settings.company_slug.strip('/')}/{settings.auth_uri.strip('/')}",
        overridden_auth_url=settings.auth_url,
        login=settings.login,
        password=settings.password,
        oauth2_client_id=settings.client_id,
        oauth2_client_secret=settings.client_secret,
        oauth2_scope=settings.scope,
        oauth2_grant_type=settings.grant_type,
        token_lifetime_minutes=settings.token_lifetime_minutes,
        verify_tls=verify_tls,
        timeout_seconds=timeout_seconds,
    )


class CegidClient:
    """Endpoint helpers for the Cegid ERP."""

    def __init__(self, api: ApiPlatformClient, settings: CegidSettings) -> None:
        self._api = api
        self._settings = settings

    @property
    def api(self) -> ApiPlatformClient:
        return self._api

    def _query(
        self,
        page: Optional[int],
        select: Iterable[str] = (),
        expand: Iterable[str] = (),
    ) -> QueryString:
        query = QueryString()
        if page is not None:
            query = query.with_offset_limit(page, self._settings.items_per_page)
        query = query.add("$select", ",".join(select))
        return query.add("$expand", ",".join(expand))

    def get_customers(
        self, page: int = 1, select: Iterable[str] = (), expand: Iterable[str] = ()
    ) -> ApiResponse:
        return self._api.get("Customer", self._query(page, select, expand))

    def get_customer_locations(
        self, page: int = 1, select: Iterable[str] = (), expand: Iterable[str] = ()
    ) -> ApiResponse:
        return self._api.get("CustomerLocation", self._query(page, select, expand))

    def get_customer_location(
        self, location_id: str, select: Iterable[str] = (), expand: Iterable[str] = ()
    ) -> ApiResponse:
        if not location_id:
            raise ValueError("CustomerLocation ID is required.")
        return self._api.get(f"CustomerLocation/{location_id}", self._query(None, select, expand))

    def get_contacts(
        self, page: int = 1, select: Iterable[str] = (), expand: Iterable[str] = ()
    ) -> ApiResponse:
        return self._api.get("Contact", self._query(page, select, expand))


__all__ = ["CegidClient", "build_config"]
