"""
Factory functions wiring settings, token storage and provider clients.
"""

from functools import lru_cache
from typing import Optional

import httpx

from apiplatform_sdk.clients import ApiPlatformClient, SQLiteTokenStore, TokenStore
from apiplatform_sdk.core.config import SdkSettings, get_settings
from apiplatform_sdk.providers import (
    CegidClient,
    EconfianceClient,
    EmonsiteClient,
    EmsStockClient,
    cegid,
    econfiance,
    emonsite,
    ems_stock,
)
from apiplatform_sdk.services import ApiTokenCipher


@lru_cache()
def _settings() -> SdkSettings:
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_token_cipher() -> Optional[ApiTokenCipher]:
    """Provide token encryption when a secret is configured."""
    secret = _settings().token_encryption_secret
    if not secret:
        return None
    return ApiTokenCipher(secret)


@lru_cache()
def get_token_store() -> SQLiteTokenStore:
    """Provide the shared SQLite token table."""
    return SQLiteTokenStore(_settings().token_db_path, cipher=get_token_cipher())


def get_econfiance_client(
    settings: SdkSettings | None = None,
    store: TokenStore | None = None,
    http_client: httpx.Client | None = None,
) -> EconfianceClient:
    settings = settings or _settings()
    config = econfiance.build_config(
        settings.econfiance,
        verify_tls=settings.verify_tls,
        timeout_seconds=settings.timeout_seconds,
    )
    api = ApiPlatformClient(config, store or get_token_store(), http_client=http_client)
    return EconfianceClient(api, settings.econfiance)


def get_cegid_client(
    settings: SdkSettings | None = None,
    store: TokenStore | None = None,
    http_client: httpx.Client | None = None,
) -> CegidClient:
    settings = settings or _settings()
    config = cegid.build_config(
        settings.cegid,
        verify_tls=settings.verify_tls,
        timeout_seconds=settings.timeout_seconds,
    )
    api = ApiPlatformClient(config, store or get_token_store(), http_client=http_client)
    return CegidClient(api, settings.cegid)


def get_emonsite_client(
    settings: SdkSettings | None = None,
    store: TokenStore | None = None,
    http_client: httpx.Client | None = None,
) -> EmonsiteClient:
    settings = settings or _settings()
    config = emonsite.build_config(
        settings.emonsite,
        verify_tls=settings.verify_tls,
        timeout_seconds=settings.timeout_seconds,
    )
    api = ApiPlatformClient(config, store or get_token_store(), http_client=http_client)
    return EmonsiteClient(api, site_id=settings.emonsite.site_id)


def get_ems_stock_client(
    settings: SdkSettings | None = None,
    store: TokenStore | None = None,
    http_client: httpx.Client | None = None,
) -> EmsStockClient:
    settings = settings or _settings()
    config = ems_stock.build_config(
        settings.ems_stock,
        verify_tls=settings.verify_tls,
        timeout_seconds=settings.timeout_seconds,
    )
    api = ApiPlatformClient(config, store or get_token_store(), http_client=http_client)
    return EmsStockClient(api)


__all__ = [
    "get_cegid_client",
    "get_econfiance_client",
    "get_emonsite_client",
    "get_ems_stock_client",
    "get_token_cipher",
    "get_token_store",
]
