"""Authenticated clients for API Platform style REST / JSON-LD APIs."""

from apiplatform_sdk.clients import ApiPlatformClient, SQLiteTokenStore
from apiplatform_sdk.models import ApiResponse, ApiToken, AuthMethod, ProviderConfig, QueryString

__all__ = [
    "ApiPlatformClient",
    "ApiResponse",
    "ApiToken",
    "AuthMethod",
    "ProviderConfig",
    "QueryString",
    "SQLiteTokenStore",
]
