"""Expose the HTTP client, auth strategies and token storage."""

from .auth import AuthStrategy, JwtPasswordAuth, OAuth2PasswordAuth, strategy_for
from .token_store import SQLiteTokenStore, TokenStore
from .api_platform import ApiPlatformClient

__all__ = [
    "ApiPlatformClient",
    "AuthStrategy",
    "JwtPasswordAuth",
    "OAuth2PasswordAuth",
    "SQLiteTokenStore",
    "TokenStore",
    "strategy_for",
]
