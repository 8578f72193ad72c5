"""
Bearer token lifecycle: sweep, reuse, request and eviction.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Optional

import httpx

from apiplatform_sdk.models import ApiToken, ProviderConfig

if TYPE_CHECKING:
    from apiplatform_sdk.clients.auth import AuthStrategy
    from apiplatform_sdk.clients.token_store import TokenStore

logger = logging.getLogger(__name__)


class TokenService:
    """Resolve the bearer token for a provider, caching it in a token store."""

    def __init__(self, store: TokenStore) -> None:
        self._store = store

    def sweep(self, lifetime_minutes: int) -> int:
        """Delete tokens created more than ``lifetime_minutes`` ago."""
        removed = self._store.delete_older_than(timedelta(minutes=lifetime_minutes))
        if removed:
            logger.debug("Swept %s expired API token(s)", removed)
        return removed

    def resolve(
        self,
        http: httpx.Client,
        config: ProviderConfig,
        strategy: AuthStrategy,
    ) -> Optional[str]:
        """Return a cached token for the config's (login, api_url), or request one.

        A cache hit refreshes the record's ``updated_at``. A newly issued token
        is persisted. ``None`` means authentication failed.
        """
        cached = self._store.find(config.login, config.api_url)
        if cached is not None:
            self._store.save(cached.touched())
            return cached.token

        token = strategy.request_token(http, config)
        if token is None:
            return None

        self._store.save(ApiToken(user=config.login, domain=config.api_url, token=token))
        logger.info("Issued new API token for %s", config.name)
        return token

    def evict(self, config: ProviderConfig) -> None:
        """Forget the cached token, typically after a 401 response."""
        self._store.delete(config.login, config.api_url)


__all__ = ["TokenService"]
