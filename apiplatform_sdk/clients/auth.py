"""
Credential exchange strategies.

Each strategy posts the provider's credentials to its token endpoint and
returns the bearer token, or ``None`` when the exchange fails. There is no
retry: the caller decides what to do with a failure.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from apiplatform_sdk.models import AuthMethod, ProviderConfig
from apiplatform_sdk.models.provider import FORM_MIME_TYPE

logger = logging.getLogger(__name__)


class AuthStrategy(ABC):
    """Obtain a bearer token from a provider's authentication endpoint."""

    token_key: str = "token"

    @abstractmethod
    def _send(self, http: httpx.Client, config: ProviderConfig) -> httpx.Response:
        """Post the credentials to the token endpoint."""

    def request_token(self, http: httpx.Client, config: ProviderConfig) -> Optional[str]:
        response = self._send(http, config)
        if not response.is_success:
            logger.warning(
                "Authentication rejected by %s (HTTP %s)",
                config.name,
                response.status_code,
            )
            return None

        try:
            payload = response.json()
        except ValueError:
            logger.warning("Authentication response from %s is not JSON", config.name)
            return None

        token = payload.get(self.token_key) if isinstance(payload, dict) else None
        if not token:
            logger.warning(
                "Authentication response from %s has no %r field",
                config.name,
                self.token_key,
            )
            return None
        return str(token)


class JwtPasswordAuth(AuthStrategy):
    """API Platform JWT login: ``{email, password}`` in, ``{token}`` out."""

    token_key = "token"

    def _send(self, http: httpx.Client, config: ProviderConfig) -> httpx.Response:
        return http.post(
            config.auth_url,
            json={"email": config.login, "password": config.password},
            headers=config.default_headers(),
        )


class OAuth2PasswordAuth(AuthStrategy):
    """OAuth 2.0 resource-owner password grant, form-encoded."""

    token_key = "access_token"

    def _send(self, http: httpx.Client, config: ProviderConfig) -> httpx.Response:
        form: Dict[str, Any] = {
            "grant_type": config.oauth2_grant_type,
            "client_id": config.oauth2_client_id,
            "client_secret": config.oauth2_client_secret,
            "username": config.login,
            "password": config.password,
        }
        if config.oauth2_scope:
            form["scope"] = config.oauth2_scope
        return http.post(
            config.auth_url,
            data=form,
            headers={"Accept": config.accept, "Content-Type": FORM_MIME_TYPE},
        )


def strategy_for(method: AuthMethod) -> AuthStrategy:
    if method is AuthMethod.OAUTH2:
        return OAuth2PasswordAuth()
    return JwtPasswordAuth()


__all__ = ["AuthStrategy", "JwtPasswordAuth", "OAuth2PasswordAuth", "strategy_for"]
