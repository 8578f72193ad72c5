"""
Provider configuration injected into the generic API client.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

JSONLD_MIME_TYPE = "application/ld+json"
MERGE_PATCH_MIME_TYPE = "application/merge-patch+json"
FORM_MIME_TYPE = "application/x-www-form-urlencoded"


class AuthMethod(str, Enum):
    """Credential exchange protocol used to obtain a bearer token."""

    JWT = "jwt"
    OAUTH2 = "oauth2"


class ProviderConfig(BaseModel):
    """Everything that distinguishes one API from another."""

    model_config = ConfigDict(frozen=True)

    name: str
    base_url: str
    format: str = "jsonld"
    concat_format: bool = Field(
        True,
        description="Append '.<format>' to collection GET URIs, e.g. /products.jsonld.",
    )
    accept: str = JSONLD_MIME_TYPE
    content_type: str = JSONLD_MIME_TYPE
    has_authentication: bool = False
    auth_method: AuthMethod = AuthMethod.JWT
    auth_uri: str = "auth"
    overridden_auth_url: str = ""
    login: str = ""
    password: str = ""
    oauth2_client_id: str = ""
    oauth2_client_secret: str = ""
    oauth2_scope: str = ""
    oauth2_grant_type: str = "password"
    token_lifetime_minutes: int = 1440
    verify_tls: bool = True
    timeout_seconds: float = 30.0

    @property
    def api_url(self) -> str:
        """Base URL, always ending with a slash."""
        return self.base_url if self.base_url.endswith("/") else f"{self.base_url}/"

    @property
    def normalized_auth_uri(self) -> str:
        return self.auth_uri.strip("/")

    @property
    def auth_url(self) -> str:
        """Full URL of the token endpoint."""
        if self.overridden_auth_url:
            return self.overridden_auth_url
        return f"{self.api_url}{self.normalized_auth_uri}"

    def default_headers(self) -> Dict[str, str]:
        return {"Accept": self.accept, "Content-Type": self.content_type}

    def with_credentials(self, login: str, password: str) -> ProviderConfig:
        return self.model_copy(update={"login": login, "password": password})


__all__ = [
    "AuthMethod",
    "FORM_MIME_TYPE",
    "JSONLD_MIME_TYPE",
    "MERGE_PATCH_MIME_TYPE",
    "ProviderConfig",
]
