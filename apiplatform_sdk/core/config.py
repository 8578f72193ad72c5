"""
SDK configuration models and helpers.

Each provider reads its endpoint and credentials from its own settings class
so applications can override any of them through the environment or a
``.env`` file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


class EconfianceSettings(_EnvSettings):
    """Configuration for the e-confiance.fr certification API."""

    api_url: str = Field(
        "https://certification.e-confiance.fr/api/", alias="ECONFIANCE_API_URL"
    )
    login: str = Field("", alias="ECONFIANCE_LOGIN", description="Company slug.")
    password: str = Field("", alias="ECONFIANCE_PASSWORD")
    company_id: int = Field(
        0,
        alias="ECONFIANCE_COMPANY_ID",
        description="Company ID, returned by the API on each authentication.",
    )
    token_lifetime_minutes: int = Field(1440, alias="ECONFIANCE_TOKEN_LIFETIME")


class CegidSettings(_EnvSettings):
    """Configuration for the Cegid (Acumatica) ERP API."""

    base_url: str = Field("https://xrp-flex.cegid.cloud/", alias="CEGID_BASE_URL")
    company_slug: str = Field("company-slug", alias="CEGID_COMPANY_SLUG")
    endpoint_path: str = Field(
        "entity/Default/22.200.001", alias="CEGID_ENDPOINT_PATH"
    )
    auth_uri: str = Field("identity/connect/token", alias="CEGID_AUTH_URI")
    overridden_auth_url: Optional[str] = Field(
        None,
        alias="CEGID_AUTH_URL",
        description=(
            "Full token URL when it does not live under the API URL. "
            "Defaults to <base_url>/<company_slug>/<auth_uri>."
        ),
    )
    login: str = Field("", alias="CEGID_LOGIN")
    password: str = Field("", alias="CEGID_PASSWORD")
    client_id: str = Field("", alias="CEGID_CLIENT_ID")
    client_secret: str = Field("", alias="CEGID_CLIENT_SECRET")
    scope: str = Field("api", alias="CEGID_SCOPE")
    grant_type: str = Field("password", alias="CEGID_GRANT_TYPE")
    items_per_page: int = Field(20, alias="CEGID_ITEMS_PER_PAGE")
    token_lifetime_minutes: int = Field(30, alias="CEGID_TOKEN_LIFETIME")

    @property
    def api_url(self) -> str:
        return "/".join(
            (
                self.base_url.rstrip("/"),
                self.company_slug.strip("/"),
                self.endpoint_path.strip("/"),
            )
        )

    @property
    def auth_url(self) -> str:
        if self.overridden_auth_url:
            return self.overridden_auth_url
        return "/".join(
            (
                self.base_url.rstrip("/"),
                self.company_slug.strip("/"),
                self.auth_uri.strip("/"),
            )
        )


class EmonsiteSettings(_EnvSettings):
    """Configuration for the e-monsite CMS API.

    Use ``https://api.awelty.com/`` for sites on the Awelty white label.
    """

    api_url: str = Field("https://api.e-monsite.com/", alias="EMONSITE_API_URL")
    login: str = Field("", alias="EMONSITE_LOGIN")
    password: str = Field("", alias="EMONSITE_PASSWORD")
    has_authentication: bool = Field(False, alias="EMONSITE_HAS_AUTHENTICATION")
    site_id: Optional[str] = Field(None, alias="EMONSITE_SITE_ID")


class EmsStockSettings(_EnvSettings):
    """Configuration for the Ems-Stock API (no authentication)."""

    api_url: str = Field("https://api.ems-stock.dev/", alias="EMS_STOCK_API_URL")


class SdkSettings(_EnvSettings):
    """Root settings object shared by every provider client."""

    log_level: str = Field("INFO", alias="SDK_LOG_LEVEL")
    token_db_path: str = Field("var/api_tokens.sqlite3", alias="SDK_TOKEN_DB_PATH")
    token_encryption_secret: Optional[str] = Field(
        None,
        alias="SDK_TOKEN_ENCRYPTION_SECRET",
        description="Secret used to derive the key encrypting stored tokens.",
    )
    verify_tls: bool = Field(True, alias="SDK_VERIFY_TLS")
    timeout_seconds: float = Field(30.0, alias="SDK_TIMEOUT")
    econfiance: EconfianceSettings = Field(default_factory=EconfianceSettings)
    cegid: CegidSettings = Field(default_factory=CegidSettings)
    emonsite: EmonsiteSettings = Field(default_factory=EmonsiteSettings)
    ems_stock: EmsStockSettings = Field(default_factory=EmsStockSettings)


@lru_cache()
def get_settings() -> SdkSettings:
    """Return a cached settings object."""
    return SdkSettings()


__all__ = [
    "CegidSettings",
    "EconfianceSettings",
    "EmonsiteSettings",
    "EmsStockSettings",
    "SdkSettings",
    "get_settings",
]
