"""
Domain model for persisted bearer tokens.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiToken(BaseModel):
    """A bearer token cached for a (user, domain) pair."""

    id: Optional[int] = Field(None, description="Storage row identifier.")
    user: str = Field(..., description="Credential identifier the token was issued to.")
    domain: str = Field(..., description="API base URL the token is valid for.")
    token: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def touched(self) -> "ApiToken":
        """Return a copy with ``updated_at`` set to now."""
        return self.model_copy(update={"updated_at": _utcnow()})


__all__ = ["ApiToken"]
