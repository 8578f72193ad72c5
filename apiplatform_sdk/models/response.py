"""Response values returned by the API client, with Hydra pagination parsing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

_LAST_PAGE_PATTERN = re.compile(r"(?:^|[?&])page=(\d+)(?:&|$)", re.IGNORECASE)


def parse_max_page(content: Any) -> int:
    """Extract the last page number from ``hydra:view.hydra:last``.

    Returns 1 when the hint is absent or carries no ``page=N`` parameter.
    """
    if not isinstance(content, dict):
        return 1
    view = content.get("hydra:view")
    if not isinstance(view, dict):
        return 1
    last = view.get("hydra:last")
    if not isinstance(last, str):
        return 1
    match = _LAST_PAGE_PATTERN.search(last)
    if not match:
        return 1
    return max(int(match.group(1)), 1)


def parse_total_items(content: Any) -> int:
    """Read ``hydra:totalItems``, defaulting to 0."""
    if not isinstance(content, dict):
        return 0
    total = content.get("hydra:totalItems")
    try:
        return int(total) if total is not None else 0
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True, slots=True)
class ApiResponse:
    """Status code and decoded JSON body of one API call.

    ``data`` is the ``hydra:member`` list for collections, otherwise the body.
    ``max_page`` and ``total_items`` are only meaningful for collection GETs.
    """

    status_code: int
    body: Any = None
    max_page: int = 1
    total_items: int = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def unauthorized(self) -> bool:
        return self.status_code == 401

    @property
    def data(self) -> Any:
        if isinstance(self.body, dict) and "hydra:member" in self.body:
            return self.body["hydra:member"]
        return self.body

    @classmethod
    def collection(cls, status_code: int, body: Optional[Any]) -> ApiResponse:
        return cls(
            status_code=status_code,
            body=body,
            max_page=parse_max_page(body),
            total_items=parse_total_items(body),
        )


__all__ = ["ApiResponse", "parse_max_page", "parse_total_items"]
