"""Immutable query-string builder passed to each API call."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Tuple
from urllib.parse import quote, urlencode

_SORT_DIRECTIONS = ("asc", "desc")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def _is_array_name(name: str) -> bool:
    return name.endswith("[]")


@dataclass(frozen=True, slots=True)
class QueryString:
    """Ordered query parameters plus a raw fragment for repeated ``name[]`` keys.

    Every mutator returns a new value; instances are never modified in place.
    """

    params: Tuple[Tuple[str, str], ...] = ()
    additional: str = ""

    def add(self, name: str, value: Any, *, force_empty: bool = False) -> QueryString:
        """Set ``name=value``.

        Names ending in ``[]`` are appended to the additional fragment so they
        can repeat; any other name overwrites its previous value. Empty names
        or values are ignored unless ``force_empty`` is set.
        """
        text = _stringify(value)
        if (not name or not text) and not force_empty:
            return self
        if _is_array_name(name):
            return replace(self, additional=f"{self.additional}&{name}={quote(text, safe='')}")

        updated = dict(self.params)
        updated[name] = text
        return replace(self, params=tuple(updated.items()))

    def remove(self, name: str) -> QueryString:
        if not name:
            return self
        if _is_array_name(name):
            pattern = re.compile(rf"&{re.escape(name)}=[^&]*")
            return replace(self, additional=pattern.sub("", self.additional))
        return replace(
            self, params=tuple((key, value) for key, value in self.params if key != name)
        )

    def with_page(self, page: int) -> QueryString:
        return self.add("page", int(page))

    def with_order(self, prop: str, sort: str) -> QueryString:
        """Sort on ``prop``, replacing any ordering set before."""
        if sort.lower() not in _SORT_DIRECTIONS:
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {sort!r}.")
        cleared = replace(
            self,
            params=tuple(
                (key, value) for key, value in self.params if not key.startswith("order[")
            ),
        )
        return cleared.add(f"order[{prop}]", sort.lower())

    def with_offset_limit(self, page: int, per_page: int) -> QueryString:
        """OData-style paging: ``$top=<per_page>&$skip=<offset>``."""
        offset = (int(page) - 1) * per_page
        return self.add("$top", per_page).add("$skip", offset)

    def as_dict(self) -> Dict[str, str]:
        return dict(self.params)

    def encode(self) -> str:
        """Render the full query string, without the leading '?'."""
        parts = []
        main = urlencode(self.params)
        if main:
            parts.append(main)
        extra = self.additional.lstrip("&")
        if extra:
            parts.append(extra)
        return "&".join(parts)

    def __bool__(self) -> bool:
        return bool(self.params or self.additional)


__all__ = ["QueryString"]
