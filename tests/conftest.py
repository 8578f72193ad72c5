"""Pytest configuration shared across the suite."""

from __future__ import annotations

import pytest

try:
    from . import _bootstrap  # noqa: F401
    from ._fakes import FakeTokenStore
except ImportError:  # pragma: no cover - fallback for direct execution
    import _bootstrap  # type: ignore # noqa: F401
    from _fakes import FakeTokenStore  # type: ignore

from apiplatform_sdk.clients import SQLiteTokenStore


@pytest.fixture
def fake_store() -> FakeTokenStore:
    return FakeTokenStore()


@pytest.fixture
def sqlite_store(tmp_path) -> SQLiteTokenStore:
    return SQLiteTokenStore(str(tmp_path / "tokens" / "api_tokens.sqlite3"))
