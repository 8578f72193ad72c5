from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from apiplatform_sdk.clients import SQLiteTokenStore
from apiplatform_sdk.models import ApiToken
from apiplatform_sdk.services import ApiTokenCipher

DOMAIN = "https://api.example.com/"


def _token(user: str, value: str, *, age: timedelta = timedelta(0)) -> ApiToken:
    created = datetime.now(timezone.utc) - age
    return ApiToken(user=user, domain=DOMAIN, token=value, created_at=created, updated_at=created)


def test_save_assigns_id_and_find_returns_token(sqlite_store: SQLiteTokenStore) -> None:
    saved = sqlite_store.save(_token("alice", "tok-1"))

    assert saved.id is not None
    found = sqlite_store.find("alice", DOMAIN)
    assert found is not None
    assert found.token == "tok-1"
    assert found.id == saved.id
    assert sqlite_store.find("alice", "https://other.example.com/") is None


def test_find_prefers_most_recent_duplicate(sqlite_store: SQLiteTokenStore) -> None:
    sqlite_store.save(_token("alice", "old", age=timedelta(minutes=10)))
    sqlite_store.save(_token("alice", "new"))

    found = sqlite_store.find("alice", DOMAIN)
    assert found is not None
    assert found.token == "new"


def test_save_updates_existing_row(sqlite_store: SQLiteTokenStore) -> None:
    saved = sqlite_store.save(_token("alice", "tok", age=timedelta(minutes=5)))
    touched = saved.touched()

    sqlite_store.save(touched)

    found = sqlite_store.find("alice", DOMAIN)
    assert found is not None
    assert found.updated_at > saved.updated_at
    assert found.created_at == saved.created_at


def test_delete_older_than_removes_only_expired_tokens(sqlite_store: SQLiteTokenStore) -> None:
    sqlite_store.save(_token("stale", "a", age=timedelta(minutes=90)))
    sqlite_store.save(_token("edge", "b", age=timedelta(minutes=61)))
    sqlite_store.save(_token("fresh", "c", age=timedelta(minutes=30)))
    sqlite_store.save(_token("new", "d"))

    removed = sqlite_store.delete_older_than(timedelta(minutes=60))

    assert removed == 2
    assert sqlite_store.find("stale", DOMAIN) is None
    assert sqlite_store.find("edge", DOMAIN) is None
    assert sqlite_store.find("fresh", DOMAIN) is not None
    assert sqlite_store.find("new", DOMAIN) is not None


def test_delete_removes_all_rows_for_pair(sqlite_store: SQLiteTokenStore) -> None:
    sqlite_store.save(_token("alice", "one"))
    sqlite_store.save(_token("alice", "two"))
    sqlite_store.save(_token("bob", "three"))

    sqlite_store.delete("alice", DOMAIN)

    assert sqlite_store.find("alice", DOMAIN) is None
    assert sqlite_store.find("bob", DOMAIN) is not None


def test_tokens_are_encrypted_at_rest(tmp_path) -> None:
    db_path = tmp_path / "tokens.sqlite3"
    store = SQLiteTokenStore(str(db_path), cipher=ApiTokenCipher("s3cret"))

    store.save(_token("alice", "plain-token"))

    with sqlite3.connect(db_path) as conn:
        (raw,) = conn.execute("SELECT token FROM api_tokens").fetchone()
    assert raw != "plain-token"

    found = store.find("alice", DOMAIN)
    assert found is not None
    assert found.token == "plain-token"


def test_wrong_secret_cannot_read_tokens(tmp_path) -> None:
    db_path = str(tmp_path / "tokens.sqlite3")
    SQLiteTokenStore(db_path, cipher=ApiTokenCipher("one")).save(
        _token("alice", "plain-token")
    )

    with pytest.raises(ValueError):
        SQLiteTokenStore(db_path, cipher=ApiTokenCipher("two")).find("alice", DOMAIN)
