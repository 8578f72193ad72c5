"""SQLite-backed storage for cached bearer tokens."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional, Protocol

from apiplatform_sdk.models import ApiToken
from apiplatform_sdk.services.token_cipher import ApiTokenCipher


class TokenStore(Protocol):
    """Persistence operations the token lifecycle relies on."""

    def find(self, user: str, domain: str) -> Optional[ApiToken]: ...

    def save(self, token: ApiToken) -> ApiToken: ...

    def delete(self, user: str, domain: str) -> None: ...

    def delete_older_than(self, age: timedelta) -> int: ...


def _to_db(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


class SQLiteTokenStore:
    """Token table keyed by (user, domain); duplicates are tolerated.

    When a cipher is supplied the ``token`` column holds ciphertext.
    """

    def __init__(self, db_path: str, cipher: ApiTokenCipher | None = None) -> None:
        self._db_path = Path(db_path)
        self._cipher = cipher
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS api_tokens (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user TEXT NOT NULL,
                    domain TEXT NOT NULL,
                    token TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_api_tokens_user_domain "
                "ON api_tokens (user, domain)"
            )

    def find(self, user: str, domain: str) -> Optional[ApiToken]:
        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT id, user, domain, token, created_at, updated_at
                FROM api_tokens
                WHERE user = ? AND domain = ?
                ORDER BY created_at DESC, id DESC
                LIMIT 1
                """,
                (user, domain),
            ).fetchone()
        if not row:
            return None
        record = ApiToken(
            id=row["id"],
            user=row["user"],
            domain=row["domain"],
            token=row["token"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
        return self._cipher.unseal(record) if self._cipher else record

    def save(self, token: ApiToken) -> ApiToken:
        stored = self._cipher.seal(token) if self._cipher else token
        values = (
            token.user,
            token.domain,
            stored.token,
            _to_db(token.created_at),
            _to_db(token.updated_at),
        )
        with self._connect() as conn:
            if token.id is None:
                cursor = conn.execute(
                    """
                    INSERT INTO api_tokens (user, domain, token, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    values,
                )
                return token.model_copy(update={"id": cursor.lastrowid})
            conn.execute(
                """
                UPDATE api_tokens
                SET user = ?, domain = ?, token = ?, created_at = ?, updated_at = ?
                WHERE id = ?
                """,
                (*values, token.id),
            )
        return token

    def delete(self, user: str, domain: str) -> None:
        with self._connect() as conn:
            conn.execute(
                "DELETE FROM api_tokens WHERE user = ? AND domain = ?",
                (user, domain),
            )

    def delete_older_than(self, age: timedelta) -> int:
        threshold = _to_db(datetime.now(timezone.utc) - age)
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM api_tokens WHERE created_at < ?",
                (threshold,),
            )
        return cursor.rowcount


__all__ = ["SQLiteTokenStore", "TokenStore"]
