"""SQLite-backed substitute for the DynamoDB session table, used for local runs."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from app.clients.session_store import SessionStoreError, require_expiration
from app.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class SQLiteSessionStore:
    """Session table in a single SQLite file.

    Expired rows are never returned and are purged whenever a new session is
    written.
    """

    def __init__(
        self,
        db_path: str,
        *,
        token_cipher: TokenCipherService,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = Path(db_path)
        self._cipher = token_cipher
        self._clock = clock
        if self._db_path.parent and not self._db_path.parent.exists():
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        with closing(self._connect()) as conn, conn:
            yield conn

    def _ensure_schema(self) -> None:
        with self._transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    session_id TEXT PRIMARY KEY,
                    token_encrypted TEXT NOT NULL,
                    expires_at INTEGER NOT NULL
                )
                """
            )

    def _save(self, session_id: str, token_encrypted: str, expiration: int) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM sessions WHERE expires_at <= ?", (int(self._clock()),))
            conn.execute(
                """
                INSERT INTO sessions (session_id, token_encrypted, expires_at)
                VALUES (?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                    token_encrypted = excluded.token_encrypted,
                    expires_at = excluded.expires_at
                """,
                (session_id, token_encrypted, expiration),
            )

    def _get(self, session_id: str) -> Optional[str]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT token_encrypted FROM sessions WHERE session_id = ? AND expires_at > ?",
                (session_id, self._clock()),
            ).fetchone()
        if not row:
            return None
        return row["token_encrypted"]

    def _remove(self, session_id: str) -> None:
        with self._transaction() as conn:
            conn.execute("DELETE FROM sessions WHERE session_id = ?", (session_id,))

    async def save(self, session_id: str, token: str, expiration: int) -> None:
        expiration = require_expiration(expiration)
        await self._call(self._save, session_id, self._cipher.encrypt(token), expiration)

    async def get(self, session_id: str) -> Optional[str]:
        token_encrypted = await self._call(self._get, session_id)
        if token_encrypted is None:
            return None
        try:
            return self._cipher.decrypt(token_encrypted)
        except ValueError:
            logger.warning("Discarding unreadable session record")
            return None

    async def remove(self, session_id: str) -> None:
        await self._call(self._remove, session_id)

    @staticmethod
    async def _call(func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            raise SessionStoreError(f"SQLite session store failed: {exc}") from exc


__all__ = ["SQLiteSessionStore"]
