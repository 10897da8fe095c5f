"""
Sender lookups against a Quassel core database.

Quassel keeps one row per distinct ``nick!ident@host`` in its ``sender``
table, for both of its backends. Both stores here answer the same LIKE query
and hand back undecoded ``SenderRow`` values.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
import time
from contextlib import asynccontextmanager
from pathlib import Path
from threading import Lock
from typing import AsyncIterator, Union

import asyncpg

from .config import StoreSettings
from .core.hostmask.models import SenderRow

logger = logging.getLogger(__name__)

POSTGRES_SEARCH = "SELECT senderid, sender, realname FROM sender WHERE sender LIKE $1::TEXT"
SQLITE_SEARCH = "SELECT senderid, sender, realname FROM sender WHERE sender LIKE ?"
SQLITE_GLOB_SEARCH = "SELECT senderid, sender, realname FROM sender WHERE sender GLOB ?"
COUNT_SENDERS = "SELECT count(*) FROM sender"


class StoreError(RuntimeError):
    """Raised when the log database cannot be opened."""


def like_to_glob(pattern: str) -> str:
    """
    Translate a LIKE pattern into the equivalent GLOB pattern.

    GLOB is always case-sensitive, so it stands in for LIKE on SQLite builds
    where ``PRAGMA case_sensitive_like`` has been compiled out.

    Examples:
        "%66_205_192%" → "*66?205?192*"
        "nick[away]*%" → "nick[[]away][*]*"
    """
    out: list[str] = []
    for ch in pattern:
        match ch:
            case "%":
                out.append("*")
            case "_":
                out.append("?")
            case "*" | "?" | "[":
                out.append(f"[{ch}]")
            case _:
                out.append(ch)
    return "".join(out)


class SqliteSenderStore:
    """Read-only access to a Quassel SQLite database."""

    def __init__(self, path: Path, *, timeout: float = 30.0) -> None:
        path = Path(path).expanduser().resolve()
        if not path.exists():
            raise StoreError(f"SQLite database not found: {path}")
        self.path = path
        self.timeout = timeout
        self._lock = Lock()
        try:
            self._conn = sqlite3.connect(
                f"{path.as_uri()}?mode=ro", uri=True, timeout=timeout, check_same_thread=False
            )
            # Fingerprints rely on case-sensitive matching, as in PostgreSQL.
            # The pragma is deprecated and silently ignored where omitted.
            self._conn.execute("PRAGMA case_sensitive_like = ON")
            (folds_case,) = self._conn.execute("SELECT 'A' LIKE 'a'").fetchone()
        except sqlite3.Error as exc:
            raise StoreError(f"cannot open {path}: {exc}") from exc
        self.use_glob = bool(folds_case)
        if self.use_glob:
            logger.debug("case_sensitive_like unavailable; searching with GLOB")

    def close(self) -> None:
        # Abort a query still running in an executor thread so the lock frees up.
        self._conn.interrupt()
        with self._lock:
            self._conn.close()

    def _execute(self, sql: str, params: tuple = ()) -> list[tuple]:
        deadline = time.monotonic() + self.timeout
        with self._lock:
            self._conn.set_progress_handler(lambda: time.monotonic() > deadline, 10_000)
            try:
                return self._conn.execute(sql, params).fetchall()
            finally:
                self._conn.set_progress_handler(None, 0)

    def search_sync(self, pattern: str) -> list[SenderRow]:
        if self.use_glob:
            rows = self._execute(SQLITE_GLOB_SEARCH, (like_to_glob(pattern),))
        else:
            rows = self._execute(SQLITE_SEARCH, (pattern,))
        return [SenderRow(id=row[0], sender=row[1], realname=row[2]) for row in rows]

    async def search(self, pattern: str) -> list[SenderRow]:
        return await asyncio.get_running_loop().run_in_executor(None, self.search_sync, pattern)

    async def count(self) -> int:
        rows = await asyncio.get_running_loop().run_in_executor(None, self._execute, COUNT_SENDERS)
        return int(rows[0][0])


class PostgresSenderStore:
    """Quassel PostgreSQL backend; queries are multiplexed over a small pool."""

    def __init__(self, pool: asyncpg.Pool, *, timeout: float = 30.0) -> None:
        self._pool = pool
        self.timeout = timeout

    @classmethod
    async def connect(
        cls, dsn: str, *, pool_size: int = 4, timeout: float = 30.0
    ) -> "PostgresSenderStore":
        try:
            pool = await asyncpg.create_pool(
                dsn, min_size=1, max_size=pool_size, timeout=timeout
            )
        except (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as exc:
            raise StoreError(f"cannot connect to PostgreSQL: {exc}") from exc
        logger.debug("connected to PostgreSQL with up to %d connections", pool_size)
        return cls(pool, timeout=timeout)

    async def close(self) -> None:
        await self._pool.close()

    async def search(self, pattern: str) -> list[SenderRow]:
        records = await self._pool.fetch(POSTGRES_SEARCH, pattern, timeout=self.timeout)
        return [
            SenderRow(id=record["senderid"], sender=record["sender"], realname=record["realname"])
            for record in records
        ]

    async def count(self) -> int:
        value = await self._pool.fetchval(COUNT_SENDERS, timeout=self.timeout)
        return int(value)


AnyStore = Union[SqliteSenderStore, PostgresSenderStore]


@asynccontextmanager
async def open_store(settings: StoreSettings) -> AsyncIterator[AnyStore]:
    """Open the configured backend and close it when the block exits."""
    match settings.backend:
        case "sqlite":
            if settings.sqlite_path is None:
                raise StoreError("store.sqlite_path is not set")
            store = SqliteSenderStore(settings.sqlite_path, timeout=settings.query_timeout_seconds)
            logger.debug("opened SQLite database %s", settings.sqlite_path)
            try:
                yield store
            finally:
                store.close()
        case "postgres":
            store = await PostgresSenderStore.connect(
                settings.dsn,
                pool_size=settings.pool_size,
                timeout=settings.query_timeout_seconds,
            )
            try:
                yield store
            finally:
                await store.close()
        case _:
            raise StoreError(f"unknown store backend: {settings.backend}")
