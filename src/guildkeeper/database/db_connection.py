"""
Database connection management: one long-lived aiosqlite connection.

Design rationale
----------------
SQLite performs best with a **single long-lived connection** rather than
opening/closing a connection per operation:
  - Avoids repeated handshake and pragma setup overhead
  - Keeps the page cache warm across operations
  - WAL mode allows one writer + concurrent readers safely

Concurrency model
-----------------
SQLite is single-writer. Writers are serialised at the application layer with
a semaphore (``_write_sem``) so async tasks queue up instead of fighting over
SQLite's busy-timeout. This is also what makes guild creation race-free: two
concurrent creates for the same guild run one after the other and the second
hits the primary key.

Usage
-----
    manager = ConnectionManager()
    await manager.open(path)

    async with manager.read() as conn:
        rows = await conn.execute_fetchall("SELECT ...")

    # Atomic writes: serialised, auto-rollback on error or cancellation
    async with manager.transaction() as conn:
        await conn.execute("INSERT ...")

    await manager.close()
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from guildkeeper.util.logger import get_logger

logger = get_logger("database_connection")

# ── Pragmas applied once when the connection is opened ──────────────────────
_PRAGMAS = [
    "PRAGMA journal_mode = WAL",
    "PRAGMA foreign_keys = ON",
    "PRAGMA synchronous = NORMAL",    # safe with WAL; faster than FULL
    "PRAGMA temp_store = MEMORY",
    "PRAGMA busy_timeout = 5000",
]


class ConnectionManager:
    """
    Owner of the single aiosqlite connection.

    * Reads:  ``async with read()``; no lock, WAL allows concurrent reads.
    * Writes: ``async with transaction()``; serialised by ``_write_sem``,
      committed on clean exit, rolled back on any exception.
    """

    def __init__(self) -> None:
        self._conn: aiosqlite.Connection | None = None
        self._write_sem = asyncio.Semaphore(1)
        self._path: Path | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self, path: Path) -> None:
        """
        Open the database file and apply the pragmas.

        Called once at startup, before any repository is used. A second call
        while open is ignored.
        """
        if self._conn is not None:
            logger.warning("[DB CONNECTION] open() called but connection already exists; ignoring")
            return

        self._path = path
        path.parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(path)
        for pragma in _PRAGMAS:
            await self._conn.execute(pragma)
        await self._conn.commit()

        logger.info("[DB CONNECTION] Opened connection to %s", path)

    async def close(self) -> None:
        """Checkpoint the WAL and close the connection."""
        if self._conn is None:
            return

        try:
            await self._conn.execute("PRAGMA wal_checkpoint(TRUNCATE)")
            await self._conn.commit()
        except Exception:
            logger.exception("[DB CONNECTION] WAL checkpoint failed during close")
        finally:
            await self._conn.close()
            self._conn = None
            logger.info("[DB CONNECTION] Connection closed")

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def connection(self) -> aiosqlite.Connection:
        """
        The raw aiosqlite connection.

        Raises:
            RuntimeError: If the connection has not been opened yet.
        """
        if self._conn is None:
            raise RuntimeError(
                "ConnectionManager: connection is not open. "
                "Call await manager.open(path) at startup."
            )
        return self._conn

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Serialised write transaction.

        Cancellation of the caller counts as an error: the rollback still
        runs, so an abandoned request never leaves a half-applied write.

        Raises:
            RuntimeError: If the connection is not open.
        """
        conn = self.connection

        async with self._write_sem:
            try:
                yield conn
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Read scope. Symmetrical with ``transaction()`` but takes no lock.
        """
        yield self.connection
