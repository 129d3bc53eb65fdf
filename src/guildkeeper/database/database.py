"""
Database handle shared by every Guildkeeper service.

The Database class owns the single aiosqlite connection, the schema and the
performance monitor. It is created once at startup, passed explicitly to the
services, and shut down at exit; there is no module-level instance.

Its ``read()`` and ``transaction()`` scopes are also where backend errors are
classified: any ``sqlite3.Error`` escaping a scope is re-raised as
``StoreFailure`` (``ConstraintViolation`` for integrity errors), so services
and callers never see backend-specific exceptions.

Lifecycle:
    1. ``await db.initialize()`` at program startup
    2. hand ``db`` to the services
    3. ``await db.shutdown()`` at program end
"""

from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Dict

import aiosqlite

from guildkeeper.database.db_connection import ConnectionManager
from guildkeeper.database.db_perf_mon import DatabasePerformanceMonitor
from guildkeeper.database.db_schema import SchemaManager
from guildkeeper.errors import ConstraintViolation, StoreFailure
from guildkeeper.util.logger import get_logger

logger = get_logger("database")

DB_PATH = Path("./data/guildkeeper.db")


class Database:
    """
    Central database coordinator.

    Provides:
    - Connection lifecycle and schema creation
    - Read and write scopes with error classification
    - Per-operation performance statistics
    """

    def __init__(self, db_path: Path = DB_PATH, slow_query_threshold_ms: float = 100.0):
        self.db_path = db_path
        self.db_perf_mon = DatabasePerformanceMonitor(slow_query_threshold_ms)
        self._connection = ConnectionManager()

    @property
    def is_open(self) -> bool:
        return self._connection.is_open

    async def initialize(self) -> None:
        """
        Open the connection and create the schema.

        Safe to call twice; the second call is a no-op.

        Raises:
            StoreFailure: If the file cannot be opened or the schema cannot be created.
        """
        if self._connection.is_open:
            logger.debug("[DATABASE] Already initialized, skipping")
            return

        try:
            await self._connection.open(self.db_path)
            await SchemaManager.initialize_schema(self._connection.connection)
        except (sqlite3.Error, OSError) as exc:
            logger.error("[DATABASE] Database initialization failed: %s", exc)
            await self._connection.close()
            raise StoreFailure("initialize", str(exc)) from exc

        logger.info("[DATABASE] Database initialized at %s", self.db_path)

    async def shutdown(self) -> None:
        """Close the connection. Safe to call when not initialized."""
        if not self._connection.is_open:
            return
        await self._connection.close()
        logger.info("[DATABASE] Database shutdown complete")

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def read(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        """
        Read scope for ``operation`` (used in logs and error messages).

        Raises:
            StoreFailure: If the database is not open or a query fails.
        """
        self._require_open(operation)
        try:
            async with self._connection.read() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise self._classify(operation, exc) from exc

    @asynccontextmanager
    async def transaction(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        """
        Serialised write scope for ``operation``; commits on clean exit and
        rolls back on any exception.

        Raises:
            ConstraintViolation: If a write broke an integrity constraint.
            StoreFailure: If the database is not open or a statement fails.
        """
        self._require_open(operation)
        try:
            async with self._connection.transaction() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise self._classify(operation, exc) from exc

    def _require_open(self, operation: str) -> None:
        if not self._connection.is_open:
            logger.error("[DATABASE] %s attempted while the database is not open", operation)
            raise StoreFailure(operation, "database is not open")

    @staticmethod
    def _classify(operation: str, exc: sqlite3.Error) -> StoreFailure:
        if isinstance(exc, sqlite3.IntegrityError):
            logger.debug("[DATABASE] Constraint violation during %s: %s", operation, exc)
            return ConstraintViolation(operation, str(exc))
        logger.error("[DATABASE] Store failure during %s: %s", operation, exc)
        return StoreFailure(operation, str(exc))

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_db_performance_stats(self) -> Dict[str, Dict[str, float]]:
        return self.db_perf_mon.get_statistics()

    def reset_db_performance_stats(self) -> None:
        self.db_perf_mon.reset()
        logger.info("[DATABASE] Performance statistics reset")
