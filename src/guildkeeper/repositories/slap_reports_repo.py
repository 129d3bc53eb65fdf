"""
Repository for the append-only slap_reports table.

Ordering is always ``id ASC``: ids are AUTOINCREMENT so they follow commit
order and are never reused. There are no update or delete methods, and the
schema's triggers reject them anyway.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

import aiosqlite

from guildkeeper.database.db_perf_mon import DatabasePerformanceMonitor
from guildkeeper.datatypes.discord_datatypes import GuildID, UserID, u64_from_sql, u64_to_sql
from guildkeeper.datatypes.slap_datatypes import SlapReport

_COLUMNS = "id, guild_id, offender, enforcer, sentence, reason, created_at"


def _parse_timestamp(value: str) -> datetime:
    # Stored by SQLite's strftime in UTC without an offset
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


def _row_to_report(row) -> SlapReport:
    return SlapReport(
        id=row[0],
        guild=GuildID.from_sql(row[1]),
        offender=UserID.from_sql(row[2]),
        enforcer=UserID.from_sql(row[3]) if row[3] is not None else None,
        sentence=u64_from_sql(row[4]),
        reason=row[5],
        created_at=_parse_timestamp(row[6]),
    )


class SlapReportsRepository:
    """Append and ordered reads for the slap_reports table."""

    def __init__(self, performance: DatabasePerformanceMonitor) -> None:
        self._performance = performance

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def insert(
        self,
        conn: aiosqlite.Connection,
        guild_id: GuildID,
        sentence: int,
        offender: UserID,
        enforcer: UserID | None,
        reason: str | None,
    ) -> SlapReport:
        """Append one entry and return it with its assigned id and timestamp."""
        with self._performance.track("slap_reports.insert"):
            async with conn.execute(
                """
                INSERT INTO slap_reports (guild_id, offender, enforcer, sentence, reason)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    guild_id.to_sql(),
                    offender.to_sql(),
                    enforcer.to_sql() if enforcer is not None else None,
                    u64_to_sql(sentence),
                    reason,
                ),
            ) as cursor:
                slap_id = cursor.lastrowid

            async with conn.execute(
                f"SELECT {_COLUMNS} FROM slap_reports WHERE id = ?",
                (slap_id,),
            ) as cursor:
                row = await cursor.fetchone()

        return _row_to_report(row)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def select_ordered(
        self,
        conn: aiosqlite.Connection,
        guild_id: GuildID,
        limit: int,
        offender: UserID | None = None,
    ) -> List[SlapReport]:
        """Return the first ``limit`` entries of the guild (or of one offender)."""
        if offender is None:
            query = f"SELECT {_COLUMNS} FROM slap_reports WHERE guild_id = ? ORDER BY id ASC LIMIT ?"
            params: tuple = (guild_id.to_sql(), limit)
            name = "slap_reports.select_guild"
        else:
            query = f"SELECT {_COLUMNS} FROM slap_reports WHERE guild_id = ? AND offender = ? ORDER BY id ASC LIMIT ?"
            params = (guild_id.to_sql(), offender.to_sql(), limit)
            name = "slap_reports.select_member"

        with self._performance.track(name):
            async with conn.execute(query, params) as cursor:
                rows = await cursor.fetchall()
        return [_row_to_report(row) for row in rows]

    async def select_offenders(
        self, conn: aiosqlite.Connection, guild_id: GuildID, limit: int
    ) -> List[UserID]:
        """Return the offender of each of the first ``limit`` guild entries."""
        with self._performance.track("slap_reports.select_offenders"):
            async with conn.execute(
                "SELECT offender FROM slap_reports WHERE guild_id = ? ORDER BY id ASC LIMIT ?",
                (guild_id.to_sql(), limit),
            ) as cursor:
                rows = await cursor.fetchall()
        return [UserID.from_sql(row[0]) for row in rows]

    async def count(
        self, conn: aiosqlite.Connection, guild_id: GuildID, offender: UserID | None = None
    ) -> int:
        """Return the all-time number of entries for the guild (or one offender)."""
        if offender is None:
            query = "SELECT COUNT(*) FROM slap_reports WHERE guild_id = ?"
            params: tuple = (guild_id.to_sql(),)
        else:
            query = "SELECT COUNT(*) FROM slap_reports WHERE guild_id = ? AND offender = ?"
            params = (guild_id.to_sql(), offender.to_sql())

        with self._performance.track("slap_reports.count"):
            async with conn.execute(query, params) as cursor:
                row = await cursor.fetchone()
        return row[0] if row else 0
