"""
Repository for the guilds table.

Handles only the scalar configuration columns; the role map lives in
``role_privileges_repo``.
"""

from __future__ import annotations

from typing import Any, List

import aiosqlite

from guildkeeper.database.db_perf_mon import DatabasePerformanceMonitor
from guildkeeper.datatypes.discord_datatypes import ChannelID, GuildID
from guildkeeper.datatypes.guild_config import MUTABLE_FIELDS, GuildConfig

_COLUMNS = "guild_id, admin_channel, advertise, welcome_message, goodbye_message"


def _to_column(field: str, value: Any) -> Any:
    """Convert a domain value to its column representation."""
    if field == "admin_channel":
        return value.to_sql() if value is not None else None
    if field == "advertise":
        return 1 if value else 0
    return value


def _row_to_config(row) -> GuildConfig:
    return GuildConfig(
        guild_id=GuildID.from_sql(row[0]),
        admin_channel=ChannelID.from_sql(row[1]) if row[1] is not None else None,
        advertise=bool(row[2]),
        welcome_message=row[3],
        goodbye_message=row[4],
    )


class GuildConfigRepository:
    """CRUD for the guilds table only."""

    def __init__(self, performance: DatabasePerformanceMonitor) -> None:
        self._performance = performance

    async def get(self, conn: aiosqlite.Connection, guild_id: GuildID) -> GuildConfig | None:
        """Fetch a single guild's configuration row."""
        with self._performance.track("guild_config.get"):
            async with conn.execute(
                f"SELECT {_COLUMNS} FROM guilds WHERE guild_id = ?",
                (guild_id.to_sql(),),
            ) as cursor:
                row = await cursor.fetchone()

        return _row_to_config(row) if row is not None else None

    async def get_field(self, conn: aiosqlite.Connection, guild_id: GuildID, field: str) -> tuple[Any] | None:
        """
        Fetch one column for a guild.

        Returns a 1-tuple holding the converted value, or None when the guild
        has no row. The tuple keeps "no row" apart from "column is NULL".
        """
        if field not in MUTABLE_FIELDS:
            raise ValueError(f"Unknown guild config field: {field}")

        with self._performance.track(f"guild_config.get_{field}"):
            async with conn.execute(
                f"SELECT {field} FROM guilds WHERE guild_id = ?",
                (guild_id.to_sql(),),
            ) as cursor:
                row = await cursor.fetchone()

        if row is None:
            return None
        value = row[0]
        if field == "admin_channel":
            return (ChannelID.from_sql(value) if value is not None else None,)
        if field == "advertise":
            return (bool(value),)
        return (value,)

    async def exists(self, conn: aiosqlite.Connection, guild_id: GuildID) -> bool:
        with self._performance.track("guild_config.exists"):
            async with conn.execute(
                "SELECT 1 FROM guilds WHERE guild_id = ? LIMIT 1",
                (guild_id.to_sql(),),
            ) as cursor:
                return await cursor.fetchone() is not None

    async def insert(self, conn: aiosqlite.Connection, config: GuildConfig) -> None:
        """Insert a new row. A duplicate guild_id violates the primary key."""
        with self._performance.track("guild_config.insert"):
            await conn.execute(
                f"INSERT INTO guilds ({_COLUMNS}) VALUES (?, ?, ?, ?, ?)",
                (
                    config.guild_id.to_sql(),
                    _to_column("admin_channel", config.admin_channel),
                    _to_column("advertise", config.advertise),
                    config.welcome_message,
                    config.goodbye_message,
                ),
            )

    async def update_field(self, conn: aiosqlite.Connection, guild_id: GuildID, field: str, value: Any) -> bool:
        """Overwrite one column. Returns False when the guild has no row."""
        if field not in MUTABLE_FIELDS:
            raise ValueError(f"Unknown guild config field: {field}")

        with self._performance.track(f"guild_config.set_{field}"):
            async with conn.execute(
                f"UPDATE guilds SET {field} = ? WHERE guild_id = ?",
                (_to_column(field, value), guild_id.to_sql()),
            ) as cursor:
                return cursor.rowcount > 0

    async def replace(self, conn: aiosqlite.Connection, config: GuildConfig) -> bool:
        """Overwrite every scalar column of an existing row."""
        with self._performance.track("guild_config.replace"):
            async with conn.execute(
                """
                UPDATE guilds SET
                    admin_channel   = ?,
                    advertise       = ?,
                    welcome_message = ?,
                    goodbye_message = ?
                WHERE guild_id = ?
                """,
                (
                    _to_column("admin_channel", config.admin_channel),
                    _to_column("advertise", config.advertise),
                    config.welcome_message,
                    config.goodbye_message,
                    config.guild_id.to_sql(),
                ),
            ) as cursor:
                return cursor.rowcount > 0

    async def list_ids(self, conn: aiosqlite.Connection) -> List[GuildID]:
        """Return every configured guild."""
        with self._performance.track("guild_config.list_ids"):
            async with conn.execute("SELECT guild_id FROM guilds") as cursor:
                rows = await cursor.fetchall()
        return sorted(GuildID.from_sql(row[0]) for row in rows)
