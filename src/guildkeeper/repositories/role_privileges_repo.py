"""
Repository for the guild_role_privileges table.
"""

from __future__ import annotations

from typing import Dict, Set

import aiosqlite

from guildkeeper.database.db_perf_mon import DatabasePerformanceMonitor
from guildkeeper.datatypes.discord_datatypes import GuildID, RoleID
from guildkeeper.datatypes.privilege import Privilege, RolePrivilege, parse_privilege, privilege_to_text


class RolePrivilegesRepository:
    """CRUD for the guild_role_privileges table."""

    def __init__(self, performance: DatabasePerformanceMonitor) -> None:
        self._performance = performance

    async def get_for_role(
        self, conn: aiosqlite.Connection, guild_id: GuildID, role_id: RoleID
    ) -> Set[Privilege]:
        """Return the privileges directly assigned to one role."""
        with self._performance.track("role_privileges.get_for_role"):
            async with conn.execute(
                "SELECT privilege FROM guild_role_privileges WHERE guild_id = ? AND role_id = ?",
                (guild_id.to_sql(), role_id.to_sql()),
            ) as cursor:
                rows = await cursor.fetchall()
        return {parse_privilege(row[0]) for row in rows}

    async def get_roles_with(
        self, conn: aiosqlite.Connection, guild_id: GuildID, privilege: Privilege
    ) -> Set[RoleID]:
        """Return every role of the guild holding ``privilege``."""
        with self._performance.track("role_privileges.get_roles_with"):
            async with conn.execute(
                "SELECT role_id FROM guild_role_privileges WHERE guild_id = ? AND privilege = ?",
                (guild_id.to_sql(), privilege_to_text(privilege)),
            ) as cursor:
                rows = await cursor.fetchall()
        return {RoleID.from_sql(row[0]) for row in rows}

    async def get_for_guild(
        self, conn: aiosqlite.Connection, guild_id: GuildID
    ) -> Dict[RoleID, Set[Privilege]]:
        """Return the whole role map of a guild."""
        with self._performance.track("role_privileges.get_for_guild"):
            async with conn.execute(
                "SELECT role_id, privilege FROM guild_role_privileges WHERE guild_id = ?",
                (guild_id.to_sql(),),
            ) as cursor:
                rows = await cursor.fetchall()

        result: Dict[RoleID, Set[Privilege]] = {}
        for role_id_int, token in rows:
            result.setdefault(RoleID.from_sql(role_id_int), set()).add(parse_privilege(token))
        return result

    async def insert(self, conn: aiosqlite.Connection, entry: RolePrivilege) -> bool:
        """Add a (role, privilege) pair. Returns False when it already existed."""
        with self._performance.track("role_privileges.insert"):
            async with conn.execute(
                "INSERT OR IGNORE INTO guild_role_privileges (guild_id, role_id, privilege) VALUES (?, ?, ?)",
                (entry.guild_id.to_sql(), entry.role_id.to_sql(), privilege_to_text(entry.privilege)),
            ) as cursor:
                return cursor.rowcount > 0

    async def delete(self, conn: aiosqlite.Connection, entry: RolePrivilege) -> bool:
        """Remove a (role, privilege) pair. Returns False when it was absent."""
        with self._performance.track("role_privileges.delete"):
            async with conn.execute(
                "DELETE FROM guild_role_privileges WHERE guild_id = ? AND role_id = ? AND privilege = ?",
                (entry.guild_id.to_sql(), entry.role_id.to_sql(), privilege_to_text(entry.privilege)),
            ) as cursor:
                return cursor.rowcount > 0
