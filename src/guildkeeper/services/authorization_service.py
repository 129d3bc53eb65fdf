"""
AuthorizationService: answers privilege questions over a guild's role map.

Two combinators are kept deliberately separate:

- ``has_privileges``: ONE role must hold ALL of the required privileges.
- ``have_privilege``: ANY of several roles must hold ONE privilege.

Membership is presence-based. A role with no rows simply holds nothing, and
a guild without a configuration answers with empty sets, so every query is
total over all guild and role IDs. The only failure is ``StoreFailure``.
"""

from __future__ import annotations

from typing import Dict, Iterable, Set, Union

from guildkeeper.database.database import Database
from guildkeeper.datatypes.discord_datatypes import GuildID, RoleID
from guildkeeper.datatypes.privilege import Privilege, RolePrivilege, privileges_to_text
from guildkeeper.errors import NotFound
from guildkeeper.repositories.guild_config_repo import GuildConfigRepository
from guildkeeper.repositories.interfaces import GuildConfigStore, RolePrivilegeStore
from guildkeeper.repositories.role_privileges_repo import RolePrivilegesRepository
from guildkeeper.util.logger import get_logger

logger = get_logger("authorization_service")

GuildLike = Union[GuildID, int, str]
RoleLike = Union[RoleID, int, str]


class AuthorizationService:
    """Authorization queries and role-map mutation for every guild."""

    def __init__(
        self,
        database: Database,
        guild_store: GuildConfigStore | None = None,
        privilege_store: RolePrivilegeStore | None = None,
    ) -> None:
        self._db = database
        self._guild_store = guild_store or GuildConfigRepository(database.db_perf_mon)
        self._privilege_store = privilege_store or RolePrivilegesRepository(database.db_perf_mon)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def exists(self, guild_id: GuildLike) -> bool:
        """Return whether the guild has a configuration."""
        guild_id = GuildID(guild_id)
        async with self._db.read("exists") as conn:
            return await self._guild_store.exists(conn, guild_id)

    async def privileges_for(self, guild_id: GuildLike, role_id: RoleLike) -> Set[Privilege]:
        """Return the privileges directly assigned to ``role_id``; empty if none."""
        guild_id, role_id = GuildID(guild_id), RoleID(role_id)
        async with self._db.read("privileges_for") as conn:
            return await self._privilege_store.get_for_role(conn, guild_id, role_id)

    async def roles_with(self, guild_id: GuildLike, privilege: Privilege) -> Set[RoleID]:
        """Return every role in the guild holding ``privilege``."""
        guild_id = GuildID(guild_id)
        async with self._db.read("roles_with") as conn:
            return await self._privilege_store.get_roles_with(conn, guild_id, privilege)

    async def role_privileges(self, guild_id: GuildLike) -> Dict[RoleID, Set[Privilege]]:
        """Return the guild's whole role map."""
        guild_id = GuildID(guild_id)
        async with self._db.read("role_privileges") as conn:
            return await self._privilege_store.get_for_guild(conn, guild_id)

    async def has_privileges(
        self, guild_id: GuildLike, role_id: RoleLike, required: Iterable[Privilege]
    ) -> bool:
        """
        Return True iff the role holds every privilege in ``required``.

        An empty ``required`` is vacuously satisfied and does not hit the store.
        """
        required_set = set(required)
        if not required_set:
            return True

        held = await self.privileges_for(guild_id, role_id)
        granted = required_set <= held
        logger.debug(
            "[AUTHZ] guild %s role %s requires %s, holds %s -> %s",
            guild_id, role_id, privileges_to_text(required_set), privileges_to_text(held), granted,
        )
        return granted

    async def have_privilege(
        self, guild_id: GuildLike, role_ids: Iterable[RoleLike], privilege: Privilege
    ) -> bool:
        """
        Return True iff at least one of ``role_ids`` holds ``privilege``.

        An empty collection of roles never holds anything.
        """
        candidates = {RoleID(role_id) for role_id in role_ids}
        if not candidates:
            return False

        holders = await self.roles_with(guild_id, privilege)
        granted = not candidates.isdisjoint(holders)
        logger.debug(
            "[AUTHZ] guild %s any of %d roles holds %s -> %s",
            guild_id, len(candidates), privilege, granted,
        )
        return granted

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    async def grant(self, guild_id: GuildLike, role_id: RoleLike, privilege: Privilege) -> bool:
        """
        Assign ``privilege`` to a role.

        Returns False when the role already held it.

        Raises:
            NotFound: If the guild has no configuration.
        """
        guild_id, role_id = GuildID(guild_id), RoleID(role_id)
        async with self._db.transaction("grant") as conn:
            if not await self._guild_store.exists(conn, guild_id):
                raise NotFound(guild_id)
            added = await self._privilege_store.insert(conn, RolePrivilege(guild_id, role_id, privilege))

        if added:
            logger.info("[AUTHZ] Granted %s to role %s in guild %s", privilege, role_id, guild_id)
        return added

    async def revoke(self, guild_id: GuildLike, role_id: RoleLike, privilege: Privilege) -> bool:
        """Remove ``privilege`` from a role. Returns False when it was not held."""
        guild_id, role_id = GuildID(guild_id), RoleID(role_id)
        async with self._db.transaction("revoke") as conn:
            removed = await self._privilege_store.delete(conn, RolePrivilege(guild_id, role_id, privilege))

        if removed:
            logger.info("[AUTHZ] Revoked %s from role %s in guild %s", privilege, role_id, guild_id)
        return removed
