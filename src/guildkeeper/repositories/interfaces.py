"""
Store interface contracts.

The services depend on these protocols, not on SQLite. Any persistence
backend can be plugged in as long as it honors them. Every method takes an
opaque connection handle first (whatever the backend's ``Database`` scope
yields) and either returns a value or raises a store-level failure.

The aiosqlite repositories in this package are the shipped implementation.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, Set, runtime_checkable

from guildkeeper.datatypes.discord_datatypes import GuildID, RoleID, UserID
from guildkeeper.datatypes.guild_config import GuildConfig
from guildkeeper.datatypes.privilege import Privilege, RolePrivilege
from guildkeeper.datatypes.slap_datatypes import SlapReport


@runtime_checkable
class GuildConfigStore(Protocol):
    """Per-guild configuration rows."""

    async def get(self, conn: Any, guild_id: GuildID) -> GuildConfig | None:
        """Return the row, or None if the guild has no configuration."""
        ...

    async def get_field(self, conn: Any, guild_id: GuildID, field: str) -> tuple[Any] | None:
        """Return a 1-tuple with one column's value, or None if the guild has no row."""
        ...

    async def exists(self, conn: Any, guild_id: GuildID) -> bool:
        ...

    async def insert(self, conn: Any, config: GuildConfig) -> None:
        """Insert a new row; a duplicate guild raises ``ConstraintViolation``."""
        ...

    async def update_field(self, conn: Any, guild_id: GuildID, field: str, value: Any) -> bool:
        """Overwrite one column; False if no row matched."""
        ...

    async def replace(self, conn: Any, config: GuildConfig) -> bool:
        """Overwrite every scalar column of an existing row; False if no row matched."""
        ...

    async def list_ids(self, conn: Any) -> List[GuildID]:
        ...


@runtime_checkable
class RolePrivilegeStore(Protocol):
    """The role-to-privilege relation of each guild."""

    async def get_for_role(self, conn: Any, guild_id: GuildID, role_id: RoleID) -> Set[Privilege]:
        ...

    async def get_roles_with(self, conn: Any, guild_id: GuildID, privilege: Privilege) -> Set[RoleID]:
        ...

    async def get_for_guild(self, conn: Any, guild_id: GuildID) -> Dict[RoleID, Set[Privilege]]:
        ...

    async def insert(self, conn: Any, entry: RolePrivilege) -> bool:
        """Add a pair; False when it was already present."""
        ...

    async def delete(self, conn: Any, entry: RolePrivilege) -> bool:
        """Remove a pair; False when it was not present."""
        ...


@runtime_checkable
class SlapLedgerStore(Protocol):
    """Append-only moderation ledger."""

    async def insert(
        self,
        conn: Any,
        guild_id: GuildID,
        sentence: int,
        offender: UserID,
        enforcer: UserID | None,
        reason: str | None,
    ) -> SlapReport:
        """Append an entry; the store assigns ``id`` and ``created_at``."""
        ...

    async def select_ordered(
        self, conn: Any, guild_id: GuildID, limit: int, offender: UserID | None = None
    ) -> List[SlapReport]:
        """Return up to ``limit`` entries by ascending id, optionally for one offender."""
        ...

    async def select_offenders(self, conn: Any, guild_id: GuildID, limit: int) -> List[UserID]:
        ...

    async def count(self, conn: Any, guild_id: GuildID, offender: UserID | None = None) -> int:
        ...
