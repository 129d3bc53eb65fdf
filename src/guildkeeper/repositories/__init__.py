"""Repository layer: store protocols and their aiosqlite implementations."""
from guildkeeper.repositories.interfaces import GuildConfigStore, RolePrivilegeStore, SlapLedgerStore
from guildkeeper.repositories.guild_config_repo import GuildConfigRepository
from guildkeeper.repositories.role_privileges_repo import RolePrivilegesRepository
from guildkeeper.repositories.slap_reports_repo import SlapReportsRepository

__all__ = [
    "GuildConfigStore",
    "RolePrivilegeStore",
    "SlapLedgerStore",
    "GuildConfigRepository",
    "RolePrivilegesRepository",
    "SlapReportsRepository",
]
