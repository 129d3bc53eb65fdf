import pytest

from guildkeeper.datatypes.discord_datatypes import GuildID, RoleID
from guildkeeper.datatypes.privilege import Privilege, RolePrivilege
from guildkeeper.repositories.interfaces import RolePrivilegeStore
from guildkeeper.repositories.role_privileges_repo import RolePrivilegesRepository
from guildkeeper.services.guild_config_service import GuildConfigService


@pytest.mark.asyncio
async def test_insert_and_delete_entries(database):
    await GuildConfigService(database).new(1, advertise=False)
    repo = RolePrivilegesRepository(database.db_perf_mon)
    assert isinstance(repo, RolePrivilegeStore)

    entry = RolePrivilege(GuildID(1), RoleID(2**64 - 1), Privilege.MANAGER)

    async with database.transaction("seed") as conn:
        assert await repo.insert(conn, entry) is True
        assert await repo.insert(conn, entry) is False

    async with database.read("check") as conn:
        assert await repo.get_for_role(conn, GuildID(1), RoleID(2**64 - 1)) == {Privilege.MANAGER}
        assert await repo.get_roles_with(conn, GuildID(1), Privilege.MANAGER) == {RoleID(2**64 - 1)}

    async with database.transaction("remove") as conn:
        assert await repo.delete(conn, entry) is True
        assert await repo.delete(conn, entry) is False

    async with database.read("check") as conn:
        assert await repo.get_for_guild(conn, GuildID(1)) == {}


def test_role_privilege_is_a_value():
    a = RolePrivilege(GuildID(1), RoleID(2), Privilege.ADMIN)
    b = RolePrivilege(GuildID(1), RoleID(2), Privilege.ADMIN)
    assert a == b
    assert len({a, b}) == 1
