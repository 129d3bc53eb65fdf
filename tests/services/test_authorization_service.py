"""Tests for AuthorizationService privilege queries and role-map mutation."""

import pytest
import pytest_asyncio

from guildkeeper.datatypes.discord_datatypes import RoleID
from guildkeeper.datatypes.privilege import Privilege
from guildkeeper.errors import NotFound
from guildkeeper.services.authorization_service import AuthorizationService
from guildkeeper.services.guild_config_service import GuildConfigService

GUILD = 42
ADMIN_ROLE = 100
MOD_ROLE = 200
PLAIN_ROLE = 300


@pytest_asyncio.fixture
async def authz(database):
    await GuildConfigService(database).new(GUILD, advertise=False)
    service = AuthorizationService(database)
    await service.grant(GUILD, ADMIN_ROLE, Privilege.ADMIN)
    await service.grant(GUILD, ADMIN_ROLE, Privilege.MANAGER)
    await service.grant(GUILD, MOD_ROLE, Privilege.MANAGER)
    return service


class FailingStore:
    """Privilege store that must not be reached."""

    async def get_for_role(self, conn, guild_id, role_id):
        raise AssertionError("store should not be queried")

    async def get_roles_with(self, conn, guild_id, privilege):
        raise AssertionError("store should not be queried")


class TestQueries:
    @pytest.mark.asyncio
    async def test_exists(self, authz):
        assert await authz.exists(GUILD) is True
        assert await authz.exists(GUILD + 1) is False

    @pytest.mark.asyncio
    async def test_privileges_for(self, authz):
        assert await authz.privileges_for(GUILD, ADMIN_ROLE) == {Privilege.ADMIN, Privilege.MANAGER}
        assert await authz.privileges_for(GUILD, MOD_ROLE) == {Privilege.MANAGER}
        assert await authz.privileges_for(GUILD, PLAIN_ROLE) == set()

    @pytest.mark.asyncio
    async def test_unknown_guild_answers_empty(self, authz):
        assert await authz.privileges_for(999, ADMIN_ROLE) == set()
        assert await authz.roles_with(999, Privilege.ADMIN) == set()
        assert await authz.role_privileges(999) == {}
        assert await authz.has_privileges(999, ADMIN_ROLE, [Privilege.ADMIN]) is False

    @pytest.mark.asyncio
    async def test_roles_with(self, authz):
        assert await authz.roles_with(GUILD, Privilege.MANAGER) == {RoleID(ADMIN_ROLE), RoleID(MOD_ROLE)}
        assert await authz.roles_with(GUILD, Privilege.EVENT) == set()

    @pytest.mark.asyncio
    async def test_role_privileges(self, authz):
        assert await authz.role_privileges(GUILD) == {
            RoleID(ADMIN_ROLE): {Privilege.ADMIN, Privilege.MANAGER},
            RoleID(MOD_ROLE): {Privilege.MANAGER},
        }


class TestCombinators:
    @pytest.mark.asyncio
    async def test_has_privileges_requires_all(self, authz):
        assert await authz.has_privileges(GUILD, ADMIN_ROLE, [Privilege.ADMIN, Privilege.MANAGER]) is True
        assert await authz.has_privileges(GUILD, MOD_ROLE, [Privilege.ADMIN, Privilege.MANAGER]) is False
        assert await authz.has_privileges(GUILD, ADMIN_ROLE, [Privilege.EVENT]) is False

    @pytest.mark.asyncio
    async def test_admin_does_not_imply_others(self, authz):
        await authz.grant(GUILD, PLAIN_ROLE, Privilege.ADMIN)
        assert await authz.has_privileges(GUILD, PLAIN_ROLE, [Privilege.MANAGER]) is False

    @pytest.mark.asyncio
    async def test_empty_requirement_is_vacuously_true(self, database):
        service = AuthorizationService(database, privilege_store=FailingStore())
        assert await service.has_privileges(GUILD, PLAIN_ROLE, []) is True
        assert await service.has_privileges(999, 1, set()) is True

    @pytest.mark.asyncio
    async def test_have_privilege_any_role(self, authz):
        assert await authz.have_privilege(GUILD, [PLAIN_ROLE, MOD_ROLE], Privilege.MANAGER) is True
        assert await authz.have_privilege(GUILD, [PLAIN_ROLE], Privilege.MANAGER) is False
        assert await authz.have_privilege(GUILD, [ADMIN_ROLE, MOD_ROLE], Privilege.EVENT) is False

    @pytest.mark.asyncio
    async def test_have_privilege_empty_roles_is_false(self, database):
        service = AuthorizationService(database, privilege_store=FailingStore())
        assert await service.have_privilege(GUILD, [], Privilege.ADMIN) is False

    @pytest.mark.asyncio
    async def test_all_vs_any_differ(self, authz):
        # Holding two privileges across two roles is not the same as one role holding both
        await authz.grant(GUILD, PLAIN_ROLE, Privilege.EVENT)
        assert await authz.have_privilege(GUILD, [MOD_ROLE, PLAIN_ROLE], Privilege.MANAGER) is True
        assert await authz.have_privilege(GUILD, [MOD_ROLE, PLAIN_ROLE], Privilege.EVENT) is True
        assert await authz.has_privileges(GUILD, MOD_ROLE, [Privilege.MANAGER, Privilege.EVENT]) is False
        assert await authz.has_privileges(GUILD, PLAIN_ROLE, [Privilege.MANAGER, Privilege.EVENT]) is False


class TestMutation:
    @pytest.mark.asyncio
    async def test_grant_is_idempotent(self, authz):
        assert await authz.grant(GUILD, PLAIN_ROLE, Privilege.EVENT) is True
        assert await authz.grant(GUILD, PLAIN_ROLE, Privilege.EVENT) is False
        assert await authz.privileges_for(GUILD, PLAIN_ROLE) == {Privilege.EVENT}

    @pytest.mark.asyncio
    async def test_grant_requires_configuration(self, authz):
        with pytest.raises(NotFound):
            await authz.grant(999, ADMIN_ROLE, Privilege.ADMIN)

    @pytest.mark.asyncio
    async def test_revoke(self, authz):
        assert await authz.revoke(GUILD, ADMIN_ROLE, Privilege.ADMIN) is True
        assert await authz.revoke(GUILD, ADMIN_ROLE, Privilege.ADMIN) is False
        assert await authz.privileges_for(GUILD, ADMIN_ROLE) == {Privilege.MANAGER}

    @pytest.mark.asyncio
    async def test_roles_are_scoped_per_guild(self, authz, database):
        await GuildConfigService(database).new(GUILD + 1, advertise=True)
        assert await authz.privileges_for(GUILD + 1, ADMIN_ROLE) == set()
