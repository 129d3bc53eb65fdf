"""Tests for GuildConfigService creation, setters, getters and validation."""

import asyncio

import pytest

from guildkeeper.datatypes.discord_datatypes import ChannelID, GuildID, RoleID
from guildkeeper.datatypes.guild_config import GuildConfig
from guildkeeper.datatypes.privilege import Privilege
from guildkeeper.errors import AlreadyExists, InvalidMessage, NotFound
from guildkeeper.services.authorization_service import AuthorizationService
from guildkeeper.services.guild_config_service import GuildConfigService


@pytest.fixture
def configs(database):
    return GuildConfigService(database, max_message_length=50, allowed_langs=["en", "fr"])


class TestCreation:
    @pytest.mark.asyncio
    async def test_new_guild_scenario(self, configs):
        await configs.new(42, advertise=True, welcome_message="Hi", goodbye_message=None)

        assert await configs.exists(42) is True
        assert await configs.get_advertise(42) is True
        assert await configs.get_welcome_message(42) == "Hi"
        assert await configs.get_goodbye_message(42) is None
        assert await configs.get_admin_chan(42) is None

    @pytest.mark.asyncio
    async def test_new_twice_raises_already_exists_and_keeps_data(self, configs):
        await configs.new(42, advertise=True, welcome_message="Hi")
        with pytest.raises(AlreadyExists) as excinfo:
            await configs.new(42, advertise=False, welcome_message="Other")
        assert excinfo.value.guild_id == GuildID(42)

        assert await configs.get_advertise(42) is True
        assert await configs.get_welcome_message(42) == "Hi"

    @pytest.mark.asyncio
    async def test_concurrent_new_has_one_winner(self, configs):
        results = await asyncio.gather(
            *(configs.new(7, advertise=bool(i % 2)) for i in range(5)),
            return_exceptions=True,
        )
        successes = [r for r in results if isinstance(r, GuildConfig)]
        failures = [r for r in results if isinstance(r, AlreadyExists)]
        assert len(successes) == 1
        assert len(failures) == 4

    @pytest.mark.asyncio
    async def test_new_with_admin_channel(self, configs):
        await configs.new(42, advertise=False, admin_channel=555)
        assert await configs.get_admin_chan(42) == ChannelID(555)

    @pytest.mark.asyncio
    async def test_invalid_message_leaves_nothing_behind(self, configs):
        with pytest.raises(InvalidMessage):
            await configs.new(42, advertise=False, goodbye_message="x" * 51)
        assert await configs.exists(42) is False


class TestSettersAndGetters:
    @pytest.mark.asyncio
    async def test_set_then_clear_welcome(self, configs):
        await configs.new(42, advertise=False)
        await configs.set_welcome_message(42, "Welcome!")
        assert await configs.get_welcome_message(42) == "Welcome!"
        await configs.set_welcome_message(42, None)
        assert await configs.get_welcome_message(42) is None

    @pytest.mark.asyncio
    async def test_empty_message_is_distinct_from_unset(self, configs):
        await configs.new(42, advertise=False)
        await configs.set_goodbye_message(42, "")
        assert await configs.get_goodbye_message(42) == ""

    @pytest.mark.asyncio
    async def test_set_advertise_and_admin_chan(self, configs):
        await configs.new(42, advertise=False)
        await configs.set_advertise(42, True)
        await configs.set_admin_chan(42, 2**64 - 1)
        assert await configs.get_advertise(42) is True
        assert await configs.get_admin_chan(42) == ChannelID(2**64 - 1)
        await configs.set_admin_chan(42, None)
        assert await configs.get_admin_chan(42) is None

    @pytest.mark.asyncio
    async def test_setters_do_not_touch_other_fields(self, configs):
        await configs.new(42, advertise=True, welcome_message="Hi", goodbye_message="Bye")
        await configs.set_welcome_message(42, "Hello")
        assert await configs.get_goodbye_message(42) == "Bye"
        assert await configs.get_advertise(42) is True

    @pytest.mark.asyncio
    async def test_missing_guild_is_not_found(self, configs):
        with pytest.raises(NotFound):
            await configs.get_advertise(42)
        with pytest.raises(NotFound):
            await configs.get_welcome_message(42)
        with pytest.raises(NotFound):
            await configs.set_advertise(42, True)
        with pytest.raises(NotFound):
            await configs.set_goodbye_message(42, "Bye")
        assert await configs.exists(42) is False

    @pytest.mark.asyncio
    async def test_messages_validated_independently(self, configs):
        await configs.new(42, advertise=False, welcome_message="Hi", goodbye_message="Bye")

        with pytest.raises(InvalidMessage) as excinfo:
            await configs.set_goodbye_message(42, "x" * 51)
        assert excinfo.value.field == "goodbye_message"

        # A bad goodbye never blocks a good welcome
        await configs.set_welcome_message(42, "x" * 50)
        assert await configs.get_welcome_message(42) == "x" * 50
        assert await configs.get_goodbye_message(42) == "Bye"

        with pytest.raises(InvalidMessage):
            await configs.set_welcome_message(42, "nul\x00")


class TestWholeRecord:
    @pytest.mark.asyncio
    async def test_fetch_includes_role_map(self, configs, database):
        await configs.new(42, advertise=True, welcome_message="Hi")
        await AuthorizationService(database).grant(42, 9, Privilege.EVENT)

        config = await configs.fetch(42)
        assert config.guild_id == GuildID(42)
        assert config.advertise is True
        assert config.welcome_message == "Hi"
        assert config.role_privileges == {RoleID(9): {Privilege.EVENT}}

    @pytest.mark.asyncio
    async def test_fetch_missing(self, configs):
        with pytest.raises(NotFound):
            await configs.fetch(42)

    @pytest.mark.asyncio
    async def test_overwrite(self, configs):
        await configs.new(42, advertise=True, welcome_message="Hi")
        await configs.overwrite(GuildConfig(GuildID(42), advertise=False, goodbye_message="Bye"))

        config = await configs.fetch(42)
        assert config.advertise is False
        assert config.welcome_message is None
        assert config.goodbye_message == "Bye"

    @pytest.mark.asyncio
    async def test_overwrite_missing(self, configs):
        with pytest.raises(NotFound):
            await configs.overwrite(GuildConfig(GuildID(42)))
        with pytest.raises(NotFound):
            await configs.overwrite(GuildConfig(7))  # type: ignore

    @pytest.mark.asyncio
    async def test_overwrite_accepts_plain_ids(self, configs):
        await configs.new(42, advertise=True)
        returned = await configs.overwrite(GuildConfig(42, advertise=0, admin_channel=555))  # type: ignore

        assert returned.guild_id == GuildID(42)
        assert returned.advertise is False
        assert await configs.get_admin_chan(42) == ChannelID(555)
        assert await configs.get_advertise(42) is False

        await configs.overwrite(GuildConfig(GuildID(42), admin_channel="556"))  # type: ignore
        assert await configs.get_admin_chan(42) == ChannelID(556)

    @pytest.mark.asyncio
    async def test_overwrite_rejects_invalid_message(self, configs):
        await configs.new(42, advertise=True, welcome_message="Hi")
        with pytest.raises(InvalidMessage) as excinfo:
            await configs.overwrite(GuildConfig(GuildID(42), welcome_message="Hey", goodbye_message="x" * 51))
        assert excinfo.value.field == "goodbye_message"

        # Nothing was written
        assert await configs.get_welcome_message(42) == "Hi"
        assert await configs.get_advertise(42) is True

    @pytest.mark.asyncio
    async def test_list_guilds_sorted(self, configs):
        for guild_id in (30, 10, 2**64 - 1, 20):
            await configs.new(guild_id, advertise=False)
        assert await configs.list_guilds() == [GuildID(10), GuildID(20), GuildID(30), GuildID(2**64 - 1)]

    @pytest.mark.asyncio
    async def test_available_languages(self, configs):
        assert configs.available_languages() == ["en", "fr"]
