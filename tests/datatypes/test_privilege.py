import pytest

from guildkeeper.datatypes.guild_config import GuildConfig, validate_message
from guildkeeper.datatypes.privilege import (
    Privilege,
    parse_privilege,
    privilege_to_text,
    privileges_to_text,
)
from guildkeeper.errors import InvalidMessage, UnrecognizedPrivilege


@pytest.mark.parametrize("privilege", list(Privilege))
def test_text_round_trip(privilege):
    assert parse_privilege(privilege_to_text(privilege)) is privilege


def test_tokens():
    assert privilege_to_text(Privilege.ADMIN) == "admin"
    assert privilege_to_text(Privilege.MANAGER) == "manager"
    assert privilege_to_text(Privilege.EVENT) == "event"
    assert str(Privilege.EVENT) == "event"


@pytest.mark.parametrize("text", ["owner", "Admin", "ADMIN", " admin", "admin ", "", None, 1])
def test_unknown_tokens_rejected(text):
    with pytest.raises(UnrecognizedPrivilege):
        parse_privilege(text)


def test_unrecognized_privilege_carries_input():
    with pytest.raises(UnrecognizedPrivilege) as excinfo:
        parse_privilege("owner")
    assert excinfo.value.text == "owner"


def test_privileges_sort_in_declaration_order():
    assert sorted([Privilege.EVENT, Privilege.ADMIN, Privilege.MANAGER]) == [
        Privilege.ADMIN,
        Privilege.MANAGER,
        Privilege.EVENT,
    ]
    assert privileges_to_text({Privilege.EVENT, Privilege.ADMIN}) == ["admin", "event"]


def test_guild_config_defaults():
    config = GuildConfig(guild_id=1)  # type: ignore
    assert config.advertise is False
    assert config.admin_channel is None
    assert config.welcome_message is None
    assert config.goodbye_message is None
    assert config.role_privileges == {}


class TestValidateMessage:
    def test_none_and_empty_are_valid(self):
        assert validate_message("welcome_message", None) is None
        assert validate_message("welcome_message", "") == ""

    def test_length_limit_is_inclusive(self):
        assert validate_message("welcome_message", "x" * 10, max_length=10) == "x" * 10
        with pytest.raises(InvalidMessage) as excinfo:
            validate_message("welcome_message", "x" * 11, max_length=10)
        assert excinfo.value.field == "welcome_message"

    def test_nul_rejected(self):
        with pytest.raises(InvalidMessage):
            validate_message("goodbye_message", "bye\x00")

    def test_non_text_rejected(self):
        with pytest.raises(InvalidMessage):
            validate_message("goodbye_message", 42)  # type: ignore
