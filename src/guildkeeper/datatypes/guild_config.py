"""
Per-guild configuration record.

Database schema:
- guilds table with columns: guild_id, admin_channel, advertise,
  welcome_message, goodbye_message
- guild_role_privileges table with columns: guild_id, role_id, privilege
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Set

from guildkeeper.datatypes.discord_datatypes import ChannelID, GuildID, RoleID
from guildkeeper.datatypes.privilege import Privilege
from guildkeeper.errors import InvalidMessage

DEFAULT_MAX_MESSAGE_LENGTH = 2000

# Columns that the single-field setters are allowed to touch
MUTABLE_FIELDS = ("admin_channel", "advertise", "welcome_message", "goodbye_message")


@dataclass(slots=True)
class GuildConfig:
    """Configuration values for one guild.

    ``welcome_message`` and ``goodbye_message`` are either None (unset) or
    text; an empty string is a valid message. ``role_privileges`` is filled
    only when the whole record is fetched.
    """

    guild_id: GuildID
    advertise: bool = False
    admin_channel: ChannelID | None = None
    welcome_message: str | None = None
    goodbye_message: str | None = None
    role_privileges: Dict[RoleID, Set[Privilege]] = field(default_factory=dict)


def validate_message(field_name: str, message: str | None, max_length: int = DEFAULT_MAX_MESSAGE_LENGTH) -> str | None:
    """
    Check a welcome/goodbye message and return it unchanged.

    None passes through (the field is being cleared). Text must be a str of
    at most ``max_length`` characters without NUL characters.

    Raises:
        InvalidMessage: If the message breaks one of the constraints.
    """
    if message is None:
        return None
    if not isinstance(message, str):
        raise InvalidMessage(field_name, f"expected text, got {type(message).__name__}")
    if len(message) > max_length:
        raise InvalidMessage(field_name, f"{len(message)} characters exceeds the limit of {max_length}")
    if "\x00" in message:
        raise InvalidMessage(field_name, "contains a NUL character")
    return message
