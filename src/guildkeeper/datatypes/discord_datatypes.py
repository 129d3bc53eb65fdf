"""
Type-safe wrapper classes for chat-platform identifiers.

Guild, role, user and channel IDs are opaque unsigned 64-bit integers
(snowflakes). They are compared for equality and hashed, never used for
arithmetic. Each wrapper rejects values outside ``0 .. 2**64 - 1`` so a bad ID
fails at the boundary instead of deep inside a query.

SQLite integers are signed 64-bit, so ``to_sql``/``from_sql`` reinterpret the
value as two's complement for storage. The mapping is lossless.
"""

from __future__ import annotations

from typing import TypeVar, Union

import discord

U64_MAX = 2**64 - 1
_I64_SPAN = 2**64
_I64_MAX = 2**63 - 1

S = TypeVar("S", bound="Snowflake")


class Snowflake:
    """
    Base class for 64-bit unsigned identifiers.

    Subclasses only add a ``from_<object>`` constructor for the matching
    py-cord model. Two IDs of different kinds never compare equal, even when
    their numeric value is the same.

    Example:
        >>> gid = GuildID(123456789012345678)
        >>> int(gid)
        123456789012345678
        >>> GuildID("123456789012345678") == gid
        True
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "Snowflake"]) -> None:
        """
        Initialize from a decimal string, an int, or another ID of the same kind.

        Raises:
            ValueError: If the value is not a valid unsigned 64-bit integer.
        """
        if isinstance(value, Snowflake):
            if type(value) is not type(self):
                raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}")
            parsed = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool")
        elif isinstance(value, int):
            parsed = value
        elif isinstance(value, str):
            try:
                parsed = int(value.strip())
            except ValueError:
                raise ValueError(f"Cannot create {type(self).__name__} from {value!r}") from None
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

        if not 0 <= parsed <= U64_MAX:
            raise ValueError(f"{type(self).__name__} out of range: {parsed}")
        self._value = parsed

    @classmethod
    def from_int(cls: type[S], value: int) -> S:
        return cls(value)

    @classmethod
    def from_sql(cls: type[S], value: int) -> S:
        """Rebuild an ID from its signed 64-bit storage form."""
        return cls(u64_from_sql(value))

    def to_sql(self) -> int:
        """Return the signed 64-bit form used as a SQLite INTEGER."""
        return u64_to_sql(self._value)

    def to_int(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Snowflake):
            return type(other) is type(self) and other._value == self._value
        if isinstance(other, bool):
            return NotImplemented
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._value)

    def __lt__(self, other: object) -> bool:
        # Ordering exists only so ID collections serialize stably
        if isinstance(other, Snowflake) and type(other) is type(self):
            return self._value < other._value
        return NotImplemented


class GuildID(Snowflake):
    """Identifier of a guild (tenant)."""

    __slots__ = ()

    @classmethod
    def from_guild(cls, guild: discord.Guild) -> "GuildID":
        return cls(guild.id)


class RoleID(Snowflake):
    """Identifier of a role within a guild."""

    __slots__ = ()

    @classmethod
    def from_role(cls, role: discord.Role) -> "RoleID":
        return cls(role.id)


class UserID(Snowflake):
    """Identifier of a user (member) of a guild."""

    __slots__ = ()

    @classmethod
    def from_user(cls, member: Union[discord.Member, discord.User]) -> "UserID":
        return cls(member.id)


class ChannelID(Snowflake):
    """Identifier of a channel."""

    __slots__ = ()

    @classmethod
    def from_channel(cls, channel: Union[discord.TextChannel, discord.Thread, discord.abc.GuildChannel]) -> "ChannelID":
        return cls(channel.id)


def check_u64(value: int, name: str) -> int:
    """Validate that a plain int fits in an unsigned 64-bit field."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"{name} out of range: {value}")
    return value


def u64_to_sql(value: int) -> int:
    return value - _I64_SPAN if value > _I64_MAX else value


def u64_from_sql(value: int) -> int:
    return value + _I64_SPAN if value < 0 else value
