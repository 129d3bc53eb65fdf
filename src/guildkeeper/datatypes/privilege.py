"""
Privilege vocabulary and its text round-trip.

The set is flat and closed: no privilege implies another (ADMIN does not
imply MANAGER) and there is no runtime registration. Privileges sort by
declaration order purely so serialized sets come out stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

from guildkeeper.datatypes.discord_datatypes import GuildID, RoleID
from guildkeeper.errors import UnrecognizedPrivilege


class Privilege(Enum):
    """Enumeration of privileges a role can hold within a guild."""

    ADMIN = "admin"
    MANAGER = "manager"
    EVENT = "event"

    def __str__(self) -> str:
        return self.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Privilege):
            return NotImplemented
        return _DECLARATION_ORDER[self] < _DECLARATION_ORDER[other]


_DECLARATION_ORDER = {privilege: index for index, privilege in enumerate(Privilege)}
_BY_TOKEN = {privilege.value: privilege for privilege in Privilege}


def parse_privilege(text: str) -> Privilege:
    """
    Parse an exact lowercase privilege token.

    Only ``"admin"``, ``"manager"`` and ``"event"`` are accepted. Matching is
    case sensitive and does not trim whitespace.

    Raises:
        UnrecognizedPrivilege: For any other input, including non-strings.
    """
    if not isinstance(text, str):
        raise UnrecognizedPrivilege(text)
    try:
        return _BY_TOKEN[text]
    except KeyError:
        raise UnrecognizedPrivilege(text) from None


def privilege_to_text(privilege: Privilege) -> str:
    """Return the lowercase token for a privilege."""
    return privilege.value


def privileges_to_text(privileges: Iterable[Privilege]) -> List[str]:
    """Serialize a privilege set as a sorted list of tokens."""
    return [privilege_to_text(p) for p in sorted(set(privileges))]


@dataclass(frozen=True, slots=True)
class RolePrivilege:
    """One (guild, role, privilege) association; each triple exists at most once."""

    guild_id: GuildID
    role_id: RoleID
    privilege: Privilege
