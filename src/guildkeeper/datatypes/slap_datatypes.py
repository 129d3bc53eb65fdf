"""
Moderation ledger entries.

A SlapReport is written once and never updated or deleted. The store assigns
``id`` (strictly increasing, so it doubles as insertion order) and
``created_at``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from guildkeeper.datatypes.discord_datatypes import GuildID, UserID


@dataclass(frozen=True, slots=True)
class SlapReport:
    """One moderation action recorded against a member.

    Attributes:
        id: Store-assigned sequence number
        guild: Guild the slap belongs to
        offender: Member who was slapped
        enforcer: Member who handed it out, None when automated or unknown
        sentence: Severity/duration value; its meaning belongs to the caller
        reason: Free-text reason, if any
        created_at: Store-assigned UTC timestamp
    """

    id: int
    guild: GuildID
    offender: UserID
    enforcer: UserID | None
    sentence: int
    reason: str | None
    created_at: datetime
