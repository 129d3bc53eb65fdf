"""
LedgerService: append-only moderation ledger ("slaps").

Writes append one immutable SlapReport. Reads are bounded and cursor-less:
every call starts again from the oldest entry and returns at most ``limit``
entries in ascending id order. To see more, ask for a larger limit; there is
no offset or resume token.

A limit must fit the store's count type (signed 64-bit, so at most
``MAX_LIMIT``). Anything outside ``0..MAX_LIMIT`` is rejected with
``LimitOutOfRange`` before the store is touched, instead of being wrapped or
truncated.

``GuildSlapRecord`` and ``MemberSlapRecord`` are views: they hold only their
keys and a service reference, and query the ledger on every call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Union

from guildkeeper.database.database import Database
from guildkeeper.datatypes.discord_datatypes import GuildID, UserID, check_u64
from guildkeeper.datatypes.slap_datatypes import SlapReport
from guildkeeper.errors import LimitOutOfRange
from guildkeeper.repositories.interfaces import SlapLedgerStore
from guildkeeper.repositories.slap_reports_repo import SlapReportsRepository
from guildkeeper.util.logger import get_logger

logger = get_logger("ledger_service")

MAX_LIMIT = 2**63 - 1

GuildLike = Union[GuildID, int, str]
UserLike = Union[UserID, int, str]


def check_limit(limit: int) -> int:
    """
    Validate a pagination limit.

    Raises:
        LimitOutOfRange: If ``limit`` is not an int in ``0..MAX_LIMIT``.
    """
    if isinstance(limit, bool) or not isinstance(limit, int) or not 0 <= limit <= MAX_LIMIT:
        raise LimitOutOfRange(limit, MAX_LIMIT)
    return limit


class LedgerService:
    """Append and bounded reads over the slap ledger."""

    def __init__(self, database: Database, store: SlapLedgerStore | None = None) -> None:
        self._db = database
        self._store = store or SlapReportsRepository(database.db_perf_mon)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def new_slap(
        self,
        guild_id: GuildLike,
        sentence: int,
        offender: UserLike,
        enforcer: UserLike | None = None,
        reason: str | None = None,
    ) -> SlapReport:
        """
        Append a slap. Identical calls create distinct entries.

        Raises:
            ValueError: If ``sentence`` is not an unsigned 64-bit int.
            StoreFailure: If the store fails.
        """
        guild_id = GuildID(guild_id)
        offender = UserID(offender)
        enforcer = UserID(enforcer) if enforcer is not None else None
        check_u64(sentence, "sentence")

        async with self._db.transaction("new_slap") as conn:
            report = await self._store.insert(conn, guild_id, sentence, offender, enforcer, reason)

        logger.info(
            "[LEDGER] Slap #%d in guild %s: offender %s, enforcer %s, sentence %d",
            report.id, guild_id, offender, enforcer, sentence,
        )
        return report

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def len(self, guild_id: GuildLike, member: UserLike | None = None) -> int:
        """Return the all-time number of slaps in the guild, or of one member."""
        guild_id = GuildID(guild_id)
        member = UserID(member) if member is not None else None
        async with self._db.read("slap_count") as conn:
            return await self._store.count(conn, guild_id, member)

    async def slaps(
        self, guild_id: GuildLike, limit: int, member: UserLike | None = None
    ) -> List[SlapReport]:
        """Return the oldest ``limit`` slaps of the guild (or of one member), oldest first."""
        check_limit(limit)
        guild_id = GuildID(guild_id)
        member = UserID(member) if member is not None else None
        if limit == 0:
            return []
        async with self._db.read("slaps") as conn:
            return await self._store.select_ordered(conn, guild_id, limit, member)

    async def offenders(self, guild_id: GuildLike, limit: int) -> List[UserID]:
        """Return the offender of each of the oldest ``limit`` guild slaps, repeats included."""
        check_limit(limit)
        guild_id = GuildID(guild_id)
        if limit == 0:
            return []
        async with self._db.read("offenders") as conn:
            return await self._store.select_offenders(conn, guild_id, limit)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def guild_record(self, guild_id: GuildLike) -> "GuildSlapRecord":
        return GuildSlapRecord(self, GuildID(guild_id))

    def member_record(self, guild_id: GuildLike, member: UserLike) -> "MemberSlapRecord":
        return MemberSlapRecord(self, GuildID(guild_id), UserID(member))


@dataclass(frozen=True, slots=True)
class GuildSlapRecord:
    """All slaps of one guild, oldest first."""

    ledger: LedgerService
    guild_id: GuildID

    async def len(self) -> int:
        return await self.ledger.len(self.guild_id)

    async def slaps(self, limit: int) -> List[SlapReport]:
        return await self.ledger.slaps(self.guild_id, limit)

    async def offenders(self, limit: int) -> List[UserID]:
        return await self.ledger.offenders(self.guild_id, limit)


@dataclass(frozen=True, slots=True)
class MemberSlapRecord:
    """The slaps of one member within one guild, oldest first."""

    ledger: LedgerService
    guild_id: GuildID
    member: UserID

    async def len(self) -> int:
        return await self.ledger.len(self.guild_id, self.member)

    async def slaps(self, limit: int) -> List[SlapReport]:
        return await self.ledger.slaps(self.guild_id, limit, self.member)
