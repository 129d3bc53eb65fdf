"""
GuildConfigService: lifecycle of per-guild configuration.

Responsibilities:
- Create a guild's configuration exactly once (``AlreadyExists`` afterwards)
- Validate welcome and goodbye messages, each on its own
- Overwrite single fields, or every scalar field at once
- Read single fields, the whole record, or the list of configured guilds

A guild without a configuration is reported as ``NotFound``; an unset
optional field is a normal ``None``. Each call is one store operation, so
concurrent setters on different fields never conflict and setters on the
same field are last-write-wins.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Union

from guildkeeper.database.database import Database
from guildkeeper.datatypes.discord_datatypes import ChannelID, GuildID
from guildkeeper.datatypes.guild_config import DEFAULT_MAX_MESSAGE_LENGTH, GuildConfig, validate_message
from guildkeeper.errors import AlreadyExists, ConstraintViolation, NotFound
from guildkeeper.repositories.guild_config_repo import GuildConfigRepository
from guildkeeper.repositories.interfaces import GuildConfigStore, RolePrivilegeStore
from guildkeeper.repositories.role_privileges_repo import RolePrivilegesRepository
from guildkeeper.util.logger import get_logger

logger = get_logger("guild_config_service")

GuildLike = Union[GuildID, int, str]
ChannelLike = Union[ChannelID, int, str]


class GuildConfigService:
    """Creation, validation and mutation of guild configurations."""

    def __init__(
        self,
        database: Database,
        *,
        max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
        allowed_langs: Sequence[str] = ("en",),
        guild_store: GuildConfigStore | None = None,
        privilege_store: RolePrivilegeStore | None = None,
    ) -> None:
        self._db = database
        self._max_message_length = max_message_length
        self._allowed_langs = list(allowed_langs)
        self._guild_store = guild_store or GuildConfigRepository(database.db_perf_mon)
        self._privilege_store = privilege_store or RolePrivilegesRepository(database.db_perf_mon)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def new(
        self,
        guild_id: GuildLike,
        advertise: bool,
        welcome_message: str | None = None,
        goodbye_message: str | None = None,
        admin_channel: ChannelLike | None = None,
    ) -> GuildConfig:
        """
        Create the configuration of a guild.

        Both messages are validated before anything is written, and the
        insert is a single atomic statement, so a failure leaves no trace.

        Raises:
            InvalidMessage: If either message breaks the length/content rules.
            AlreadyExists: If the guild already has a configuration.
        """
        guild_id = GuildID(guild_id)
        config = GuildConfig(
            guild_id=guild_id,
            advertise=bool(advertise),
            admin_channel=ChannelID(admin_channel) if admin_channel is not None else None,
            welcome_message=self._validate("welcome_message", welcome_message),
            goodbye_message=self._validate("goodbye_message", goodbye_message),
        )

        try:
            async with self._db.transaction("guild_new") as conn:
                await self._guild_store.insert(conn, config)
        except ConstraintViolation:
            logger.info("[GUILD CONFIG] Guild %s already has a configuration", guild_id)
            raise AlreadyExists(guild_id) from None

        logger.info("[GUILD CONFIG] Created configuration for guild %s", guild_id)
        return config

    # ------------------------------------------------------------------
    # Existence and listing
    # ------------------------------------------------------------------

    async def exists(self, guild_id: GuildLike) -> bool:
        guild_id = GuildID(guild_id)
        async with self._db.read("exists") as conn:
            return await self._guild_store.exists(conn, guild_id)

    async def list_guilds(self) -> List[GuildID]:
        """Return every configured guild in ascending ID order."""
        async with self._db.read("list_guilds") as conn:
            return await self._guild_store.list_ids(conn)

    async def fetch(self, guild_id: GuildLike) -> GuildConfig:
        """
        Return the full configuration, role map included.

        Raises:
            NotFound: If the guild has no configuration.
        """
        guild_id = GuildID(guild_id)
        async with self._db.read("fetch") as conn:
            config = await self._guild_store.get(conn, guild_id)
            if config is None:
                raise NotFound(guild_id)
            config.role_privileges = await self._privilege_store.get_for_guild(conn, guild_id)
        return config

    def available_languages(self) -> List[str]:
        """Return the languages the service offers to guilds."""
        return list(self._allowed_langs)

    # ------------------------------------------------------------------
    # Whole-record update
    # ------------------------------------------------------------------

    async def overwrite(self, config: GuildConfig) -> GuildConfig:
        """
        Replace every scalar field of an existing configuration.

        The role map in ``config`` is ignored; use the authorization service
        to change it.

        Raises:
            InvalidMessage: If either message breaks the rules.
            NotFound: If the guild has no configuration.
        """
        config = GuildConfig(
            guild_id=GuildID(config.guild_id),
            advertise=bool(config.advertise),
            admin_channel=ChannelID(config.admin_channel) if config.admin_channel is not None else None,
            welcome_message=self._validate("welcome_message", config.welcome_message),
            goodbye_message=self._validate("goodbye_message", config.goodbye_message),
        )

        async with self._db.transaction("overwrite") as conn:
            if not await self._guild_store.replace(conn, config):
                raise NotFound(config.guild_id)

        logger.info("[GUILD CONFIG] Overwrote configuration for guild %s", config.guild_id)
        return config

    # ------------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------------

    async def set_admin_chan(self, guild_id: GuildLike, channel_id: ChannelLike | None) -> None:
        await self._set_field(guild_id, "admin_channel", ChannelID(channel_id) if channel_id is not None else None)

    async def set_advertise(self, guild_id: GuildLike, advertise: bool) -> None:
        await self._set_field(guild_id, "advertise", bool(advertise))

    async def set_welcome_message(self, guild_id: GuildLike, message: str | None) -> None:
        await self._set_field(guild_id, "welcome_message", self._validate("welcome_message", message))

    async def set_goodbye_message(self, guild_id: GuildLike, message: str | None) -> None:
        await self._set_field(guild_id, "goodbye_message", self._validate("goodbye_message", message))

    # ------------------------------------------------------------------
    # Getters
    # ------------------------------------------------------------------

    async def get_admin_chan(self, guild_id: GuildLike) -> ChannelID | None:
        return await self._get_field(guild_id, "admin_channel")

    async def get_advertise(self, guild_id: GuildLike) -> bool:
        return await self._get_field(guild_id, "advertise")

    async def get_welcome_message(self, guild_id: GuildLike) -> str | None:
        return await self._get_field(guild_id, "welcome_message")

    async def get_goodbye_message(self, guild_id: GuildLike) -> str | None:
        return await self._get_field(guild_id, "goodbye_message")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _validate(self, field: str, message: str | None) -> str | None:
        return validate_message(field, message, self._max_message_length)

    async def _set_field(self, guild_id: GuildLike, field: str, value: Any) -> None:
        guild_id = GuildID(guild_id)
        async with self._db.transaction(f"set_{field}") as conn:
            if not await self._guild_store.update_field(conn, guild_id, field, value):
                raise NotFound(guild_id)
        logger.debug("[GUILD CONFIG] Guild %s: %s updated", guild_id, field)

    async def _get_field(self, guild_id: GuildLike, field: str) -> Any:
        guild_id = GuildID(guild_id)
        async with self._db.read(f"get_{field}") as conn:
            found = await self._guild_store.get_field(conn, guild_id, field)
        if found is None:
            raise NotFound(guild_id)
        return found[0]
