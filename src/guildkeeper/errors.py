"""
Error taxonomy for Guildkeeper.

Every failing operation raises one of these instead of returning a default
value. Callers (transport layer, console) decide how to surface them:

- ``StoreFailure`` is an internal failure of the persistence engine.
- ``ClientError`` subclasses are client-correctable: the request was
  well-formed at the transport level but cannot be honored as asked.

Nothing in the core retries or masks these errors.
"""

from __future__ import annotations

from typing import Any


class GuildkeeperError(Exception):
    """Base class for all errors raised by Guildkeeper."""


class StoreFailure(GuildkeeperError):
    """The persistence engine failed (connectivity, I/O, unclassified constraint)."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        message = f"store failure during {operation}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ClientError(GuildkeeperError):
    """Base class for errors the caller can correct."""


class AlreadyExists(ClientError):
    """A guild configuration already exists for this guild."""

    def __init__(self, guild_id: Any) -> None:
        self.guild_id = guild_id
        super().__init__(f"guild {guild_id} already has a configuration")


class NotFound(ClientError):
    """The guild has no configuration."""

    def __init__(self, guild_id: Any) -> None:
        self.guild_id = guild_id
        super().__init__(f"guild {guild_id} has no configuration")


class UnrecognizedPrivilege(ClientError):
    """A privilege token did not match any known privilege."""

    def __init__(self, text: Any) -> None:
        self.text = text
        super().__init__(f"unrecognized privilege: {text!r}")


class LimitOutOfRange(ClientError):
    """A pagination limit is not representable by the store's count type."""

    def __init__(self, limit: Any, maximum: int) -> None:
        self.limit = limit
        self.maximum = maximum
        super().__init__(f"limit {limit!r} is outside the supported range 0..{maximum}")


class InvalidMessage(ClientError):
    """A welcome or goodbye message failed validation."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"invalid {field}: {reason}")


class ConstraintViolation(StoreFailure):
    """The store rejected a write because it broke a uniqueness or integrity constraint.

    Services classify this into a client error where the constraint has a
    domain meaning (a duplicate guild becomes ``AlreadyExists``); anywhere
    else it stays an internal store failure.
    """
