"""Interactive admin console for inspecting guild configurations and ledgers."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
import os

from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.shortcuts import PromptSession

from guildkeeper.database.database import Database
from guildkeeper.datatypes.privilege import privileges_to_text
from guildkeeper.errors import ClientError, StoreFailure
from guildkeeper.services.authorization_service import AuthorizationService
from guildkeeper.services.guild_config_service import GuildConfigService
from guildkeeper.services.ledger_service import LedgerService
from guildkeeper.util.logger import get_logger

# Box drawing helpers for aligned console output
BOX_WIDTH = 45

DEFAULT_SLAP_LIMIT = 20


def box_title(title: str) -> list[str]:
    inner_width = BOX_WIDTH - 2
    pad_left = (inner_width - len(title)) // 2
    pad_right = inner_width - len(title) - pad_left
    return [
        f"╔{'═' * inner_width}╗",
        f"║{' ' * pad_left}{title}{' ' * pad_right}║",
        f"╚{'═' * inner_width}╝"
    ]


logger = get_logger("console")

CommandHandler = Callable[["ConsoleControl", list[str]], Awaitable[None]]


@dataclass
class Command:
    """Definition of a console command."""
    name: str
    handler: CommandHandler
    aliases: list[str]
    description: str
    usage: str = ""

    def matches(self, input_cmd: str) -> bool:
        return input_cmd == self.name or input_cmd in self.aliases


def console_print(message: str, style: str = "") -> None:
    """Render text via prompt_toolkit without breaking the active prompt."""
    formatted: FormattedText | str
    if style:
        formatted = FormattedText([(style, message)])
    else:
        formatted = message
    print_formatted_text(formatted)


class ConsoleControl:
    """Shared state of a console session: the services and the shutdown flag."""

    def __init__(
        self,
        database: Database,
        guild_configs: GuildConfigService,
        authorization: AuthorizationService,
        ledger: LedgerService,
    ) -> None:
        self.shutdown_event = asyncio.Event()
        self.database = database
        self.guild_configs = guild_configs
        self.authorization = authorization
        self.ledger = ledger

    def request_shutdown(self) -> None:
        self.shutdown_event.set()

    def is_shutdown_requested(self) -> bool:
        return self.shutdown_event.is_set()


# ==================== Command Handlers ====================

async def cmd_help(control: ConsoleControl, args: list[str]) -> None:
    """Display available commands and their descriptions."""
    for line in box_title("Console Commands Reference"):
        console_print(line, "ansigreen")

    for cmd in COMMANDS:
        aliases_str = f" (aliases: {', '.join(cmd.aliases)})" if cmd.aliases else ""
        console_print(f"\n  {cmd.name}{aliases_str}", "ansicyan")
        console_print(f"    {cmd.description}")
        if cmd.usage:
            console_print(f"    Usage: {cmd.usage}", "ansibrightblack")

    console_print("")


async def cmd_status(control: ConsoleControl, args: list[str]) -> None:
    """Display database status and query statistics."""
    for line in box_title("Status"):
        console_print(line, "ansiblue")

    db_status = "🟢 Open" if control.database.is_open else "🔴 Closed"
    console_print(f"  Database:   {db_status} ({control.database.db_path})")
    if control.database.is_open:
        guilds = await control.guild_configs.list_guilds()
        console_print(f"  Guilds:     {len(guilds)}")

    console_print("")
    console_print(control.database.db_perf_mon.get_summary())
    console_print("")


async def cmd_guilds(control: ConsoleControl, args: list[str]) -> None:
    """List all configured guilds."""
    guilds = await control.guild_configs.list_guilds()
    if not guilds:
        console_print("No guilds configured.", "ansiyellow")
        return

    for line in box_title(f"Configured Guilds ({len(guilds)})"):
        console_print(line, "ansiblue")
    for guild_id in guilds:
        count = await control.ledger.len(guild_id)
        console_print(f"  • {guild_id} (slaps: {count})")
    console_print("")


async def cmd_guild(control: ConsoleControl, args: list[str]) -> None:
    """Show one guild's configuration and role map."""
    if len(args) != 1:
        console_print("Usage: guild <guild_id>", "ansiyellow")
        return

    config = await control.guild_configs.fetch(args[0])
    for line in box_title(f"Guild {config.guild_id}"):
        console_print(line, "ansiblue")
    console_print(f"  Admin channel:   {config.admin_channel if config.admin_channel is not None else '-'}")
    console_print(f"  Advertise:       {'yes' if config.advertise else 'no'}")
    console_print(f"  Welcome message: {config.welcome_message!r}")
    console_print(f"  Goodbye message: {config.goodbye_message!r}")
    if config.role_privileges:
        console_print("  Roles:")
        for role_id in sorted(config.role_privileges):
            console_print(f"    • {role_id}: {', '.join(privileges_to_text(config.role_privileges[role_id]))}")
    else:
        console_print("  Roles:           none")
    console_print("")


async def cmd_slaps(control: ConsoleControl, args: list[str]) -> None:
    """List the oldest slaps of a guild, optionally for one member."""
    if not 1 <= len(args) <= 3:
        console_print("Usage: slaps <guild_id> [limit] [member_id]", "ansiyellow")
        return

    try:
        limit = int(args[1]) if len(args) > 1 else DEFAULT_SLAP_LIMIT
    except ValueError:
        console_print(f"Limit must be a number, got {args[1]!r}", "ansired")
        return
    member = args[2] if len(args) > 2 else None

    reports = await control.ledger.slaps(args[0], limit, member)
    total = await control.ledger.len(args[0], member)
    title = f"Slaps {len(reports)}/{total}"
    for line in box_title(title):
        console_print(line, "ansiblue")
    for report in reports:
        enforcer = report.enforcer if report.enforcer is not None else "auto"
        reason = report.reason if report.reason is not None else "-"
        console_print(
            f"  #{report.id} {report.created_at:%Y-%m-%d %H:%M} offender {report.offender} "
            f"by {enforcer}, sentence {report.sentence}: {reason}"
        )
    console_print("")


async def cmd_langs(control: ConsoleControl, args: list[str]) -> None:
    """List the languages offered to guilds."""
    console_print(", ".join(control.guild_configs.available_languages()))


async def cmd_clear(control: ConsoleControl, args: list[str]) -> None:
    """Clear the console screen."""
    os.system('cls' if os.name == 'nt' else 'clear')
    console_print("Console cleared.", "ansigreen")


async def cmd_shutdown(control: ConsoleControl, args: list[str]) -> None:
    """Request graceful shutdown."""
    console_print("Shutdown requested.", "ansiyellow")
    control.request_shutdown()


# ==================== Command Registry ====================

COMMANDS: list[Command] = [
    Command(
        name="help",
        handler=cmd_help,
        aliases=["h", "?"],
        description="Show this help message with all available commands",
    ),
    Command(
        name="status",
        handler=cmd_status,
        aliases=["stat", "info"],
        description="Display database status and query statistics",
    ),
    Command(
        name="guilds",
        handler=cmd_guilds,
        aliases=["servers", "g"],
        description="List all configured guilds with their slap counts",
    ),
    Command(
        name="guild",
        handler=cmd_guild,
        aliases=["server"],
        description="Show a guild's configuration and role privileges",
        usage="guild <guild_id>",
    ),
    Command(
        name="slaps",
        handler=cmd_slaps,
        aliases=["ledger"],
        description="List the oldest slaps of a guild, optionally for one member",
        usage=f"slaps <guild_id> [limit={DEFAULT_SLAP_LIMIT}] [member_id]",
    ),
    Command(
        name="langs",
        handler=cmd_langs,
        aliases=["languages"],
        description="List the languages offered to guilds",
    ),
    Command(
        name="clear",
        handler=cmd_clear,
        aliases=["cls"],
        description="Clear the console screen",
    ),
    Command(
        name="shutdown",
        handler=cmd_shutdown,
        aliases=["stop", "quit", "exit"],
        description="Gracefully shut down",
    ),
]


# ==================== Command Dispatcher ====================

async def handle_console_command(command: str, control: ConsoleControl) -> None:
    """Interpret and execute a single console command line."""
    if not command.strip():
        return

    parts = command.strip().split()
    cmd_name = parts[0].lower()
    args = parts[1:]

    for cmd in COMMANDS:
        if cmd.matches(cmd_name):
            try:
                await cmd.handler(control, args)
            except (ClientError, ValueError) as exc:
                console_print(f"Error: {exc}", "ansired")
            except StoreFailure as exc:
                logger.error("Store failure executing command '%s': %s", cmd_name, exc)
                console_print(f"Store failure: {exc}", "ansired")
            return

    console_print(f"Unknown command '{cmd_name}'. Type 'help' for available commands.", "ansired")


async def run_console(control: ConsoleControl) -> None:
    """Run the interactive console until shutdown is requested."""
    session = PromptSession("> ")

    for line in box_title("Guildkeeper Admin Console"):
        console_print(line, "ansigreen")
    console_print("Type 'help' for available commands or 'exit' to quit.\n", "ansibrightblack")

    with patch_stdout():
        while not control.is_shutdown_requested():
            try:
                line = await session.prompt_async()
            except (EOFError, KeyboardInterrupt):
                console_print("\nShutdown requested by user.", "ansiyellow")
                control.request_shutdown()
                break
            if line.strip():
                await handle_console_command(line, control)


@asynccontextmanager
async def console_session(control: ConsoleControl) -> AsyncIterator[ConsoleControl]:
    """Run the console in the background, cancelling it on exit."""
    console_task = asyncio.create_task(run_console(control))
    try:
        yield control
    finally:
        control.request_shutdown()
        console_task.cancel()
        try:
            await console_task
        except asyncio.CancelledError:
            pass
