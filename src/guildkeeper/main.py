"""
Guildkeeper
===========

Authorization and per-guild configuration core of a multi-guild management
service. Running the package opens the database and starts the admin console;
the services can also be embedded by constructing them around a ``Database``.
"""

import asyncio
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from guildkeeper.configuration.app_configuration import CONFIG_PATH, AppConfig
from guildkeeper.database.database import Database
from guildkeeper.errors import StoreFailure
from guildkeeper.services.authorization_service import AuthorizationService
from guildkeeper.services.guild_config_service import GuildConfigService
from guildkeeper.services.ledger_service import LedgerService
from guildkeeper.ui.console import ConsoleControl, console_session
from guildkeeper.util.logger import get_logger, handle_exception

logger = get_logger("main")


def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. GUILDKEEPER_HOME environment variable, if set.
    2. If running in a frozen/compiled context, the executable's directory.
    3. Otherwise, the grandparent of this file's directory (the repo root).
    """
    if env_home := os.getenv("GUILDKEEPER_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]


@dataclass
class Runtime:
    """Everything created at startup and torn down at shutdown."""
    database: Database
    guild_configs: GuildConfigService
    authorization: AuthorizationService
    ledger: LedgerService


def load_environment(base_dir: Path) -> None:
    """Load ``.env`` from the base directory, if present."""
    load_dotenv(dotenv_path=base_dir / ".env")


def resolve_db_path(base_dir: Path, app_config: AppConfig) -> Path:
    """Return the database path: GUILDKEEPER_DB_PATH, else the configured path."""
    configured = os.getenv("GUILDKEEPER_DB_PATH") or app_config.database.path
    path = Path(configured)
    return path if path.is_absolute() else base_dir / path


def build_runtime(database: Database, app_config: AppConfig) -> Runtime:
    """Construct the services around an initialized database."""
    return Runtime(
        database=database,
        guild_configs=GuildConfigService(
            database,
            max_message_length=app_config.max_message_length,
            allowed_langs=app_config.allowed_langs,
        ),
        authorization=AuthorizationService(database),
        ledger=LedgerService(database),
    )


async def async_main(base_dir: Path) -> int:
    """Open the database, run the console until shutdown, then close everything.

    Returns
    -------
    int
        0 on clean shutdown, 1 if the database could not be initialized.
    """
    load_environment(base_dir)
    app_config = AppConfig(base_dir / CONFIG_PATH)

    database = Database(resolve_db_path(base_dir, app_config), app_config.database.slow_query_ms)
    try:
        await database.initialize()
    except StoreFailure as exc:
        logger.critical("Failed to initialize database: %s", exc)
        return 1

    runtime = build_runtime(database, app_config)
    control = ConsoleControl(runtime.database, runtime.guild_configs, runtime.authorization, runtime.ledger)
    try:
        async with console_session(control):
            await control.shutdown_event.wait()
    finally:
        await database.shutdown()
        logger.info("Shutdown complete.")

    return 0


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    base_dir = resolve_base_dir()
    logger.info("Starting Guildkeeper from %s", base_dir)
    try:
        return asyncio.run(async_main(base_dir))
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
