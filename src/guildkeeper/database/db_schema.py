"""
Database schema initialization.

Creates tables, indexes and triggers, and records the schema version. Every
statement is idempotent so initialization can run on each startup.

Identifiers are unsigned 64-bit values stored in signed INTEGER columns via
two's complement (see ``Snowflake.to_sql``).
"""

import aiosqlite

from guildkeeper.datatypes.privilege import Privilege
from guildkeeper.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1

_PRIVILEGE_TOKENS = ", ".join(f"'{p.value}'" for p in Privilege)


class SchemaManager:
    """Creates and versions the Guildkeeper schema."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """Create or update all tables, indexes and triggers, then commit."""
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._create_triggers(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized (version %d)", SCHEMA_VERSION)

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        # One configuration row per guild; the primary key is the uniqueness
        # guarantee behind AlreadyExists
        await db.execute("""
            CREATE TABLE IF NOT EXISTS guilds (
                guild_id INTEGER PRIMARY KEY,
                admin_channel INTEGER,
                advertise INTEGER NOT NULL DEFAULT 0,
                welcome_message TEXT,
                goodbye_message TEXT,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute(f"""
            CREATE TABLE IF NOT EXISTS guild_role_privileges (
                guild_id INTEGER NOT NULL,
                role_id INTEGER NOT NULL,
                privilege TEXT NOT NULL CHECK (privilege IN ({_PRIVILEGE_TOKENS})),
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, role_id, privilege),
                FOREIGN KEY (guild_id) REFERENCES guilds(guild_id) ON DELETE CASCADE
            )
        """)

        # Append-only ledger. AUTOINCREMENT keeps ids strictly increasing and
        # never reused, so id order is insertion order.
        await db.execute("""
            CREATE TABLE IF NOT EXISTS slap_reports (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id INTEGER NOT NULL,
                offender INTEGER NOT NULL,
                enforcer INTEGER,
                sentence INTEGER NOT NULL,
                reason TEXT,
                created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        await db.execute("CREATE INDEX IF NOT EXISTS idx_role_privileges_lookup ON guild_role_privileges(guild_id, privilege)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_slap_reports_guild ON slap_reports(guild_id, id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_slap_reports_member ON slap_reports(guild_id, offender, id)")

    @staticmethod
    async def _create_triggers(db: aiosqlite.Connection) -> None:
        await db.execute("""
            CREATE TRIGGER IF NOT EXISTS update_guilds_timestamp
            AFTER UPDATE ON guilds
            FOR EACH ROW
            BEGIN
                UPDATE guilds SET updated_at = CURRENT_TIMESTAMP
                WHERE guild_id = NEW.guild_id;
            END
        """)

        # The ledger is immutable
        await db.execute("""
            CREATE TRIGGER IF NOT EXISTS slap_reports_no_update
            BEFORE UPDATE ON slap_reports
            BEGIN
                SELECT RAISE(ABORT, 'slap_reports is append-only');
            END
        """)
        await db.execute("""
            CREATE TRIGGER IF NOT EXISTS slap_reports_no_delete
            BEFORE DELETE ON slap_reports
            BEGIN
                SELECT RAISE(ABORT, 'slap_reports is append-only');
            END
        """)

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
