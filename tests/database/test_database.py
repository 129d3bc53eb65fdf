"""
Tests for the Database handle.

Covers:
- Schema creation and idempotent initialization
- Error classification at the read/transaction scopes
- Rollback of failed and cancelled transactions
- Ledger immutability enforced by triggers
- Performance monitoring
"""

import asyncio
import sqlite3

import pytest

from guildkeeper.database.database import Database
from guildkeeper.database.db_perf_mon import DatabasePerformanceMonitor
from guildkeeper.errors import ConstraintViolation, StoreFailure
from guildkeeper.services.guild_config_service import GuildConfigService
from guildkeeper.services.ledger_service import LedgerService


@pytest.mark.asyncio
async def test_schema_tables_created(database):
    async with database.read("tables") as conn:
        async with conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'") as cursor:
            tables = {row[0] for row in await cursor.fetchall()}
    assert {"guilds", "guild_role_privileges", "slap_reports", "schema_version"} <= tables


@pytest.mark.asyncio
async def test_initialize_twice_is_noop(database):
    await database.initialize()
    assert database.is_open


@pytest.mark.asyncio
async def test_closed_database_raises_store_failure(tmp_path):
    db = Database(tmp_path / "closed.db")
    with pytest.raises(StoreFailure):
        async with db.read("lookup"):
            pass
    with pytest.raises(StoreFailure) as excinfo:
        async with db.transaction("lookup"):
            pass
    assert excinfo.value.operation == "lookup"


@pytest.mark.asyncio
async def test_shutdown_then_use_raises_store_failure(tmp_path):
    db = Database(tmp_path / "shut.db")
    await db.initialize()
    await db.shutdown()
    assert not db.is_open
    with pytest.raises(StoreFailure):
        await LedgerService(db).len(1)
    # Second shutdown is harmless
    await db.shutdown()


@pytest.mark.asyncio
async def test_sqlite_errors_are_classified(database):
    with pytest.raises(StoreFailure) as excinfo:
        async with database.read("bad_query") as conn:
            await conn.execute("SELECT * FROM no_such_table")
    assert not isinstance(excinfo.value, ConstraintViolation)
    assert not isinstance(excinfo.value, sqlite3.Error)


@pytest.mark.asyncio
async def test_integrity_error_becomes_constraint_violation(database):
    async with database.transaction("seed") as conn:
        await conn.execute("INSERT INTO guilds (guild_id) VALUES (1)")
    with pytest.raises(ConstraintViolation):
        async with database.transaction("dup") as conn:
            await conn.execute("INSERT INTO guilds (guild_id) VALUES (1)")


@pytest.mark.asyncio
async def test_failed_transaction_rolls_back(database):
    with pytest.raises(StoreFailure):
        async with database.transaction("partial") as conn:
            await conn.execute("INSERT INTO guilds (guild_id) VALUES (5)")
            await conn.execute("INSERT INTO guilds (guild_id) VALUES (5)")

    async with database.read("check") as conn:
        async with conn.execute("SELECT COUNT(*) FROM guilds") as cursor:
            assert (await cursor.fetchone())[0] == 0


@pytest.mark.asyncio
async def test_cancelled_transaction_rolls_back(database):
    inserted = asyncio.Event()
    never = asyncio.Event()

    async def abandoned_write():
        async with database.transaction("abandoned") as conn:
            await conn.execute("INSERT INTO guilds (guild_id) VALUES (9)")
            inserted.set()
            await never.wait()

    task = asyncio.create_task(abandoned_write())
    await inserted.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    configs = GuildConfigService(database)
    assert await configs.exists(9) is False
    # The write lock was released and the row is gone
    await configs.new(9, advertise=True)
    assert await configs.get_advertise(9) is True


@pytest.mark.asyncio
async def test_privilege_column_rejects_unknown_tokens(database):
    async with database.transaction("seed") as conn:
        await conn.execute("INSERT INTO guilds (guild_id) VALUES (1)")
    with pytest.raises(StoreFailure):
        async with database.transaction("bad_token") as conn:
            await conn.execute(
                "INSERT INTO guild_role_privileges (guild_id, role_id, privilege) VALUES (1, 2, 'owner')"
            )


@pytest.mark.asyncio
async def test_slap_reports_are_immutable(database):
    ledger = LedgerService(database)
    report = await ledger.new_slap(1, 10, 2)

    with pytest.raises(StoreFailure):
        async with database.transaction("tamper") as conn:
            await conn.execute("UPDATE slap_reports SET reason = 'edited' WHERE id = ?", (report.id,))
    with pytest.raises(StoreFailure):
        async with database.transaction("erase") as conn:
            await conn.execute("DELETE FROM slap_reports WHERE id = ?", (report.id,))

    assert await ledger.len(1) == 1


@pytest.mark.asyncio
async def test_performance_monitoring(database):
    """Verify performance monitoring tracks repository calls."""
    database.reset_db_performance_stats()

    await LedgerService(database).new_slap(123, 1, 789)

    stats = database.get_db_performance_stats()
    assert "slap_reports.insert" in stats
    assert stats["slap_reports.insert"]["count"] == 1
    assert stats["slap_reports.insert"]["total_time"] >= 0


def test_perf_monitor_summary_and_statistics():
    monitor = DatabasePerformanceMonitor(slow_query_threshold_ms=1.0)
    assert monitor.get_summary() == "No queries tracked yet"

    monitor.record("fast", 0.0001)
    monitor.record("slow", 0.5)

    stats = monitor.get_statistics()
    assert stats["fast"]["count"] == 1
    assert stats["slow"]["max_time"] == 0.5
    assert "slow:" in monitor.get_summary()

    monitor.reset()
    assert monitor.get_statistics() == {}


def test_perf_monitor_track_records_on_error():
    monitor = DatabasePerformanceMonitor()
    with pytest.raises(RuntimeError):
        with monitor.track("boom"):
            raise RuntimeError("fail")
    assert monitor.get_statistics()["boom"]["count"] == 1
