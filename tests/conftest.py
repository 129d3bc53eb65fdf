"""
Pytest configuration and fixtures for Guildkeeper tests.
"""

import sys
from pathlib import Path

import pytest_asyncio

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from guildkeeper.database.database import Database  # noqa: E402


@pytest_asyncio.fixture
async def database(tmp_path):
    """An initialized database in a temporary directory."""
    db = Database(tmp_path / "test.db")
    await db.initialize()
    yield db
    await db.shutdown()
