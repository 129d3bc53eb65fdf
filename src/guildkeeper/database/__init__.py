"""
Database package for Guildkeeper.

Provides the aiosqlite-backed store: a single long-lived connection,
schema creation, error classification and performance monitoring.

Public API:
    - Database: the handle passed to every service
"""
