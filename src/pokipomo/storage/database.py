"""SQLite database management with WAL mode."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any

import aiosqlite

logger = logging.getLogger(__name__)

# Schema version for migrations
SCHEMA_VERSION = 1

SCHEMA = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

-- Completed focus sessions, in completion order
CREATE TABLE IF NOT EXISTS focus_sessions (
    id TEXT PRIMARY KEY,
    duration_seconds INTEGER NOT NULL,
    reflection TEXT NOT NULL DEFAULT '',
    started_at DATETIME NOT NULL,
    ended_at DATETIME NOT NULL,
    outcome TEXT NOT NULL DEFAULT 'completed',
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_sessions_ended ON focus_sessions(ended_at);

-- Key/value state (streak anchor and friends)
CREATE TABLE IF NOT EXISTS app_state (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""


class Database:
    """SQLite database manager with WAL mode."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._connection: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        """Initialize database connection with WAL mode."""
        if self._connection is not None:
            return

        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(
            self.db_path,
            isolation_level=None,  # Autocommit mode, we handle transactions manually
        )

        await self._connection.execute("PRAGMA journal_mode=WAL")
        await self._connection.execute("PRAGMA synchronous=NORMAL")
        await self._connection.execute("PRAGMA busy_timeout=5000")

        self._connection.row_factory = aiosqlite.Row

        await self._init_schema()

        logger.info(f"Database connected: {self.db_path}")

    async def _init_schema(self) -> None:
        """Initialize database schema."""
        if self._connection is None:
            raise RuntimeError("Database not connected")

        await self._connection.executescript(SCHEMA)

        async with self._connection.execute(
            "SELECT MAX(version) FROM schema_version"
        ) as cursor:
            row = await cursor.fetchone()
            current_version = row[0] if row and row[0] else 0

        if current_version < SCHEMA_VERSION:
            await self._connection.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (SCHEMA_VERSION,),
            )
            logger.info(f"Schema updated to version {SCHEMA_VERSION}")

    async def close(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None
            logger.info("Database connection closed")

    async def execute(
        self, query: str, params: tuple[Any, ...] | dict[str, Any] = ()
    ) -> int:
        """Execute a query and return last row ID."""
        if self._connection is None:
            raise RuntimeError("Database not connected")

        async with self._lock:
            cursor = await self._connection.execute(query, params)
            return cursor.lastrowid or 0

    async def execute_many(
        self, query: str, params_list: list[tuple[Any, ...]] | list[dict[str, Any]]
    ) -> None:
        """Execute a query with multiple parameter sets in one transaction."""
        if self._connection is None:
            raise RuntimeError("Database not connected")

        async with self._lock:
            await self._connection.execute("BEGIN")
            try:
                await self._connection.executemany(query, params_list)
                await self._connection.execute("COMMIT")
            except Exception:
                await self._connection.execute("ROLLBACK")
                raise

    async def fetch_one(
        self, query: str, params: tuple[Any, ...] = ()
    ) -> dict[str, Any] | None:
        """Fetch a single row."""
        if self._connection is None:
            raise RuntimeError("Database not connected")

        async with self._connection.execute(query, params) as cursor:
            row = await cursor.fetchone()
            if row:
                return dict(row)
            return None

    async def fetch_all(
        self, query: str, params: tuple[Any, ...] = ()
    ) -> list[dict[str, Any]]:
        """Fetch all rows."""
        if self._connection is None:
            raise RuntimeError("Database not connected")

        async with self._connection.execute(query, params) as cursor:
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    async def get_state(self, key: str, default: Any = None) -> Any:
        """Get a stored state value."""
        row = await self.fetch_one(
            "SELECT value FROM app_state WHERE key = ?", (key,)
        )
        if row:
            return row["value"]
        return default

    async def set_state(self, key: str, value: Any) -> None:
        """Set a stored state value."""
        await self.execute(
            """INSERT INTO app_state (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)
               ON CONFLICT(key) DO UPDATE SET value = ?, updated_at = CURRENT_TIMESTAMP""",
            (key, str(value), str(value)),
        )
