# manages connection to db, exposes the key-value contract used by the repositories
import asyncio
import os
from contextlib import asynccontextmanager
from typing import Optional

import aiosqlite

from db.errors import PersistenceError
from utils import config
from utils.logger import get_logger

_logger = get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class SqliteKeyValueStore:
    """
    String-to-string store kept in a single SQLite table.

    get returns None for absent keys, set overwrites, delete of an absent key
    is a no-op. Any storage failure is raised as PersistenceError.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or config.DB_PATH
        self._initialized = False
        self._init_lock = asyncio.Lock()

    async def _init_db(self, conn: aiosqlite.Connection) -> None:
        _logger.info(f"Initializing key-value store at {self.path}...")
        await conn.executescript(_SCHEMA)
        await conn.commit()

    @asynccontextmanager
    async def connect(self):
        """Async context manager yielding an aiosqlite connection.

        Creates the parent directory and the table on first use.
        """
        parent = os.path.dirname(self.path)
        try:
            if parent:
                os.makedirs(parent, exist_ok=True)
            conn = await aiosqlite.connect(self.path)
        except (OSError, aiosqlite.Error) as e:
            raise PersistenceError() from e

        try:
            if not self._initialized:
                async with self._init_lock:
                    if not self._initialized:
                        await self._init_db(conn)
                        self._initialized = True
            yield conn
        except aiosqlite.Error as e:
            _logger.error(f"Storage error on {self.path}: {e}")
            raise PersistenceError() from e
        finally:
            await conn.close()

    async def get(self, key: str) -> Optional[str]:
        async with self.connect() as conn:
            cur = await conn.execute("SELECT value FROM kv_store WHERE key = ?;", (key,))
            row = await cur.fetchone()
            await cur.close()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        async with self.connect() as conn:
            await conn.execute(
                """
                INSERT INTO kv_store(key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value;
                """,
                (key, value),
            )
            await conn.commit()

    async def delete(self, key: str) -> None:
        async with self.connect() as conn:
            await conn.execute("DELETE FROM kv_store WHERE key = ?;", (key,))
            await conn.commit()
