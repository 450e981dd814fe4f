# manages connection to db, provides key-value helpers internal to db package
import asyncio
import os
from contextlib import asynccontextmanager
from typing import Optional

import aiosqlite

from utils.logger import get_logger

_logger = get_logger(__name__)

DB_PATH = os.getenv("SHOP_DB_PATH", "data/shop.sqlite")

KV_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key   TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_initialized = False
_init_lock = asyncio.Lock()


async def _table_exists(conn: aiosqlite.Connection, table_name: str) -> bool:
    cur = await conn.execute(
        """
        SELECT name
        FROM sqlite_master
        WHERE type = 'table'
          AND name = ?;
        """,
        (table_name,),
    )
    row = await cur.fetchone()
    await cur.close()
    return row is not None


@asynccontextmanager
async def connect() -> aiosqlite.Connection:
    """Async context manager yielding an aiosqlite connection.

    Creates the key-value table on first use.
    """
    global _initialized
    parent = os.path.dirname(DB_PATH)
    if parent:
        os.makedirs(parent, exist_ok=True)
    conn = await aiosqlite.connect(DB_PATH)

    if not _initialized:
        async with _init_lock:
            if not _initialized:
                if not await _table_exists(conn, "kv_store"):
                    _logger.info(f"Initializing key-value store at {DB_PATH}...")
                    await conn.executescript(KV_SCHEMA)
                    await conn.commit()
                _initialized = True
    try:
        yield conn
    finally:
        await conn.close()


async def get_item(key: str) -> Optional[str]:
    """Return the raw value stored under key, or None."""
    async with connect() as conn:
        cur = await conn.execute("SELECT value FROM kv_store WHERE key = ?;", (key,))
        row = await cur.fetchone()
        await cur.close()
    return row[0] if row else None


async def set_item(key: str, value: str) -> None:
    async with connect() as conn:
        await conn.execute(
            """
            INSERT INTO kv_store(key, value) VALUES (?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value;
            """,
            (key, value),
        )
        await conn.commit()


async def remove_item(key: str) -> None:
    async with connect() as conn:
        await conn.execute("DELETE FROM kv_store WHERE key = ?;", (key,))
        await conn.commit()
