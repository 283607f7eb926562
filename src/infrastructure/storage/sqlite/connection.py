"""
Async SQLite connection pool.

The reminder ledger is written by reconciliation and the scheduler while the
API reads it, so every connection runs in WAL mode with a busy timeout.
Connections are opened on demand up to ``pool_size`` and reused afterwards.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from src.config import get_logger, get_settings
from src.core.exceptions import DatabaseError

logger = get_logger(__name__)

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA foreign_keys=ON",
)


class ConnectionPool:
    """Bounded pool of aiosqlite connections to one database file."""

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.pool_size = pool_size
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._connections: list[aiosqlite.Connection] = []
        self._lock = asyncio.Lock()

    @property
    def size(self) -> int:
        """Number of connections opened so far."""
        return len(self._connections)

    async def _open(self) -> aiosqlite.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            conn = await aiosqlite.connect(self.db_path)
            await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
            for pragma in _PRAGMAS:
                await conn.execute(pragma)
        except aiosqlite.Error as e:
            raise DatabaseError("connect", str(e)) from e

        conn.row_factory = aiosqlite.Row
        self._connections.append(conn)
        logger.debug(
            "sqlite_connection_opened",
            db_path=str(self.db_path),
            open_connections=len(self._connections),
        )
        return conn

    async def _checkout(self) -> aiosqlite.Connection:
        try:
            return self._idle.get_nowait()
        except asyncio.QueueEmpty:
            pass

        async with self._lock:
            if len(self._connections) < self.pool_size:
                return await self._open()

        # Pool exhausted: wait for a connection to come back
        return await self._idle.get()

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection for the duration of the block.

        Usage:
            async with pool.acquire() as conn:
                await conn.execute(...)
        """
        conn = await self._checkout()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """
        Borrow a connection and commit when the block exits cleanly.

        Integrity errors are re-raised unchanged so stores can map
        constraint violations; other driver errors become DatabaseError.
        """
        async with self.acquire() as conn:
            try:
                yield conn
            except aiosqlite.IntegrityError:
                await conn.rollback()
                raise
            except aiosqlite.Error as e:
                await conn.rollback()
                raise DatabaseError("transaction", str(e)) from e
            except Exception:
                await conn.rollback()
                raise
            await conn.commit()

    async def ping(self) -> bool:
        """Run a trivial query to confirm the database answers."""
        async with self.acquire() as conn:
            cursor = await conn.execute("SELECT 1")
            row = await cursor.fetchone()
            return row is not None and row[0] == 1

    async def close(self) -> None:
        """Close every connection the pool opened."""
        async with self._lock:
            for conn in self._connections:
                await conn.close()
            closed = len(self._connections)
            self._connections.clear()
            self._idle = asyncio.Queue()
        logger.info("connection_pool_closed", closed=closed)


_pool: ConnectionPool | None = None


async def get_pool() -> ConnectionPool:
    """Process-wide pool for the configured database."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = ConnectionPool(
            db_path=storage.db_path,
            pool_size=storage.pool_size,
            busy_timeout=storage.busy_timeout,
        )
        logger.info(
            "connection_pool_created",
            db_path=str(storage.db_path),
            pool_size=storage.pool_size,
        )
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def get_connection() -> AsyncIterator[aiosqlite.Connection]:
    """Connection from the global pool, for reads."""
    pool = await get_pool()
    async with pool.acquire() as conn:
        yield conn


@asynccontextmanager
async def get_transaction() -> AsyncIterator[aiosqlite.Connection]:
    """Connection from the global pool that commits on success."""
    pool = await get_pool()
    async with pool.transaction() as conn:
        yield conn
