"""
Read-only PostgreSQL pool for the engagement record store.
"""

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from engagement.config import settings
from engagement.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


async def _configure_connection(conn: psycopg.AsyncConnection) -> None:
    conn.row_factory = dict_row
    await conn.set_autocommit(True)
    await conn.execute("SET default_transaction_read_only = on")
    await conn.execute("SET timezone = 'UTC'")


class DatabasePoolManager:
    def __init__(self):
        self.pool: AsyncConnectionPool | None = None

    async def initialize(self) -> None:
        """Open the pool; a no-op when it is already open."""
        if self.pool is not None:
            return
        if not settings.DATABASE_URL:
            raise RuntimeError("DATABASE_URL is not configured")

        pool_config = settings.get_db_pool_config()
        pool = AsyncConnectionPool(
            conninfo=settings.DATABASE_URL,
            open=False,
            configure=_configure_connection,
            check=AsyncConnectionPool.check_connection,
            **pool_config,
        )
        try:
            await pool.open(wait=True)
        except Exception as e:
            logger.error("Failed to open database pool", error=str(e))
            await pool.close()
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

        self.pool = pool
        logger.info(
            "Database pool opened",
            min_size=pool_config["min_size"],
            max_size=pool_config["max_size"],
        )

    async def close(self) -> None:
        if self.pool is None:
            return
        pool, self.pool = self.pool, None
        await pool.close()
        logger.info("Database pool closed")

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        if self.pool is None:
            raise RuntimeError("Database pool not initialized. Call initialize() first.")
        async with self.pool.connection() as conn:
            yield conn

    async def health_check(self) -> dict[str, Any]:
        """Round-trip a trivial query and report latency."""
        if self.pool is None:
            return {"healthy": False, "service": "database_pool", "error": "Pool not initialized"}

        started = time.monotonic()
        try:
            async with self.connection() as conn:
                await conn.execute("SELECT 1")
        except psycopg.Error as e:
            logger.error("Database health check failed", error=str(e))
            return {"healthy": False, "service": "database_pool", "error": str(e)}

        return {
            "healthy": True,
            "service": "database_pool",
            "connection_time_ms": round((time.monotonic() - started) * 1000, 2),
        }


db_pool = DatabasePoolManager()


async def get_db_connection():
    """Pooled connection context manager for the helpers."""
    return db_pool.connection()


async def db_health_check() -> dict[str, Any]:
    return await db_pool.health_check()
