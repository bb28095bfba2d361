"""
Database connection pool and RLS-scoped connection managers.

All database access goes through store_conn() or system_conn().
Never use pool.acquire() directly outside this module.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

import asyncpg

from backend.config import settings

logger = logging.getLogger(__name__)

pool: asyncpg.Pool | None = None


async def init_pool() -> None:
    """
    Initialize the connection pool.
    Called once at application startup.
    """
    global pool
    pool = await asyncpg.create_pool(
        dsn=settings.DATABASE_URL,
        min_size=settings.DB_POOL_MIN_SIZE,
        max_size=settings.DB_POOL_MAX_SIZE,
        command_timeout=60,
        init=_init_connection,
    )
    logger.info("Database pool initialized")


async def close_pool() -> None:
    """
    Close the connection pool.
    Called at application shutdown.
    """
    global pool
    if pool is not None:
        await pool.close()
        pool = None
        logger.info("Database pool closed")


async def _init_connection(conn: asyncpg.Connection) -> None:
    """Decode json/jsonb columns to Python dicts and lists."""
    await conn.set_type_codec(
        "jsonb",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )
    await conn.set_type_codec(
        "json",
        encoder=json.dumps,
        decoder=json.loads,
        schema="pg_catalog",
    )


@asynccontextmanager
async def store_conn(store_id: str):
    """
    Acquire a database connection scoped to one store via RLS.

    Every query through this connection can only see/modify rows
    belonging to this store. Enforced by Postgres RLS policies.
    The connection runs inside a transaction that commits on exit.

    Usage:
        async with store_conn(store_id) as conn:
            row = await conn.fetchrow("SELECT * FROM storefront_themes WHERE status = $1", "DRAFT")
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        async with conn.transaction():
            # All policies reference current_setting('app.store_id')
            await conn.execute(
                "SELECT set_config('app.store_id', $1, true)",
                str(store_id),
            )
            yield conn


@asynccontextmanager
async def system_conn():
    """
    Acquire a database connection without store scoping.

    For migrations, test fixtures and operations that span stores.
    Route handlers serving store data should use store_conn().
    """
    if pool is None:
        raise RuntimeError("Database pool not initialized. Call init_pool() first.")

    async with pool.acquire() as conn:
        async with conn.transaction():
            # RLS policies treat an empty app.store_id as the system context.
            await conn.execute("SELECT set_config('app.store_id', '', true)")
            yield conn
