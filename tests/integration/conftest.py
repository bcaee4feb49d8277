# tests/integration/conftest.py
import asyncio
import time

import pytest_asyncio
from psycopg_pool import AsyncConnectionPool
from redis.asyncio import Redis

from dnstoggle.infrastructure.db.migrate import migrate_up
from dnstoggle.settings import get_settings


@pytest_asyncio.fixture
async def redis_client():
    r = Redis.from_url(get_settings().redis_url, encoding="utf-8", decode_responses=True)
    try:
        yield r
    finally:
        await r.aclose()


async def _wait_pool_ready(p: AsyncConnectionPool, timeout: float = 30.0) -> None:
    """Retry simple SELECT until Postgres accepts connections."""
    deadline = time.monotonic() + timeout
    last_exc: Exception | None = None
    while time.monotonic() < deadline:
        try:
            async with p.connection(timeout=1) as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT 1;")
                    await cur.fetchone()
            return
        except Exception as e:
            last_exc = e
            await asyncio.sleep(0.5)
    if last_exc:
        raise last_exc
    raise TimeoutError("database not ready")


@pytest_asyncio.fixture
async def pool():
    dsn = get_settings().database_url
    p = AsyncConnectionPool(dsn, min_size=1, max_size=2, open=False)
    await p.open()
    await _wait_pool_ready(p)
    migrate_up(dsn)
    try:
        yield p
    finally:
        await p.close()


@pytest_asyncio.fixture
async def truncate_audit(pool: AsyncConnectionPool):
    async with pool.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute("TRUNCATE audit_events RESTART IDENTITY;")
    yield
    async with pool.connection() as conn:
        async with conn.transaction():
            async with conn.cursor() as cur:
                await cur.execute("TRUNCATE audit_events RESTART IDENTITY;")
