"""
Bootstrap - wait for PostgreSQL and Redis before consuming

Both dependencies are retried forever at a fixed interval; a long-lived
worker started alongside its infrastructure simply waits for it.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Iterable

import asyncpg
import redis.exceptions

from cartographer.config.database import (
    PostgresConfig,
    RedisConfig,
    create_job_queue,
    create_postgres_pool,
)
from cartographer.repositories.schema import ensure_schema
from cartographer.services.errors import TransientInfrastructureFault
from cartographer.services.job_queue import JobQueue

logger = logging.getLogger(__name__)

POSTGRES_ERRORS = (OSError, asyncio.TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError)
REDIS_ERRORS = (OSError, asyncio.TimeoutError, redis.exceptions.ConnectionError, redis.exceptions.TimeoutError)


async def _try_postgres(config: PostgresConfig) -> asyncpg.Pool:
    try:
        pool = await create_postgres_pool(config)
    except POSTGRES_ERRORS as e:
        raise TransientInfrastructureFault(f"PostgreSQL unavailable: {e}") from e

    try:
        async with pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
        await ensure_schema(pool)
    except POSTGRES_ERRORS as e:
        await pool.close()
        raise TransientInfrastructureFault(f"PostgreSQL unavailable: {e}") from e
    return pool


async def _try_redis(config: RedisConfig, queue_names: Iterable[str]) -> JobQueue:
    queue = None
    try:
        queue = await create_job_queue(config)
        await queue.ping()
        for queue_name in queue_names:
            await queue.recover_unacked(queue_name)
    except REDIS_ERRORS as e:
        if queue is not None:
            await queue.close()
        raise TransientInfrastructureFault(f"Redis unavailable: {e}") from e
    return queue


async def wait_for(
    name: str,
    attempt: Callable[[], Awaitable],
    interval: float,
    sleep: Callable[[float], Awaitable] = asyncio.sleep
):
    """Call ``attempt`` until it stops raising TransientInfrastructureFault"""
    logger.info(f"Waiting for {name}...")
    attempts = 0
    while True:
        attempts += 1
        try:
            result = await attempt()
        except TransientInfrastructureFault as e:
            logger.debug(f"{name} attempt {attempts} failed: {e}")
            await sleep(interval)
            continue
        logger.info(f"Successfully connected to {name}")
        return result


async def connect_postgres(config: PostgresConfig, interval: float = 5.0, **kwargs) -> asyncpg.Pool:
    return await wait_for("PostgreSQL", lambda: _try_postgres(config), interval, **kwargs)


async def connect_job_queue(
    config: RedisConfig,
    queue_names: Iterable[str],
    interval: float = 5.0,
    **kwargs
) -> JobQueue:
    queue_names = list(queue_names)
    return await wait_for("Redis", lambda: _try_redis(config, queue_names), interval, **kwargs)
