"""
Connection Configuration
========================

PostgreSQL and Redis connection settings for the worker, built from the
service Settings.
"""
from dataclasses import dataclass
from typing import Optional

from .settings import Settings


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""
    host: str
    port: int
    user: str
    password: str
    database: str
    min_size: int = 1
    max_size: int = 5

    @classmethod
    def from_settings(cls, settings: Settings, min_size: int = 1, max_size: int = 5) -> 'PostgresConfig':
        return cls(
            host=settings.postgres_host,
            port=settings.postgres_port,
            user=settings.postgres_user,
            password=settings.postgres_password,
            database=settings.postgres_db,
            min_size=min_size,
            max_size=max_size,
        )

    def to_asyncpg_kwargs(self) -> dict:
        """Convert to asyncpg.create_pool kwargs."""
        return {
            'host': self.host,
            'port': self.port,
            'user': self.user,
            'password': self.password,
            'database': self.database,
            'min_size': self.min_size,
            'max_size': self.max_size,
        }


@dataclass
class RedisConfig:
    """Redis connection configuration."""
    url: str
    queue_name: str = "queue:expedition"
    dead_letter_queue: Optional[str] = None
    max_deliveries: int = 5

    @classmethod
    def from_settings(cls, settings: Settings) -> 'RedisConfig':
        return cls(
            url=settings.redis_url,
            queue_name=settings.expedition_queue,
            dead_letter_queue=settings.dead_letter_queue,
            max_deliveries=settings.max_deliveries,
        )

    @property
    def dead_letter_name(self) -> str:
        return self.dead_letter_queue or f"{self.queue_name}:dead"


async def create_postgres_pool(config: PostgresConfig):
    """Create PostgreSQL connection pool."""
    import asyncpg
    return await asyncpg.create_pool(**config.to_asyncpg_kwargs())


async def create_job_queue(config: RedisConfig):
    """Create and connect Redis job queue."""
    from cartographer.services.job_queue import JobQueue
    queue = JobQueue(
        config.url,
        dead_letter_queue=config.dead_letter_name,
        max_deliveries=config.max_deliveries,
    )
    await queue.connect()
    return queue
