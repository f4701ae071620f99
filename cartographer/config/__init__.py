"""
Configuration module for settings and connections.
"""
from .settings import Settings, get_settings
from .database import (
    PostgresConfig,
    RedisConfig,
    create_postgres_pool,
    create_job_queue,
)

__all__ = [
    'Settings',
    'get_settings',
    'PostgresConfig',
    'RedisConfig',
    'create_postgres_pool',
    'create_job_queue',
]
