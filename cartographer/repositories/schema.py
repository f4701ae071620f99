"""
PostgreSQL schema for campaigns and expeditions
"""
import logging

import asyncpg

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS campaigns (
    id              TEXT PRIMARY KEY,
    depth           INTEGER,
    unknown_mass    DOUBLE PRECISION,
    explorers       TEXT[] NOT NULL DEFAULT '{}',
    score_history   JSONB NOT NULL DEFAULT '[]'::jsonb,
    last_update     TIMESTAMPTZ
);

CREATE TABLE IF NOT EXISTS expeditions (
    id              TEXT PRIMARY KEY,
    campaign_id     TEXT NOT NULL,
    user_id         TEXT,
    user_color      TEXT,
    events          JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at      TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS idx_expeditions_campaign ON expeditions (campaign_id);
"""


async def ensure_schema(db_pool: asyncpg.Pool):
    """Create tables if absent"""
    async with db_pool.acquire() as conn:
        await conn.execute(SCHEMA)
    logger.info("Schema ready")
