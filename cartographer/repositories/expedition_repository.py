"""
Expedition Repository - PostgreSQL storage for raw expeditions

Storage: PostgreSQL (expeditions table)
"""
import json
import logging

import asyncpg

from cartographer.models.domain.expedition import Expedition

logger = logging.getLogger(__name__)


class ExpeditionRepository:
    """
    Repository for Expedition domain model

    Expeditions are written once; a redelivered message does not overwrite
    the stored record.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    async def save(self, expedition: Expedition) -> bool:
        """
        Insert expedition if not already stored.

        Returns:
            True if a row was inserted
        """
        async with self.db_pool.acquire() as conn:
            status = await conn.execute("""
                INSERT INTO expeditions (id, campaign_id, user_id, user_color, events)
                VALUES ($1, $2, $3, $4, $5::jsonb)
                ON CONFLICT (id) DO NOTHING
            """,
                expedition.id,
                expedition.campaign_id,
                expedition.user_id,
                expedition.user_color,
                json.dumps([event.to_dict() for event in expedition.events])
            )
        return status == 'INSERT 0 1'
