"""
Campaign Repository - PostgreSQL storage for campaigns and their score history

Storage: PostgreSQL (campaigns table)

score_history is an append-only JSONB array; appends and the last_update
timestamp are written by a single UPDATE statement.
"""
import json
import logging
from typing import Optional

import asyncpg

from cartographer.models.domain.campaign import Campaign, ScoreRecord
from cartographer.services.errors import PersistenceFault

logger = logging.getLogger(__name__)


class CampaignRepository:
    """
    Repository for Campaign domain model
    """

    def __init__(self, db_pool: asyncpg.Pool):
        self.db_pool = db_pool

    # =========================================================================
    # READ OPERATIONS
    # =========================================================================

    async def get_by_id(self, campaign_id: str) -> Optional[Campaign]:
        """
        Retrieve campaign by ID.

        Args:
            campaign_id: Campaign ID

        Returns:
            Campaign model or None
        """
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT id, depth, unknown_mass, explorers,
                       score_history, last_update
                FROM campaigns
                WHERE id = $1
            """, campaign_id)

            if not row:
                return None

            history = row['score_history']
            if isinstance(history, str):
                history = json.loads(history)

            return Campaign(
                id=row['id'],
                depth=row['depth'],
                unknown_mass=row['unknown_mass'],
                explorers=list(row['explorers'] or []),
                score_history=[ScoreRecord.from_json(entry) for entry in history or []],
                last_update=row['last_update']
            )

    async def get_model_config(self, campaign_id: str) -> Optional[Campaign]:
        """
        Campaign with only its model configuration loaded.

        Explorers and score history are left empty.

        Returns:
            Campaign model or None
        """
        async with self.db_pool.acquire() as conn:
            row = await conn.fetchrow("""
                SELECT id, depth, unknown_mass
                FROM campaigns
                WHERE id = $1
            """, campaign_id)

            if not row:
                return None

            return Campaign(
                id=row['id'],
                depth=row['depth'],
                unknown_mass=row['unknown_mass']
            )

    # =========================================================================
    # WRITE OPERATIONS
    # =========================================================================

    async def create(self, campaign: Campaign) -> Campaign:
        """
        Insert a new campaign.

        Args:
            campaign: Campaign to insert (history starts empty)

        Returns:
            The campaign
        """
        async with self.db_pool.acquire() as conn:
            await conn.execute("""
                INSERT INTO campaigns (id, depth, unknown_mass, explorers, score_history, last_update)
                VALUES ($1, $2, $3, $4, '[]'::jsonb, NOW())
            """, campaign.id, campaign.depth, campaign.unknown_mass, campaign.explorers)

        logger.info(f"Created campaign {campaign.id}")
        return campaign

    async def append_score(self, campaign_id: str, record: ScoreRecord):
        """
        Append a score to the campaign's history and touch last_update.

        Raises:
            PersistenceFault: the write failed or no campaign matched
        """
        try:
            async with self.db_pool.acquire() as conn:
                status = await conn.execute("""
                    UPDATE campaigns
                    SET score_history = score_history || jsonb_build_array($2::jsonb),
                        last_update = NOW()
                    WHERE id = $1
                """, campaign_id, json.dumps(record.to_json()))
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            raise PersistenceFault(campaign_id, record.expedition_id, str(e)) from e

        if status == 'UPDATE 0':
            raise PersistenceFault(campaign_id, record.expedition_id, "no such campaign")
