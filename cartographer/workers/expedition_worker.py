"""
ExpeditionWorker - scores completed expeditions against their campaign's model

Pipeline per message:
1. Decode the expedition payload
2. Save the raw expedition (best effort, failure only logged)
3. Resolve the campaign's model (created from campaign config on first use)
4. Score the sequence against the model as it was before this expedition
5. Learn the sequence
6. Append the score to the campaign's history
7. Ack

A resolution or persistence fault rejects the message for redelivery.
Learning is not undone when persistence fails, so a redelivered message is
learned again unless dedupe_redeliveries is enabled.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from cartographer.models.domain import Expedition, ScoreRecord
from cartographer.repositories import CampaignRepository, ExpeditionRepository
from cartographer.services.errors import DecodeFault, PersistenceFault
from cartographer.services.job_queue import Delivery, JobQueue
from cartographer.services.model_actor import ModelActor
from cartographer.services.worker_base import BaseWorker

logger = logging.getLogger(__name__)


class ExpeditionWorker(BaseWorker):
    """
    Ingestion pipeline for expedition-completion messages
    """

    def __init__(
        self,
        job_queue: JobQueue,
        actor: ModelActor,
        campaign_repo: CampaignRepository,
        expedition_repo: ExpeditionRepository,
        queue_name: str = "queue:expedition",
        worker_id: int = 1,
        dequeue_timeout: int = 5
    ):
        super().__init__(
            job_queue=job_queue,
            worker_name=f"expedition-worker-{worker_id}",
            queue_name=queue_name,
            dequeue_timeout=dequeue_timeout
        )
        self.actor = actor
        self.campaign_repo = campaign_repo
        self.expedition_repo = expedition_repo

    async def handle(self, delivery: Delivery) -> bool:
        try:
            expedition = self.decode(delivery)
        except DecodeFault as e:
            logger.error(f"[{self.worker_name}] Undecodable message: {e}")
            await self.job_queue.reject(delivery, requeue=False, reason=f"decode: {e}")
            return False

        logger.info(
            f"[{self.worker_name}] Received expedition {expedition.id} "
            f"for campaign {expedition.campaign_id} ({len(expedition.events)} events)"
        )

        await self._save_expedition(expedition)

        try:
            outcome = await self.actor.submit(
                expedition.campaign_id, expedition.id, expedition.to_sequence()
            )
        except Exception as e:
            logger.error(
                f"[{self.worker_name}] Can't resolve model for campaign {expedition.campaign_id} "
                f"(expedition {expedition.id}): {e}"
            )
            await self.job_queue.reject(delivery, reason=str(e))
            return False

        logger.info(
            f"[{self.worker_name}] CrossEntropy {outcome.score} for expedition {expedition.id}"
            + ("" if outcome.learned else " (already learned)")
        )

        record = ScoreRecord(
            value=outcome.score,
            timestamp=datetime.now(timezone.utc),
            expedition_id=expedition.id,
            user_id=expedition.user_id,
            user_color=expedition.user_color,
        )

        try:
            await self.campaign_repo.append_score(expedition.campaign_id, record)
        except PersistenceFault as e:
            logger.error(f"[{self.worker_name}] Exception saving cross entropy: {e}")
            await self.job_queue.reject(delivery, reason=str(e))
            return False

        logger.info(f"[{self.worker_name}] Saved cross entropy for expedition {expedition.id}")
        await self.job_queue.ack(delivery)
        return True

    def decode(self, delivery: Delivery) -> Expedition:
        return Expedition.from_json(delivery.body)

    async def _save_expedition(self, expedition: Expedition) -> Optional[bool]:
        try:
            return await self.expedition_repo.save(expedition)
        except Exception as e:
            logger.error(f"[{self.worker_name}] Can't save expedition {expedition.id}: {e}")
            return None

    async def on_idle(self):
        await self.actor.evict_idle()
