"""
Run Expedition Worker

Waits for PostgreSQL and Redis, then scores expeditions from the queue.

Usage:
    python -m cartographer.run_worker
"""
import os
from pathlib import Path

# Load .env from the working directory
from dotenv import load_dotenv
load_dotenv(Path.cwd() / '.env')

import asyncio
import logging

from cartographer.config import PostgresConfig, RedisConfig, get_settings
from cartographer.repositories import CampaignRepository, ExpeditionRepository
from cartographer.services.bootstrap import connect_job_queue, connect_postgres
from cartographer.services.model_actor import ModelActor
from cartographer.services.model_registry import ModelRegistry
from cartographer.workers import ExpeditionWorker

logger = logging.getLogger(__name__)


async def main():
    """Main worker entry point"""
    settings = get_settings()
    worker_id = int(os.getenv('WORKER_ID', '1'))

    db_pool = await connect_postgres(
        PostgresConfig.from_settings(settings),
        interval=settings.connect_retry_interval
    )
    job_queue = await connect_job_queue(
        RedisConfig.from_settings(settings),
        [settings.expedition_queue],
        interval=settings.connect_retry_interval
    )

    campaign_repo = CampaignRepository(db_pool)
    registry = ModelRegistry(
        campaign_repo,
        default_depth=settings.default_depth,
        default_unknown_mass=settings.default_unknown_mass,
        max_models=settings.max_models,
        idle_ttl=settings.model_idle_ttl,
    )
    actor = ModelActor(registry, dedupe_redeliveries=settings.dedupe_redeliveries)
    actor.start()

    worker = ExpeditionWorker(
        job_queue,
        actor,
        campaign_repo,
        ExpeditionRepository(db_pool),
        queue_name=settings.expedition_queue,
        worker_id=worker_id,
        dequeue_timeout=settings.dequeue_timeout,
    )

    logger.info(f"Starting expedition worker {worker_id}")

    try:
        await worker.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        await actor.stop()
        await db_pool.close()
        await job_queue.close()
        logger.info("Worker shut down cleanly")


def run():
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    asyncio.run(main())


if __name__ == '__main__':
    run()
