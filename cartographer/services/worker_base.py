"""
Base worker class for queue consumers

- Reliable queue consumption (BLMOVE + explicit ack/reject)
- Signal handling (graceful shutdown)
- Processed/failed counters

One message is processed end-to-end before the next is reserved.
"""
import asyncio
import logging
import signal

from cartographer.services.job_queue import Delivery, JobQueue

logger = logging.getLogger(__name__)


class BaseWorker:
    """
    Base class for queue workers

    Subclasses implement ``handle(delivery)`` and must ack or reject the
    delivery themselves. An exception escaping ``handle`` rejects the
    message (redelivery).
    """

    def __init__(self, job_queue: JobQueue, worker_name: str, queue_name: str, dequeue_timeout: int = 5):
        self.job_queue = job_queue
        self.worker_name = worker_name
        self.queue_name = queue_name
        self.dequeue_timeout = dequeue_timeout
        self.running = False
        self.jobs_processed = 0
        self.jobs_failed = 0

    async def start(self):
        """
        Main worker loop

        Continuously:
        1. BLMOVE from queue (blocks until message available)
        2. Handle it (ack or reject)
        3. On empty poll, run idle housekeeping
        """
        self._setup_signal_handlers()

        self.running = True
        logger.info(f"[{self.worker_name}] Started, listening on {self.queue_name}")

        while self.running:
            try:
                delivery = await self.job_queue.reserve(self.queue_name, timeout=self.dequeue_timeout)

                if delivery:
                    await self.run_once(delivery)
                else:
                    await self.on_idle()

            except asyncio.CancelledError:
                logger.info(f"[{self.worker_name}] Received cancellation signal")
                break
            except Exception as e:
                logger.error(f"[{self.worker_name}] Worker loop error: {e}", exc_info=True)
                await asyncio.sleep(1)

        logger.info(
            f"[{self.worker_name}] Shutting down. "
            f"Processed: {self.jobs_processed}, Failed: {self.jobs_failed}"
        )

    def stop(self):
        self.running = False

    async def run_once(self, delivery: Delivery) -> bool:
        """
        Handle one delivery.

        Returns:
            True if the message was handled successfully
        """
        logger.debug(f"[{self.worker_name}] Received message (attempt {delivery.attempt})")
        try:
            ok = await self.handle(delivery)
        except Exception as e:
            logger.error(f"[{self.worker_name}] Job failed: {e}", exc_info=True)
            await self.job_queue.reject(delivery, reason=str(e))
            ok = False

        if ok:
            self.jobs_processed += 1
        else:
            self.jobs_failed += 1
        return ok

    def _setup_signal_handlers(self):
        """Setup graceful shutdown on SIGTERM/SIGINT"""
        def shutdown_handler(signum, frame):
            logger.info(f"[{self.worker_name}] Received signal {signum}, shutting down...")
            self.running = False

        signal.signal(signal.SIGTERM, shutdown_handler)
        signal.signal(signal.SIGINT, shutdown_handler)

    async def handle(self, delivery: Delivery) -> bool:
        """
        Override in subclass - process the message, then ack or reject it

        Returns:
            True on success
        """
        raise NotImplementedError(f"{self.__class__.__name__} must implement handle()")

    async def on_idle(self):
        """Called after a poll that returned no message. Default: nothing."""
        return None

