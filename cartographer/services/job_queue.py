"""
Redis-based reliable job queue for expedition messages

Uses LPUSH for publishing and BLMOVE for consumption:
- 'queue:expedition'             → pending messages (consumed from the right)
- 'queue:expedition:processing'  → messages delivered but not yet acked
- 'queue:expedition:deliveries'  → failed delivery count per message
- 'queue:expedition:dead'        → messages that will never be retried

Delivery is at-least-once: a message stays in the processing list until it
is acked, and rejected messages go back to the consuming end of the queue.
"""
import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


def message_digest(body: str) -> str:
    return hashlib.sha1(body.encode('utf-8')).hexdigest()


@dataclass
class Delivery:
    """One delivered message, pending ack or reject"""
    queue_name: str
    body: str
    attempt: int = 1

    @property
    def digest(self) -> str:
        return message_digest(self.body)


class JobQueue:
    """
    Redis-based job queue with explicit acknowledgement

    Each message is consumed by exactly ONE worker. Rejected messages are
    redelivered until ``max_deliveries`` failures, then dead-lettered
    (``max_deliveries=0`` redelivers forever).
    """

    def __init__(self, redis_url: str, dead_letter_queue: Optional[str] = None, max_deliveries: int = 5):
        self.redis = None
        self.redis_url = redis_url
        self.dead_letter_queue = dead_letter_queue
        self.max_deliveries = max_deliveries

    async def connect(self):
        """Initialize Redis connection"""
        self.redis = await redis.from_url(self.redis_url, decode_responses=True)

    async def close(self):
        """Close Redis connection"""
        if self.redis:
            await self.redis.close()

    async def ping(self) -> bool:
        return await self.redis.ping()

    @staticmethod
    def processing_list(queue_name: str) -> str:
        return f"{queue_name}:processing"

    @staticmethod
    def deliveries_hash(queue_name: str) -> str:
        return f"{queue_name}:deliveries"

    def dead_letter_list(self, queue_name: str) -> str:
        return self.dead_letter_queue or f"{queue_name}:dead"

    # =========================================================================
    # PRODUCER
    # =========================================================================

    async def enqueue(self, queue_name: str, job: dict):
        """
        Add job to queue

        Example:
            await queue.enqueue('queue:expedition', {
                'expeditionId': '...',
                'campaignId': '...',
                'events': [...]
            })
        """
        await self.redis.lpush(queue_name, json.dumps(job))

    # =========================================================================
    # CONSUMER
    # =========================================================================

    async def reserve(self, queue_name: str, timeout: int = 5) -> Optional[Delivery]:
        """
        Blocking move from queue to its processing list (BLMOVE)

        Returns None on timeout. The body is delivered undecoded.
        """
        body = await self.redis.blmove(
            queue_name, self.processing_list(queue_name), timeout, src='RIGHT', dest='LEFT'
        )
        if body is None:
            return None

        failures = await self.redis.hget(self.deliveries_hash(queue_name), message_digest(body))
        return Delivery(
            queue_name=queue_name,
            body=body,
            attempt=int(failures or 0) + 1,
        )

    async def ack(self, delivery: Delivery):
        """Message fully processed"""
        await self.redis.lrem(self.processing_list(delivery.queue_name), 1, delivery.body)
        await self.redis.hdel(self.deliveries_hash(delivery.queue_name), delivery.digest)

    async def reject(self, delivery: Delivery, requeue: bool = True, reason: str = "") -> bool:
        """
        Message failed.

        Requeued for immediate redelivery unless ``requeue`` is False or the
        delivery bound is reached, in which case it is dead-lettered.

        Returns:
            True if the message was requeued
        """
        if not requeue:
            await self.dead_letter(delivery, reason)
            return False

        failures = await self.redis.hincrby(
            self.deliveries_hash(delivery.queue_name), delivery.digest, 1
        )
        if self.max_deliveries and failures >= self.max_deliveries:
            await self.dead_letter(delivery, f"{reason} (after {failures} deliveries)".strip())
            return False

        # a failure between these two leaves the message in both lists
        await self.redis.rpush(delivery.queue_name, delivery.body)
        await self.redis.lrem(self.processing_list(delivery.queue_name), 1, delivery.body)
        return True

    async def dead_letter(self, delivery: Delivery, reason: str = ""):
        """Park a message for manual inspection; it is never redelivered"""
        await self.redis.lpush(self.dead_letter_list(delivery.queue_name), json.dumps({
            'body': delivery.body,
            'reason': reason,
            'failed_at': datetime.now(timezone.utc).isoformat(),
        }))
        await self.redis.lrem(self.processing_list(delivery.queue_name), 1, delivery.body)
        await self.redis.hdel(self.deliveries_hash(delivery.queue_name), delivery.digest)
        logger.warning(f"Dead-lettered message from {delivery.queue_name}: {reason}")

    async def recover_unacked(self, queue_name: str) -> int:
        """
        Move messages left in the processing list back to the queue.

        Called at startup: anything still in processing was delivered to a
        worker that died before acking.
        """
        recovered = 0
        while True:
            body = await self.redis.lmove(
                self.processing_list(queue_name), queue_name, src='LEFT', dest='RIGHT'
            )
            if body is None:
                break
            recovered += 1
        if recovered:
            logger.info(f"Recovered {recovered} unacked message(s) on {queue_name}")
        return recovered

