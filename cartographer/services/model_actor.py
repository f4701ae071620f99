"""
ModelActor - single task owning the model registry

All reads and writes of naturalness models go through one asyncio task.
Callers send requests over a queue and await the reply, so models are never
touched by two coroutines at once regardless of how many messages the
consumer has in flight.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

from cartographer.naturalness import Sequence
from cartographer.services.model_registry import ModelRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreRequest:
    campaign_id: str
    expedition_id: Optional[str]
    sequence: Sequence


@dataclass(frozen=True)
class EvictRequest:
    now: Optional[float] = None


@dataclass(frozen=True)
class ScoreOutcome:
    """
    score: cross-entropy against the model before this sequence was learned
    learned: False when the expedition was skipped as already learned
    model_created: the campaign's model was created by this request
    """
    score: float
    learned: bool
    model_created: bool


class ModelActor:
    """
    Single writer for ModelRegistry and its models.

    score-then-learn: a sequence never lowers its own novelty score.
    """

    def __init__(self, registry: ModelRegistry, dedupe_redeliveries: bool = False):
        self.registry = registry
        self.dedupe_redeliveries = dedupe_redeliveries
        self._mailbox: asyncio.Queue = asyncio.Queue()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="model-actor")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def submit(self, campaign_id: str, expedition_id: Optional[str], sequence: Sequence) -> ScoreOutcome:
        """
        Score then learn ``sequence`` on the campaign's model.

        Raises:
            CampaignNotFound: and any other resolution fault
        """
        return await self._ask(ScoreRequest(campaign_id, expedition_id, sequence))

    async def evict_idle(self, now: Optional[float] = None) -> List[str]:
        return await self._ask(EvictRequest(now))

    async def _ask(self, request):
        if not self.running:
            raise RuntimeError("model actor is not running")
        reply = asyncio.get_running_loop().create_future()
        await self._mailbox.put((request, reply))
        return await reply

    async def _run(self):
        while True:
            request, reply = await self._mailbox.get()
            try:
                result = await self._handle(request)
            except asyncio.CancelledError:
                if not reply.done():
                    reply.cancel()
                raise
            except Exception as e:
                if not reply.done():
                    reply.set_exception(e)
            else:
                if not reply.done():
                    reply.set_result(result)
            finally:
                self._mailbox.task_done()

    async def _handle(self, request):
        if isinstance(request, EvictRequest):
            return self.registry.evict_idle(request.now)
        return await self._score_and_learn(request)

    async def _score_and_learn(self, request: ScoreRequest) -> ScoreOutcome:
        created = request.campaign_id not in self.registry
        entry = await self.registry.resolve_entry(request.campaign_id)

        score = entry.model.score(request.sequence)

        if (self.dedupe_redeliveries and request.expedition_id is not None
                and request.expedition_id in entry.learned_expeditions):
            logger.info(
                f"Expedition {request.expedition_id} already learned by campaign "
                f"{request.campaign_id}, not learning again"
            )
            return ScoreOutcome(score=score, learned=False, model_created=created)

        entry.model.learn(request.sequence)
        if self.dedupe_redeliveries and request.expedition_id is not None:
            entry.learned_expeditions.add(request.expedition_id)

        return ScoreOutcome(score=score, learned=True, model_created=created)
