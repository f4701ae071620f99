"""
ModelRegistry - per-campaign naturalness models, loaded on first use

Models live only in process memory. The cache is optionally bounded:
- max_models > 0: least recently used models are dropped beyond the bound
- idle_ttl > 0: evict_idle() drops models unused for longer than idle_ttl

A dropped model is rebuilt empty on the campaign's next expedition.
"""
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, List, Optional, Set

from cartographer.naturalness import NaturalnessModel, DEFAULT_DEPTH, DEFAULT_UNKNOWN_MASS
from cartographer.services.errors import CampaignNotFound

logger = logging.getLogger(__name__)


@dataclass
class RegistryEntry:
    campaign_id: str
    model: NaturalnessModel
    created_at: datetime
    last_used: float
    learned_expeditions: Set[str] = field(default_factory=set)


class ModelRegistry:
    """
    Cache of campaign id → NaturalnessModel

    Not safe for concurrent use; ModelActor is its only caller in the worker.
    """

    def __init__(
        self,
        campaign_repo,
        default_depth: int = DEFAULT_DEPTH,
        default_unknown_mass: float = DEFAULT_UNKNOWN_MASS,
        max_models: int = 0,
        idle_ttl: float = 0.0,
        clock: Callable[[], float] = time.monotonic
    ):
        self.campaign_repo = campaign_repo
        self.default_depth = default_depth
        self.default_unknown_mass = default_unknown_mass
        self.max_models = max_models
        self.idle_ttl = idle_ttl
        self.clock = clock
        self._entries: 'OrderedDict[str, RegistryEntry]' = OrderedDict()

    async def resolve(self, campaign_id: str) -> NaturalnessModel:
        """
        Cached model for the campaign, created from its stored config if absent.

        Raises:
            CampaignNotFound: no such campaign; nothing is cached
        """
        entry = await self.resolve_entry(campaign_id)
        return entry.model

    async def resolve_entry(self, campaign_id: str) -> RegistryEntry:
        entry = self._entries.get(campaign_id)
        if entry is not None:
            entry.last_used = self.clock()
            self._entries.move_to_end(campaign_id)
            return entry

        logger.info(f"Creating model for campaign {campaign_id}")
        campaign = await self.campaign_repo.get_model_config(campaign_id)
        if campaign is None:
            raise CampaignNotFound(campaign_id)

        depth, unknown_mass = campaign.model_config(self.default_depth, self.default_unknown_mass)
        entry = RegistryEntry(
            campaign_id=campaign_id,
            model=NaturalnessModel(depth, unknown_mass),
            created_at=datetime.now(timezone.utc),
            last_used=self.clock(),
        )
        self._entries[campaign_id] = entry
        logger.info(f"Model for campaign {campaign_id}: depth={depth}, unknown_mass={unknown_mass}")

        self._enforce_bound()
        return entry

    def get(self, campaign_id: str) -> Optional[NaturalnessModel]:
        """Cached model without loading"""
        entry = self._entries.get(campaign_id)
        return entry.model if entry else None

    def evict_idle(self, now: Optional[float] = None) -> List[str]:
        """
        Drop models unused for longer than idle_ttl.

        Returns:
            Evicted campaign ids
        """
        if not self.idle_ttl:
            return []

        now = self.clock() if now is None else now
        evicted = [
            campaign_id for campaign_id, entry in self._entries.items()
            if now - entry.last_used > self.idle_ttl
        ]
        for campaign_id in evicted:
            del self._entries[campaign_id]
        if evicted:
            logger.info(f"Evicted {len(evicted)} idle model(s): {', '.join(evicted)}")
        return evicted

    def _enforce_bound(self):
        if not self.max_models:
            return
        while len(self._entries) > self.max_models:
            campaign_id, _ = self._entries.popitem(last=False)
            logger.info(f"Evicted least recently used model for campaign {campaign_id}")

    def campaign_ids(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, campaign_id: str) -> bool:
        return campaign_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
