"""
Pytest configuration and shared fakes for cartographer tests.
"""
import json
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest

from cartographer.models.domain import Campaign, Expedition, ScoreRecord
from cartographer.services.errors import PersistenceFault
from cartographer.services.job_queue import Delivery


def pytest_configure(config):
    """Configure pytest with asyncio marker."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an async test."
    )


class FakeCampaignRepository:
    """In-memory campaign storage"""

    def __init__(self, campaigns: Optional[List[Campaign]] = None):
        self.campaigns: Dict[str, Campaign] = {c.id: c for c in campaigns or []}
        self.lookups: List[str] = []
        self.failures_left = 0

    async def get_model_config(self, campaign_id: str) -> Optional[Campaign]:
        self.lookups.append(campaign_id)
        campaign = self.campaigns.get(campaign_id)
        if campaign is None:
            return None
        return Campaign(id=campaign.id, depth=campaign.depth, unknown_mass=campaign.unknown_mass)

    async def append_score(self, campaign_id: str, record: ScoreRecord):
        if self.failures_left:
            self.failures_left -= 1
            raise PersistenceFault(campaign_id, record.expedition_id, "connection reset")
        campaign = self.campaigns.get(campaign_id)
        if campaign is None:
            raise PersistenceFault(campaign_id, record.expedition_id, "no such campaign")
        campaign.score_history.append(record)
        campaign.last_update = record.timestamp


class FakeExpeditionRepository:
    """In-memory expedition storage"""

    def __init__(self):
        self.saved: Dict[str, Expedition] = {}
        self.fail = False

    async def save(self, expedition: Expedition) -> bool:
        if self.fail:
            raise ConnectionError("postgres went away")
        if expedition.id in self.saved:
            return False
        self.saved[expedition.id] = expedition
        return True


def make_payload(expedition_id="exp-1", campaign_id="camp-1", events=None, **extra):
    payload = {
        'expeditionId': expedition_id,
        'campaignId': campaign_id,
        'userId': 'alice',
        'userColor': '#ff0000',
        'events': events if events is not None else [
            {'type': 'click', 'selector': '#login', 'value': 'click'},
            {'type': 'input', 'selector': '#user', 'value': 'alice'},
            {'type': 'submit', 'selector': 'form', 'value': 'submit'},
        ],
    }
    payload.update(extra)
    return payload


def make_delivery(job, body=None, attempt=1) -> Delivery:
    return Delivery(
        queue_name='queue:expedition',
        body=body if body is not None else json.dumps(job),
        attempt=attempt,
    )


@pytest.fixture
def campaign():
    return Campaign(id="camp-1", depth=2, unknown_mass=0.1, explorers=["alice"])


@pytest.fixture
def campaign_repo(campaign):
    return FakeCampaignRepository([campaign])


@pytest.fixture
def expedition_repo():
    return FakeExpeditionRepository()


@pytest.fixture
def job_queue():
    queue = AsyncMock()
    queue.reject.return_value = True
    return queue
