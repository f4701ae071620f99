"""
Error kinds raised while ingesting expeditions
"""
from typing import Optional


class CartographerError(Exception):
    """Base class for pipeline faults"""


class CampaignNotFound(CartographerError):
    """The campaign referenced by an expedition does not exist in storage"""

    def __init__(self, campaign_id: str):
        super().__init__(f"campaign not found: {campaign_id}")
        self.campaign_id = campaign_id


class PersistenceFault(CartographerError):
    """
    Storing a score failed.

    Raised after scoring and learning already ran in memory.
    """

    def __init__(self, campaign_id: str, expedition_id: Optional[str], reason: str = ""):
        message = f"can't save score for campaign {campaign_id} (expedition {expedition_id})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.campaign_id = campaign_id
        self.expedition_id = expedition_id


class DecodeFault(CartographerError):
    """Message body is not a valid expedition payload"""


class TransientInfrastructureFault(CartographerError):
    """Storage or broker unreachable"""
