"""
Repository Pattern - Storage abstraction layer

Repositories hide PostgreSQL details from the pipeline.
Consumers work with domain models, not storage-specific types.
"""
from .campaign_repository import CampaignRepository
from .expedition_repository import ExpeditionRepository
from .schema import ensure_schema, SCHEMA

__all__ = [
    'CampaignRepository',
    'ExpeditionRepository',
    'ensure_schema',
    'SCHEMA',
]
