"""
Domain models - storage-agnostic representations
"""
from .campaign import Campaign, ScoreRecord, encode_score, decode_score
from .expedition import Expedition, InteractionEvent

__all__ = [
    'Campaign',
    'ScoreRecord',
    'encode_score',
    'decode_score',
    'Expedition',
    'InteractionEvent',
]
