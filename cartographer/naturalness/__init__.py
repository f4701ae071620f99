"""
Naturalness scoring of UI interaction sequences.
"""
from .event import Event
from .sequence import ContextKey, EMPTY_CONTEXT, Sequence
from .successor import SuccessorFrequencyTable
from .model import NaturalnessModel, DEFAULT_DEPTH, DEFAULT_UNKNOWN_MASS
from .session import CandidateScore, ExplorationSession

__all__ = [
    'Event',
    'ContextKey',
    'EMPTY_CONTEXT',
    'Sequence',
    'SuccessorFrequencyTable',
    'NaturalnessModel',
    'DEFAULT_DEPTH',
    'DEFAULT_UNKNOWN_MASS',
    'CandidateScore',
    'ExplorationSession',
]
