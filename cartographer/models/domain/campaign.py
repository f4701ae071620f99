"""
Campaign domain model - a test configuration grouping expeditions
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from cartographer.naturalness import DEFAULT_DEPTH, DEFAULT_UNKNOWN_MASS

# jsonb has no representation for non-finite numbers
_NON_FINITE = {
    'Infinity': math.inf,
    '-Infinity': -math.inf,
    'NaN': math.nan,
}


def encode_score(value: float):
    """Score as a jsonb-safe value"""
    if math.isfinite(value):
        return value
    if math.isnan(value):
        return 'NaN'
    return 'Infinity' if value > 0 else '-Infinity'


def decode_score(value) -> float:
    if isinstance(value, str):
        return _NON_FINITE[value]
    return float(value)


@dataclass(frozen=True)
class ScoreRecord:
    """
    One cross-entropy result appended to a campaign's history.

    Never mutated after creation.
    """
    value: float
    timestamp: datetime
    expedition_id: str
    user_id: Optional[str] = None
    user_color: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            'value': encode_score(self.value),
            'date': self.timestamp.isoformat(),
            'expeditionId': self.expedition_id,
            'userId': self.user_id,
            'userColor': self.user_color,
        }

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'ScoreRecord':
        return cls(
            value=decode_score(data['value']),
            timestamp=datetime.fromisoformat(data['date']),
            expedition_id=data['expeditionId'],
            user_id=data.get('userId'),
            user_color=data.get('userColor'),
        )


@dataclass
class Campaign:
    """
    Campaign domain model

    Storage: PostgreSQL (campaigns table)

    ``depth`` and ``unknown_mass`` configure the campaign's naturalness model;
    NULL values, and a depth below 1, fall back to service defaults.
    """
    id: str
    depth: Optional[int] = None
    unknown_mass: Optional[float] = None
    explorers: List[str] = field(default_factory=list)
    score_history: List[ScoreRecord] = field(default_factory=list)
    last_update: Optional[datetime] = None

    def model_config(
        self,
        default_depth: int = DEFAULT_DEPTH,
        default_unknown_mass: float = DEFAULT_UNKNOWN_MASS
    ) -> Tuple[int, float]:
        depth = self.depth if self.depth is not None and self.depth > 0 else default_depth
        unknown_mass = self.unknown_mass if self.unknown_mass is not None else default_unknown_mass
        return depth, unknown_mass

    def has_explorer(self, user_id: str) -> bool:
        return user_id in self.explorers
