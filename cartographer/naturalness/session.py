"""
ExplorationSession - live scoring while a tester explores

Keeps a sliding window of the most recent interactions and a private model
trained on successive windows. Candidate next interactions can be ranked by
how natural they would be after the current window.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional

from cartographer.naturalness.event import Event
from cartographer.naturalness.model import NaturalnessModel
from cartographer.naturalness.sequence import Sequence


@dataclass(frozen=True)
class CandidateScore:
    """Cross-entropy of the window extended with one candidate event."""
    event: Event
    score: float


class ExplorationSession:

    def __init__(self, depth: int, unknown_mass: float):
        self.model = NaturalnessModel(depth, unknown_mass)
        self.window: List[Event] = []

    @property
    def depth(self) -> int:
        return self.model.depth

    def record(self, event: Event):
        """
        Append an interaction.

        Once the window holds more than ``depth`` events it is learned as one
        sequence and the oldest event is dropped.
        """
        self.window.append(event)
        if len(self.window) > self.depth:
            self.model.learn(Sequence(self.window))
            self.window.pop(0)

    def rank_candidates(self, candidates: Iterable[Event]) -> Optional[List[CandidateScore]]:
        """
        Score each candidate as the next interaction, in candidate order.

        Returns None until at least ``depth`` events have been recorded.
        """
        if len(self.window) < self.depth:
            return None
        return [
            CandidateScore(candidate, self.model.score(Sequence(self.window + [candidate])))
            for candidate in candidates
        ]

    def most_natural(self, candidates: Iterable[Event]) -> Optional[CandidateScore]:
        """Lowest scoring candidate (first one on ties), or None."""
        ranked = self.rank_candidates(candidates)
        if not ranked:
            return None
        return min(ranked, key=lambda candidate: candidate.score)

    def reset(self):
        self.model = NaturalnessModel(self.model.depth, self.model.unknown_mass)
        self.window = []
