"""
SuccessorFrequencyTable - what followed a given context, and how often
"""
from typing import Dict

from cartographer.naturalness.event import Event


class SuccessorFrequencyTable:
    """
    Observation counts of the events that followed one context.

    Invariant: ``total`` equals the sum of all counts.
    """

    def __init__(self):
        self.counts: Dict[str, int] = {}
        self.total = 0

    def observe(self, event: Event):
        self.counts[event.signature] = self.counts.get(event.signature, 0) + 1
        self.total += 1

    def count_of(self, event: Event) -> int:
        return self.counts.get(event.signature, 0)

    def probability_of(self, event: Event) -> float:
        """Relative frequency of ``event`` after this context (0 if never observed)."""
        if self.total == 0:
            return 0.0
        return self.count_of(event) / self.total

    def __len__(self) -> int:
        return len(self.counts)

    def __repr__(self) -> str:
        return f"SuccessorFrequencyTable(successors={len(self.counts)}, total={self.total})"
