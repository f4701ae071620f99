"""
NaturalnessModel - incrementally trained n-gram model over interaction events

Scores a sequence by its cross-entropy under the current model:

    score = -(1/N) * sum(log2(p_i))

where p_i is the discounted probability of event i given its context.
A fraction ``unknown_mass`` of the probability mass is reserved for
continuations the model has never seen; observed continuations share the
remaining ``1 - unknown_mass``.

Lower scores mean the sequence resembles what was already learned, higher
scores mean it is novel. With ``unknown_mass == 0`` a single unseen
continuation makes the score +inf.
"""
import math
from typing import Dict, Optional

from cartographer.naturalness.sequence import ContextKey, Sequence
from cartographer.naturalness.successor import SuccessorFrequencyTable

DEFAULT_DEPTH = 3
DEFAULT_UNKNOWN_MASS = 0.0


class NaturalnessModel:
    """
    Mapping from context to successor statistics.

    ``depth`` and ``unknown_mass`` are fixed at construction; the tables only
    ever grow, through ``learn``.
    """

    def __init__(self, depth: int = DEFAULT_DEPTH, unknown_mass: float = DEFAULT_UNKNOWN_MASS):
        if depth < 1:
            raise ValueError(f"depth must be at least 1, got {depth}")
        if not 0.0 <= unknown_mass < 1.0:
            raise ValueError(f"unknown_mass must be in [0, 1), got {unknown_mass}")

        self._depth = depth
        self._unknown_mass = unknown_mass
        self._tables: Dict[ContextKey, SuccessorFrequencyTable] = {}

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def unknown_mass(self) -> float:
        return self._unknown_mass

    def table_for(self, context: ContextKey) -> Optional[SuccessorFrequencyTable]:
        """Successor table of ``context``, or None if the context was never learned."""
        return self._tables.get(context)

    def score(self, sequence: Sequence) -> float:
        """
        Cross-entropy of ``sequence`` against the current model state.

        Read-only. An empty sequence scores ``unknown_mass``.
        """
        if len(sequence) == 0:
            return self._unknown_mass

        log_sum = 0.0
        for context, target in sequence.samples(self._depth):
            table = self._tables.get(context)
            p = table.probability_of(target) if table is not None else 0.0

            if p == 0.0:
                effective_p = self._unknown_mass
            else:
                effective_p = p * (1.0 - self._unknown_mass)

            if effective_p == 0.0:
                # log2(0): nothing reserved for the unseen continuation
                return math.inf
            log_sum += math.log2(effective_p)

        return -(log_sum / len(sequence))

    def learn(self, sequence: Sequence):
        """Record every (context, target) pair of ``sequence``."""
        for context, target in sequence.samples(self._depth):
            table = self._tables.get(context)
            if table is None:
                table = SuccessorFrequencyTable()
                self._tables[context] = table
            table.observe(target)

    def __len__(self) -> int:
        return len(self._tables)

    def __repr__(self) -> str:
        return (
            f"NaturalnessModel(depth={self._depth}, unknown_mass={self._unknown_mass}, "
            f"contexts={len(self._tables)})"
        )
