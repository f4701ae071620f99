"""
Sequence - ordered interactions of one expedition, with n-gram context extraction
"""
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from cartographer.naturalness.event import Event


@dataclass(frozen=True)
class ContextKey:
    """
    Signatures of the events preceding a position, oldest first.

    Kept as a tuple so that ("ab", "c") and ("a", "bc") never collide.
    """
    signatures: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.signatures)

    def __str__(self) -> str:
        return ' > '.join(self.signatures)


EMPTY_CONTEXT = ContextKey()


class Sequence:
    """
    Ordered, append-only list of events.

    Order is significant: the same events in a different order form a
    different sequence.
    """

    def __init__(self, events: Iterable[Event] = ()):
        self._events: List[Event] = list(events)

    @property
    def events(self) -> Tuple[Event, ...]:
        return tuple(self._events)

    def append(self, event: Event):
        self._events.append(event)

    def context_key_at(self, index: int, depth: int) -> ContextKey:
        """
        Context of the event at ``index``: up to ``depth`` preceding events.

        Near the start of the sequence fewer events are used, no padding.
        """
        start = max(0, index - depth)
        return ContextKey(tuple(event.signature for event in self._events[start:index]))

    def samples(self, depth: int) -> Iterator[Tuple[ContextKey, Event]]:
        """Yield (context, target) pairs for every position."""
        for index, target in enumerate(self._events):
            yield self.context_key_at(index, depth), target

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __getitem__(self, index: int) -> Event:
        return self._events[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Sequence):
            return NotImplemented
        return self._events == other._events

    def __repr__(self) -> str:
        return f"Sequence({len(self._events)} events)"
