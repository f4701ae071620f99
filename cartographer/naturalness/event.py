"""
Event - atomic UI interaction signature
"""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Event:
    """
    Opaque interaction signature.

    The signature combines the interaction kind, the target locator (CSS
    selector) and the observed value. Two events are equal when their
    signatures are equal.
    """
    signature: str

    @classmethod
    def from_interaction(
        cls,
        kind: Optional[str],
        selector: Optional[str],
        value: Optional[str]
    ) -> 'Event':
        """Build an event from the raw fields captured in the browser."""
        parts = ('' if part is None else part for part in (kind, selector, value))
        return cls(''.join(parts))

    def __str__(self) -> str:
        return self.signature
