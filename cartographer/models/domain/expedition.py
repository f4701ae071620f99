"""
Expedition domain model - one recorded exploration session
"""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cartographer.naturalness import Event, Sequence
from cartographer.services.errors import DecodeFault


def _event_field(raw: Dict[str, Any], key: str) -> str:
    """Field as captured text; only a missing value is empty"""
    value = raw.get(key)
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


@dataclass(frozen=True)
class InteractionEvent:
    """Raw interaction as captured by the browser extension"""
    type: str
    selector: str
    value: str

    def to_event(self) -> Event:
        return Event.from_interaction(self.type, self.selector, self.value)

    def to_dict(self) -> Dict[str, str]:
        return {'type': self.type, 'selector': self.selector, 'value': self.value}


@dataclass
class Expedition:
    """
    Expedition domain model

    Storage: PostgreSQL (expeditions table), written once per message.

    Payload format (queue message):
        {
            "expeditionId": "...",
            "campaignId": "...",
            "userId": "...",
            "userColor": "#aabbcc",
            "events": [{"type": "click", "selector": "#login", "value": "click"}, ...]
        }
    """
    id: str
    campaign_id: str
    user_id: Optional[str] = None
    user_color: Optional[str] = None
    events: List[InteractionEvent] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: Any) -> 'Expedition':
        """
        Build an expedition from a decoded queue message.

        Raises:
            DecodeFault: payload is missing ids or carries malformed events
        """
        if not isinstance(payload, dict):
            raise DecodeFault(f"expected an object, got {type(payload).__name__}")

        expedition_id = payload.get('expeditionId')
        campaign_id = payload.get('campaignId')
        if not expedition_id or not campaign_id:
            raise DecodeFault("expeditionId and campaignId are required")

        raw_events = payload.get('events') or []
        if not isinstance(raw_events, list):
            raise DecodeFault(f"events must be a list (expedition {expedition_id})")

        events = []
        for raw in raw_events:
            if not isinstance(raw, dict):
                raise DecodeFault(f"malformed event in expedition {expedition_id}: {raw!r}")
            events.append(InteractionEvent(
                type=_event_field(raw, 'type'),
                selector=_event_field(raw, 'selector'),
                value=_event_field(raw, 'value'),
            ))

        return cls(
            id=str(expedition_id),
            campaign_id=str(campaign_id),
            user_id=payload.get('userId'),
            user_color=payload.get('userColor'),
            events=events,
        )

    @classmethod
    def from_json(cls, body: str) -> 'Expedition':
        try:
            payload = json.loads(body)
        except (TypeError, ValueError) as e:
            raise DecodeFault(f"message body is not JSON: {e}") from e
        return cls.from_payload(payload)

    def to_payload(self) -> Dict[str, Any]:
        return {
            'expeditionId': self.id,
            'campaignId': self.campaign_id,
            'userId': self.user_id,
            'userColor': self.user_color,
            'events': [event.to_dict() for event in self.events],
        }

    def to_sequence(self) -> Sequence:
        """Events in recorded order"""
        return Sequence(event.to_event() for event in self.events)
