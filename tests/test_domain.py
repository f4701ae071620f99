"""
Domain model tests: payload decoding, score records, campaign config.
"""
import math
from datetime import datetime, timezone

import pytest

from cartographer.models.domain import Campaign, Expedition, ScoreRecord
from cartographer.naturalness import Event
from cartographer.services.errors import DecodeFault

from conftest import make_payload


class TestExpedition:

    def test_from_payload(self):
        expedition = Expedition.from_payload(make_payload())

        assert expedition.id == "exp-1"
        assert expedition.campaign_id == "camp-1"
        assert expedition.user_color == "#ff0000"
        assert [e.type for e in expedition.events] == ["click", "input", "submit"]

    def test_sequence_keeps_recorded_order(self):
        sequence = Expedition.from_payload(make_payload()).to_sequence()
        assert list(sequence) == [
            Event("click#loginclick"),
            Event("input#useralice"),
            Event("submitformsubmit"),
        ]

    def test_missing_events_is_empty_sequence(self):
        payload = make_payload()
        del payload['events']
        assert len(Expedition.from_payload(payload).to_sequence()) == 0

    @pytest.mark.parametrize("payload", [
        [],
        {'campaignId': 'camp-1', 'events': []},
        {'expeditionId': 'exp-1', 'events': []},
        make_payload(events="click"),
        make_payload(events=["click"]),
    ])
    def test_malformed_payload(self, payload):
        with pytest.raises(DecodeFault):
            Expedition.from_payload(payload)

    def test_non_json_body(self):
        with pytest.raises(DecodeFault):
            Expedition.from_json("{not json")

    def test_falsy_event_values_are_kept(self):
        zero = Expedition.from_payload(make_payload(events=[
            {'type': 'input', 'selector': '#qty', 'value': 0},
        ]))
        blank = Expedition.from_payload(make_payload(events=[
            {'type': 'input', 'selector': '#qty', 'value': ''},
        ]))
        unchecked = Expedition.from_payload(make_payload(events=[
            {'type': 'change', 'selector': '#terms', 'value': False},
        ]))

        assert list(zero.to_sequence()) == [Event("input#qty0")]
        assert list(blank.to_sequence()) == [Event("input#qty")]
        assert zero.to_sequence() != blank.to_sequence()
        assert list(unchecked.to_sequence()) == [Event("change#termsfalse")]

    def test_null_body_is_not_an_expedition(self):
        with pytest.raises(DecodeFault, match="expected an object"):
            Expedition.from_json("null")

    def test_payload_round_trip(self):
        payload = make_payload()
        assert Expedition.from_payload(payload).to_payload() == payload


class TestScoreRecord:

    def test_infinite_score_is_jsonb_safe(self):
        record = ScoreRecord(
            value=math.inf,
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            expedition_id="exp-1",
        )
        data = record.to_json()

        assert data['value'] == 'Infinity'
        assert ScoreRecord.from_json(data).value == math.inf

    def test_finite_score(self):
        record = ScoreRecord(
            value=0.152,
            timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
            expedition_id="exp-1",
            user_id="alice",
            user_color="#ff0000",
        )
        assert ScoreRecord.from_json(record.to_json()) == record


class TestCampaign:

    def test_model_config_defaults(self):
        assert Campaign(id="c").model_config(4, 0.01) == (4, 0.01)

    def test_model_config_keeps_explicit_zero(self):
        assert Campaign(id="c", depth=2, unknown_mass=0.0).model_config(4, 0.01) == (2, 0.0)

    def test_model_config_zero_depth_uses_default(self):
        assert Campaign(id="c", depth=0, unknown_mass=0.1).model_config(4, 0.01) == (4, 0.1)

    def test_has_explorer(self):
        campaign = Campaign(id="c", explorers=["alice"])
        assert campaign.has_explorer("alice")
        assert not campaign.has_explorer("bob")
