"""
Tests for the roster and burnout signal provider clients.
"""

import asyncio

import httpx
import pytest

from sprint_engine.errors import ValidationError
from sprint_engine.integrations import (
    DEFAULT_VELOCITY,
    BurnoutSignal,
    BurnoutSignalClient,
    Contributor,
    RosterClient,
    parse_roster,
    parse_signals
)


def transport_for(payload, seen=None, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


class TestContributor:
    """Tests for parsing roster records."""

    def test_partial_record(self):
        """Missing optional fields fall back to defaults."""
        contributor = Contributor.from_dict({"username": "alice"})

        assert contributor.id == "alice"
        assert contributor.name == "alice"
        assert contributor.velocity == DEFAULT_VELOCITY
        assert contributor.skills == {}
        assert contributor.open_tickets == 0

    def test_camel_case_fields(self):
        contributor = Contributor.from_dict({
            "id": "bob",
            "name": "Bob",
            "velocity": 6,
            "openTickets": 5,
            "currentLoad": 12,
            "compatibleWith": ["alice"],
            "skills": {"react": 1.4, "devops": -0.2}
        })

        assert contributor.open_tickets == 5
        assert contributor.current_load == 12.0
        assert contributor.compatible_with == {"alice"}
        assert contributor.skills == {"react": 1.0, "devops": 0.0}

    def test_invalid_velocity(self):
        with pytest.raises(ValidationError) as exc:
            Contributor.from_dict({"id": "bob", "velocity": 0})
        assert exc.value.field == "velocity"

    def test_missing_id(self):
        with pytest.raises(ValidationError) as exc:
            Contributor.from_dict({"name": "Nobody"})
        assert exc.value.field == "id"

    def test_duplicates_keep_first(self):
        roster = parse_roster([
            {"id": "alice", "velocity": 5},
            {"id": "bob"},
            {"id": "alice", "velocity": 9},
        ])

        assert [dev.id for dev in roster] == ["alice", "bob"]
        assert roster[0].velocity == 5

    @pytest.mark.parametrize("key,field", [
        ("openTickets", "open_tickets"),
        ("currentLoad", "current_load"),
    ])
    def test_malformed_numeric_field(self, key, field):
        """A non-numeric count is a validation error naming the field."""
        with pytest.raises(ValidationError) as exc:
            parse_roster([{"id": "a", "velocity": 5, key: "many"}])
        assert exc.value.field == field

    def test_negative_open_tickets(self):
        with pytest.raises(ValidationError) as exc:
            Contributor.from_dict({"id": "a", "open_tickets": -1})
        assert exc.value.field == "open_tickets"

    def test_non_object_record(self):
        with pytest.raises(ValidationError) as exc:
            parse_roster([{"id": "alice"}, "bob"])
        assert exc.value.field == "team[1]"


class TestBurnoutSignal:

    def test_partial_record_is_neutral(self):
        signal = BurnoutSignal.from_dict({"username": "alice"})

        assert signal.risk_score == 0.0
        assert signal.velocity_signal == "STABLE"
        assert signal.overload_signal == "HEALTHY"
        assert signal.mood_trend == "stable"

    def test_parse_signals_keyed_by_id(self):
        signals = parse_signals([
            {"contributor_id": "alice", "riskScore": 40, "moodTrend": "declining"},
            {"contributor_id": "bob", "risk_score": 10},
        ])

        assert set(signals) == {"alice", "bob"}
        assert signals["alice"].risk_score == 40
        assert signals["alice"].mood_trend == "declining"


class TestRosterClient:
    """Tests for the roster provider client."""

    def test_requires_url(self, monkeypatch):
        monkeypatch.delenv("ROSTER_URL", raising=False)
        with pytest.raises(ValueError):
            RosterClient()

    def test_get_roster(self):
        seen = []
        payload = {"contributors": [{"id": "alice", "velocity": 5}, {"id": "bob"}]}
        client = RosterClient(
            url="https://roster.example/",
            token="secret",
            transport=transport_for(payload, seen)
        )

        roster = asyncio.run(client.get_roster(team="platform"))

        assert [dev.id for dev in roster] == ["alice", "bob"]
        assert roster[1].velocity == DEFAULT_VELOCITY
        assert seen[0].url.path == "/contributors"
        assert seen[0].url.params["team"] == "platform"
        assert seen[0].headers["Authorization"] == "Bearer secret"

    def test_list_payload(self):
        client = RosterClient(url="https://roster.example", transport=transport_for([{"id": "carol"}]))

        roster = asyncio.run(client.get_roster())

        assert [dev.id for dev in roster] == ["carol"]

    def test_malformed_payload_is_validation_error(self):
        payload = {"contributors": [{"id": "a", "openTickets": "many"}]}
        client = RosterClient(url="https://roster.example", transport=transport_for(payload))

        with pytest.raises(ValidationError) as exc:
            asyncio.run(client.get_roster())
        assert exc.value.field == "open_tickets"

    def test_provider_error_propagates(self):
        client = RosterClient(url="https://roster.example", transport=transport_for({}, status_code=503))

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(client.get_roster())


class TestBurnoutSignalClient:
    """Tests for the burnout signal provider client."""

    def test_requires_url(self, monkeypatch):
        monkeypatch.delenv("SIGNALS_URL", raising=False)
        with pytest.raises(ValueError):
            BurnoutSignalClient()

    def test_get_signals(self):
        seen = []
        payload = {"signals": [{"username": "alice", "riskScore": 65, "overloadSignal": "OVERLOADED"}]}
        client = BurnoutSignalClient(url="https://signals.example", transport=transport_for(payload, seen))

        signals = asyncio.run(client.get_signals(["alice", "bob"]))

        assert list(signals) == ["alice"]
        assert signals["alice"].risk_score == 65
        assert signals["alice"].overload_signal == "OVERLOADED"
        assert seen[0].url.params["contributors"] == "alice,bob"
