"""
tests/test_schemas.py — Upstream Payload Schemas
=================================================
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from killboard.engine.schemas import (
    KillboardEvent,
    SearchResult,
    ServerStatus,
    parse_timestamp,
)
from conftest import make_event_payload


class TestParseTimestamp:
    def test_nanosecond_precision(self):
        dt = parse_timestamp("2030-01-01T12:34:56.123456789Z")
        assert dt == datetime(2030, 1, 1, 12, 34, 56, 123456, tzinfo=UTC)

    def test_short_fraction_padded(self):
        assert parse_timestamp("2030-01-01T00:00:00.5Z").microsecond == 500000

    def test_naive_assumed_utc(self):
        assert parse_timestamp("2030-01-01T00:00:00").tzinfo is UTC

    def test_offset_converted(self):
        dt = parse_timestamp("2030-01-01T02:00:00+02:00")
        assert dt == datetime(2030, 1, 1, 0, 0, tzinfo=UTC)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_timestamp(12345)


class TestKillboardEvent:
    def test_parses_pascal_case(self):
        event = KillboardEvent.model_validate(
            make_event_payload(987, ("P1", "Alice"), ("P2", "Bob"), fame=250)
        )
        assert event.event_id == "987"
        assert event.killer.name == "Alice"
        assert event.victim.id == "P2"
        assert event.fame == 250
        assert event.composite_key == ("987", event.timestamp)

    def test_missing_killer_rejected(self):
        payload = make_event_payload(1, ("P1", "Alice"), ("P2", "Bob"))
        del payload["Killer"]
        with pytest.raises(ValidationError):
            KillboardEvent.model_validate(payload)

    def test_empty_event_id_rejected(self):
        with pytest.raises(ValidationError):
            KillboardEvent.model_validate(make_event_payload("", ("P1", "A"), ("P2", "B")))

    def test_main_hand(self):
        payload = make_event_payload(1, ("P1", "Alice"), ("P2", "Bob"))
        payload["Killer"]["Equipment"] = {"MainHand": {"Type": "T8_2H_BOW"}}
        event = KillboardEvent.model_validate(payload)
        assert event.killer.main_hand == "T8_2H_BOW"
        assert event.victim.main_hand is None


class TestMisc:
    def test_search_null_lists(self):
        result = SearchResult.model_validate({"players": None, "guilds": None})
        assert result.players == []
        assert result.guilds == []

    def test_server_status_online(self):
        assert ServerStatus.model_validate({"status": "Online", "message": "ok"}).online is True
        assert ServerStatus.model_validate({"status": "offline"}).online is False
