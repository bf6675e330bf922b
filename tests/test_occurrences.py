"""
tests/test_occurrences.py — Kill/Death Classification
======================================================
"""

from __future__ import annotations

from killboard.engine.occurrences import classify
from killboard.engine.schemas import GuildMemberInfo, KillboardEvent
from killboard.services.poller import classify_for_roster
from conftest import make_event_payload


def _event(killer=("P1", "Alice"), victim=("X", "Bob")) -> KillboardEvent:
    return KillboardEvent.model_validate(make_event_payload("E1", killer, victim))


class TestClassify:
    def test_member_as_killer(self):
        occs = classify(_event(), "P1", "Alice")
        assert len(occs) == 1
        assert occs[0].is_kill is True
        assert occs[0].kind == "kill"

    def test_member_as_victim(self):
        occs = classify(_event(killer=("X", "Bob"), victim=("P1", "Alice")), "P1", "Alice")
        assert [o.kind for o in occs] == ["death"]

    def test_uninvolved_member(self):
        assert classify(_event(), "P9", "Zed") == []

    def test_row_columns(self):
        row = classify(_event(), "P1", "Alice")[0].as_row()
        assert row["event_id"] == "E1"
        assert row["killer_name"] == "Alice"
        assert row["victim_name"] == "Bob"
        assert row["fame"] == 1000
        assert row["guild_member_involved"] == "Alice"
        assert row["is_kill"] is True


class TestClassifyForRoster:
    def test_event_between_two_members_yields_both(self):
        roster = {
            "P1": GuildMemberInfo(id="P1", name="Alice"),
            "P2": GuildMemberInfo(id="P2", name="Carol"),
        }
        occs = classify_for_roster(_event(victim=("P2", "Carol")), roster)
        assert {(o.member_name, o.kind) for o in occs} == {("Alice", "kill"), ("Carol", "death")}

    def test_outsider_event_yields_nothing(self):
        roster = {"P1": GuildMemberInfo(id="P1", name="Alice")}
        assert classify_for_roster(_event(killer=("X", "Bob"), victim=("Y", "Eve")), roster) == []
