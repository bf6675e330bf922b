"""
tests/test_store.py — Store Services
=====================================

Kill log, roster cache, server settings, tracked entities and builds,
all against an in-memory SQLite engine.
"""

from __future__ import annotations

import json

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from killboard.database.models import Build, EntityType
from killboard.engine.occurrences import classify
from killboard.engine.schemas import GuildMemberInfo, KillboardEvent
from killboard.services.build_service import (
    BuildData,
    BuildExistsError,
    create_build,
    get_build,
    list_builds,
    remove_build,
)
from killboard.services.killboard_service import (
    get_guild_members,
    get_recent_kills,
    save_kill_event,
    update_guild_members,
)
from killboard.services.settings_service import (
    get_server_settings,
    reset_server_settings,
    update_server_settings,
)
from killboard.services.tracking_service import (
    add_tracked_entity,
    clear_tracked_entities,
    get_tracked_entities,
    remove_tracked_entity,
    remove_tracked_entity_by_name,
)
from conftest import make_event_payload


def _occurrence(event_id="E1", *, minute=0, killer=("P1", "Alice"), victim=("X", "Bob")):
    event = KillboardEvent.model_validate(
        make_event_payload(event_id, killer, victim, timestamp=f"2030-01-01T12:{minute:02d}:00Z")
    )
    return classify(event, "P1", "Alice")[0]


# ===========================================================================
# Test: kill log
# ===========================================================================
class TestKillLog:
    def test_insert_is_idempotent(self, db_engine):
        occ = _occurrence()
        assert save_kill_event(db_engine, occ) is True
        assert save_kill_event(db_engine, occ) is False
        assert len(get_recent_kills(db_engine, "Alice")) == 1

    def test_recent_kills_newest_first(self, db_engine):
        for minute in (5, 1, 9):
            save_kill_event(db_engine, _occurrence(f"E{minute}", minute=minute))
        rows = get_recent_kills(db_engine, "Alice")
        assert [r.event_id for r in rows] == ["E9", "E5", "E1"]

    def test_recent_kills_limit(self, db_engine):
        for minute in range(5):
            save_kill_event(db_engine, _occurrence(f"E{minute}", minute=minute))
        assert len(get_recent_kills(db_engine, "Alice", limit=2)) == 2

    def test_recent_kills_other_member_empty(self, db_engine):
        save_kill_event(db_engine, _occurrence())
        assert get_recent_kills(db_engine, "Carol") == []


# ===========================================================================
# Test: roster cache
# ===========================================================================
class TestRosterCache:
    def test_upsert_updates_names(self, db_engine):
        update_guild_members(db_engine, "G1", [GuildMemberInfo(id="P1", name="Alice")])
        update_guild_members(db_engine, "G1", [GuildMemberInfo(id="P1", name="Alicia")])
        members = get_guild_members(db_engine, "G1")
        assert [(m.id, m.name) for m in members] == [("P1", "Alicia")]

    def test_departed_members_retained_by_default(self, db_engine):
        update_guild_members(db_engine, "G1", [
            GuildMemberInfo(id="P1", name="Alice"),
            GuildMemberInfo(id="P2", name="Carol"),
        ])
        update_guild_members(db_engine, "G1", [GuildMemberInfo(id="P1", name="Alice")])
        assert len(get_guild_members(db_engine, "G1")) == 2

    def test_prune_removes_departed(self, db_engine):
        update_guild_members(db_engine, "G1", [
            GuildMemberInfo(id="P1", name="Alice"),
            GuildMemberInfo(id="P2", name="Carol"),
        ])
        written = update_guild_members(
            db_engine, "G1", [GuildMemberInfo(id="P1", name="Alice")], prune=True,
        )
        assert written == 1
        assert [m.name for m in get_guild_members(db_engine, "G1")] == ["Alice"]


# ===========================================================================
# Test: server settings
# ===========================================================================
class TestServerSettings:
    def test_defaults_without_row(self, db_engine):
        settings = get_server_settings(db_engine, 123)
        assert settings["language"] == "en"
        assert settings["killboard_channel"] is None

    def test_update_stores_snowflakes_as_text(self, db_engine):
        settings = update_server_settings(db_engine, 123, killboard_channel=987654321)
        assert settings["killboard_channel"] == "987654321"
        assert settings["language"] == "en"

    def test_partial_update_keeps_other_fields(self, db_engine):
        update_server_settings(db_engine, 123, language="de")
        settings = update_server_settings(db_engine, 123, builder_role=55)
        assert settings["language"] == "de"
        assert settings["builder_role"] == "55"

    def test_unknown_field_rejected(self, db_engine):
        with pytest.raises(ValueError):
            update_server_settings(db_engine, 123, colour="blue")

    def test_reset(self, db_engine):
        update_server_settings(db_engine, 123, language="fr", builder_role=1)
        settings = reset_server_settings(db_engine, 123)
        assert settings["language"] == "en"
        assert settings["builder_role"] is None


# ===========================================================================
# Test: tracked entities
# ===========================================================================
class TestTracking:
    def test_add_then_remove_by_name_leaves_empty(self, db_engine):
        assert add_tracked_entity(db_engine, 1, "P1", "Alice", EntityType.PLAYER) is True
        removed = remove_tracked_entity_by_name(db_engine, 1, "alice")
        assert removed is not None
        assert removed.entity_id == "P1"
        assert get_tracked_entities(db_engine, 1) == []

    def test_duplicate_add_is_noop(self, db_engine):
        add_tracked_entity(db_engine, 1, "G9", "Knights", "guild")
        assert add_tracked_entity(db_engine, 1, "G9", "Knights", "guild") is False
        assert len(get_tracked_entities(db_engine, 1)) == 1

    def test_same_entity_on_two_servers(self, db_engine):
        assert add_tracked_entity(db_engine, 1, "P1", "Alice", "player") is True
        assert add_tracked_entity(db_engine, 2, "P1", "Alice", "player") is True

    def test_invalid_type_rejected(self, db_engine):
        with pytest.raises(ValueError):
            add_tracked_entity(db_engine, 1, "P1", "Alice", "alliance")

    def test_remove_unknown(self, db_engine):
        assert remove_tracked_entity(db_engine, 1, "nope") is False
        assert remove_tracked_entity_by_name(db_engine, 1, "nobody") is None

    def test_clear(self, db_engine):
        add_tracked_entity(db_engine, 1, "P1", "Alice", "player")
        add_tracked_entity(db_engine, 1, "P2", "Carol", "player")
        add_tracked_entity(db_engine, 2, "P3", "Dave", "player")
        assert clear_tracked_entities(db_engine, 1) == 2
        assert len(get_tracked_entities(db_engine, 2)) == 1


# ===========================================================================
# Test: builds
# ===========================================================================
class TestBuilds:
    def test_create_and_get(self, db_engine):
        data = BuildData(name="Tank", weapon="T8_MACE", spells=["Q", " W ", ""])
        build = create_build(db_engine, 1, 42, data)
        assert build.id is not None

        found = get_build(db_engine, 1, "tank")
        assert found is not None
        assert found.weapon == "T8_MACE"
        assert found.creator_id == "42"
        assert found.spell_list == ["Q", "W"]

    def test_duplicate_name_rejected_without_mutation(self, db_engine, db_session):
        create_build(db_engine, 1, 42, BuildData(name="Tank", weapon="T8_MACE"))
        with pytest.raises(BuildExistsError):
            create_build(db_engine, 1, 7, BuildData(name="TANK", weapon="T4_SWORD"))

        rows = db_session.scalars(select(Build)).all()
        assert len(rows) == 1
        assert rows[0].weapon == "T8_MACE"

    def test_same_name_on_other_server(self, db_engine):
        create_build(db_engine, 1, 42, BuildData(name="Tank"))
        create_build(db_engine, 2, 42, BuildData(name="Tank"))
        assert len(list_builds(db_engine, 2)) == 1

    def test_blank_name_rejected(self, db_engine):
        with pytest.raises(ValueError):
            create_build(db_engine, 1, 42, BuildData(name="   "))

    def test_only_creator_can_remove(self, db_engine):
        create_build(db_engine, 1, 42, BuildData(name="Tank"))
        assert remove_build(db_engine, 1, "Tank", 7) is False
        assert remove_build(db_engine, 1, "tank", 42) is True
        assert get_build(db_engine, 1, "Tank") is None

    def test_spells_stored_as_json(self, db_engine):
        create_build(db_engine, 1, 42, BuildData(name="Healer", spells=["Heal", "Shield"]))
        with Session(db_engine) as session:
            raw = session.scalar(select(Build.spells))
        assert json.loads(raw) == ["Heal", "Shield"]
