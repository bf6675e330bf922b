"""
tests/test_embeds.py — Embed Builders
======================================
"""

from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace

from killboard.constants import DEATH_COLOR, KILL_COLOR
from killboard.engine.occurrences import classify
from killboard.engine.schemas import GoldPrice, KillboardEvent, PriceQuote
from killboard.services.embeds import (
    build_build_list_embed,
    build_gold_embed,
    build_occurrence_embed,
    build_price_embed,
    build_recent_kills_embed,
)
from conftest import make_event_payload


def _event() -> KillboardEvent:
    payload = make_event_payload("E1", ("P1", "Alice"), ("P2", "Bob"), fame=12345)
    payload["Victim"]["GuildName"] = "Raiders"
    return KillboardEvent.model_validate(payload)


class TestOccurrenceEmbed:
    def test_kill_is_green(self):
        embed = build_occurrence_embed(classify(_event(), "P1", "Alice")[0])
        assert embed.color.value == KILL_COLOR
        assert "Alice killed Bob" in embed.title
        assert embed.url.endswith("/E1")

    def test_death_is_red(self):
        embed = build_occurrence_embed(classify(_event(), "P2", "Bob")[0])
        assert embed.color.value == DEATH_COLOR
        assert "Bob was killed by Alice" in embed.title

    def test_fields(self):
        embed = build_occurrence_embed(classify(_event(), "P1", "Alice")[0])
        fields = {f.name: f.value for f in embed.fields}
        assert fields["Fame"] == "12,345"
        assert "[Raiders]" in fields["Victim"]


class TestMarketEmbeds:
    def test_prices_sorted_cheapest_first(self):
        prices = [
            PriceQuote(item_id="T4_SWORD", city="Martlock", sell_price_min=900),
            PriceQuote(item_id="T4_SWORD", city="Caerleon", sell_price_min=500),
            PriceQuote(item_id="T4_SWORD", city="Lymhurst", sell_price_min=0),
        ]
        embed = build_price_embed("Sword", prices)
        assert [f.name for f in embed.fields] == ["Caerleon", "Martlock"]

    def test_no_orders(self):
        embed = build_price_embed("Sword", [PriceQuote(item_id="X", city="Caerleon")])
        assert embed.description == "No current market orders found"

    def test_gold(self):
        embed = build_gold_embed(GoldPrice(price=4500, timestamp=datetime(2030, 1, 1, tzinfo=UTC)))
        assert embed.fields[0].value == "4,500 silver"


class TestListEmbeds:
    def test_recent_kills_summary(self):
        rows = [
            SimpleNamespace(is_kill=True, victim_name="Bob", killer_name="Alice", fame=10),
            SimpleNamespace(is_kill=False, victim_name="Alice", killer_name="Eve", fame=20),
        ]
        embed = build_recent_kills_embed("Alice", rows)
        assert "Bob" in embed.description
        assert "Eve" in embed.description
        assert embed.footer.text.startswith("1 kills / 1 deaths")

    def test_empty_builds(self):
        assert "/new-build" in build_build_list_embed([]).description
