"""
tests/test_albion_client.py — Albion API Client
================================================

All requests are answered by an ``httpx.MockTransport``.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from killboard.services.albion_client import AlbionAPIError, AlbionClient
from conftest import make_event_payload


# Helper to run async tests without pytest-asyncio
def run_async(coro):
    """Run an async coroutine in a new event loop."""
    return asyncio.get_event_loop_policy().new_event_loop().run_until_complete(coro)


def _client(routes: dict[str, object], seen: list | None = None) -> AlbionClient:
    """Client whose transport answers by URL path."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        answer = routes.get(request.url.path)
        if answer is None:
            return httpx.Response(404)
        if isinstance(answer, httpx.Response):
            return answer
        return httpx.Response(200, json=answer)

    return AlbionClient(
        transport=httpx.MockTransport(handler),
        gameinfo_url="https://gi.test/api/gameinfo",
        data_url="https://data.test/api/v2/stats",
    )


class TestGameinfo:
    def test_search(self):
        seen = []
        client = _client({
            "/api/gameinfo/search": {
                "players": [{"Id": "P1", "Name": "Alice", "GuildName": "Knights"}],
                "guilds": None,
            },
        }, seen)
        result = run_async(client.search("Alice"))
        assert result.players[0].id == "P1"
        assert result.guilds == []
        assert seen[0].url.params["q"] == "Alice"

    def test_guild_members(self):
        client = _client({
            "/api/gameinfo/guilds/G1/members": [
                {"Id": "P1", "Name": "Alice"},
                {"Id": "P2", "Name": "Carol"},
            ],
        })
        members = run_async(client.guild_members("G1"))
        assert [m.name for m in members] == ["Alice", "Carol"]

    def test_guild_detail_includes_members(self):
        client = _client({
            "/api/gameinfo/guilds/G1": {"Id": "G1", "Name": "Knights", "MemberCount": 2},
            "/api/gameinfo/guilds/G1/members": [{"Id": "P1", "Name": "Alice"}],
        })
        guild = run_async(client.guild_detail("G1"))
        assert guild.name == "Knights"
        assert [m.id for m in guild.members] == ["P1"]


class TestPlayerEvents:
    def test_merges_dedups_and_sorts(self):
        seen = []
        kills = [
            make_event_payload(1, ("P1", "Alice"), ("X", "Bob"), timestamp="2030-01-01T10:00:00Z"),
            make_event_payload(3, ("P1", "Alice"), ("Y", "Eve"), timestamp="2030-01-01T12:00:00Z"),
        ]
        deaths = [
            make_event_payload(2, ("X", "Bob"), ("P1", "Alice"), timestamp="2030-01-01T11:00:00Z"),
            make_event_payload(3, ("P1", "Alice"), ("Y", "Eve"), timestamp="2030-01-01T12:00:00Z"),
        ]
        client = _client({
            "/api/gameinfo/players/P1/kills": kills,
            "/api/gameinfo/players/P1/deaths": deaths,
        }, seen)

        events = run_async(client.player_events("P1", limit=10))

        assert [e.event_id for e in events] == ["3", "2", "1"]
        assert seen[0].url.params["limit"] == "10"
        assert seen[0].url.params["offset"] == "0"

    def test_truncates_to_limit(self):
        kills = [
            make_event_payload(i, ("P1", "A"), ("X", "B"), timestamp=f"2030-01-01T10:{i:02d}:00Z")
            for i in range(5)
        ]
        client = _client({
            "/api/gameinfo/players/P1/kills": kills,
            "/api/gameinfo/players/P1/deaths": [],
        })
        events = run_async(client.player_events("P1", limit=2))
        assert [e.event_id for e in events] == ["4", "3"]

    def test_malformed_entries_skipped(self):
        good = make_event_payload(1, ("P1", "Alice"), ("X", "Bob"))
        broken = {"EventId": 2, "Killer": None, "TimeStamp": "2030-01-01T12:00:00Z"}
        client = _client({
            "/api/gameinfo/players/P1/kills": [broken, good],
            "/api/gameinfo/players/P1/deaths": [],
        })
        events = run_async(client.player_events("P1"))
        assert [e.event_id for e in events] == ["1"]


class TestErrors:
    def test_rate_limit(self):
        client = _client({"/api/gameinfo/guilds/G1/members": httpx.Response(429)})
        with pytest.raises(AlbionAPIError) as excinfo:
            run_async(client.guild_members("G1"))
        assert excinfo.value.rate_limited is True
        assert excinfo.value.status_code == 429

    def test_non_json_body(self):
        client = _client({"/api/gameinfo/search": httpx.Response(200, content=b"<html>")})
        with pytest.raises(AlbionAPIError):
            run_async(client.search("x"))

    def test_non_list_roster(self):
        client = _client({"/api/gameinfo/guilds/G1/members": {"error": "nope"}})
        with pytest.raises(AlbionAPIError):
            run_async(client.guild_members("G1"))

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        client = AlbionClient(transport=httpx.MockTransport(handler))
        with pytest.raises(AlbionAPIError) as excinfo:
            run_async(client.search("x"))
        assert excinfo.value.status_code is None


class TestMarketAndStatus:
    def test_item_prices(self):
        seen = []
        client = _client({
            "/api/v2/stats/prices/T4_SWORD.json": [
                {"item_id": "T4_SWORD", "city": "Caerleon", "sell_price_min": 1200,
                 "sell_price_min_date": "2030-01-01T00:00:00"},
            ],
        }, seen)
        prices = run_async(client.item_prices("T4_SWORD", locations=["Caerleon", "Martlock"]))
        assert prices[0].sell_price_min == 1200
        assert seen[0].url.params["locations"] == "Caerleon,Martlock"

    def test_gold(self):
        client = _client({
            "/api/v2/stats/gold.json": [{"price": 4321, "timestamp": "2030-01-01T00:00:00"}],
        })
        history = run_async(client.gold_prices())
        assert history[0].price == 4321

    def test_server_status_with_bom(self, monkeypatch):
        import killboard.services.albion_client as client_mod

        monkeypatch.setitem(client_mod.SERVER_STATUS_URLS, "Test", "https://status.test/")
        body = b"\xef\xbb\xbf" + json.dumps({"status": "online", "message": "All good"}).encode()
        client = _client({"/": httpx.Response(200, content=body)})
        status = run_async(client.server_status("Test"))
        assert status.online is True
        assert status.message == "All good"

    def test_item_image_url(self):
        url = AlbionClient.item_image_url("T4_SWORD", quality=3)
        assert url.endswith("/item/T4_SWORD.png?quality=3&size=217")
