"""
killboard.services.albion_client — Albion Online API Client
============================================================

Thin async wrapper over the public Albion endpoints (gameinfo, the Albion
Data Project market API, the render service and the server-status pages).

Every response is validated against :mod:`killboard.engine.schemas` before
it leaves this module.  Transport errors, non-200 answers (including 429
rate limits) and unparseable bodies all surface as :class:`AlbionAPIError`
so callers have one thing to catch.  Inside event feeds, a single malformed
entry is logged and dropped rather than failing the whole page.

One :class:`httpx.AsyncClient` is shared for the lifetime of the bot, with
an explicit per-request timeout so a hung upstream call cannot stall the
poller forever.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from killboard.constants import (
    DATA_API,
    GAMEINFO_API,
    MARKET_CITIES,
    RENDER_API,
    SERVER_STATUS_URLS,
)
from killboard.engine.schemas import (
    GoldPrice,
    GuildDetail,
    GuildMemberInfo,
    KillboardEvent,
    PlayerDetail,
    PriceQuote,
    SearchResult,
    ServerStatus,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

USER_AGENT = "killboard-bot/0.1"


class AlbionAPIError(Exception):
    """An upstream call failed or returned something unusable."""

    def __init__(self, message: str, *, status_code: int | None = None, url: str | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url

    @property
    def rate_limited(self) -> bool:
        return self.status_code == 429


class AlbionClient:
    """Async client for the Albion Online public APIs.

    Parameters
    ----------
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional custom transport (tests pass an ``httpx.MockTransport``).
        Defaults to a transport with one connect retry.
    """

    def __init__(
        self,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        gameinfo_url: str = GAMEINFO_API,
        data_url: str = DATA_API,
    ) -> None:
        self.gameinfo_url = gameinfo_url.rstrip("/")
        self.data_url = data_url.rstrip("/")
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport or httpx.AsyncHTTPTransport(retries=1),
            headers={"User-Agent": USER_AGENT},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> AlbionClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    # -------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------
    async def _get_json(self, url: str, params: dict | None = None) -> Any:
        try:
            resp = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise AlbionAPIError(f"Request to {url} failed: {exc!r}", url=url) from exc

        if resp.status_code != 200:
            raise AlbionAPIError(
                f"{url} answered HTTP {resp.status_code}",
                status_code=resp.status_code,
                url=url,
            )
        try:
            # The status pages prefix their JSON with a UTF-8 BOM.
            return json.loads(resp.content.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise AlbionAPIError(f"{url} returned a non-JSON body", url=url) from exc

    @staticmethod
    def _parse(model: type[M], payload: Any, url: str) -> M:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            raise AlbionAPIError(
                f"{url} returned a malformed {model.__name__}: {exc.error_count()} errors",
                url=url,
            ) from exc

    @staticmethod
    def _parse_list(model: type[M], payload: Any, url: str) -> list[M]:
        """Validate each entry of a JSON array, dropping malformed entries."""
        if payload is None:
            return []
        if not isinstance(payload, list):
            raise AlbionAPIError(f"{url} returned {type(payload).__name__}, expected a list", url=url)

        items: list[M] = []
        for raw in payload:
            try:
                items.append(model.model_validate(raw))
            except ValidationError as exc:
                ident = raw.get("EventId") or raw.get("Id") if isinstance(raw, dict) else None
                logger.warning(
                    "Skipping malformed %s from %s (id=%s): %s",
                    model.__name__, url, ident, exc.errors()[0]["msg"],
                )
        return items

    # -------------------------------------------------------------------
    # Gameinfo
    # -------------------------------------------------------------------
    async def search(self, query: str) -> SearchResult:
        url = f"{self.gameinfo_url}/search"
        return self._parse(SearchResult, await self._get_json(url, {"q": query}), url)

    async def player_detail(self, player_id: str) -> PlayerDetail:
        url = f"{self.gameinfo_url}/players/{player_id}"
        return self._parse(PlayerDetail, await self._get_json(url), url)

    async def guild_members(self, guild_id: str) -> list[GuildMemberInfo]:
        """The current roster of *guild_id*."""
        url = f"{self.gameinfo_url}/guilds/{guild_id}/members"
        return self._parse_list(GuildMemberInfo, await self._get_json(url), url)

    async def guild_detail(self, guild_id: str) -> GuildDetail:
        """Guild info plus its roster."""
        url = f"{self.gameinfo_url}/guilds/{guild_id}"
        payload = await self._get_json(url)
        if isinstance(payload, dict):
            payload = {**payload, "members": await self.guild_members(guild_id)}
        return self._parse(GuildDetail, payload, url)

    async def player_kills(self, player_id: str, limit: int = 10) -> list[KillboardEvent]:
        url = f"{self.gameinfo_url}/players/{player_id}/kills"
        payload = await self._get_json(url, {"limit": limit, "offset": 0})
        return self._parse_list(KillboardEvent, payload, url)

    async def player_deaths(self, player_id: str, limit: int = 10) -> list[KillboardEvent]:
        url = f"{self.gameinfo_url}/players/{player_id}/deaths"
        payload = await self._get_json(url, {"limit": limit, "offset": 0})
        return self._parse_list(KillboardEvent, payload, url)

    async def player_events(self, player_id: str, limit: int = 10) -> list[KillboardEvent]:
        """Recent kills and deaths of *player_id*, newest first, at most *limit*."""
        kills = await self.player_kills(player_id, limit)
        deaths = await self.player_deaths(player_id, limit)

        merged: dict[str, KillboardEvent] = {}
        for event in (*kills, *deaths):
            merged.setdefault(event.event_id, event)
        ordered = sorted(merged.values(), key=lambda e: e.timestamp, reverse=True)
        return ordered[:limit]

    # -------------------------------------------------------------------
    # Market data
    # -------------------------------------------------------------------
    async def item_prices(
        self, item_id: str, locations: Iterable[str] = MARKET_CITIES,
    ) -> list[PriceQuote]:
        url = f"{self.data_url}/prices/{item_id}.json"
        payload = await self._get_json(url, {"locations": ",".join(locations)})
        return self._parse_list(PriceQuote, payload, url)

    async def gold_prices(self, count: int = 1) -> list[GoldPrice]:
        url = f"{self.data_url}/gold.json"
        return self._parse_list(GoldPrice, await self._get_json(url, {"count": count}), url)

    # -------------------------------------------------------------------
    # Misc
    # -------------------------------------------------------------------
    async def server_status(self, region: str) -> ServerStatus:
        url = SERVER_STATUS_URLS[region]
        return self._parse(ServerStatus, await self._get_json(url), url)

    @staticmethod
    def item_image_url(item_id: str, quality: int = 1, size: int = 217) -> str:
        return f"{RENDER_API}/item/{item_id}.png?quality={quality}&size={size}"
