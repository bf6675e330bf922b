"""
killboard.bot.core — Bot Instance & Cog Loader
===============================================

Defines :class:`KillboardBot`, a ``commands.Bot`` subclass that:

1. Stores the shared config (``bot.cfg``), DB engine (``bot.engine``),
   Albion API client (``bot.albion``) and the event poller
   (``bot.poller``) so every Cog can reach them via ``self.bot.*``.
2. Loads every Cog listed in :data:`EXTENSIONS`.
3. Syncs slash commands on ready: to ``DEV_GUILD_ID`` when that env var
   is set, globally otherwise.
4. Releases the HTTP client and the storage handle on shutdown.
"""

from __future__ import annotations

import logging
import os

import discord
from discord.ext import commands
from sqlalchemy import Engine

from killboard.config import KillboardConfig
from killboard.services.albion_client import AlbionClient
from killboard.services.notifier import ChannelNotifier
from killboard.services.poller import EventPoller

logger = logging.getLogger(__name__)

# Cog modules to load on startup.
EXTENSIONS: list[str] = [
    "killboard.bot.cogs.killboard",
    "killboard.bot.cogs.builds",
    "killboard.bot.cogs.market",
    "killboard.bot.cogs.lookup",
    "killboard.bot.cogs.server",
    "killboard.bot.cogs.tasks",
]


class KillboardBot(commands.Bot):
    """The killboard bot: shared config, store, API client and poller.

    Parameters
    ----------
    cfg:
        The parsed :class:`KillboardConfig`.
    engine:
        A SQLAlchemy :class:`Engine` for the local store.
    albion:
        Optional pre-built API client; one is created from *cfg* otherwise.
    """

    def __init__(
        self,
        cfg: KillboardConfig,
        engine: Engine,
        albion: AlbionClient | None = None,
    ) -> None:
        # Slash commands only; no privileged intents needed.
        intents = discord.Intents.default()

        super().__init__(
            command_prefix=cfg.bot_prefix,
            intents=intents,
            description="Albion Online killboard, market and build tracker",
        )

        # Cogs reach these through self.bot.*
        self.cfg = cfg
        self.engine = engine
        self.albion = albion or AlbionClient(timeout=cfg.request_timeout_seconds)
        self.notifier = ChannelNotifier(self, cfg.killboard_channel_id)
        self.poller = EventPoller(
            self.albion,
            engine,
            self.notifier,
            guild_id=cfg.tracked_guild_id,
            event_page_size=cfg.event_page_size,
            member_delay=cfg.member_delay_seconds,
            key_capacity=cfg.processed_key_cap,
            prune_departed=cfg.prune_departed_members,
        )

    # -----------------------------------------------------------------------
    # Lifecycle hooks
    # -----------------------------------------------------------------------
    async def setup_hook(self) -> None:
        """Load every cog in :data:`EXTENSIONS` before connecting.

        A cog that fails to import is logged and skipped.
        """
        for ext in EXTENSIONS:
            try:
                await self.load_extension(ext)
                logger.info("Loaded extension: %s", ext)
            except Exception as exc:
                logger.error("Failed to load extension %s: %s", ext, exc)

    async def on_ready(self) -> None:
        """Sync slash commands once the gateway session is ready."""
        assert self.user is not None
        logger.info("Logged in as %s (ID: %s)", self.user.name, self.user.id)

        # --- Slash-command sync ---------------------------------------------
        dev_guild_id = os.getenv("DEV_GUILD_ID")
        if dev_guild_id:
            guild = discord.Object(id=int(dev_guild_id))
            self.tree.copy_global_to(guild=guild)
            synced = await self.tree.sync(guild=guild)
            logger.info("Synced %d commands to dev guild %s", len(synced), dev_guild_id)
        else:
            synced = await self.tree.sync()
            logger.info("Synced %d commands globally", len(synced))

        if not self.cfg.killboard_channel_id:
            logger.warning("killboard_channel_id is not set — the kill feed will stay idle")

    async def close(self) -> None:
        """Graceful shutdown — stop the poller, close HTTP and DB handles."""
        logger.info("Bot shutting down…")
        await super().close()
        await self.albion.aclose()
        self.engine.dispose()
        logger.info("Storage handle released.")
