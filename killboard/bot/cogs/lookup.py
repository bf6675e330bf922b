"""
killboard.bot.cogs.lookup — Player & Guild Lookup
==================================================

Both commands search by name, take the first hit and fetch its detail
record from the gameinfo API.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from killboard.services.albion_client import AlbionAPIError
from killboard.services.embeds import build_guild_embed, build_player_embed

if TYPE_CHECKING:
    from killboard.bot.core import KillboardBot

logger = logging.getLogger(__name__)


class Lookup(commands.Cog, name="Lookup"):
    """Albion player and guild information."""

    def __init__(self, bot: KillboardBot) -> None:
        self.bot = bot

    @app_commands.command(name="player", description="Look up an Albion player")
    @app_commands.describe(name="Character name")
    async def player(self, interaction: discord.Interaction, name: str) -> None:
        await interaction.response.defer()
        try:
            results = await self.bot.albion.search(name)
            if not results.players:
                await interaction.followup.send(f'Player "{name}" not found')
                return
            detail = await self.bot.albion.player_detail(results.players[0].id)
        except AlbionAPIError as exc:
            logger.warning("Player lookup for %r failed: %s", name, exc)
            await interaction.followup.send("Error fetching player data")
            return
        await interaction.followup.send(embed=build_player_embed(detail))

    @app_commands.command(name="guild", description="Look up an Albion guild")
    @app_commands.describe(name="Guild name")
    async def guild(self, interaction: discord.Interaction, name: str) -> None:
        await interaction.response.defer()
        try:
            results = await self.bot.albion.search(name)
            if not results.guilds:
                await interaction.followup.send(f'Guild "{name}" not found')
                return
            detail = await self.bot.albion.guild_detail(results.guilds[0].id)
        except AlbionAPIError as exc:
            logger.warning("Guild lookup for %r failed: %s", name, exc)
            await interaction.followup.send("Error fetching guild data")
            return
        await interaction.followup.send(embed=build_guild_embed(detail))


async def setup(bot: KillboardBot) -> None:
    await bot.add_cog(Lookup(bot))
