"""
killboard.bot.cogs.market — Market & Item Commands
===================================================

- /price      — current market prices for an item (name or id)
- /premium    — premium subscription prices
- /gold       — live gold price
- /image      — rendered item icon
- /randomator — roll a random weapon
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from killboard.constants import INFO_COLOR, PREMIUM_COLOR
from killboard.services.albion_client import AlbionAPIError, AlbionClient
from killboard.services.embeds import build_gold_embed, build_premium_embed, build_price_embed
from killboard.services.items import find_item_id, find_item_suggestions, random_weapon

if TYPE_CHECKING:
    from killboard.bot.core import KillboardBot

logger = logging.getLogger(__name__)


class Market(commands.Cog, name="Market"):
    """Albion Data Project prices and item helpers."""

    def __init__(self, bot: KillboardBot) -> None:
        self.bot = bot

    # -------------------------------------------------------------------
    # /price
    # -------------------------------------------------------------------
    @app_commands.command(name="price", description="Get current market prices for an item")
    @app_commands.describe(item="Item name or item id (e.g. T4_SWORD)")
    async def price(self, interaction: discord.Interaction, item: str) -> None:
        await interaction.response.defer()

        item_id = find_item_id(item)
        if item_id is None:
            suggestions = find_item_suggestions(item)
            if not suggestions:
                await interaction.followup.send(
                    f'Item "{item}" not found. Try exact names like "chestnut planks" '
                    'or item ids like "T4_SWORD".'
                )
                return
            embed = discord.Embed(
                title=f'\U0001f50d Did you mean one of these? (search: "{item}")',
                description="\n".join(f"**{name}** — `{iid}`" for name, iid in suggestions),
                color=INFO_COLOR,
            )
            embed.set_footer(text="Use the exact name or the item id")
            await interaction.followup.send(embed=embed)
            return

        try:
            prices = await self.bot.albion.item_prices(item_id)
        except AlbionAPIError as exc:
            logger.warning("Price lookup for %s failed: %s", item_id, exc)
            await interaction.followup.send("Error fetching price data. Please try again later.")
            return

        embed = build_price_embed(item, prices)
        embed.set_footer(text=f"Item ID: {item_id}")
        await interaction.followup.send(embed=embed)

    @price.autocomplete("item")
    async def _item_autocomplete(
        self, interaction: discord.Interaction, current: str,
    ) -> list[app_commands.Choice[str]]:
        return [
            app_commands.Choice(name=name, value=name)
            for name, _ in find_item_suggestions(current)
        ]

    # -------------------------------------------------------------------
    # /premium
    # -------------------------------------------------------------------
    @app_commands.command(name="premium", description="Get current premium prices")
    async def premium(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            prices = await self.bot.albion.item_prices("PREMIUM")
        except AlbionAPIError as exc:
            logger.warning("Premium price lookup failed: %s", exc)
            await interaction.followup.send("Error fetching premium prices")
            return
        await interaction.followup.send(embed=build_premium_embed(prices))

    # -------------------------------------------------------------------
    # /gold
    # -------------------------------------------------------------------
    @app_commands.command(name="gold", description="Get the live gold price")
    async def gold(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            history = await self.bot.albion.gold_prices(count=1)
        except AlbionAPIError as exc:
            logger.warning("Gold price lookup failed: %s", exc)
            await interaction.followup.send("Error fetching gold price")
            return

        if not history:
            await interaction.followup.send("No gold price data available")
            return
        await interaction.followup.send(embed=build_gold_embed(history[0]))

    # -------------------------------------------------------------------
    # /image
    # -------------------------------------------------------------------
    @app_commands.command(name="image", description="Show an item's icon")
    @app_commands.describe(item="Item name or item id", quality="Item quality (1-5)")
    async def image(
        self,
        interaction: discord.Interaction,
        item: str,
        quality: app_commands.Range[int, 1, 5] = 1,
    ) -> None:
        item_id = find_item_id(item)
        if item_id is None:
            await interaction.response.send_message(
                f'Item "{item}" not found. Try exact names like "chestnut planks" '
                'or item ids like "T4_SWORD".'
            )
            return

        embed = discord.Embed(
            title=f"\U0001f5bc️ {item}",
            description=f"Quality: {quality} | Item ID: {item_id}",
            color=INFO_COLOR,
        )
        embed.set_image(url=AlbionClient.item_image_url(item_id, quality=quality))
        await interaction.response.send_message(embed=embed)

    # -------------------------------------------------------------------
    # /randomator
    # -------------------------------------------------------------------
    @app_commands.command(name="randomator", description="Roll a random weapon")
    async def randomator(self, interaction: discord.Interaction) -> None:
        item_id, weapon, tier = random_weapon()
        embed = discord.Embed(title="\U0001f3b2 Random Build Generator", color=PREMIUM_COLOR)
        embed.add_field(name="Weapon", value=item_id, inline=True)
        embed.add_field(name="Type", value=weapon, inline=True)
        embed.add_field(name="Tier", value=tier, inline=True)
        embed.set_thumbnail(url=AlbionClient.item_image_url(item_id, size=64))
        embed.set_footer(text="Use /new-build to save this as a custom build!")
        embed.timestamp = discord.utils.utcnow()
        await interaction.response.send_message(embed=embed)


async def setup(bot: KillboardBot) -> None:
    await bot.add_cog(Market(bot))
