"""
killboard.bot.cogs.builds — Custom Build Commands
==================================================

- /build        — show a saved build
- /new-build    — save a build (builder role only, when one is configured)
- /remove-build — delete one of your own builds
- /builds       — list the server's builds
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from killboard.database.engine import run_db
from killboard.services.build_service import (
    BuildData,
    BuildExistsError,
    create_build,
    get_build,
    list_builds,
    remove_build,
)
from killboard.services.embeds import (
    build_build_embed,
    build_build_list_embed,
    build_success_embed,
)
from killboard.services.settings_service import get_server_settings

if TYPE_CHECKING:
    from killboard.bot.core import KillboardBot

logger = logging.getLogger(__name__)


def parse_spells(raw: str | None) -> list[str]:
    """Split a comma-separated spell list, keeping order."""
    if not raw:
        return []
    return [s.strip() for s in raw.split(",") if s.strip()]


class Builds(commands.Cog, name="Builds"):
    """User-authored equipment loadouts."""

    def __init__(self, bot: KillboardBot) -> None:
        self.bot = bot

    async def _creator_name(self, creator_id: str) -> str:
        user = self.bot.get_user(int(creator_id))
        if user is None:
            try:
                user = await self.bot.fetch_user(int(creator_id))
            except discord.HTTPException:
                return "Unknown"
        return user.display_name

    # -------------------------------------------------------------------
    # /build
    # -------------------------------------------------------------------
    @app_commands.command(name="build", description="Show a saved build")
    @app_commands.describe(name="Build name")
    @app_commands.guild_only()
    async def build(self, interaction: discord.Interaction, name: str) -> None:
        await interaction.response.defer()
        try:
            found = await run_db(get_build, self.bot.engine, interaction.guild_id, name)
        except Exception:
            logger.exception("Build lookup failed for %r", name)
            await interaction.followup.send("Error fetching build data")
            return

        if found is None:
            await interaction.followup.send(f'Build "{name}" not found')
            return
        creator = await self._creator_name(found.creator_id)
        await interaction.followup.send(embed=build_build_embed(found, creator))

    @build.autocomplete("name")
    async def _build_autocomplete(
        self, interaction: discord.Interaction, current: str,
    ) -> list[app_commands.Choice[str]]:
        builds = await run_db(list_builds, self.bot.engine, interaction.guild_id)
        return [
            app_commands.Choice(name=b.build_name, value=b.build_name)
            for b in builds
            if current.lower() in b.build_name.lower()
        ][:25]

    # -------------------------------------------------------------------
    # /new-build
    # -------------------------------------------------------------------
    @app_commands.command(name="new-build", description="Create a custom build")
    @app_commands.describe(
        name="Build name",
        weapon="Main-hand weapon",
        off_hand="Off-hand item",
        helmet="Helmet",
        armor="Armor",
        shoes="Shoes",
        cape="Cape",
        bag="Bag",
        mount="Mount",
        food="Food",
        potion="Potion",
        spells="Spells, comma-separated in slot order",
        description="Build description",
    )
    @app_commands.guild_only()
    async def new_build(
        self,
        interaction: discord.Interaction,
        name: str,
        weapon: str,
        helmet: str | None = None,
        armor: str | None = None,
        shoes: str | None = None,
        off_hand: str | None = None,
        cape: str | None = None,
        bag: str | None = None,
        mount: str | None = None,
        food: str | None = None,
        potion: str | None = None,
        spells: str | None = None,
        description: str | None = None,
    ) -> None:
        await interaction.response.defer()

        settings = await run_db(get_server_settings, self.bot.engine, interaction.guild_id)
        builder_role = settings["builder_role"]
        if builder_role and not any(
            str(role.id) == builder_role for role in getattr(interaction.user, "roles", [])
        ):
            await interaction.followup.send(
                f"🔒 Only members with <@&{builder_role}> can create builds.",
                ephemeral=True,
            )
            return

        data = BuildData(
            name=name,
            weapon=weapon,
            off_hand=off_hand,
            helmet=helmet,
            armor=armor,
            shoes=shoes,
            cape=cape,
            bag=bag,
            mount=mount,
            food=food,
            potion=potion,
            spells=parse_spells(spells),
            description=description,
        )
        try:
            saved = await run_db(
                create_build, self.bot.engine, interaction.guild_id, interaction.user.id, data,
            )
        except BuildExistsError:
            await interaction.followup.send(f'Build "{name}" already exists')
            return
        except ValueError as exc:
            await interaction.followup.send(f"❌ {exc}")
            return
        except Exception:
            logger.exception("Creating build %r failed", name)
            await interaction.followup.send("Error creating build")
            return

        embed = build_success_embed("Build Created", f'Build "{saved.build_name}" has been saved!')
        embed.add_field(name="Build ID", value=str(saved.id), inline=True)
        embed.add_field(name="Creator", value=interaction.user.display_name, inline=True)
        await interaction.followup.send(embed=embed)

    # -------------------------------------------------------------------
    # /remove-build
    # -------------------------------------------------------------------
    @app_commands.command(name="remove-build", description="Delete one of your builds")
    @app_commands.describe(name="Build name")
    @app_commands.guild_only()
    async def remove_build_cmd(self, interaction: discord.Interaction, name: str) -> None:
        await interaction.response.defer()
        try:
            removed = await run_db(
                remove_build, self.bot.engine, interaction.guild_id, name, interaction.user.id,
            )
        except Exception:
            logger.exception("Removing build %r failed", name)
            await interaction.followup.send("Error removing build")
            return

        if removed:
            await interaction.followup.send(
                embed=build_success_embed("Build Removed", f'Build "{name}" has been deleted')
            )
        else:
            await interaction.followup.send(
                f"Build \"{name}\" not found or you don't have permission to delete it"
            )

    # -------------------------------------------------------------------
    # /builds
    # -------------------------------------------------------------------
    @app_commands.command(name="builds", description="List this server's builds")
    @app_commands.guild_only()
    async def builds(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer()
        try:
            rows = await run_db(list_builds, self.bot.engine, interaction.guild_id)
        except Exception:
            logger.exception("Listing builds failed for server %s", interaction.guild_id)
            await interaction.followup.send("Error fetching builds")
            return
        await interaction.followup.send(embed=build_build_list_embed(rows))


async def setup(bot: KillboardBot) -> None:
    await bot.add_cog(Builds(bot))
