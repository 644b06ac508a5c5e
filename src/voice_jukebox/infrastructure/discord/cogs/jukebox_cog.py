"""Slash-command cog for the shared jukebox.

Every command funnels through ``JukeboxService.run`` so chat and HTTP report
the same results; replies are ephemeral to keep the channel quiet.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING

import discord
from discord import app_commands
from discord.ext import commands

from voice_jukebox.domain.music.value_objects import PlayMode
from voice_jukebox.domain.shared.constants import QueueConstants
from voice_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages
from voice_jukebox.infrastructure.discord.guards.voice_guards import (
    get_member_voice_channel,
    reply_result,
    send_ephemeral,
)
from voice_jukebox.utils.reply import format_track_line, truncate

if TYPE_CHECKING:
    from ....application.commands.command_result import CommandResult
    from ....application.services.jukebox_service import JukeboxService
    from ....config.container import Container

logger = logging.getLogger(__name__)

MODE_CHOICES = [app_commands.Choice(name=mode.label, value=int(mode)) for mode in PlayMode]

EMBED_UPCOMING_LINES = 10


class JukeboxCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @property
    def service(self) -> JukeboxService:
        return self.container.jukebox_service

    async def _run(
        self, interaction: discord.Interaction, operation: Awaitable[CommandResult]
    ) -> None:
        result = await self.service.run(operation)
        await reply_result(interaction, result)

    # ─────────────────────────────────────────────────────────────────
    # Queueing
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="play", description="Play a song now (alias, link or search).")
    @app_commands.describe(query='e.g. "yt never gonna", a music link, or plain search text')
    async def play(self, interaction: discord.Interaction, query: str) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        await self._run(
            interaction, self.service.play_text(query, QueueConstants.TRACK_COMMAND_TOKENS)
        )

    @app_commands.command(name="add", description="Queue a song to play next.")
    @app_commands.describe(query='e.g. "wy 稻香", a music link, or plain search text')
    async def add(self, interaction: discord.Interaction, query: str) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        await self._run(
            interaction, self.service.add_text(query, QueueConstants.TRACK_COMMAND_TOKENS)
        )

    @app_commands.command(name="playlist", description="Load a playlist into the queue.")
    @app_commands.describe(
        query='Playlist link or search, optionally with a limit ("wy chill 10", "wy chill max")',
        append="Append to the current queue instead of replacing it",
    )
    async def playlist(
        self, interaction: discord.Interaction, query: str, append: bool = False
    ) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        await self._run(interaction, self.service.playlist_text(query, append=append))

    @app_commands.command(name="album", description="Load an album into the queue.")
    @app_commands.describe(
        query="Album link or search, optionally with a limit",
        append="Append to the current queue instead of replacing it",
    )
    async def album(
        self, interaction: discord.Interaction, query: str, append: bool = False
    ) -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        await self._run(interaction, self.service.album_text(query, append=append))

    @app_commands.command(name="clear", description="Empty the playlist and stop.")
    async def clear(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.clear_playlist())

    # ─────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="mode", description="Set the play mode.")
    @app_commands.choices(mode=MODE_CHOICES)
    async def mode(
        self, interaction: discord.Interaction, mode: app_commands.Choice[int]
    ) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.set_mode(mode.value))

    @app_commands.command(name="next", description="Skip to the next song in the playlist.")
    async def next_track(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.play_next_music())

    @app_commands.command(name="start", description="Start the playlist if nothing is playing.")
    async def start(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.start_playback())

    @app_commands.command(name="stop", description="Stop playback, keeping the playlist.")
    async def stop(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.stop())

    @app_commands.command(name="pause", description="Pause playback.")
    async def pause(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.set_paused(True))

    @app_commands.command(name="resume", description="Resume playback.")
    async def resume(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.set_paused(False))

    # ─────────────────────────────────────────────────────────────────
    # Information
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="status", description="Show what is playing and what comes next.")
    async def status(self, interaction: discord.Interaction) -> None:
        status = self.service.get_status()

        embed = discord.Embed(title=DiscordUIMessages.EMBED_STATUS, color=discord.Color.blurple())
        embed.add_field(
            name=DiscordUIMessages.FIELD_NOW_PLAYING,
            value=(
                format_track_line(status.current)
                if status.current
                else DiscordUIMessages.STATE_NOTHING_PLAYING
            ),
            inline=False,
        )
        if status.upcoming:
            lines = [
                f"{i}. {format_track_line(track)}"
                for i, track in enumerate(status.upcoming[:EMBED_UPCOMING_LINES], start=1)
            ]
            embed.add_field(
                name=DiscordUIMessages.FIELD_UP_NEXT, value="\n".join(lines), inline=False
            )
        embed.add_field(name=DiscordUIMessages.FIELD_MODE, value=status.mode)
        embed.add_field(name=DiscordUIMessages.FIELD_PAUSED, value="yes" if status.paused else "no")
        embed.add_field(name=DiscordUIMessages.FIELD_LISTENERS, value=str(status.listeners))

        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="list", description="Show the playlist.")
    async def list_playlist(self, interaction: discord.Interaction) -> None:
        summary = self.service.playlist_summary()
        if not summary:
            await send_ephemeral(interaction, DiscordUIMessages.STATE_PLAYLIST_EMPTY)
            return

        embed = discord.Embed(
            title=DiscordUIMessages.EMBED_PLAYLIST,
            description=truncate(summary, 4000),
            color=discord.Color.blurple(),
        )
        await interaction.response.send_message(embed=embed, ephemeral=True)

    @app_commands.command(name="providers", description="Show music providers and login state.")
    async def providers(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        statuses = await self.service.get_provider_statuses()

        embed = discord.Embed(title=DiscordUIMessages.EMBED_PROVIDERS, color=discord.Color.blurple())
        for status in statuses:
            state = "enabled" if status.enabled else "disabled"
            user = status.user_name or DiscordUIMessages.NOT_LOGGED_IN
            embed.add_field(
                name=f"{status.name} ({status.tag})",
                value=f"{state} · {', '.join(status.aliases)}\n{status.server}\n{user}",
                inline=False,
            )
        await interaction.followup.send(embed=embed, ephemeral=True)

    # ─────────────────────────────────────────────────────────────────
    # Administration
    # ─────────────────────────────────────────────────────────────────

    @app_commands.command(name="login", description="Log in to a music provider.")
    @app_commands.describe(
        provider="Provider tag or alias (e.g. wy)",
        args='Provider specific, e.g. "cookie <value>" or "phone <number> <password>"',
    )
    async def login(self, interaction: discord.Interaction, provider: str, args: str = "") -> None:
        await interaction.response.defer(ephemeral=True, thinking=True)
        await self._run(interaction, self.service.login(provider, args.split()))

    @app_commands.command(name="here", description="Move the jukebox into your voice channel.")
    async def here(self, interaction: discord.Interaction) -> None:
        channel = await get_member_voice_channel(interaction)
        if channel is None:
            return
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.move_to(channel.id, channel.name))

    @app_commands.command(name="reload", description="Reload configuration from the environment.")
    @app_commands.default_permissions(manage_guild=True)
    async def reload(self, interaction: discord.Interaction) -> None:
        await interaction.response.defer(ephemeral=True)
        await self._run(interaction, self.service.reload())


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(JukeboxCog(bot, container))
