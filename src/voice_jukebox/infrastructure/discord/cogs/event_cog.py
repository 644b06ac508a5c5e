"""Discord event listeners that feed voice presence into the event bus."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from voice_jukebox.domain.shared.events import (
    DomainEvent,
    MemberEnteredChannel,
    MemberLeftChannel,
    MemberMovedChannel,
)
from voice_jukebox.domain.shared.messages import ErrorMessages

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class EventCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._resumed_logged_once = False

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_ready(self) -> None:
        # Reconnects replay on_ready; the listener set may have drifted meanwhile
        await self.container.presence_tracker.resync()

    @commands.Cog.listener()
    async def on_disconnect(self) -> None:
        logger.warning("WebSocket disconnected")

    @commands.Cog.listener()
    async def on_resumed(self) -> None:
        if not self._resumed_logged_once:
            logger.info("WebSocket session resumed")
            self._resumed_logged_once = True
        await self.container.presence_tracker.resync()

    # ─────────────────────────────────────────────────────────────────
    # Voice Events
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_voice_state_update(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> None:
        event = self._translate(member, before, after)
        if event is None:
            return
        await self.container.event_bus.publish(event)

    def _translate(
        self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState
    ) -> DomainEvent | None:
        """Map a voice state change to a presence event, or None when it is irrelevant."""
        self_id = self.bot.user.id if self.bot.user else None
        if member.bot and member.id != self_id:
            return None

        guild_id = self.container.settings.discord.guild_id
        if guild_id is not None and member.guild.id != guild_id:
            return None

        source = before.channel.id if before.channel else None
        target = after.channel.id if after.channel else None

        # Mute, deafen and stream toggles keep the channel unchanged
        if source == target:
            return None
        if source is None and target is not None:
            return MemberEnteredChannel(member_id=member.id, channel_id=target)
        if target is None and source is not None:
            return MemberLeftChannel(member_id=member.id, channel_id=source)
        assert source is not None and target is not None
        return MemberMovedChannel(
            member_id=member.id, source_channel_id=source, target_channel_id=target
        )


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(EventCog(bot, container))
