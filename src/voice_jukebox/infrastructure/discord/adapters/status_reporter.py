"""Discord implementation of StatusReporter: bot activity and channel announcements."""

from __future__ import annotations

import logging

import discord

from voice_jukebox.application.interfaces.status_reporter import StatusReporter
from voice_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

ACTIVITY_NAME_MAX = 128


class DiscordStatusReporter(StatusReporter):
    def __init__(self, bot: discord.Client, text_channel_id: int | None = None) -> None:
        self._bot = bot
        self._text_channel_id = text_channel_id

    async def set_status_text(self, text: str) -> None:
        if not self._bot.is_ready():
            return
        activity = discord.Activity(
            type=discord.ActivityType.listening, name=text[:ACTIVITY_NAME_MAX]
        )
        await self._bot.change_presence(activity=activity)

    async def send_message(self, text: str) -> None:
        if self._text_channel_id is None:
            return
        channel = self._bot.get_channel(self._text_channel_id)
        if not isinstance(channel, discord.abc.Messageable):
            logger.warning(LogTemplates.CHANNEL_NOT_FOUND, self._text_channel_id)
            return
        await channel.send(text)
