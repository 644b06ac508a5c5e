"""Discord implementation of ChannelMembership: voice connection and member lookup."""

from __future__ import annotations

import asyncio
import logging

import discord

from voice_jukebox.application.interfaces.channel_membership import ChannelMembership
from voice_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0

VoiceChannelLike = discord.VoiceChannel | discord.StageChannel


class DiscordChannelMembership(ChannelMembership):
    """Tracks the single voice connection the jukebox owns.

    Other bots in the channel are not listeners and are left out of member
    lists, matching what the event cog publishes.
    """

    def __init__(self, bot: discord.Client, guild_id: int | None = None) -> None:
        self._bot = bot
        self._guild_id = guild_id

    @property
    def self_id(self) -> int | None:
        user = self._bot.user
        return user.id if user else None

    def voice_client(self) -> discord.VoiceClient | None:
        """The bot's voice client, restricted to the configured guild when set."""
        for vc in self._bot.voice_clients:
            if not isinstance(vc, discord.VoiceClient):
                continue
            if self._guild_id is not None and vc.guild.id != self._guild_id:
                continue
            return vc
        return None

    def current_channel_id(self) -> int | None:
        vc = self.voice_client()
        if vc and vc.channel:
            return vc.channel.id
        return None

    def _get_voice_channel(self, channel_id: int) -> VoiceChannelLike | None:
        channel = self._bot.get_channel(channel_id)
        if channel is None:
            logger.warning(LogTemplates.CHANNEL_NOT_FOUND, channel_id)
            return None
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            return None
        return channel

    async def list_members(self, channel_id: int) -> list[int]:
        channel = self._get_voice_channel(channel_id)
        if channel is None:
            return []
        self_id = self.self_id
        return [m.id for m in channel.members if m.id == self_id or not m.bot]

    async def join(self, channel_id: int) -> bool:
        """Connect if not connected, move if in a different channel."""
        channel = self._get_voice_channel(channel_id)
        if channel is None:
            return False

        vc = self.voice_client()
        if vc and not vc.is_connected():
            await vc.disconnect(force=True)
            vc = None

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                if vc is None:
                    await channel.connect(self_deaf=True)
                    logger.info(LogTemplates.VOICE_CONNECTED, channel.name)
                elif vc.channel is None or vc.channel.id != channel_id:
                    await vc.move_to(channel)
                    logger.info(LogTemplates.VOICE_MOVED, channel.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False
