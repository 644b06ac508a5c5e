"""Discord implementation of PlaybackControl using FFmpeg and a volume transformer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

import discord

from voice_jukebox.application.interfaces.playback_control import (
    PlaybackControl,
    TrackFinishedCallback,
)
from voice_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from voice_jukebox.config.settings import PlaybackSettings
    from voice_jukebox.domain.music.entities import Track
    from voice_jukebox.infrastructure.discord.adapters.membership_adapter import (
        DiscordChannelMembership,
    )

logger = logging.getLogger(__name__)

FADE_IN_SECONDS: float = 0.5

# Matches yt-dlp's Android client user-agent to avoid YouTube 403 responses
ANDROID_USER_AGENT = "com.google.android.youtube/19.44.38 (Linux; U; Android 14) gzip"

StreamResolver = Callable[["Track"], Awaitable[str | None]]


class DiscordPlaybackAdapter(PlaybackControl):
    """Plays tracks on the jukebox's voice connection.

    Every start bumps a generation counter captured by the FFmpeg ``after``
    callback. Stopping or replacing a track bumps it again, so only the
    natural end of the most recent track reaches the finished callback.

    A pause requested while nothing is playing is remembered and applied to
    the next track as soon as it starts.
    """

    def __init__(
        self,
        bot: discord.Client,
        membership: DiscordChannelMembership,
        stream_resolver: StreamResolver,
        settings: PlaybackSettings,
    ) -> None:
        self._bot = bot
        self._membership = membership
        self._resolve_stream = stream_resolver
        self._volume = settings.default_volume
        self._ffmpeg_options = dict(settings.ffmpeg_options)
        self._on_finished: TrackFinishedCallback | None = None
        self._generation = 0
        self._paused = False

    def set_on_finished_callback(self, callback: TrackFinishedCallback | None) -> None:
        self._on_finished = callback

    async def start(self, track: Track) -> bool:
        vc = self._membership.voice_client()
        if vc is None:
            logger.warning(LogTemplates.PLAYBACK_NOT_CONNECTED)
            return False

        stream_url = await self._resolve_stream(track)
        if not stream_url:
            logger.error(LogTemplates.PLAYBACK_NO_STREAM_URL, track.display_name)
            return False

        self._generation += 1
        generation = self._generation
        if vc.is_playing() or vc.is_paused():
            vc.stop()

        try:
            # User-Agent must match yt-dlp's Android client to prevent YouTube 403
            base_before_opts = self._ffmpeg_options.get("before_options", "")
            before_opts = f'{base_before_opts} -headers "User-Agent: {ANDROID_USER_AGENT}"'
            base_opts = self._ffmpeg_options.get("options", "")
            fade_opts = f'{base_opts} -af "afade=t=in:ss=0:d={FADE_IN_SECONDS}"'

            source = discord.FFmpegPCMAudio(
                stream_url, before_options=before_opts, options=fade_opts
            )
            volume_source = discord.PCMVolumeTransformer(source, volume=self._volume)

            def after_callback(error: Exception | None = None) -> None:
                if error:
                    logger.warning(LogTemplates.PLAYBACK_ERROR, error)
                asyncio.run_coroutine_threadsafe(
                    self._handle_track_end(generation), self._bot.loop
                )

            vc.play(volume_source, after=after_callback)
            if self._paused:
                vc.pause()
                logger.info(LogTemplates.PLAYBACK_STARTED_PAUSED, track.display_name)
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False

        logger.info(LogTemplates.PLAYBACK_STARTED, track.display_name)
        return True

    async def stop(self) -> None:
        self._generation += 1
        vc = self._membership.voice_client()
        if vc and (vc.is_playing() or vc.is_paused()):
            vc.stop()

    async def set_paused(self, paused: bool) -> bool:
        self._paused = paused
        vc = self._membership.voice_client()
        if vc is None:
            return False
        if paused and vc.is_playing():
            vc.pause()
            logger.info(LogTemplates.PLAYBACK_PAUSED)
            return True
        if not paused and vc.is_paused():
            vc.resume()
            logger.info(LogTemplates.PLAYBACK_RESUMED)
            return True
        return False

    def is_playing(self) -> bool:
        vc = self._membership.voice_client()
        return vc is not None and vc.is_playing()

    def is_paused(self) -> bool:
        vc = self._membership.voice_client()
        return vc is not None and vc.is_paused()

    async def _handle_track_end(self, generation: int) -> None:
        """Runs on the bot loop after FFmpeg's thread reports the end of a source."""
        if generation != self._generation:
            logger.debug(LogTemplates.PLAYBACK_STALE_FINISH, generation, self._generation)
            return

        if self._on_finished is None:
            logger.warning(LogTemplates.PLAYBACK_NO_CALLBACK)
            return
        try:
            await self._on_finished()
        except Exception as e:
            logger.error(LogTemplates.PLAYBACK_CALLBACK_ERROR, e)
