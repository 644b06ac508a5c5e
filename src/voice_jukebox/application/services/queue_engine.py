"""Queue/mode engine: owns the play queue, the active mode and what is playing.

Every sequence that decides the next track and starts it runs under one
lock, so a user command and the asynchronous "track finished" notification
can never both start a track.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from voice_jukebox.application.interfaces.playback_control import PlaybackControl
from voice_jukebox.application.interfaces.status_reporter import StatusReporter
from voice_jukebox.domain.music.entities import PlayQueue, Track, TrackCollection
from voice_jukebox.domain.music.value_objects import AdvanceStatus, PlayMode
from voice_jukebox.domain.shared.constants import QueueConstants
from voice_jukebox.domain.shared.messages import LogTemplates, ResultMessages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvanceResult:
    """Outcome of :meth:`QueueEngine.advance_to_next`."""

    status: AdvanceStatus
    track: Track | None = None

    @property
    def started(self) -> bool:
        return self.status is AdvanceStatus.STARTED


class QueueEngine:
    """Holds the queue and drives the playback capability through it."""

    def __init__(
        self,
        *,
        playback: PlaybackControl,
        status_reporter: StatusReporter,
        mode: PlayMode = PlayMode.SEQUENTIAL,
        idle_text: str = ResultMessages.STATUS_IDLE,
        announce_tracks: bool = False,
    ) -> None:
        self._playback = playback
        self._status = status_reporter
        self._mode = mode
        self._queue = PlayQueue()
        self._now_playing: Track | None = None
        self._starts = 0
        self._lock = asyncio.Lock()
        self.idle_text = idle_text
        self.announce_tracks = announce_tracks

    @property
    def queue(self) -> PlayQueue:
        return self._queue

    @property
    def mode(self) -> PlayMode:
        return self._mode

    def set_mode(self, mode: PlayMode | int | str) -> PlayMode:
        """Change the mode; it applies from the next advance onward."""
        self._mode = PlayMode.parse(mode)
        self._queue.reset_pass()
        logger.info(LogTemplates.QUEUE_MODE_CHANGED, self._mode.label)
        return self._mode

    # ── Queue mutations ─────────────────────────────────────────────

    def set_playlist(
        self,
        tracks: TrackCollection | Iterable[Track],
        limit: int = QueueConstants.UNLIMITED,
        name: str | None = None,
    ) -> int:
        if isinstance(tracks, TrackCollection):
            name = tracks.name if name is None else name
            tracks = tracks.tracks
        count = self._queue.set_playlist(tracks, limit=limit, name=name or "")
        logger.info(LogTemplates.QUEUE_REPLACED, count, self._queue.name)
        return count

    def add_playlist(
        self,
        tracks: TrackCollection | Iterable[Track],
        limit: int = QueueConstants.UNLIMITED,
        append_only: bool = True,
    ) -> int:
        if isinstance(tracks, TrackCollection):
            tracks = tracks.tracks
        count = self._queue.add_playlist(tracks, limit=limit, append_only=append_only)
        logger.info(LogTemplates.QUEUE_EXTENDED, count)
        return count

    def add_music(self, track: Track, as_immediate_next: bool = True) -> int:
        position = self._queue.add_track(track, as_next=as_immediate_next)
        logger.info(LogTemplates.QUEUE_ENQUEUED, track.display_name, position, as_immediate_next)
        return position

    def clear(self) -> int:
        """Empty the queue without touching playback."""
        count = self._queue.clear()
        logger.info(LogTemplates.QUEUE_CLEARED, count)
        return count

    # ── Playback ────────────────────────────────────────────────────

    async def play_track(self, track: Track) -> bool:
        """Start ``track`` right away, independent of the cursor."""
        async with self._lock:
            return await self._start(track)

    async def advance_to_next(self) -> AdvanceResult:
        async with self._lock:
            return await self._advance_locked()

    async def start_playlist(
        self,
        tracks: TrackCollection | Iterable[Track],
        limit: int = QueueConstants.UNLIMITED,
        name: str | None = None,
    ) -> tuple[int, AdvanceResult]:
        """Replace the queue and start its first track in one locked step."""
        async with self._lock:
            count = self.set_playlist(tracks, limit=limit, name=name)
            return count, await self._advance_locked()

    async def on_track_finished(self) -> None:
        """Handle the asynchronous end of the current track.

        A notification that waited on the lock while another track was
        started is stale and dropped.
        """
        issued_at = self._starts
        async with self._lock:
            if self._starts != issued_at:
                logger.debug(LogTemplates.QUEUE_FINISHED_STALE, issued_at, self._starts)
                return
            if self._queue.is_empty:
                logger.debug(LogTemplates.QUEUE_FINISHED_IGNORED)
                await self._go_idle()
                return
            result = await self._advance_locked()
            if result.status is AdvanceStatus.EMPTY:
                await self._go_idle()

    async def _advance_locked(self) -> AdvanceResult:
        track = self._queue.advance(self._mode)
        if track is None:
            logger.info(LogTemplates.QUEUE_EMPTY, self._mode.label)
            return AdvanceResult(AdvanceStatus.EMPTY)
        if await self._start(track):
            return AdvanceResult(AdvanceStatus.STARTED, track)
        return AdvanceResult(AdvanceStatus.FAILED, track)

    async def _start(self, track: Track) -> bool:
        try:
            started = await self._playback.start(track)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_START_FAILED, track.display_name)
            started = False

        if not started:
            self._now_playing = None
            await self._report(ResultMessages.STATUS_START_FAILED.format(track=track.display_name))
            return False

        self._now_playing = track
        self._starts += 1
        await self._report(ResultMessages.STATUS_PLAYING.format(track=track.display_name))
        if self.announce_tracks:
            await self._announce(ResultMessages.NOW_PLAYING.format(track=track.display_name))
        return True

    async def _go_idle(self) -> None:
        self._now_playing = None
        await self._report(self.idle_text)

    async def _report(self, text: str) -> None:
        try:
            await self._status.set_status_text(text)
        except Exception as e:
            logger.warning(LogTemplates.STATUS_UPDATE_FAILED, e)

    async def _announce(self, text: str) -> None:
        try:
            await self._status.send_message(text)
        except Exception as e:
            logger.warning(LogTemplates.STATUS_UPDATE_FAILED, e)

    async def stop(self) -> None:
        """Stop playback; the cursor stays where it is."""
        async with self._lock:
            await self._playback.stop()
            logger.info(LogTemplates.PLAYBACK_STOPPED)
            await self._go_idle()

    # ── Views ───────────────────────────────────────────────────────

    def current_track(self) -> Track | None:
        return self._now_playing

    def upcoming_tracks(self, count: int = QueueConstants.STATUS_UPCOMING_COUNT) -> list[Track]:
        return self._queue.upcoming(count, self._mode)

    def playlist_summary_text(self, max_lines: int = QueueConstants.SUMMARY_MAX_LINES) -> str:
        return self._queue.summary_text(max_lines=max_lines)
