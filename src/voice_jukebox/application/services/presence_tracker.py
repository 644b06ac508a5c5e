"""Pause playback when the bot's voice channel empties, resume when someone returns."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from voice_jukebox.domain.shared.events import (
    EventBus,
    MemberEnteredChannel,
    MemberLeftChannel,
    MemberMovedChannel,
)
from voice_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from voice_jukebox.application.interfaces.channel_membership import ChannelMembership
    from voice_jukebox.application.interfaces.playback_control import PlaybackControl

logger = logging.getLogger(__name__)


class PresenceTracker:
    """Keeps the set of listeners in the bot's own channel.

    Every change is followed by an evaluation: with auto-pause enabled, an
    empty set requests a pause and a non-empty one requests a resume. A
    request is only issued when it differs from the previous one.
    """

    def __init__(
        self,
        *,
        membership: ChannelMembership,
        playback: PlaybackControl,
        event_bus: EventBus,
        auto_pause: bool = True,
    ) -> None:
        self._membership = membership
        self._playback = playback
        self._bus = event_bus
        self._auto_pause = auto_pause
        self._members: set[int] = set()
        self._channel_id: int | None = None
        self._requested_paused: bool | None = None
        self._lock = asyncio.Lock()
        self._started = False

    @property
    def auto_pause(self) -> bool:
        return self._auto_pause

    @property
    def channel_id(self) -> int | None:
        return self._channel_id

    @property
    def listener_count(self) -> int:
        return len(self._members)

    def members(self) -> frozenset[int]:
        return frozenset(self._members)

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(MemberEnteredChannel, self._on_entered)
        self._bus.subscribe(MemberLeftChannel, self._on_left)
        self._bus.subscribe(MemberMovedChannel, self._on_moved)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(MemberEnteredChannel, self._on_entered)
        self._bus.unsubscribe(MemberLeftChannel, self._on_left)
        self._bus.unsubscribe(MemberMovedChannel, self._on_moved)
        self._started = False

    async def set_auto_pause(self, enabled: bool) -> None:
        async with self._lock:
            self._auto_pause = enabled
            self._requested_paused = None
            state = "enabled" if enabled else "disabled"
            logger.info(LogTemplates.PRESENCE_AUTO_PAUSE_TOGGLED, state)
            await self._evaluate()

    # ── Operations ──────────────────────────────────────────────────

    async def resync(self, channel_id: int | None = None) -> None:
        """Rebuild the listener set from a full membership query."""
        async with self._lock:
            await self._resync_locked(channel_id)

    async def on_enter(self, member_id: int, target_channel_id: int) -> None:
        async with self._lock:
            if member_id == self._membership.self_id:
                await self._resync_locked(target_channel_id)
                return
            if self._enter(member_id, target_channel_id):
                await self._evaluate()

    async def on_leave(self, member_id: int, source_channel_id: int) -> None:
        async with self._lock:
            if member_id == self._membership.self_id:
                self._channel_id = None
                self._members = set()
                await self._evaluate()
                return
            if self._leave(member_id, source_channel_id):
                await self._evaluate()

    async def on_move(self, member_id: int, source_channel_id: int, target_channel_id: int) -> None:
        async with self._lock:
            if member_id == self._membership.self_id:
                await self._resync_locked(target_channel_id)
                return
            left = self._leave(member_id, source_channel_id)
            entered = self._enter(member_id, target_channel_id)
            if left or entered:
                await self._evaluate()

    # ── Internals ───────────────────────────────────────────────────

    async def _resync_locked(self, channel_id: int | None) -> None:
        if channel_id is None:
            channel_id = self._membership.current_channel_id()

        self_id = self._membership.self_id
        members: set[int] = set()
        if channel_id is not None:
            members = {
                m for m in await self._membership.list_members(channel_id) if m != self_id
            }

        self._channel_id = channel_id
        self._members = members
        logger.info(LogTemplates.PRESENCE_RESYNCED, channel_id, len(members))
        await self._evaluate()

    def _enter(self, member_id: int, channel_id: int) -> bool:
        if member_id == self._membership.self_id:
            return False
        if self._channel_id is None or channel_id != self._channel_id:
            logger.debug(LogTemplates.PRESENCE_STALE_EVENT, channel_id, self._channel_id)
            return False
        self._members.add(member_id)
        logger.debug(LogTemplates.PRESENCE_ENTERED, member_id, channel_id, len(self._members))
        return True

    def _leave(self, member_id: int, channel_id: int) -> bool:
        if member_id == self._membership.self_id:
            return False
        if self._channel_id is None or channel_id != self._channel_id:
            logger.debug(LogTemplates.PRESENCE_STALE_EVENT, channel_id, self._channel_id)
            return False
        self._members.discard(member_id)
        logger.debug(LogTemplates.PRESENCE_LEFT, member_id, channel_id, len(self._members))
        return True

    async def _evaluate(self) -> None:
        if not self._auto_pause:
            return

        desired = not self._members
        if desired == self._requested_paused:
            return
        self._requested_paused = desired

        if desired:
            logger.info(LogTemplates.PRESENCE_AUTO_PAUSE)
        else:
            logger.info(LogTemplates.PRESENCE_AUTO_RESUME)
        await self._playback.set_paused(desired)

    # ── Event handlers ──────────────────────────────────────────────

    async def _on_entered(self, event: MemberEnteredChannel) -> None:
        await self.on_enter(event.member_id, event.channel_id)

    async def _on_left(self, event: MemberLeftChannel) -> None:
        await self.on_leave(event.member_id, event.channel_id)

    async def _on_moved(self, event: MemberMovedChannel) -> None:
        await self.on_move(event.member_id, event.source_channel_id, event.target_channel_id)
