"""Port interface for the audio output pipeline."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Track

TrackFinishedCallback = Callable[[], Awaitable[None]]


class PlaybackControl(ABC):
    """Interface for starting, stopping and pausing audio playback.

    Implementations invoke the finished callback once when a started track
    ends on its own, and never for a track that was stopped or replaced.
    """

    @abstractmethod
    async def start(self, track: "Track") -> bool:
        """Start playing ``track``, replacing anything currently playing."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def set_paused(self, paused: bool) -> bool:
        """Pause or resume; returns whether the state changed.

        The requested state sticks: a pause asked for while idle applies to
        the next started track.
        """
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...

    @abstractmethod
    def is_paused(self) -> bool:
        ...

    @abstractmethod
    def set_on_finished_callback(self, callback: TrackFinishedCallback | None) -> None:
        ...
