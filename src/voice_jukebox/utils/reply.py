"""Utility functions for formatting jukebox replies."""

from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from voice_jukebox.application.queries.playback_status import TrackInfo


@cache
def format_duration(seconds: int | float | None) -> str:
    if seconds is None:
        return "–"

    total_seconds = int(seconds)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    secs = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


@cache
def truncate(text: str, max_length: int = 90) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def format_track_line(track: TrackInfo, max_length: int = 60) -> str:
    """One-line ``name - author [m:ss]`` rendering used in status embeds."""
    label = f"{track.name} - {track.author}" if track.author else track.name
    line = truncate(label, max_length)
    if track.duration_seconds:
        line = f"{line} [{format_duration(track.duration_seconds)}]"
    return line
