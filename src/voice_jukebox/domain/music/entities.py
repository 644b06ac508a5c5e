"""Core domain entities for the music bounded context."""

from __future__ import annotations

import random
from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from voice_jukebox.domain.music.value_objects import PlayMode
from voice_jukebox.domain.shared.types import (
    DurationSeconds,
    NonEmptyStr,
    ProviderTagStr,
    ResultLimit,
    TrackNameStr,
)


class Track(BaseModel):
    """Immutable value object representing a playable track.

    Identity is ``(provider, id)``; the remaining fields are display metadata.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr
    name: TrackNameStr
    author: str = ""
    provider: ProviderTagStr
    album: NonEmptyStr | None = None
    duration_seconds: DurationSeconds | None = None
    stream_url: NonEmptyStr | None = None
    webpage_url: NonEmptyStr | None = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.provider, self.id)

    @property
    def display_name(self) -> str:
        """Name with author appended when known."""
        if self.author:
            return f"{self.name} - {self.author}"
        return self.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)


class TrackCollection(BaseModel):
    """A playlist or album as fetched from a provider."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr
    name: str
    provider: ProviderTagStr
    tracks: list[Track] = Field(default_factory=list)


class ProviderUser(BaseModel):
    """Account a provider is currently logged in as."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: NonEmptyStr
    name: str


def take_limit(tracks: Iterable[Track], limit: ResultLimit) -> list[Track]:
    """Return at most ``limit`` tracks in order; ``0`` means unlimited."""
    items = list(tracks)
    if limit > 0:
        return items[:limit]
    return items


class PlayQueue(BaseModel):
    """Ordered track list with a play cursor and mode-dependent advance rules.

    ``cursor`` is either ``None`` (nothing selected yet) or a valid index.
    ``played`` holds the indexes drawn during the current pass and drives the
    random modes. ``up_next`` is a stack of indexes inserted as "play next";
    they take priority over the mode rule, most recent first.
    """

    model_config = ConfigDict(strict=True, validate_assignment=False)

    name: str = ""
    tracks: list[Track] = Field(default_factory=list)
    cursor: int | None = None
    played: set[int] = Field(default_factory=set)
    up_next: list[int] = Field(default_factory=list)

    _rng: random.Random = PrivateAttr(default_factory=random.Random)

    @property
    def length(self) -> int:
        return len(self.tracks)

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    def seed(self, value: int) -> None:
        """Make random draws reproducible."""
        self._rng.seed(value)

    def current(self) -> Track | None:
        if self.cursor is None:
            return None
        return self.tracks[self.cursor]

    # ── Mutations ───────────────────────────────────────────────────

    def set_playlist(
        self, tracks: Iterable[Track], limit: ResultLimit = 0, name: str = ""
    ) -> int:
        """Replace the queue wholesale and reset the cursor."""
        self.tracks = take_limit(tracks, limit)
        self.name = name
        self.cursor = None
        self.played = set()
        self.up_next = []
        return len(self.tracks)

    def add_playlist(
        self, tracks: Iterable[Track], limit: ResultLimit = 0, append_only: bool = True
    ) -> int:
        """Extend the queue, at the tail or as a block right after the cursor."""
        items = take_limit(tracks, limit)
        if not items:
            return 0
        if append_only:
            self.tracks.extend(items)
        else:
            self._insert(self._after_cursor(), items)
        return len(items)

    def add_track(self, track: Track, as_next: bool = True) -> int:
        """Insert one track after the cursor (played next) or at the tail.

        Returns the index the track landed on.
        """
        if not as_next:
            self.tracks.append(track)
            return len(self.tracks) - 1

        position = self._after_cursor()
        self._insert(position, [track])
        self.up_next.append(position)
        return position

    def clear(self) -> int:
        count = len(self.tracks)
        self.tracks = []
        self.name = ""
        self.cursor = None
        self.played = set()
        self.up_next = []
        return count

    def reset_pass(self) -> None:
        """Start a new random pass, counting the current track as already drawn."""
        self.played = {self.cursor} if self.cursor is not None else set()

    def _after_cursor(self) -> int:
        return 0 if self.cursor is None else self.cursor + 1

    def _insert(self, position: int, items: list[Track]) -> None:
        count = len(items)
        self.tracks[position:position] = items

        def shift(index: int) -> int:
            return index + count if index >= position else index

        if self.cursor is not None:
            self.cursor = shift(self.cursor)
        self.played = {shift(i) for i in self.played}
        self.up_next = [shift(i) for i in self.up_next]

    # ── Advancing ───────────────────────────────────────────────────

    def advance(self, mode: PlayMode) -> Track | None:
        """Move the cursor to the next track under ``mode``.

        Returns ``None`` when the mode's termination rule says the queue is
        exhausted; the cursor is left untouched in that case.
        """
        if not self.tracks:
            return None

        index = self._pop_up_next()
        if index is None:
            index = self._select_index(mode)
        if index is None:
            return None

        self.cursor = index
        self.played.add(index)
        return self.tracks[index]

    def _pop_up_next(self) -> int | None:
        while self.up_next:
            index = self.up_next.pop()
            if 0 <= index < len(self.tracks):
                return index
        return None

    def _select_index(self, mode: PlayMode) -> int | None:
        size = len(self.tracks)
        following = self._after_cursor()

        if mode is PlayMode.SEQUENTIAL:
            return following if following < size else None

        if mode is PlayMode.SEQUENTIAL_LOOP:
            return following % size

        pool = [i for i in range(size) if i not in self.played]
        if not pool:
            if mode is PlayMode.RANDOM:
                return None
            # Loop mode: start a new pass, avoiding an immediate repeat.
            self.played = set()
            pool = [i for i in range(size) if size == 1 or i != self.cursor]
        return self._rng.choice(pool)

    # ── Read-only views ─────────────────────────────────────────────

    def upcoming(self, count: int, mode: PlayMode) -> list[Track]:
        """Best-effort preview of what plays next.

        Sequential modes list tracks in order (wrapping for the loop mode);
        random modes list the not yet drawn tracks in queue order.
        """
        if count <= 0 or not self.tracks:
            return []

        order: list[int] = []
        for index in reversed(self.up_next):
            if 0 <= index < len(self.tracks) and index not in order:
                order.append(index)

        size = len(self.tracks)
        if mode.is_random:
            rest = [i for i in range(size) if i not in self.played]
        else:
            start = self._after_cursor()
            rest = list(range(start, size))
            if mode is PlayMode.SEQUENTIAL_LOOP:
                rest += list(range(0, min(start, size)))

        for index in rest:
            if index not in order:
                order.append(index)
            if len(order) >= count:
                break

        return [self.tracks[i] for i in order[:count]]

    def summary_text(self, max_lines: int = 10) -> str:
        """Short multi-line listing used by the ``list`` command."""
        if not self.tracks:
            return ""

        label = self.name or "Playlist"
        lines = [f"{label} ({len(self.tracks)} tracks)"]

        start = 0
        if self.cursor is not None:
            start = max(0, min(self.cursor, len(self.tracks) - max_lines))
        window = self.tracks[start : start + max_lines]

        for offset, track in enumerate(window):
            index = start + offset
            marker = "▶" if index == self.cursor else f"{index + 1}."
            lines.append(f"{marker} {track.display_name}")

        remaining = len(self.tracks) - (start + len(window))
        if remaining > 0:
            lines.append(f"... and {remaining} more")
        return "\n".join(lines)
