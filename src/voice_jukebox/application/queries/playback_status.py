"""Read-only status models returned to both front-ends."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from voice_jukebox.domain.music.entities import Track, TrackCollection
from voice_jukebox.domain.music.value_objects import PlayMode
from voice_jukebox.domain.shared.types import NonNegativeInt


class TrackInfo(BaseModel):
    """Flat view of a track for status payloads."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    author: str
    provider: str
    album: str | None = None
    duration_seconds: int | None = None

    @classmethod
    def from_track(cls, track: Track) -> TrackInfo:
        return cls(
            id=track.id,
            name=track.name,
            author=track.author,
            provider=track.provider,
            album=track.album,
            duration_seconds=track.duration_seconds,
        )


class PlaybackStatus(BaseModel):
    """What is playing, what comes next, and how the queue is configured."""

    model_config = ConfigDict(frozen=True)

    current: TrackInfo | None = None
    upcoming: list[TrackInfo] = Field(default_factory=list)
    playlist_name: str = ""
    playlist_length: NonNegativeInt = 0
    mode: str
    mode_value: int
    paused: bool = False
    playing: bool = False
    listeners: NonNegativeInt = 0

    @classmethod
    def build(
        cls,
        *,
        current: Track | None,
        upcoming: list[Track],
        playlist_name: str,
        playlist_length: int,
        mode: PlayMode,
        paused: bool,
        playing: bool,
        listeners: int,
    ) -> PlaybackStatus:
        return cls(
            current=TrackInfo.from_track(current) if current else None,
            upcoming=[TrackInfo.from_track(t) for t in upcoming],
            playlist_name=playlist_name,
            playlist_length=playlist_length,
            mode=mode.label,
            mode_value=int(mode),
            paused=paused,
            playing=playing,
            listeners=listeners,
        )


class ProviderStatus(BaseModel):
    """Per-provider configuration and login state."""

    model_config = ConfigDict(frozen=True)

    tag: str
    name: str
    enabled: bool
    aliases: list[str] = Field(default_factory=list)
    server: str = ""
    user_id: str | None = None
    user_name: str | None = None

    @property
    def logged_in(self) -> bool:
        return self.user_id is not None


class CollectionInfo(BaseModel):
    """Flat view of a playlist or album search hit."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    provider: str
    track_count: NonNegativeInt = 0

    @classmethod
    def from_collection(cls, collection: TrackCollection) -> CollectionInfo:
        return cls(
            id=collection.id,
            name=collection.name,
            provider=collection.provider,
            track_count=len(collection.tracks),
        )


class ProviderSearchResult(BaseModel):
    """Search hits from one provider, or the error it raised."""

    model_config = ConfigDict(frozen=True)

    provider: str
    name: str
    items: list[dict[str, Any]] = Field(default_factory=list)
    error: str | None = None
