"""Port interface for external music catalog providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel

from voice_jukebox.domain.shared.types import NonEmptyStr, ResultLimit

if TYPE_CHECKING:
    from ...domain.music.entities import ProviderUser, Track, TrackCollection
    from ...domain.music.value_objects import ContentReference
    from .preference_store import PreferenceStore


class CatalogProvider(ABC):
    """Interface for a music catalog: search, metadata, listing and login.

    ``tag`` is the stable identity used in configuration and on every
    :class:`Track` the provider produces.
    """

    tag: ClassVar[str]
    name: ClassVar[str]
    default_aliases: ClassVar[tuple[str, ...]] = ()

    @abstractmethod
    async def search_tracks(self, text: NonEmptyStr, limit: ResultLimit) -> list["Track"]:
        ...

    @abstractmethod
    async def search_playlists(
        self, text: NonEmptyStr, limit: ResultLimit
    ) -> list["TrackCollection"]:
        """Search playlists; returned collections may omit their tracks."""
        ...

    @abstractmethod
    async def search_albums(self, text: NonEmptyStr, limit: ResultLimit) -> list["TrackCollection"]:
        """Search albums; returned collections may omit their tracks."""
        ...

    @abstractmethod
    async def get_track(self, track_id: NonEmptyStr) -> "Track | None":
        ...

    async def get_podcast(self, podcast_id: NonEmptyStr) -> "Track | None":
        """Fetch a podcast episode as a playable track; ids are track ids by default."""
        return await self.get_track(podcast_id)

    @abstractmethod
    async def get_playlist(
        self, playlist_id: NonEmptyStr, limit: ResultLimit
    ) -> "TrackCollection | None":
        """Fetch a playlist with up to ``limit`` member tracks (0 = all)."""
        ...

    @abstractmethod
    async def get_album(
        self, album_id: NonEmptyStr, limit: ResultLimit
    ) -> "TrackCollection | None":
        """Fetch an album with up to ``limit`` member tracks (0 = all)."""
        ...

    @abstractmethod
    def classify_input(self, text: str) -> "ContentReference":
        """Recognize links or ids this provider understands; NONE otherwise."""
        ...

    @abstractmethod
    def recognized_url_fragments(self) -> tuple[str, ...]:
        """Substrings that identify this provider's links, e.g. a host name."""
        ...

    @abstractmethod
    async def login(self, args: list[str]) -> str:
        """Log in with provider-specific arguments and return a result message."""
        ...

    @abstractmethod
    def server_descriptor(self) -> str:
        """Short description of the backend this provider talks to."""
        ...

    @abstractmethod
    async def current_user(self) -> "ProviderUser | None":
        ...

    @abstractmethod
    async def resolve_stream_url(self, track: "Track") -> str | None:
        """Return a URL the audio pipeline can open for ``track``."""
        ...

    async def refresh(self, options: BaseModel) -> None:
        """Apply new options after a configuration reload."""
        return None

    async def close(self) -> None:
        return None


ProviderConstructor = Callable[[Any, "PreferenceStore | None"], CatalogProvider]


@dataclass(frozen=True)
class ProviderFactory:
    """Static registry entry: how to parse a provider's options and build it."""

    options_type: type[BaseModel]
    build: ProviderConstructor
