from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from pydantic import BaseModel, ConfigDict

from voice_jukebox.application.interfaces.catalog_provider import (
    CatalogProvider,
    ProviderFactory,
)
from voice_jukebox.application.interfaces.channel_membership import ChannelMembership
from voice_jukebox.application.interfaces.playback_control import PlaybackControl
from voice_jukebox.domain.music.entities import ProviderUser, Track, TrackCollection
from voice_jukebox.domain.music.value_objects import ContentReference

# ============================================================================
# Test Doubles
# ============================================================================


class FakeOptions(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str = ""


class FakeProvider(CatalogProvider):
    """In-memory catalog: tracks, playlists and albums keyed by id."""

    tag = "fake"
    name = "Fake Music"
    default_aliases = ("fake", "fk")
    fragments: tuple[str, ...] = ("fake.example",)

    def __init__(self, options: FakeOptions | None = None, preference_store: Any = None) -> None:
        self.options = options or FakeOptions()
        self.preference_store = preference_store
        self.tracks: dict[str, Track] = {}
        self.podcasts: dict[str, Track] = {}
        self.playlists: dict[str, TrackCollection] = {}
        self.albums: dict[str, TrackCollection] = {}
        self.classifications: dict[str, ContentReference] = {}
        self.user: ProviderUser | None = None
        self.refreshed_with: BaseModel | None = None
        self.closed = False
        self.search_error: Exception | None = None

    def add_track(self, track_id: str, name: str, author: str = "") -> Track:
        track = Track(id=track_id, name=name, author=author, provider=self.tag)
        self.tracks[track_id] = track
        return track

    def add_playlist(self, playlist_id: str, name: str, tracks: list[Track]) -> TrackCollection:
        collection = TrackCollection(id=playlist_id, name=name, provider=self.tag, tracks=tracks)
        self.playlists[playlist_id] = collection
        return collection

    def add_album(self, album_id: str, name: str, tracks: list[Track]) -> TrackCollection:
        collection = TrackCollection(id=album_id, name=name, provider=self.tag, tracks=tracks)
        self.albums[album_id] = collection
        return collection

    async def search_tracks(self, text, limit):
        if self.search_error is not None:
            raise self.search_error
        hits = [t for t in self.tracks.values() if text.lower() in t.name.lower()]
        return hits[:limit]

    async def search_playlists(self, text, limit):
        hits = [c for c in self.playlists.values() if text.lower() in c.name.lower()]
        return hits[:limit]

    async def search_albums(self, text, limit):
        hits = [c for c in self.albums.values() if text.lower() in c.name.lower()]
        return hits[:limit]

    async def get_track(self, track_id):
        return self.tracks.get(track_id)

    async def get_podcast(self, podcast_id):
        return self.podcasts.get(podcast_id)

    @staticmethod
    def _limited(collection: TrackCollection | None, limit: int) -> TrackCollection | None:
        if collection is None or limit <= 0:
            return collection
        return collection.model_copy(update={"tracks": collection.tracks[:limit]})

    async def get_playlist(self, playlist_id, limit):
        return self._limited(self.playlists.get(playlist_id), limit)

    async def get_album(self, album_id, limit):
        return self._limited(self.albums.get(album_id), limit)

    def classify_input(self, text):
        return self.classifications.get(text, ContentReference.none())

    def recognized_url_fragments(self):
        return self.fragments

    async def login(self, args):
        self.user = ProviderUser(id="u1", name=" ".join(args) or "anon")
        return f"Logged in to {self.name} as {self.user.name}"

    def server_descriptor(self):
        return "fake://local"

    async def current_user(self):
        return self.user

    async def resolve_stream_url(self, track):
        return f"https://{self.fragments[0]}/stream/{track.id}"

    async def refresh(self, options):
        self.refreshed_with = options

    async def close(self):
        self.closed = True


class OtherProvider(FakeProvider):
    tag = "other"
    name = "Other Music"
    default_aliases = ("other", "ot")
    fragments = ("other.example",)


FAKE_FACTORIES: dict[str, ProviderFactory] = {
    "fake": ProviderFactory(options_type=FakeOptions, build=FakeProvider),
    "other": ProviderFactory(options_type=FakeOptions, build=OtherProvider),
}


class FakePlayback(PlaybackControl):
    """Playback double that records starts and lets tests finish tracks."""

    def __init__(self) -> None:
        self.started: list[Track] = []
        self.pause_requests: list[bool] = []
        self.stop_count = 0
        self.fail_next = False
        self._playing: Track | None = None
        self._paused = False
        self._on_finished = None

    async def start(self, track: Track) -> bool:
        if self.fail_next:
            self.fail_next = False
            return False
        self.started.append(track)
        self._playing = track
        return True

    async def stop(self) -> None:
        self.stop_count += 1
        self._playing = None

    async def set_paused(self, paused: bool) -> bool:
        self.pause_requests.append(paused)
        changed = self._playing is not None and self._paused != paused
        self._paused = paused
        return changed

    def is_playing(self) -> bool:
        return self._playing is not None and not self._paused

    def is_paused(self) -> bool:
        return self._playing is not None and self._paused

    def set_on_finished_callback(self, callback) -> None:
        self._on_finished = callback

    async def finish(self) -> None:
        """Simulate the natural end of the current track."""
        self._playing = None
        if self._on_finished is not None:
            await self._on_finished()


class FakeMembership(ChannelMembership):
    def __init__(self, self_id: int = 1000) -> None:
        self._self_id = self_id
        self.channel_id: int | None = None
        self.members: dict[int, list[int]] = {}
        self.join_result = True

    @property
    def self_id(self) -> int | None:
        return self._self_id

    def current_channel_id(self) -> int | None:
        return self.channel_id

    async def list_members(self, channel_id: int) -> list[int]:
        return list(self.members.get(channel_id, []))

    async def join(self, channel_id: int) -> bool:
        if self.join_result:
            self.channel_id = channel_id
        return self.join_result


# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from voice_jukebox.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def preference_store(in_memory_database):
    """Create a preference store with in-memory database."""
    from voice_jukebox.infrastructure.persistence.repositories.preference_repository import (
        SQLitePreferenceStore,
    )

    return SQLitePreferenceStore(in_memory_database)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def providers_settings():
    from voice_jukebox.config.settings import ProviderEntry, ProvidersSettings

    return ProvidersSettings(
        default="fake",
        entries=(ProviderEntry(tag="fake"), ProviderEntry(tag="other")),
    )


@pytest_asyncio.fixture
async def registry(providers_settings):
    """Provider registry with the fake and other providers enabled."""
    from voice_jukebox.application.services.provider_registry import ProviderRegistry

    reg = ProviderRegistry(FAKE_FACTORIES)
    await reg.configure(providers_settings)
    return reg


@pytest.fixture
def fake_provider(registry) -> FakeProvider:
    return registry.get("fake")


@pytest.fixture
def other_provider(registry) -> OtherProvider:
    return registry.get("other")


@pytest.fixture
def resolver(registry):
    from voice_jukebox.application.services.request_resolver import RequestResolver

    return RequestResolver(registry)


@pytest.fixture
def playback() -> FakePlayback:
    return FakePlayback()


@pytest.fixture
def membership() -> FakeMembership:
    return FakeMembership()


@pytest.fixture
def status_reporter():
    reporter = AsyncMock()
    reporter.set_status_text = AsyncMock()
    reporter.send_message = AsyncMock()
    return reporter


@pytest.fixture
def engine(playback, status_reporter):
    from voice_jukebox.application.services.queue_engine import QueueEngine

    queue_engine = QueueEngine(playback=playback, status_reporter=status_reporter)
    playback.set_on_finished_callback(queue_engine.on_track_finished)
    return queue_engine


@pytest.fixture
def event_bus():
    from voice_jukebox.domain.shared.events import EventBus

    return EventBus()


@pytest.fixture
def presence(membership, playback, event_bus):
    from voice_jukebox.application.services.presence_tracker import PresenceTracker

    return PresenceTracker(membership=membership, playback=playback, event_bus=event_bus)


@pytest.fixture
def jukebox_service(registry, resolver, engine, playback, presence, membership):
    from voice_jukebox.application.services.jukebox_service import JukeboxService

    return JukeboxService(
        registry=registry,
        resolver=resolver,
        engine=engine,
        playback=playback,
        presence=presence,
        membership=membership,
        preference_store=AsyncMock(),
    )


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


@pytest.fixture
def make_track():
    """Factory for tracks of the fake provider."""

    def _make(track_id: str, name: str | None = None, author: str = "") -> Track:
        return Track(id=track_id, name=name or f"Song {track_id}", author=author, provider="fake")

    return _make


@pytest.fixture
def abc_tracks(make_track):
    return [make_track("a"), make_track("b"), make_track("c")]
