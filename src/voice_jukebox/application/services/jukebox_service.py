"""Jukebox Application Service - the one facade both front-ends talk to.

Every user-facing operation lives here: resolving requests against providers,
mutating the queue through the engine, and reporting status. Operations raise
domain errors; :meth:`JukeboxService.run` turns them into results.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from voice_jukebox.application.commands.command_result import CommandResult, CommandStatus
from voice_jukebox.application.queries.playback_status import (
    CollectionInfo,
    PlaybackStatus,
    ProviderSearchResult,
    ProviderStatus,
    TrackInfo,
)
from voice_jukebox.domain.music.value_objects import AdvanceStatus, ContentType, PlayMode
from voice_jukebox.domain.shared.constants import QueueConstants, SearchConstants
from voice_jukebox.domain.shared.exceptions import (
    DomainError,
    InvalidArgumentError,
    NotFoundError,
)
from voice_jukebox.domain.shared.messages import ErrorMessages, LogTemplates, ResultMessages

if TYPE_CHECKING:
    from voice_jukebox.application.commands.playback_request import PlaybackRequest
    from voice_jukebox.application.interfaces.catalog_provider import CatalogProvider
    from voice_jukebox.application.interfaces.channel_membership import ChannelMembership
    from voice_jukebox.application.interfaces.playback_control import PlaybackControl
    from voice_jukebox.application.interfaces.preference_store import PreferenceStore
    from voice_jukebox.application.services.presence_tracker import PresenceTracker
    from voice_jukebox.application.services.provider_registry import ProviderRegistry
    from voice_jukebox.application.services.queue_engine import QueueEngine
    from voice_jukebox.application.services.request_resolver import RequestResolver
    from voice_jukebox.config.settings import Settings
    from voice_jukebox.domain.music.entities import Track, TrackCollection

logger = logging.getLogger(__name__)

_SEARCH_KINDS = {
    ContentType.TRACK: "song",
    ContentType.PLAYLIST: "playlist",
    ContentType.ALBUM: "album",
}


class JukeboxService:
    """Orchestrates resolver, providers, queue engine and presence tracking."""

    def __init__(
        self,
        *,
        registry: ProviderRegistry,
        resolver: RequestResolver,
        engine: QueueEngine,
        playback: PlaybackControl,
        presence: PresenceTracker,
        membership: ChannelMembership,
        preference_store: PreferenceStore | None = None,
        settings_loader: Callable[[], Settings] | None = None,
    ) -> None:
        self._registry = registry
        self._resolver = resolver
        self._engine = engine
        self._playback = playback
        self._presence = presence
        self._membership = membership
        self._preference_store = preference_store
        self._settings_loader = settings_loader
        self._pending: set[asyncio.Task[None]] = set()

    # ── Error boundary ──────────────────────────────────────────────

    async def run(self, operation: Awaitable[CommandResult]) -> CommandResult:
        """Await ``operation`` and convert any failure into a failed result."""
        name = getattr(operation, "__qualname__", type(operation).__name__)
        try:
            return await operation
        except DomainError as e:
            logger.info(LogTemplates.COMMAND_FAILED, name, e.message)
            return CommandResult.from_error(e)
        except Exception:
            logger.exception(LogTemplates.COMMAND_UNEXPECTED, name)
            return CommandResult.error(CommandStatus.UNEXPECTED, ErrorMessages.UNEXPECTED)

    # ── Resolution ──────────────────────────────────────────────────

    def resolve(self, raw: str, max_tokens: int = 3) -> PlaybackRequest:
        return self._resolver.resolve(raw, max_tokens)

    def resolve_typed(self, query: str, content_type: ContentType) -> PlaybackRequest:
        return self._resolver.resolve_typed(query, content_type)

    async def _fetch_track(self, request: PlaybackRequest) -> Track:
        provider = request.provider
        reference = request.reference

        if reference.type is ContentType.PODCAST and reference.id:
            track = await provider.get_podcast(reference.id)
            if track is None:
                raise NotFoundError("podcast", reference.id)
            return track

        if reference.type is ContentType.TRACK and reference.id:
            track = await provider.get_track(reference.id)
            if track is None:
                raise NotFoundError("track", reference.id)
            return track

        hits = await provider.search_tracks(request.text, 1)
        if not hits:
            raise NotFoundError("track", request.text)
        return hits[0]

    async def _fetch_collection(
        self, request: PlaybackRequest, kind: ContentType
    ) -> TrackCollection:
        provider = request.provider
        reference = request.reference
        label = kind.value

        if reference.type is kind and reference.id:
            collection_id = reference.id
        else:
            if kind is ContentType.PLAYLIST:
                search = provider.search_playlists
            else:
                search = provider.search_albums
            hits = await search(request.text, 1)
            if not hits:
                raise NotFoundError(label, request.text)
            collection_id = hits[0].id

        fetch = provider.get_playlist if kind is ContentType.PLAYLIST else provider.get_album
        collection = await fetch(collection_id, request.limit)
        if collection is None:
            raise NotFoundError(label, collection_id)
        return collection

    # ── Queue commands ──────────────────────────────────────────────

    async def play_text(
        self, raw: str, max_tokens: int = QueueConstants.TRACK_COMMAND_TOKENS
    ) -> CommandResult:
        return await self.play(self.resolve(raw, max_tokens))

    async def add_text(
        self, raw: str, max_tokens: int = QueueConstants.TRACK_COMMAND_TOKENS
    ) -> CommandResult:
        return await self.add(self.resolve(raw, max_tokens))

    async def playlist_text(self, raw: str, append: bool = False) -> CommandResult:
        request = self.resolve(raw, QueueConstants.COLLECTION_COMMAND_TOKENS)
        return await self.play_playlist(request, append=append)

    async def album_text(self, raw: str, append: bool = False) -> CommandResult:
        request = self.resolve(raw, QueueConstants.COLLECTION_COMMAND_TOKENS)
        return await self.play_album(request, append=append)

    async def typed_command(self, command_type: str, query: str) -> CommandResult:
        """Run ``reload`` or a typed ``play``/``add`` command such as ``play_song`` or ``add_list``.

        The part after the underscore forces the content type when the query
        starts with a provider alias; without it the input is auto-detected.
        """
        command_type = (command_type or "").strip().lower()
        if command_type == "reload":
            return await self.reload()

        verb, _, sub_type = command_type.partition("_")
        if verb not in ("play", "add"):
            raise InvalidArgumentError(
                ErrorMessages.UNKNOWN_COMMAND_TYPE.format(type=command_type), argument="type"
            )
        if not (query or "").strip():
            raise InvalidArgumentError(ErrorMessages.MISSING_QUERY, argument="query")

        request = self.resolve_typed(query, ContentType.from_name(sub_type or "auto"))
        append = verb == "add"
        if request.content_type is ContentType.PLAYLIST:
            return await self.play_playlist(request, append=append)
        if request.content_type is ContentType.ALBUM:
            return await self.play_album(request, append=append)
        return await (self.add(request) if append else self.play(request))

    async def play(self, request: PlaybackRequest) -> CommandResult:
        """Play one track now; playlists and albums replace the queue instead."""
        if request.content_type is ContentType.PLAYLIST:
            return await self.play_playlist(request)
        if request.content_type is ContentType.ALBUM:
            return await self.play_album(request)

        track = await self._fetch_track(request)
        if self._engine.mode.is_looping:
            self._engine.add_music(track, as_immediate_next=False)

        if not await self._engine.play_track(track):
            return CommandResult.error(
                CommandStatus.UNEXPECTED,
                ResultMessages.START_FAILED.format(track=track.display_name),
            )
        return CommandResult.success(
            ResultMessages.NOW_PLAYING.format(track=track.display_name),
            data=TrackInfo.from_track(track),
        )

    async def add(self, request: PlaybackRequest) -> CommandResult:
        """Queue one track to play next; never starts playback."""
        if request.content_type is ContentType.PLAYLIST:
            return await self.play_playlist(request, append=True)
        if request.content_type is ContentType.ALBUM:
            return await self.play_album(request, append=True)

        track = await self._fetch_track(request)
        self._engine.add_music(track, as_immediate_next=True)
        return CommandResult.success(
            ResultMessages.QUEUED_NEXT.format(track=track.display_name),
            data=TrackInfo.from_track(track),
        )

    async def play_playlist(self, request: PlaybackRequest, append: bool = False) -> CommandResult:
        collection = await self._fetch_collection(request, ContentType.PLAYLIST)
        return await self._load_collection(collection, request.limit, append)

    async def play_album(self, request: PlaybackRequest, append: bool = False) -> CommandResult:
        collection = await self._fetch_collection(request, ContentType.ALBUM)
        return await self._load_collection(collection, request.limit, append)

    async def _load_collection(
        self, collection: TrackCollection, limit: int, append: bool
    ) -> CommandResult:
        if not collection.tracks:
            return CommandResult.empty(ResultMessages.COLLECTION_EMPTY.format(name=collection.name))

        if append:
            count = self._engine.add_playlist(collection, limit=limit)
            return CommandResult.success(
                ResultMessages.COLLECTION_QUEUED.format(count=count, name=collection.name),
                data=CollectionInfo.from_collection(collection),
            )

        count, result = await self._engine.start_playlist(collection, limit=limit)
        if result.status is AdvanceStatus.FAILED and result.track is not None:
            return CommandResult.error(
                CommandStatus.UNEXPECTED,
                ResultMessages.START_FAILED.format(track=result.track.display_name),
            )
        return CommandResult.success(
            ResultMessages.COLLECTION_PLAYING.format(name=collection.name, count=count),
            data=CollectionInfo.from_collection(collection),
        )

    async def set_mode(self, value: PlayMode | int | str) -> CommandResult:
        mode = self._engine.set_mode(value)
        if self._preference_store is not None:
            await self._preference_store.save_play_mode(mode)
        return CommandResult.success(ResultMessages.MODE_SET.format(mode=mode.label))

    async def play_next_music(self) -> CommandResult:
        result = await self._engine.advance_to_next()
        if result.status is AdvanceStatus.EMPTY:
            return CommandResult.empty(ResultMessages.QUEUE_EMPTY)
        track_name = result.track.display_name if result.track else ""
        if result.status is AdvanceStatus.FAILED:
            return CommandResult.error(
                CommandStatus.UNEXPECTED, ResultMessages.START_FAILED.format(track=track_name)
            )
        return CommandResult.success(ResultMessages.NOW_PLAYING.format(track=track_name))

    async def start_playback(self) -> CommandResult:
        if self._playback.is_playing():
            return CommandResult.empty(ResultMessages.ALREADY_PLAYING)
        return await self.play_next_music()

    async def stop(self) -> CommandResult:
        if not (self._playback.is_playing() or self._playback.is_paused()):
            return CommandResult.empty(ResultMessages.NOTHING_PLAYING)
        await self._engine.stop()
        return CommandResult.success(ResultMessages.STOPPED)

    async def set_paused(self, paused: bool) -> CommandResult:
        if not (self._playback.is_playing() or self._playback.is_paused()):
            return CommandResult.empty(ResultMessages.NOTHING_PLAYING)
        await self._playback.set_paused(paused)
        return CommandResult.success(ResultMessages.PAUSED if paused else ResultMessages.RESUMED)

    def clear(self) -> asyncio.Task[None]:
        """Empty the queue and dispatch a stop.

        Returns the stop task; callers may await it but never have to.
        """
        self._engine.clear()
        task = asyncio.create_task(self._stop_after_clear())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _stop_after_clear(self) -> None:
        try:
            if self._playback.is_playing() or self._playback.is_paused():
                await self._engine.stop()
        except Exception as e:
            logger.warning(LogTemplates.PLAYBACK_STOP_TASK_FAILED, e)

    async def clear_playlist(self) -> CommandResult:
        self.clear()
        return CommandResult.success(ResultMessages.CLEARED)

    # ── Providers ───────────────────────────────────────────────────

    async def login(self, provider_name: str, args: list[str]) -> CommandResult:
        provider = self._registry.require(provider_name)
        message = await provider.login(args)
        return CommandResult.success(message)

    async def get_provider_statuses(self) -> list[ProviderStatus]:
        statuses: list[ProviderStatus] = []
        for slot in self._registry.slots():
            user = None
            if slot.enabled:
                try:
                    user = await slot.provider.current_user()
                except Exception as e:
                    logger.warning(LogTemplates.PROVIDER_USER_LOOKUP_FAILED, slot.tag, e)
            statuses.append(
                ProviderStatus(
                    tag=slot.tag,
                    name=slot.provider.name,
                    enabled=slot.enabled,
                    aliases=list(slot.aliases),
                    server=slot.provider.server_descriptor(),
                    user_id=user.id if user else None,
                    user_name=user.name if user else None,
                )
            )
        return statuses

    async def search_all(
        self, keyword: str, kind: str = "song", limit: int = SearchConstants.DEFAULT_LIMIT
    ) -> list[ProviderSearchResult]:
        """Search every enabled provider; one provider failing does not fail the rest."""
        keyword = (keyword or "").strip()
        if not keyword:
            raise InvalidArgumentError(ErrorMessages.MISSING_QUERY, argument="q")

        try:
            content_type = ContentType.from_name(kind)
        except InvalidArgumentError:
            content_type = ContentType.NONE
        if content_type not in _SEARCH_KINDS:
            raise InvalidArgumentError(
                ErrorMessages.UNKNOWN_SEARCH_TYPE.format(type=kind), argument="type"
            )

        if limit <= 0:
            limit = SearchConstants.DEFAULT_LIMIT
        limit = min(max(limit, SearchConstants.MIN_LIMIT), SearchConstants.MAX_LIMIT)

        providers = self._registry.enabled_providers()
        return list(
            await asyncio.gather(
                *(self._search_one(p, keyword, content_type, limit) for p in providers)
            )
        )

    async def _search_one(
        self, provider: CatalogProvider, keyword: str, content_type: ContentType, limit: int
    ) -> ProviderSearchResult:
        try:
            items: list[dict[str, Any]]
            if content_type is ContentType.TRACK:
                tracks = await provider.search_tracks(keyword, limit)
                items = [TrackInfo.from_track(t).model_dump() for t in tracks]
            elif content_type is ContentType.PLAYLIST:
                collections = await provider.search_playlists(keyword, limit)
                items = [CollectionInfo.from_collection(c).model_dump() for c in collections]
            else:
                collections = await provider.search_albums(keyword, limit)
                items = [CollectionInfo.from_collection(c).model_dump() for c in collections]
        except Exception as e:
            logger.warning(LogTemplates.PROVIDER_SEARCH_FAILED, provider.tag, e)
            return ProviderSearchResult(provider=provider.tag, name=provider.name, error=str(e))
        return ProviderSearchResult(provider=provider.tag, name=provider.name, items=items)

    # ── Status ──────────────────────────────────────────────────────

    def get_status(self) -> PlaybackStatus:
        queue = self._engine.queue
        return PlaybackStatus.build(
            current=self._engine.current_track(),
            upcoming=self._engine.upcoming_tracks(QueueConstants.STATUS_UPCOMING_COUNT),
            playlist_name=queue.name,
            playlist_length=queue.length,
            mode=self._engine.mode,
            paused=self._playback.is_paused(),
            playing=self._playback.is_playing(),
            listeners=self._presence.listener_count,
        )

    def playlist_summary(self) -> str:
        return self._engine.playlist_summary_text(QueueConstants.SUMMARY_MAX_LINES)

    # ── Voice channel ───────────────────────────────────────────────

    async def move_to(self, channel_id: int, channel_name: str = "") -> CommandResult:
        """Join ``channel_id`` and rebuild the listener set there."""
        if not await self._membership.join(channel_id):
            return CommandResult.error(CommandStatus.UNEXPECTED, ResultMessages.NO_CHANNEL)
        await self._presence.resync(channel_id)
        return CommandResult.success(
            ResultMessages.MOVED_HERE.format(channel=channel_name or channel_id)
        )

    # ── Configuration ───────────────────────────────────────────────

    async def reload(self) -> CommandResult:
        """Re-read settings and re-apply provider and auto-pause configuration."""
        if self._settings_loader is None:
            return CommandResult.empty(ResultMessages.RELOADED)

        settings = self._settings_loader()
        await self._registry.configure(settings.providers)
        self._engine.idle_text = settings.playback.status_idle_text
        self._engine.announce_tracks = settings.playback.announce_tracks
        await self._presence.set_auto_pause(settings.playback.auto_pause)
        logger.info(LogTemplates.CONFIG_RELOADED, len(self._registry.enabled_slots()))
        return CommandResult.success(ResultMessages.RELOADED)
