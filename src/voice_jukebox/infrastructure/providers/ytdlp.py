"""CatalogProvider implementation using yt-dlp for YouTube search and extraction."""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import TYPE_CHECKING, Any, ClassVar, Final, cast
from urllib.parse import quote_plus

from pydantic import BaseModel
from yt_dlp import YoutubeDL
from yt_dlp.version import __version__ as ytdlp_version

from voice_jukebox.application.interfaces.catalog_provider import CatalogProvider
from voice_jukebox.domain.music.entities import ProviderUser, Track, TrackCollection
from voice_jukebox.domain.music.value_objects import ContentReference, ContentType
from voice_jukebox.domain.shared.constants import SearchConstants
from voice_jukebox.domain.shared.exceptions import InvalidArgumentError
from voice_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from voice_jukebox.infrastructure.providers.ytdlp_models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    AudioFormatInfo,
    CacheEntry,
    ExtractorArgs,
    YouTubeExtractorConfig,
    YtDlpEntryInfo,
    YtDlpListing,
    YtDlpOpts,
    YtDlpProviderOptions,
)

if TYPE_CHECKING:
    from voice_jukebox.application.interfaces.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

# ── Module-level state and patterns ────────────────────────────────────

_info_cache: dict[str, CacheEntry] = {}

URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?:https?://|www\.)")

VIDEO_ID_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?:youtube\.com/(?:watch\?(?:.*&)?v=|embed/|shorts/)|youtu\.be/)([a-zA-Z0-9_-]{11})"
)

PLAYLIST_ID_PATTERN: Final[re.Pattern[str]] = re.compile(r"[?&]list=([a-zA-Z0-9_-]+)")

WATCH_URL: Final[str] = "https://www.youtube.com/watch?v={id}"
PLAYLIST_URL: Final[str] = "https://www.youtube.com/playlist?list={id}"
# "sp" filter that limits YouTube search results to playlists
PLAYLIST_SEARCH_URL: Final[str] = (
    "https://www.youtube.com/results?search_query={query}&sp=EgIQAw%3D%3D"
)


class YtDlpProvider(CatalogProvider):
    """YouTube catalog backed by yt-dlp.

    Searches and playlist listings use flat extraction, so the tracks they
    return carry no stream URL; it is resolved when a track starts playing.
    YouTube has no album concept and no login.
    """

    tag: ClassVar[str] = "youtube"
    name: ClassVar[str] = "YouTube"
    default_aliases: ClassVar[tuple[str, ...]] = ("youtube", "yt")

    def __init__(
        self,
        options: YtDlpProviderOptions | None = None,
        preference_store: PreferenceStore | None = None,
    ) -> None:
        self._apply(options or YtDlpProviderOptions())

    def _apply(self, options: YtDlpProviderOptions) -> None:
        self._options = options
        extractor_args = None
        if options.pot_server_url:
            extractor_args = ExtractorArgs(
                youtube=YouTubeExtractorConfig(pot_server_url=options.pot_server_url)
            )
        self._base_opts = YtDlpOpts(
            format=options.format,
            default_search=options.search_prefix,
            socket_timeout=options.socket_timeout,
            extractor_args=extractor_args,
        )

    async def refresh(self, options: BaseModel) -> None:
        self._apply(YtDlpProviderOptions.model_validate(options.model_dump()))

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _get_flat_opts(self, limit: int = 0) -> YtDlpOpts:
        return self._get_opts(
            noplaylist=False, extract_flat="in_playlist", playlistend=limit or None
        )

    # ── Conversion ──────────────────────────────────────────────────

    def _entry_to_track(self, info: YtDlpEntryInfo, with_stream: bool = False) -> Track | None:
        webpage_url = info.webpage_url
        if webpage_url is None and info.url and URL_PATTERN.search(info.url):
            webpage_url = info.url

        track_id = info.id or (self.extract_video_id(webpage_url) if webpage_url else None)
        if not track_id:
            logger.warning(LogTemplates.YTDLP_NO_URL_IN_INFO_DICT)
            return None

        stream_url = self._extract_stream_url(info) if with_stream else None
        return Track(
            id=track_id,
            name=info.title[:500],
            author=info.author,
            provider=self.tag,
            album=info.album,
            duration_seconds=info.duration,
            stream_url=stream_url,
            webpage_url=webpage_url or WATCH_URL.format(id=track_id),
        )

    @staticmethod
    def _extract_stream_url(info: YtDlpEntryInfo) -> str | None:
        if info.url:
            return info.url
        return YtDlpProvider._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    # ── Blocking yt-dlp calls (run in a worker thread) ─────────────

    def _extract_info_sync(self, url: str) -> YtDlpEntryInfo | None:
        now = time.time()
        cached = _info_cache.get(url)
        if cached is not None:
            if now - cached.cached_at < CACHE_TTL:
                logger.debug(LogTemplates.CACHE_HIT_URL, url[:LOG_URL_TRUNCATE])
                return cached.info
            _info_cache.pop(url, None)

        try:
            params = self._get_opts().model_dump(exclude_none=True)
            with YoutubeDL(params=cast(Any, params)) as ydl:
                data = ydl.extract_info(url, download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url)
            return None

        result = YtDlpEntryInfo.model_validate(dict(data)) if isinstance(data, dict) else None
        _info_cache[url] = CacheEntry(info=result, cached_at=now)

        if len(_info_cache) > CACHE_MAX_SIZE:
            expired = [
                k for k, entry in _info_cache.items() if now - entry.cached_at >= CACHE_TTL
            ]
            for k in expired:
                _info_cache.pop(k, None)
            if expired:
                logger.debug(LogTemplates.CACHE_EXPIRED_CLEANED, len(expired))

        return result

    def _extract_listing_sync(self, url: str, limit: int) -> YtDlpListing | None:
        try:
            params = self._get_flat_opts(limit).model_dump(exclude_none=True)
            with YoutubeDL(params=cast(Any, params)) as ydl:
                data = ydl.extract_info(url, download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_PLAYLIST, url)
            return None

        if not isinstance(data, dict):
            return None
        entries = data.get("entries") or []
        return YtDlpListing(
            id=data.get("id"),
            title=data.get("title") or "",
            entries=[YtDlpEntryInfo.model_validate(dict(e)) for e in entries if e],
        )

    def _search_sync(self, query: str, limit: int) -> list[YtDlpEntryInfo]:
        search_query = f"{self._options.search_prefix}{limit}:{query}"
        try:
            params = self._get_flat_opts().model_dump(exclude_none=True)
            with YoutubeDL(params=cast(Any, params)) as ydl:
                data = ydl.extract_info(search_query, download=False)
        except Exception:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            return []

        if not isinstance(data, dict):
            return []
        entries = data.get("entries") or []
        return [YtDlpEntryInfo.model_validate(dict(e)) for e in entries if e]

    # ── CatalogProvider ─────────────────────────────────────────────

    async def search_tracks(self, text: str, limit: int) -> list[Track]:
        limit = limit or SearchConstants.MAX_LIMIT
        entries = await asyncio.to_thread(self._search_sync, text, limit)
        tracks = [self._entry_to_track(entry) for entry in entries]
        return [t for t in tracks if t is not None]

    async def search_playlists(self, text: str, limit: int) -> list[TrackCollection]:
        limit = limit or SearchConstants.MAX_LIMIT
        url = PLAYLIST_SEARCH_URL.format(query=quote_plus(text))
        listing = await asyncio.to_thread(self._extract_listing_sync, url, limit)
        if listing is None:
            return []
        return [
            TrackCollection(id=entry.id, name=entry.title, provider=self.tag)
            for entry in listing.entries
            if entry.id
        ]

    async def search_albums(self, text: str, limit: int) -> list[TrackCollection]:
        return []

    async def get_track(self, track_id: str) -> Track | None:
        url = track_id if URL_PATTERN.search(track_id) else WATCH_URL.format(id=track_id)
        info = await asyncio.to_thread(self._extract_info_sync, url)
        if info is None:
            return None
        return self._entry_to_track(info, with_stream=True)

    async def get_playlist(self, playlist_id: str, limit: int) -> TrackCollection | None:
        if URL_PATTERN.search(playlist_id):
            url = playlist_id
        else:
            url = PLAYLIST_URL.format(id=playlist_id)
        listing = await asyncio.to_thread(self._extract_listing_sync, url, limit)
        if listing is None:
            return None

        tracks = [self._entry_to_track(entry) for entry in listing.entries]
        return TrackCollection(
            id=listing.id or playlist_id,
            name=listing.title or playlist_id,
            provider=self.tag,
            tracks=[t for t in tracks if t is not None],
        )

    async def get_album(self, album_id: str, limit: int) -> TrackCollection | None:
        return None

    @staticmethod
    def extract_video_id(text: str) -> str | None:
        match = VIDEO_ID_PATTERN.search(text)
        return match.group(1) if match else None

    def classify_input(self, text: str) -> ContentReference:
        video_id = self.extract_video_id(text)
        if video_id:
            return ContentReference(ContentType.TRACK, video_id)
        match = PLAYLIST_ID_PATTERN.search(text)
        if match and any(f in text for f in self.recognized_url_fragments()):
            return ContentReference(ContentType.PLAYLIST, match.group(1))
        return ContentReference.none()

    def recognized_url_fragments(self) -> tuple[str, ...]:
        return ("youtube.com", "youtu.be")

    async def login(self, args: list[str]) -> str:
        raise InvalidArgumentError(ErrorMessages.LOGIN_NOT_SUPPORTED.format(provider=self.name))

    def server_descriptor(self) -> str:
        return f"yt-dlp {ytdlp_version}"

    async def current_user(self) -> ProviderUser | None:
        return None

    async def resolve_stream_url(self, track: Track) -> str | None:
        url = track.webpage_url or WATCH_URL.format(id=track.id)
        info = await asyncio.to_thread(self._extract_info_sync, url)
        if info is None:
            return track.stream_url
        return self._extract_stream_url(info) or track.stream_url
