"""CatalogProvider implementation for NetEase Cloud Music.

Talks to a self-hosted NeteaseCloudMusicApi server over HTTP. The login
cookie is kept in the preference store so it survives restarts.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any, ClassVar, Final

import httpx
from pydantic import BaseModel, ConfigDict, Field

from voice_jukebox.application.interfaces.catalog_provider import CatalogProvider
from voice_jukebox.domain.music.entities import ProviderUser, Track, TrackCollection
from voice_jukebox.domain.music.value_objects import ContentReference, ContentType
from voice_jukebox.domain.shared.constants import SearchConstants
from voice_jukebox.domain.shared.exceptions import InvalidArgumentError, UnexpectedError
from voice_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from voice_jukebox.application.interfaces.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

SEARCH_TYPE_SONG: Final[int] = 1
SEARCH_TYPE_ALBUM: Final[int] = 10
SEARCH_TYPE_PLAYLIST: Final[int] = 1000
OK_CODE: Final[int] = 200

_LINK_PATTERNS: Final[tuple[tuple[re.Pattern[str], ContentType], ...]] = (
    (re.compile(r"music\.163\.com/.*?\bsong(?:\?id=|/)(\d+)"), ContentType.TRACK),
    (re.compile(r"music\.163\.com/.*?\bplaylist(?:\?id=|/)(\d+)"), ContentType.PLAYLIST),
    (re.compile(r"music\.163\.com/.*?\balbum(?:\?id=|/)(\d+)"), ContentType.ALBUM),
    (re.compile(r"music\.163\.com/.*?\b(?:program|dj)(?:\?id=|/)(\d+)"), ContentType.PODCAST),
)


class NeteaseOptions(BaseModel):
    """Options block of the ``netease`` provider entry."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    api_url: str = "http://127.0.0.1:3000"
    timeout_s: float = Field(default=10.0, gt=0)
    quality: str = "standard"
    cookie: str | None = None


def _song_to_track(song: dict[str, Any], provider: str) -> Track | None:
    song_id = song.get("id")
    name = song.get("name")
    if not song_id or not name:
        return None
    artists = song.get("ar") or song.get("artists") or []
    album = song.get("al") or song.get("album") or {}
    duration_ms = song.get("dt") or song.get("duration")
    return Track(
        id=str(song_id),
        name=str(name)[:500],
        author="/".join(a.get("name", "") for a in artists if a.get("name")),
        provider=provider,
        album=album.get("name") or None,
        duration_seconds=int(duration_ms) // 1000 if duration_ms else None,
        webpage_url=f"https://music.163.com/song?id={song_id}",
    )


class NeteaseProvider(CatalogProvider):
    tag: ClassVar[str] = "netease"
    name: ClassVar[str] = "NetEase Cloud Music"
    default_aliases: ClassVar[tuple[str, ...]] = ("netease", "wy", "163")

    def __init__(
        self,
        options: NeteaseOptions | None = None,
        preference_store: PreferenceStore | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._options = options or NeteaseOptions()
        self._store = preference_store
        self._transport = transport
        self._cookie: str | None = self._options.cookie
        self._state_loaded = False
        self._client = self._make_client()

    def _make_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._options.api_url.rstrip("/"),
            timeout=self._options.timeout_s,
            transport=self._transport,
        )

    async def refresh(self, options: BaseModel) -> None:
        new_options = NeteaseOptions.model_validate(options.model_dump())
        connection = (new_options.api_url, new_options.timeout_s)
        if connection != (self._options.api_url, self._options.timeout_s):
            await self._client.aclose()
            self._options = new_options
            self._client = self._make_client()
        else:
            self._options = new_options
        if new_options.cookie:
            self._cookie = new_options.cookie

    async def close(self) -> None:
        await self._client.aclose()

    # ── HTTP ────────────────────────────────────────────────────────

    async def _load_state(self) -> None:
        if self._state_loaded:
            return
        self._state_loaded = True
        if self._store is None or self._cookie:
            return
        state = await self._store.get_provider_state(self.tag)
        self._cookie = state.get("cookie") or None

    async def _request(self, path: str, **params: Any) -> dict[str, Any]:
        await self._load_state()
        if self._cookie:
            params["cookie"] = self._cookie
        logger.debug(LogTemplates.NETEASE_REQUEST, "GET", path)

        try:
            response = await self._client.get(path, params=params)
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise UnexpectedError(
                ErrorMessages.PROVIDER_REQUEST_FAILED.format(provider=self.name, error=e), cause=e
            ) from e

        code = body.get("code", OK_CODE) if isinstance(body, dict) else None
        if code != OK_CODE:
            logger.warning(LogTemplates.NETEASE_API_ERROR, path, code)
            message = body.get("message") or body.get("msg") if isinstance(body, dict) else None
            raise UnexpectedError(
                ErrorMessages.PROVIDER_REQUEST_FAILED.format(
                    provider=self.name, error=message or f"code {code}"
                )
            )
        return body

    async def _search(self, text: str, search_type: int, limit: int) -> dict[str, Any]:
        body = await self._request(
            "/cloudsearch",
            keywords=text,
            type=search_type,
            limit=limit or SearchConstants.MAX_LIMIT,
        )
        return body.get("result") or {}

    # ── Search ──────────────────────────────────────────────────────

    async def search_tracks(self, text: str, limit: int) -> list[Track]:
        result = await self._search(text, SEARCH_TYPE_SONG, limit)
        tracks = [_song_to_track(s, self.tag) for s in result.get("songs") or []]
        return [t for t in tracks if t is not None]

    async def search_playlists(self, text: str, limit: int) -> list[TrackCollection]:
        result = await self._search(text, SEARCH_TYPE_PLAYLIST, limit)
        return [
            TrackCollection(id=str(p["id"]), name=p.get("name") or "", provider=self.tag)
            for p in result.get("playlists") or []
            if p.get("id")
        ]

    async def search_albums(self, text: str, limit: int) -> list[TrackCollection]:
        result = await self._search(text, SEARCH_TYPE_ALBUM, limit)
        return [
            TrackCollection(id=str(a["id"]), name=a.get("name") or "", provider=self.tag)
            for a in result.get("albums") or []
            if a.get("id")
        ]

    # ── Lookups ─────────────────────────────────────────────────────

    async def get_track(self, track_id: str) -> Track | None:
        body = await self._request("/song/detail", ids=track_id)
        songs = body.get("songs") or []
        return _song_to_track(songs[0], self.tag) if songs else None

    async def get_podcast(self, podcast_id: str) -> Track | None:
        body = await self._request("/dj/program/detail", id=podcast_id)
        program = body.get("program") or {}
        song = program.get("mainSong")
        if not song:
            return None
        if program.get("name"):
            song = {**song, "name": program["name"]}
        return _song_to_track(song, self.tag)

    async def get_playlist(self, playlist_id: str, limit: int) -> TrackCollection | None:
        detail = await self._request("/playlist/detail", id=playlist_id)
        playlist = detail.get("playlist")
        if not playlist:
            return None

        params: dict[str, Any] = {"id": playlist_id}
        if limit > 0:
            params["limit"] = limit
        body = await self._request("/playlist/track/all", **params)
        tracks = [_song_to_track(s, self.tag) for s in body.get("songs") or []]
        return TrackCollection(
            id=str(playlist.get("id") or playlist_id),
            name=playlist.get("name") or playlist_id,
            provider=self.tag,
            tracks=[t for t in tracks if t is not None],
        )

    async def get_album(self, album_id: str, limit: int) -> TrackCollection | None:
        body = await self._request("/album", id=album_id)
        album = body.get("album")
        if not album:
            return None
        songs = body.get("songs") or []
        if limit > 0:
            songs = songs[:limit]
        tracks = [_song_to_track(s, self.tag) for s in songs]
        return TrackCollection(
            id=str(album.get("id") or album_id),
            name=album.get("name") or album_id,
            provider=self.tag,
            tracks=[t for t in tracks if t is not None],
        )

    def classify_input(self, text: str) -> ContentReference:
        for pattern, content_type in _LINK_PATTERNS:
            match = pattern.search(text)
            if match:
                return ContentReference(content_type, match.group(1))
        return ContentReference.none()

    def recognized_url_fragments(self) -> tuple[str, ...]:
        return ("music.163.com", "163cn.tv")

    async def resolve_stream_url(self, track: Track) -> str | None:
        body = await self._request("/song/url/v1", id=track.id, level=self._options.quality)
        data = body.get("data") or []
        if not data:
            return None
        return data[0].get("url") or None

    # ── Account ─────────────────────────────────────────────────────

    async def login(self, args: list[str]) -> str:
        """``cookie <value>`` or ``phone <number> <password>``."""
        if len(args) >= 2 and args[0] == "cookie":
            cookie = " ".join(args[1:])
        elif len(args) == 3 and args[0] == "phone":
            body = await self._request("/login/cellphone", phone=args[1], password=args[2])
            cookie = body.get("cookie") or ""
            if not cookie:
                raise UnexpectedError(ErrorMessages.LOGIN_FAILED.format(reason="no cookie"))
        else:
            raise InvalidArgumentError(ErrorMessages.LOGIN_USAGE_NETEASE, argument="args")

        self._cookie = cookie
        self._state_loaded = True
        user = await self.current_user()
        if user is None:
            raise UnexpectedError(ErrorMessages.LOGIN_FAILED.format(reason="not logged in"))

        if self._store is not None:
            await self._store.save_provider_state(self.tag, {"cookie": cookie})
        logger.info(LogTemplates.PROVIDER_LOGGED_IN, self.tag, user.name)
        return f"Logged in to {self.name} as {user.name}"

    async def current_user(self) -> ProviderUser | None:
        await self._load_state()
        if not self._cookie:
            return None
        body = await self._request("/login/status")
        data = body.get("data") if isinstance(body.get("data"), dict) else body
        profile = data.get("profile") or {}
        user_id = profile.get("userId")
        if not user_id:
            return None
        return ProviderUser(id=str(user_id), name=profile.get("nickname") or str(user_id))

    def server_descriptor(self) -> str:
        return self._options.api_url
