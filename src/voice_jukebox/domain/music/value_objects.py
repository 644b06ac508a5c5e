"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum

from voice_jukebox.domain.shared.exceptions import InvalidArgumentError
from voice_jukebox.domain.shared.messages import ErrorMessages


class ContentType(Enum):
    """What a piece of raw input text refers to."""

    NONE = "none"  # plain search text
    TRACK = "track"
    PLAYLIST = "playlist"
    ALBUM = "album"
    PODCAST = "podcast"

    @classmethod
    def from_name(cls, name: str) -> ContentType:
        """Map the short names used by front-ends (song, list, album, ...) to a type."""
        aliases = {
            "song": cls.TRACK,
            "track": cls.TRACK,
            "list": cls.PLAYLIST,
            "playlist": cls.PLAYLIST,
            "album": cls.ALBUM,
            "podcast": cls.PODCAST,
            "auto": cls.NONE,
            "none": cls.NONE,
        }
        try:
            return aliases[name.strip().lower()]
        except KeyError:
            raise InvalidArgumentError(
                ErrorMessages.UNKNOWN_CONTENT_TYPE.format(name=name), argument="type"
            ) from None


@dataclass(frozen=True)
class ContentReference:
    """Classification of a raw input string plus the provider-scoped id it names."""

    type: ContentType
    id: str | None = None

    def __post_init__(self) -> None:
        if self.type is ContentType.NONE:
            if self.id is not None:
                raise ValueError(ErrorMessages.REFERENCE_ID_WITHOUT_TYPE)
        elif not self.id or not self.id.strip():
            raise ValueError(ErrorMessages.REFERENCE_ID_REQUIRED)

    def __str__(self) -> str:
        if self.type is ContentType.NONE:
            return ContentType.NONE.value
        return f"{self.type.value}:{self.id}"

    @classmethod
    def none(cls) -> ContentReference:
        return cls(ContentType.NONE)

    @property
    def is_none(self) -> bool:
        return self.type is ContentType.NONE


class PlayMode(IntEnum):
    """Policy governing next-track selection.

    The numeric values are stable: they are persisted and accepted by the
    HTTP ``setmode`` route.
    """

    SEQUENTIAL = 0
    SEQUENTIAL_LOOP = 1
    RANDOM = 2
    RANDOM_LOOP = 3

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @property
    def is_random(self) -> bool:
        return self in (PlayMode.RANDOM, PlayMode.RANDOM_LOOP)

    @property
    def is_looping(self) -> bool:
        return self in (PlayMode.SEQUENTIAL_LOOP, PlayMode.RANDOM_LOOP)

    @classmethod
    def parse(cls, value: int | str | PlayMode) -> PlayMode:
        """Accept a PlayMode, its numeric value, or its name (case-insensitive)."""
        if isinstance(value, PlayMode):
            return value
        valid = ", ".join(f"{m.value}={m.name.lower()}" for m in cls)
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("-").isdigit():
                value = int(text)
            else:
                try:
                    return cls[text.upper().replace(" ", "_")]
                except KeyError:
                    raise InvalidArgumentError(
                        ErrorMessages.INVALID_PLAY_MODE.format(value=value, valid=valid),
                        argument="mode",
                    ) from None
        try:
            return cls(value)
        except ValueError:
            raise InvalidArgumentError(
                ErrorMessages.INVALID_PLAY_MODE.format(value=value, valid=valid),
                argument="mode",
            ) from None


_MODE_LABELS: dict[PlayMode, str] = {
    PlayMode.SEQUENTIAL: "Sequential",
    PlayMode.SEQUENTIAL_LOOP: "Sequential loop",
    PlayMode.RANDOM: "Random",
    PlayMode.RANDOM_LOOP: "Random loop",
}


class AdvanceStatus(Enum):
    """Outcome of selecting and starting the next track."""

    STARTED = "started"
    EMPTY = "empty"
    FAILED = "failed"
