"""
Music Bounded Context

Track and collection model, content references, play modes and queue state.
"""

from voice_jukebox.domain.music.entities import (
    PlayQueue,
    ProviderUser,
    Track,
    TrackCollection,
)
from voice_jukebox.domain.music.value_objects import (
    AdvanceStatus,
    ContentReference,
    ContentType,
    PlayMode,
)

__all__ = [
    # Entities
    "Track",
    "TrackCollection",
    "ProviderUser",
    "PlayQueue",
    # Value Objects
    "ContentType",
    "ContentReference",
    "PlayMode",
    "AdvanceStatus",
]
