"""
Application Queries

Read-only status models. Queries do not modify state, only describe it.
"""

from voice_jukebox.application.queries.playback_status import (
    CollectionInfo,
    PlaybackStatus,
    ProviderSearchResult,
    ProviderStatus,
    TrackInfo,
)

__all__ = [
    "CollectionInfo",
    "PlaybackStatus",
    "ProviderSearchResult",
    "ProviderStatus",
    "TrackInfo",
]
