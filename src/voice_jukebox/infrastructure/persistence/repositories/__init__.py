"""SQLite repository implementations."""

from voice_jukebox.infrastructure.persistence.repositories.preference_repository import (
    SQLitePreferenceStore,
)

__all__ = [
    "SQLitePreferenceStore",
]
