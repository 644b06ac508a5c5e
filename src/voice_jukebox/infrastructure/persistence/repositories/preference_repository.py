"""SQLite implementation of the preference store."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from voice_jukebox.application.interfaces.preference_store import PreferenceStore
from voice_jukebox.domain.music.value_objects import PlayMode
from voice_jukebox.domain.shared.constants import DatabaseTables, PreferenceKeys
from voice_jukebox.domain.shared.exceptions import InvalidArgumentError
from voice_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)


class SQLitePreferenceStore(PreferenceStore):
    """JSON values in a single key/value table."""

    def __init__(self, database: Database) -> None:
        self._db = database

    async def _get(self, key: str) -> Any:
        row = await self._db.fetch_one(
            f"SELECT value FROM {DatabaseTables.PREFERENCES} WHERE key = ?",  # noqa: S608
            (key,),
        )
        if row is None:
            return None
        try:
            return json.loads(row["value"])
        except json.JSONDecodeError as e:
            logger.warning(LogTemplates.PREFERENCE_LOAD_FAILED, key, e)
            return None

    async def _set(self, key: str, value: Any) -> None:
        await self._db.execute(
            f"""
            INSERT INTO {DatabaseTables.PREFERENCES} (key, value, updated_at)
            VALUES (?, ?, strftime('%Y-%m-%dT%H:%M:%f','now'))
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,  # noqa: S608
            (key, json.dumps(value)),
        )
        logger.debug(LogTemplates.PREFERENCE_SAVED, key)

    async def get_play_mode(self) -> PlayMode | None:
        value = await self._get(PreferenceKeys.PLAY_MODE)
        if value is None:
            return None
        try:
            return PlayMode.parse(value)
        except InvalidArgumentError as e:
            logger.warning(LogTemplates.PREFERENCE_LOAD_FAILED, PreferenceKeys.PLAY_MODE, e)
            return None

    async def save_play_mode(self, mode: PlayMode) -> None:
        await self._set(PreferenceKeys.PLAY_MODE, int(mode))

    async def get_provider_state(self, tag: str) -> dict[str, Any]:
        value = await self._get(PreferenceKeys.PROVIDER_STATE.format(tag=tag))
        return value if isinstance(value, dict) else {}

    async def save_provider_state(self, tag: str, state: dict[str, Any]) -> None:
        await self._set(PreferenceKeys.PROVIDER_STATE.format(tag=tag), state)
