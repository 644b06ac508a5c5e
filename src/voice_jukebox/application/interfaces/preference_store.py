"""Port interface for persisted user preferences."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ...domain.music.value_objects import PlayMode


class PreferenceStore(ABC):
    """Interface for the small key/value state that survives restarts.

    Only the play mode and provider login state are stored; the queue is not.
    """

    @abstractmethod
    async def get_play_mode(self) -> "PlayMode | None":
        ...

    @abstractmethod
    async def save_play_mode(self, mode: "PlayMode") -> None:
        ...

    @abstractmethod
    async def get_provider_state(self, tag: str) -> dict[str, Any]:
        """Saved state for provider ``tag``; empty when nothing is stored."""
        ...

    @abstractmethod
    async def save_provider_state(self, tag: str, state: dict[str, Any]) -> None:
        ...
