"""Port interface for surfacing playback status to listeners."""

from __future__ import annotations

from abc import ABC, abstractmethod


class StatusReporter(ABC):
    """Interface for the bot's visible status line and announcements."""

    @abstractmethod
    async def set_status_text(self, text: str) -> None:
        ...

    @abstractmethod
    async def send_message(self, text: str) -> None:
        """Post an announcement to the configured text channel."""
        ...
