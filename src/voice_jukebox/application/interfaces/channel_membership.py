"""Port interface for voice channel membership queries."""

from __future__ import annotations

from abc import ABC, abstractmethod

from voice_jukebox.domain.shared.types import DiscordSnowflake


class ChannelMembership(ABC):
    """Interface for querying who is in a voice channel.

    Enter, leave and move notifications are delivered separately as events
    on the event bus.
    """

    @property
    @abstractmethod
    def self_id(self) -> DiscordSnowflake | None:
        """Member id of the bot itself, or None before login."""
        ...

    @abstractmethod
    def current_channel_id(self) -> DiscordSnowflake | None:
        """Voice channel the bot currently occupies, or None."""
        ...

    @abstractmethod
    async def list_members(self, channel_id: DiscordSnowflake) -> list[DiscordSnowflake]:
        """All member ids in ``channel_id``, the bot included when present."""
        ...

    @abstractmethod
    async def join(self, channel_id: DiscordSnowflake) -> bool:
        """Connect to, or move into, ``channel_id``."""
        ...
