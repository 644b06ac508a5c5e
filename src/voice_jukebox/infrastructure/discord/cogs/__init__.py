"""Discord cogs - command handlers."""

from voice_jukebox.infrastructure.discord.cogs.event_cog import EventCog
from voice_jukebox.infrastructure.discord.cogs.jukebox_cog import JukeboxCog

__all__ = [
    "EventCog",
    "JukeboxCog",
]
