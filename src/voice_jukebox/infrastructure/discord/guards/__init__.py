"""Voice channel guard functions for Discord cogs."""

from voice_jukebox.infrastructure.discord.guards.voice_guards import (
    get_member,
    get_member_voice_channel,
    reply_result,
    send_ephemeral,
)

__all__ = [
    "get_member",
    "get_member_voice_channel",
    "reply_result",
    "send_ephemeral",
]
