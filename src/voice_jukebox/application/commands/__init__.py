"""
Application Commands

Request and result objects exchanged between the front-ends and the jukebox.
"""

from voice_jukebox.application.commands.command_result import CommandResult, CommandStatus
from voice_jukebox.application.commands.playback_request import PlaybackRequest

__all__ = [
    "CommandResult",
    "CommandStatus",
    "PlaybackRequest",
]
