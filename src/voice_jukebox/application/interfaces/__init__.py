"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from voice_jukebox.application.interfaces.catalog_provider import CatalogProvider, ProviderFactory
from voice_jukebox.application.interfaces.channel_membership import ChannelMembership
from voice_jukebox.application.interfaces.playback_control import PlaybackControl
from voice_jukebox.application.interfaces.preference_store import PreferenceStore
from voice_jukebox.application.interfaces.status_reporter import StatusReporter

__all__ = [
    "CatalogProvider",
    "ProviderFactory",
    "ChannelMembership",
    "PlaybackControl",
    "PreferenceStore",
    "StatusReporter",
]
