"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the jukebox services, providers, adapters and
front-ends. Components are created on-demand and cached for reuse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.channel_membership import ChannelMembership
    from ..application.interfaces.playback_control import PlaybackControl
    from ..application.interfaces.preference_store import PreferenceStore
    from ..application.interfaces.status_reporter import StatusReporter
    from ..application.services.jukebox_service import JukeboxService
    from ..application.services.presence_tracker import PresenceTracker
    from ..application.services.provider_registry import ProviderRegistry
    from ..application.services.queue_engine import QueueEngine
    from ..application.services.request_resolver import RequestResolver
    from ..domain.shared.events import EventBus
    from ..infrastructure.persistence.database import Database
    from ..infrastructure.web.server import JukeboxWebServer
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed. Adapters may be
    replaced before first use (tests assign the private fields directly).
    """

    settings: Settings
    _bot: Bot | None = None

    # Persistence layer
    _database: Database | None = None
    _preference_store: PreferenceStore | None = None

    # Infrastructure adapters
    _event_bus: EventBus | None = None
    _channel_membership: ChannelMembership | None = None
    _playback_control: PlaybackControl | None = None
    _status_reporter: StatusReporter | None = None

    # Application services
    _provider_registry: ProviderRegistry | None = None
    _request_resolver: RequestResolver | None = None
    _queue_engine: QueueEngine | None = None
    _presence_tracker: PresenceTracker | None = None
    _jukebox_service: JukeboxService | None = None

    # Front-ends
    _web_server: JukeboxWebServer | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    def reload_settings(self) -> Settings:
        """Re-read settings from the environment and keep them for later lookups."""
        from .settings import reload_settings

        self.settings = reload_settings()
        return self.settings

    # === Database ===

    @property
    def database(self) -> Database:
        """Get the database connection manager."""
        if self._database is None:
            from ..infrastructure.persistence.database import Database

            self._database = Database(self.settings.database.url, settings=self.settings.database)
        return self._database

    @property
    def preference_store(self) -> PreferenceStore:
        """Get the persisted preference store."""
        if self._preference_store is None:
            from ..infrastructure.persistence.repositories.preference_repository import (
                SQLitePreferenceStore,
            )

            self._preference_store = SQLitePreferenceStore(self.database)
        return self._preference_store

    # === Infrastructure Adapters ===

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            from ..domain.shared.events import EventBus

            self._event_bus = EventBus()
        return self._event_bus

    @property
    def channel_membership(self) -> ChannelMembership:
        """Get the Discord voice membership adapter."""
        if self._channel_membership is None:
            from ..infrastructure.discord.adapters.membership_adapter import (
                DiscordChannelMembership,
            )

            self._channel_membership = DiscordChannelMembership(
                self.bot, guild_id=self.settings.discord.guild_id
            )
        return self._channel_membership

    @property
    def playback_control(self) -> PlaybackControl:
        """Get the Discord audio playback adapter."""
        if self._playback_control is None:
            from ..infrastructure.discord.adapters.membership_adapter import (
                DiscordChannelMembership,
            )
            from ..infrastructure.discord.adapters.playback_adapter import (
                DiscordPlaybackAdapter,
            )

            membership = self.channel_membership
            assert isinstance(membership, DiscordChannelMembership)
            self._playback_control = DiscordPlaybackAdapter(
                self.bot,
                membership,
                self.provider_registry.resolve_stream_url,
                self.settings.playback,
            )
        return self._playback_control

    @property
    def status_reporter(self) -> StatusReporter:
        if self._status_reporter is None:
            from ..infrastructure.discord.adapters.status_reporter import DiscordStatusReporter

            self._status_reporter = DiscordStatusReporter(
                self.bot, text_channel_id=self.settings.discord.text_channel_id
            )
        return self._status_reporter

    # === Application Services ===

    @property
    def provider_registry(self) -> ProviderRegistry:
        """Get the provider registry built from the static provider table."""
        if self._provider_registry is None:
            from ..application.services.provider_registry import ProviderRegistry
            from ..infrastructure.providers import PROVIDER_REGISTRY

            self._provider_registry = ProviderRegistry(
                PROVIDER_REGISTRY, preference_store=self.preference_store
            )
        return self._provider_registry

    @property
    def request_resolver(self) -> RequestResolver:
        if self._request_resolver is None:
            from ..application.services.request_resolver import RequestResolver

            self._request_resolver = RequestResolver(self.provider_registry)
        return self._request_resolver

    @property
    def queue_engine(self) -> QueueEngine:
        """Get the queue/mode engine."""
        if self._queue_engine is None:
            from ..application.services.queue_engine import QueueEngine

            playback = self.settings.playback
            self._queue_engine = QueueEngine(
                playback=self.playback_control,
                status_reporter=self.status_reporter,
                mode=playback.play_mode,
                idle_text=playback.status_idle_text,
                announce_tracks=playback.announce_tracks,
            )
        return self._queue_engine

    @property
    def presence_tracker(self) -> PresenceTracker:
        """Get the auto-pause presence tracker."""
        if self._presence_tracker is None:
            from ..application.services.presence_tracker import PresenceTracker

            self._presence_tracker = PresenceTracker(
                membership=self.channel_membership,
                playback=self.playback_control,
                event_bus=self.event_bus,
                auto_pause=self.settings.playback.auto_pause,
            )
        return self._presence_tracker

    @property
    def jukebox_service(self) -> JukeboxService:
        """Get the orchestrator shared by both front-ends."""
        if self._jukebox_service is None:
            from ..application.services.jukebox_service import JukeboxService

            self._jukebox_service = JukeboxService(
                registry=self.provider_registry,
                resolver=self.request_resolver,
                engine=self.queue_engine,
                playback=self.playback_control,
                presence=self.presence_tracker,
                membership=self.channel_membership,
                preference_store=self.preference_store,
                settings_loader=self.reload_settings,
            )
        return self._jukebox_service

    # === Front-ends ===

    @property
    def web_server(self) -> JukeboxWebServer:
        """Get the HTTP API server."""
        if self._web_server is None:
            from ..infrastructure.web.server import JukeboxWebServer

            self._web_server = JukeboxWebServer(self.jukebox_service, self.settings.web)
        return self._web_server

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Initialize all async resources and wire the cross-cutting callbacks."""
        await self.database.initialize()

        saved_mode = await self.preference_store.get_play_mode()
        if saved_mode is not None:
            self.queue_engine.set_mode(saved_mode)

        await self.provider_registry.configure(self.settings.providers)

        self.playback_control.set_on_finished_callback(self.queue_engine.on_track_finished)
        self.presence_tracker.start()

    async def shutdown(self) -> None:
        """Shutdown and cleanup all resources."""
        if self._presence_tracker is not None:
            self._presence_tracker.stop()

        if self._playback_control is not None:
            self._playback_control.set_on_finished_callback(None)

        if self._web_server is not None:
            try:
                await self._web_server.stop()
            except Exception as exc:
                logger.warning(LogTemplates.BOT_CONTAINER_SHUTDOWN_ERROR, exc)

        if self._provider_registry is not None:
            await self._provider_registry.close()

        if self._database is not None:
            await self._database.close()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
