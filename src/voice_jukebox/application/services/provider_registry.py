"""Registry of configured catalog providers.

Provider classes are registered statically by tag; which of them are enabled,
which aliases they answer to and what options they receive comes from
configuration and is re-applied on every reload.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from voice_jukebox.application.interfaces.catalog_provider import CatalogProvider, ProviderFactory
from voice_jukebox.domain.shared.exceptions import ProviderDisabledError, ProviderNotFoundError
from voice_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from voice_jukebox.application.interfaces.preference_store import PreferenceStore
    from voice_jukebox.config.settings import ProvidersSettings
    from voice_jukebox.domain.music.entities import Track

logger = logging.getLogger(__name__)


@dataclass
class ProviderSlot:
    """A built provider plus its configured aliases and switch."""

    tag: str
    provider: CatalogProvider
    aliases: tuple[str, ...] = field(default_factory=tuple)
    enabled: bool = True

    def matches(self, alias: str) -> bool:
        """Exact match on the tag or any configured alias."""
        return alias == self.tag or alias in self.aliases


class ProviderRegistry:
    """Builds providers from the static factory table and answers lookups.

    Iteration order is the registration order of ``factories``; the resolver
    relies on it for deterministic provider selection.
    """

    def __init__(
        self,
        factories: Mapping[str, ProviderFactory],
        *,
        preference_store: PreferenceStore | None = None,
    ) -> None:
        self._factories = dict(factories)
        self._preference_store = preference_store
        self._slots: dict[str, ProviderSlot] = {}
        self._default_tag: str | None = None

    async def configure(self, settings: ProvidersSettings) -> None:
        """Build or refresh every registered provider from ``settings``."""
        for entry in settings.entries:
            if entry.tag not in self._factories:
                logger.warning(ErrorMessages.UNKNOWN_PROVIDER_TAG.format(tag=entry.tag))

        slots: dict[str, ProviderSlot] = {}
        for tag, factory in self._factories.items():
            entry = settings.entry_for(tag)
            options = factory.options_type.model_validate(entry.options)

            existing = self._slots.get(tag)
            if existing is not None:
                provider = existing.provider
                await provider.refresh(options)
            else:
                provider = factory.build(options, self._preference_store)

            aliases = entry.aliases or provider.default_aliases
            slots[tag] = ProviderSlot(
                tag=tag, provider=provider, aliases=tuple(aliases), enabled=entry.enabled
            )
            logger.info(LogTemplates.PROVIDER_REGISTERED, tag, ",".join(aliases), entry.enabled)

        self._slots = slots
        self._default_tag = settings.default

    # ── Lookups ─────────────────────────────────────────────────────

    def slots(self) -> list[ProviderSlot]:
        return list(self._slots.values())

    def enabled_slots(self) -> list[ProviderSlot]:
        return [slot for slot in self._slots.values() if slot.enabled]

    def enabled_providers(self) -> list[CatalogProvider]:
        return [slot.provider for slot in self.enabled_slots()]

    def find_alias(self, alias: str) -> ProviderSlot | None:
        """Slot whose tag or aliases match ``alias`` exactly, enabled or not.

        Enabled providers win when a disabled one shares the alias.
        """
        matches = [slot for slot in self._slots.values() if slot.matches(alias)]
        for slot in matches:
            if slot.enabled:
                return slot
        return matches[0] if matches else None

    def get(self, tag: str) -> CatalogProvider | None:
        slot = self._slots.get(tag)
        return slot.provider if slot else None

    def require(self, name: str) -> CatalogProvider:
        """Enabled provider for a tag or alias.

        Raises:
            ProviderNotFoundError: Nothing is registered under ``name``.
            ProviderDisabledError: The provider exists but is disabled.
        """
        slot = self.find_alias(name)
        if slot is None:
            raise ProviderNotFoundError(name)
        if not slot.enabled:
            raise ProviderDisabledError(name)
        return slot.provider

    def default_provider(self) -> CatalogProvider:
        """The configured default provider, which must be registered and enabled."""
        tag = self._default_tag or ""
        slot = self._slots.get(tag)
        if slot is None or not slot.enabled:
            raise ProviderNotFoundError(
                tag, ErrorMessages.DEFAULT_PROVIDER_MISSING.format(tag=tag)
            )
        return slot.provider

    async def resolve_stream_url(self, track: Track) -> str | None:
        """Ask the provider that produced ``track`` for a playable URL."""
        provider = self.get(track.provider)
        if provider is None:
            return track.stream_url
        return await provider.resolve_stream_url(track) or track.stream_url

    async def close(self) -> None:
        for slot in self._slots.values():
            try:
                await slot.provider.close()
                logger.debug(LogTemplates.PROVIDER_CLOSED, slot.tag)
            except Exception as e:
                logger.warning(LogTemplates.PROVIDER_CLOSE_FAILED, slot.tag, e)
        self._slots = {}
