"""Turns free command text into a provider, a content reference and a limit.

Input is matched against provider aliases first, then provider link patterns,
then provider classifiers, and finally falls back to the default provider.
"""

from __future__ import annotations

import logging
import re

from voice_jukebox.application.commands.playback_request import PlaybackRequest
from voice_jukebox.application.interfaces.catalog_provider import CatalogProvider
from voice_jukebox.application.services.provider_registry import ProviderRegistry
from voice_jukebox.domain.music.value_objects import ContentReference, ContentType
from voice_jukebox.domain.shared.constants import QueueConstants
from voice_jukebox.domain.shared.exceptions import InvalidArgumentError, ProviderDisabledError
from voice_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

logger = logging.getLogger(__name__)

_BBCODE_TAG = re.compile(r"\[/?[A-Za-z]+(?:=[^\]]*)?\]")
_ANGLE_LINK = re.compile(r"<((?:https?|ftp)://[^>\s]+)>")
_DECORATIONS = ("**", "||", "`")
_NUMBER = re.compile(r"^\d+$")
_MAX_TOKEN = "max"
_MAX_LIMIT_TOKEN_COUNT = 4


def strip_markup(text: str) -> str:
    """Remove chat decoration around pasted links and text.

    ``__`` is left alone since it appears inside ids and URLs.
    """
    text = _BBCODE_TAG.sub("", text)
    text = _ANGLE_LINK.sub(r"\1", text)
    for decoration in _DECORATIONS:
        text = text.replace(decoration, "")
    return text


def tokenize(text: str, max_tokens: int) -> list[str]:
    """Split on whitespace, collapsing the tail into the last allowed token."""
    tokens = text.split()
    if max_tokens >= 1 and len(tokens) > max_tokens:
        head = tokens[: max_tokens - 1]
        tail = " ".join(tokens[max_tokens - 1 :])
        tokens = head + [tail]
    return tokens


def pop_limit(tokens: list[str]) -> int:
    """Pop a trailing ``max`` or number token and return the limit it sets."""
    if len(tokens) < 2:
        return QueueConstants.DEFAULT_RESULT_LIMIT
    last = tokens[-1]
    if last == _MAX_TOKEN:
        tokens.pop()
        return QueueConstants.UNLIMITED
    if _NUMBER.match(last) and len(tokens) <= _MAX_LIMIT_TOKEN_COUNT:
        tokens.pop()
        return int(last)
    return QueueConstants.DEFAULT_RESULT_LIMIT


class RequestResolver:
    """Resolves raw command text against the provider registry."""

    def __init__(self, registry: ProviderRegistry) -> None:
        self._registry = registry

    def resolve(self, raw: str, max_tokens: int = 3) -> PlaybackRequest:
        """Build a request from free text.

        Raises:
            InvalidArgumentError: The text has no tokens.
            ProviderDisabledError: The text names a disabled provider.
            ProviderNotFoundError: Nothing matched and the default provider
                is missing or disabled.
        """
        tokens = tokenize(strip_markup(raw or ""), max_tokens)
        if not tokens:
            raise InvalidArgumentError(ErrorMessages.EMPTY_COMMAND, argument="query")

        limit = pop_limit(tokens)

        provider: CatalogProvider | None = None
        reference: ContentReference | None = None

        if len(tokens) >= 2:
            slot = self._registry.find_alias(tokens[0])
            if slot is not None:
                if not slot.enabled:
                    raise ProviderDisabledError(tokens[0])
                provider = slot.provider
                text = " ".join(tokens[1:])
            else:
                text = " ".join(tokens)
        else:
            text = tokens[0]

        if provider is None:
            provider, reference = self._detect(text)

        if reference is None:
            reference = self._classify(provider, text) or ContentReference.none()

        request = PlaybackRequest(provider=provider, reference=reference, text=text, limit=limit)
        logger.debug(LogTemplates.RESOLVER_RESOLVED, raw, provider.tag, reference, limit)
        return request

    def explicit(
        self,
        provider_alias: str,
        text: str,
        content_type: ContentType,
        limit: int = QueueConstants.DEFAULT_RESULT_LIMIT,
    ) -> PlaybackRequest:
        """Build a request for a named provider with the content type forced.

        Typed tracks, playlists and albums take ``text`` as the id unless the
        provider's classifier already recognizes it as that type (a pasted
        link). Other types are classified normally.
        """
        text = strip_markup(text or "").strip()
        if not text:
            raise InvalidArgumentError(ErrorMessages.MISSING_QUERY, argument="query")

        provider = self._registry.require(provider_alias)
        classified = self._classify(provider, text)

        if content_type in (ContentType.TRACK, ContentType.PLAYLIST, ContentType.ALBUM):
            if classified is not None and classified.type is content_type:
                reference = classified
            else:
                reference = ContentReference(content_type, text)
        else:
            reference = classified or ContentReference.none()

        return PlaybackRequest(provider=provider, reference=reference, text=text, limit=limit)

    def resolve_typed(self, query: str, content_type: ContentType) -> PlaybackRequest:
        """Resolve ``<alias> <id-or-text>`` with a forced type, else fall back to free text."""
        parts = strip_markup(query or "").split(None, 1)
        if len(parts) == 2:
            slot = self._registry.find_alias(parts[0])
            if slot is not None and slot.enabled:
                return self.explicit(parts[0], parts[1], content_type)
        return self.resolve(query, QueueConstants.TRACK_COMMAND_TOKENS)

    # ── Detection ───────────────────────────────────────────────────

    def _detect(self, text: str) -> tuple[CatalogProvider, ContentReference | None]:
        providers = self._registry.enabled_providers()

        for provider in providers:
            for fragment in provider.recognized_url_fragments():
                if fragment and fragment in text:
                    logger.debug(LogTemplates.RESOLVER_URL_MATCH, fragment, provider.tag)
                    return provider, None

        for provider in providers:
            reference = self._classify(provider, text)
            if reference is not None and not reference.is_none:
                logger.debug(LogTemplates.RESOLVER_CLASSIFIER_MATCH, provider.tag, reference)
                return provider, reference

        return self._registry.default_provider(), ContentReference.none()

    @staticmethod
    def _classify(provider: CatalogProvider, text: str) -> ContentReference | None:
        try:
            return provider.classify_input(text)
        except Exception as e:
            logger.warning(LogTemplates.RESOLVER_CLASSIFIER_FAILED, provider.tag, e)
            return None
