"""The resolved unit of work produced for every play/add style command."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from voice_jukebox.application.interfaces.catalog_provider import CatalogProvider
from voice_jukebox.domain.music.value_objects import ContentReference, ContentType
from voice_jukebox.domain.shared.constants import QueueConstants
from voice_jukebox.domain.shared.types import ResultLimit


class PlaybackRequest(BaseModel):
    """Provider, content reference, raw text and result limit for one command."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    provider: CatalogProvider
    reference: ContentReference
    text: str
    limit: ResultLimit = QueueConstants.DEFAULT_RESULT_LIMIT

    @property
    def provider_tag(self) -> str:
        return self.provider.tag

    @property
    def content_type(self) -> ContentType:
        return self.reference.type
