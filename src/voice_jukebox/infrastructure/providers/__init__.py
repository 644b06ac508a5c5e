"""Catalog provider implementations and the static provider registry.

Registration order matters: the request resolver tries providers in this
order when matching links and classifying free text.
"""

from voice_jukebox.application.interfaces.catalog_provider import ProviderFactory
from voice_jukebox.infrastructure.providers.netease import NeteaseOptions, NeteaseProvider
from voice_jukebox.infrastructure.providers.ytdlp import YtDlpProvider
from voice_jukebox.infrastructure.providers.ytdlp_models import YtDlpProviderOptions

PROVIDER_REGISTRY: dict[str, ProviderFactory] = {
    NeteaseProvider.tag: ProviderFactory(options_type=NeteaseOptions, build=NeteaseProvider),
    YtDlpProvider.tag: ProviderFactory(options_type=YtDlpProviderOptions, build=YtDlpProvider),
}

__all__ = [
    "PROVIDER_REGISTRY",
    "NeteaseProvider",
    "YtDlpProvider",
]
