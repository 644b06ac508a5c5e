"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization; a reload builds a fresh instance.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.music.value_objects import PlayMode
from ..domain.shared.exceptions import InvalidArgumentError
from ..domain.shared.messages import ErrorMessages, ResultMessages
from ..domain.shared.types import BusyTimeoutMs, ConnectionTimeoutS, PortNumber, VolumeFloat


class DatabaseSettings(BaseModel):
    """Preference database configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    url: str = Field(
        default="sqlite:///data/jukebox.db",
        validation_alias=AliasChoices("url", "database_url", "db_url"),
    )
    busy_timeout_ms: BusyTimeoutMs = Field(
        default=5000,
        validation_alias=AliasChoices("busy_timeout_ms", "busy_timeout"),
    )
    connection_timeout_s: ConnectionTimeoutS = Field(
        default=10,
        validation_alias=AliasChoices("connection_timeout_s", "connection_timeout"),
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        if not v.startswith("sqlite://") and v != ":memory:":
            raise ValueError(ErrorMessages.INVALID_DATABASE_URL)
        return v


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: str = Field(
        default="!",
        min_length=1,
        max_length=5,
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )
    guild_id: int | None = Field(default=None, gt=0)
    voice_channel_id: int | None = Field(
        default=None, gt=0, validation_alias=AliasChoices("voice_channel_id", "channel_id")
    )
    text_channel_id: int | None = Field(default=None, gt=0)
    sync_on_startup: bool = False


class PlaybackSettings(BaseModel):
    """Queue behaviour and audio output configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    play_mode: PlayMode = Field(
        default=PlayMode.SEQUENTIAL, validation_alias=AliasChoices("play_mode", "mode")
    )
    auto_pause: bool = Field(
        default=True, validation_alias=AliasChoices("auto_pause", "autopause")
    )
    default_volume: VolumeFloat = 0.5
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-reconnect 1 -reconnect_streamed 1 -reconnect_delay_max 5",
            "options": "-vn",
        }
    )
    status_idle_text: str = ResultMessages.STATUS_IDLE
    announce_tracks: bool = False

    @field_validator("play_mode", mode="before")
    @classmethod
    def parse_play_mode(cls, v: Any) -> PlayMode:
        """Accept the numeric value or the name of a mode."""
        try:
            return PlayMode.parse(v)
        except InvalidArgumentError as e:
            raise ValueError(e.message) from e


class WebSettings(BaseModel):
    """HTTP API configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    enabled: bool = True
    host: str = "0.0.0.0"
    port: PortNumber = 8080
    password: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("password", "token", "secret")
    )


class ProviderEntry(BaseModel):
    """One provider's switch, aliases and provider-specific options."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    tag: str = Field(min_length=1)
    enabled: bool = True
    aliases: tuple[str, ...] = ()
    options: dict[str, Any] = Field(default_factory=dict)

    @field_validator("aliases", mode="before")
    @classmethod
    def validate_aliases(cls, v: Any) -> tuple[str, ...]:
        """Accept a JSON array or a comma-separated string."""
        if isinstance(v, str):
            v = [part for part in v.split(",")]
        if isinstance(v, list):
            v = tuple(v)
        return tuple(str(alias).strip() for alias in v if str(alias).strip())


def _default_provider_entries() -> tuple[ProviderEntry, ...]:
    return (
        ProviderEntry(tag="netease"),
        ProviderEntry(tag="youtube"),
    )


class ProvidersSettings(BaseModel):
    """Catalog provider configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    default: str = Field(
        default="netease", validation_alias=AliasChoices("default", "default_provider")
    )
    entries: tuple[ProviderEntry, ...] = Field(default_factory=_default_provider_entries)

    @field_validator("entries", mode="before")
    @classmethod
    def validate_entries(cls, v: Any) -> tuple[Any, ...]:
        if isinstance(v, list):
            v = tuple(v)
        return v

    @model_validator(mode="after")
    def check_unique_tags(self) -> ProvidersSettings:
        seen: set[str] = set()
        for entry in self.entries:
            if entry.tag in seen:
                raise ValueError(ErrorMessages.DUPLICATE_PROVIDER_ENTRY.format(tag=entry.tag))
            seen.add(entry.tag)
        return self

    def entry_for(self, tag: str) -> ProviderEntry:
        """Configured entry for ``tag``, or an enabled default entry."""
        for entry in self.entries:
            if entry.tag == tag:
                return entry
        return ProviderEntry(tag=tag)


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__VOICE_CHANNEL_ID, ... (nested with ``__``)
    - PLAYBACK__PLAY_MODE, PLAYBACK__AUTO_PAUSE
    - WEB__PORT, WEB__PASSWORD
    - PROVIDERS__DEFAULT, PROVIDERS__ENTRIES (JSON array of entries)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    playback: PlaybackSettings = Field(default_factory=PlaybackSettings)
    web: WebSettings = Field(default_factory=WebSettings)
    providers: ProvidersSettings = Field(default_factory=ProvidersSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()


def reload_settings() -> Settings:
    """Drop the cached settings and load them again."""
    clear_settings_cache()
    return get_settings()
