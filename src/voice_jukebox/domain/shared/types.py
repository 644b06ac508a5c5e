"""Reusable Pydantic Annotated types for domain-wide validation.

Constrained types used across the package are defined here once, so models
can simply annotate their fields::

    from voice_jukebox.domain.shared.types import NonEmptyStr, ResultLimit

    class MyModel(BaseModel):
        name: NonEmptyStr
        limit: ResultLimit
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

DiscordSnowflake = Annotated[int, Field(gt=0, lt=2**64)]
"""Positive integer that fits a Discord snowflake (1 … 2^64-1)."""

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

VolumeFloat = Annotated[float, Field(ge=0.0, le=2.0)]
"""Audio volume multiplier in [0.0, 2.0]."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

TrackNameStr = Annotated[str, Field(min_length=1, max_length=500)]
"""Track display name: 1-500 characters."""

ProviderTagStr = Annotated[str, Field(min_length=1, max_length=32, pattern=r"^[a-z0-9_]+$")]
"""Stable provider identity: lowercase letters, digits and underscores."""


# ── Domain-specific numeric constraints ─────────────────────────────

DurationSeconds = Annotated[int, Field(ge=0)]
"""Track duration in seconds, no upper bound."""

ResultLimit = Annotated[int, Field(ge=0)]
"""Result-count limit, 0 meaning unlimited."""


# ── Settings-specific constraints ──────────────────────────────────

BusyTimeoutMs = Annotated[int, Field(ge=1000, le=30000)]
"""Database busy timeout in milliseconds: 1 000 … 30 000."""

ConnectionTimeoutS = Annotated[int, Field(ge=1, le=60)]
"""Database connection timeout in seconds: 1 … 60."""

PortNumber = Annotated[int, Field(ge=1, le=65535)]
"""TCP port: 1 … 65 535."""
