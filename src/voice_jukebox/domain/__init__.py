# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, messages, events and exceptions
- music/: Track model, content references, play modes and the play queue
"""

from voice_jukebox.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
