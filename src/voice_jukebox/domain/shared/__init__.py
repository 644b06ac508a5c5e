"""
Shared Domain Kernel

Contains types, messages and exceptions shared across the package.
"""

from voice_jukebox.domain.shared.exceptions import (
    DomainError,
    InvalidArgumentError,
    NotFoundError,
    ProviderDisabledError,
    ProviderNotFoundError,
    UnauthorizedError,
    UnexpectedError,
)

__all__ = [
    "DomainError",
    "InvalidArgumentError",
    "NotFoundError",
    "ProviderDisabledError",
    "ProviderNotFoundError",
    "UnauthorizedError",
    "UnexpectedError",
]
