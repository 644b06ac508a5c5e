"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidArgumentError(DomainError):
    """Raised when command text is empty or malformed."""

    def __init__(self, message: str, argument: str | None = None) -> None:
        super().__init__(message, code="INVALID_ARGUMENT")
        self.argument = argument


class ProviderNotFoundError(DomainError):
    """Raised when no provider is registered under a name or alias."""

    def __init__(self, alias: str, message: str | None = None) -> None:
        msg = message or f"No provider found for '{alias}'"
        super().__init__(msg, code="PROVIDER_NOT_FOUND")
        self.alias = alias


class ProviderDisabledError(DomainError):
    """Raised when a provider exists but is disabled in configuration."""

    def __init__(self, alias: str, message: str | None = None) -> None:
        msg = message or f"Provider '{alias}' is disabled"
        super().__init__(msg, code="PROVIDER_DISABLED")
        self.alias = alias


class NotFoundError(DomainError):
    """Raised when a search or lookup yields no results."""

    def __init__(self, kind: str, query: str, message: str | None = None) -> None:
        msg = message or f"No {kind} found for '{query}'"
        super().__init__(msg, code="NOT_FOUND")
        self.kind = kind
        self.query = query


class UnauthorizedError(DomainError):
    """Raised when a shared secret check fails at the HTTP boundary."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, code="UNAUTHORIZED")


class UnexpectedError(DomainError):
    """Wraps any failure that is not one of the expected domain errors."""

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message, code="UNEXPECTED")
        self.cause = cause
