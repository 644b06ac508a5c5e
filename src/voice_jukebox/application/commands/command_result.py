"""Uniform result returned by every jukebox operation."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

from voice_jukebox.domain.shared.exceptions import DomainError


class CommandStatus(Enum):
    """Status codes for command results."""

    SUCCESS = "success"
    EMPTY = "empty"
    INVALID_ARGUMENT = "invalid_argument"
    PROVIDER_NOT_FOUND = "provider_not_found"
    PROVIDER_DISABLED = "provider_disabled"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    UNEXPECTED = "unexpected"


_STATUS_BY_CODE: dict[str, CommandStatus] = {
    "INVALID_ARGUMENT": CommandStatus.INVALID_ARGUMENT,
    "PROVIDER_NOT_FOUND": CommandStatus.PROVIDER_NOT_FOUND,
    "PROVIDER_DISABLED": CommandStatus.PROVIDER_DISABLED,
    "NOT_FOUND": CommandStatus.NOT_FOUND,
    "UNAUTHORIZED": CommandStatus.UNAUTHORIZED,
}


class CommandResult(BaseModel):
    """Human-readable outcome plus optional structured data."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    status: CommandStatus
    message: str
    data: Any = None

    @property
    def is_success(self) -> bool:
        return self.status in (CommandStatus.SUCCESS, CommandStatus.EMPTY)

    @classmethod
    def success(cls, message: str, data: Any = None) -> CommandResult:
        return cls(status=CommandStatus.SUCCESS, message=message, data=data)

    @classmethod
    def empty(cls, message: str) -> CommandResult:
        """Benign no-op outcome, e.g. advancing an exhausted playlist."""
        return cls(status=CommandStatus.EMPTY, message=message)

    @classmethod
    def error(cls, status: CommandStatus, message: str) -> CommandResult:
        return cls(status=status, message=message)

    @classmethod
    def from_error(cls, error: DomainError) -> CommandResult:
        status = _STATUS_BY_CODE.get(error.code, CommandStatus.UNEXPECTED)
        return cls(status=status, message=error.message)
