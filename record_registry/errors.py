"""
Registry Errors — Typed failure kinds for every registry operation.

Error hierarchy:
    RegistryError (base)
    ├── InvalidInputError
    ├── AlreadyRegisteredError
    ├── NotRegisteredError
    ├── RecordRemovedError
    ├── NotOwnerError
    ├── NotAuthorizedError
    ├── ServicePausedError
    └── LengthMismatchError

Every error is raised before any state change. The registry never
retries; callers own retry policy.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorKind(Enum):
    """Failure kinds surfaced to callers."""
    INVALID_INPUT = "InvalidInput"
    ALREADY_REGISTERED = "AlreadyRegistered"
    NOT_REGISTERED = "NotRegistered"
    REMOVED = "Removed"
    NOT_OWNER = "NotOwner"
    NOT_AUTHORIZED = "NotAuthorized"
    SERVICE_PAUSED = "ServicePaused"
    LENGTH_MISMATCH = "LengthMismatch"


class RegistryError(Exception):
    """Base error for all registry failures."""

    kind: ClassVar[ErrorKind]

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.index: int | None = None

    def at_index(self, index: int) -> "RegistryError":
        """Annotate this error with the batch element that produced it."""
        self.index = index
        self.details["index"] = index
        return self

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "details": dict(self.details),
            "index": self.index,
        }

    def __str__(self) -> str:
        if self.index is None:
            return self.message
        return f"[item {self.index}] {self.message}"


class InvalidInputError(RegistryError):
    """
    Raised when a string field is empty, oversized, or not a string.

    Also used for null principals (transfer target, administrator).
    """

    kind = ErrorKind.INVALID_INPUT

    def __init__(
        self,
        field: str,
        message: str,
        length: int | None = None,
        limit: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, {"field": field, "length": length, "limit": limit, **(details or {})})
        self.field = field
        self.length = length
        self.limit = limit


class AlreadyRegisteredError(RegistryError):
    """Raised when the key is already registered, active or removed."""

    kind = ErrorKind.ALREADY_REGISTERED

    def __init__(self, key: str, details: dict[str, Any] | None = None):
        super().__init__(f"Record already registered: {key}", {"key": key, **(details or {})})
        self.key = key


class NotRegisteredError(RegistryError):
    """Raised when the key was never registered."""

    kind = ErrorKind.NOT_REGISTERED

    def __init__(self, key: str, details: dict[str, Any] | None = None):
        super().__init__(f"Record not registered: {key}", {"key": key, **(details or {})})
        self.key = key


class RecordRemovedError(RegistryError):
    """Raised by get_record when the key is registered but soft-deleted."""

    kind = ErrorKind.REMOVED

    def __init__(self, key: str, details: dict[str, Any] | None = None):
        super().__init__(f"Record has been removed: {key}", {"key": key, **(details or {})})
        self.key = key


class NotOwnerError(RegistryError):
    """
    Raised when the caller is not the record's current owner.

    Applies to update and transfer_ownership.
    """

    kind = ErrorKind.NOT_OWNER

    def __init__(
        self,
        key: str,
        caller: str,
        owner: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            f"Caller {caller!r} does not own record {key}",
            {"key": key, "caller": caller, "owner": owner, **(details or {})},
        )
        self.key = key
        self.caller = caller
        self.owner = owner


class NotAuthorizedError(RegistryError):
    """
    Raised when the caller lacks authority for the operation.

    Examples:
    - remove by a caller who is neither owner nor administrator
    - pause/unpause by a non-administrator
    """

    kind = ErrorKind.NOT_AUTHORIZED

    def __init__(
        self,
        operation: str,
        caller: str,
        owner: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            f"Caller {caller!r} is not authorized to {operation}",
            {"operation": operation, "caller": caller, "owner": owner, **(details or {})},
        )
        self.operation = operation
        self.caller = caller
        self.owner = owner


class ServicePausedError(RegistryError):
    """Raised when a gated mutation is attempted while paused."""

    kind = ErrorKind.SERVICE_PAUSED

    def __init__(self, operation: str, details: dict[str, Any] | None = None):
        super().__init__(
            f"Registry is paused; {operation} is unavailable",
            {"operation": operation, **(details or {})},
        )
        self.operation = operation


class LengthMismatchError(RegistryError):
    """Raised when batch input sequences differ in length."""

    kind = ErrorKind.LENGTH_MISMATCH

    def __init__(self, lengths: dict[str, int], details: dict[str, Any] | None = None):
        summary = ", ".join(f"{name}={n}" for name, n in lengths.items())
        super().__init__(
            f"Batch sequences must have equal length ({summary})",
            {"lengths": dict(lengths), **(details or {})},
        )
        self.lengths = dict(lengths)
