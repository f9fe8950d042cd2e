"""
Input Validation - Byte-length bounds for registry fields.

All limits are measured on the UTF-8 encoding, so a 64-character
identifier of multi-byte characters can exceed a 64-byte bound.
"""

from __future__ import annotations

from typing import Any

from .errors import InvalidInputError


def byte_length(value: str, field: str = "value") -> int:
    """UTF-8 byte length of a string."""
    return len(encode_utf8(field, value))


def encode_utf8(field: str, value: str) -> bytes:
    """
    Encode ``value`` as UTF-8.

    Raises:
        InvalidInputError: The string holds lone surrogates.
    """
    try:
        return value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise InvalidInputError(field, f"{field} is not valid UTF-8 (position {exc.start})") from exc


def require_text(field: str, value: Any, limit: int) -> str:
    """
    Check that ``value`` is a non-empty string of at most ``limit`` bytes.

    Returns the value unchanged.

    Raises:
        InvalidInputError: Wrong type, empty, or oversized.
    """
    if not isinstance(value, str):
        raise InvalidInputError(
            field,
            f"{field} must be a string, got {type(value).__name__}",
            limit=limit,
        )

    length = byte_length(value, field)
    if length == 0:
        raise InvalidInputError(field, f"{field} must not be empty", length=0, limit=limit)
    if length > limit:
        raise InvalidInputError(
            field,
            f"{field} is {length} bytes; limit is {limit}",
            length=length,
            limit=limit,
        )
    return value


def require_principal(field: str, value: Any) -> str:
    """Check that ``value`` is a non-null principal."""
    if not isinstance(value, str) or not value:
        raise InvalidInputError(field, f"{field} must be a non-empty principal")
    return value
