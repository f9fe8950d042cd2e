"""
Record keys — one-way digests of caller-supplied identifiers.

The registry stores and looks up records only by digest. The original
identifier is never kept in registry state; callers re-supply it for
every operation.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any

from .config import DEFAULT_DIGEST
from .errors import InvalidInputError
from .validation import encode_utf8


@dataclass(frozen=True, order=True)
class RecordKey:
    """Fixed-width storage key derived from an identifier."""
    digest: bytes

    @property
    def hex(self) -> str:
        return self.digest.hex()

    def __str__(self) -> str:
        return self.hex

    def __repr__(self) -> str:
        return f"RecordKey({self.hex[:16]}…)"

    @classmethod
    def from_hex(cls, value: str) -> "RecordKey":
        return cls(bytes.fromhex(value))


def derive_key(identifier: Any, algorithm: str = DEFAULT_DIGEST) -> RecordKey:
    """
    Digest an identifier into its RecordKey.

    Only the type is checked here; length bounds belong to register.
    """
    if not isinstance(identifier, str):
        raise InvalidInputError(
            "identifier",
            f"identifier must be a string, got {type(identifier).__name__}",
        )
    return RecordKey(hashlib.new(algorithm, encode_utf8("identifier", identifier)).digest())
