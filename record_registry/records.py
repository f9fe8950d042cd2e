"""
Record Models — Registry state structures.

A RecordKey is in exactly one of three states:

    UNREGISTERED ──register──▶ ACTIVE ──remove──▶ REMOVED

There is no edge back from REMOVED. The key stays reserved forever,
so the same identifier can never be registered again.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any

# Opaque, already-authenticated caller identity
Principal = str


class RecordStatus(Enum):
    """Lifecycle state of a RecordKey."""
    UNREGISTERED = "unregistered"
    ACTIVE = "active"
    REMOVED = "removed"


@dataclass
class Record:
    """
    Metadata stored under a RecordKey.

    ``owner`` is the only principal allowed to update or transfer the
    record. ``updated_at`` is set on register and update; transfer leaves
    it untouched.
    """
    name: str
    url: str
    owner: Principal
    updated_at: datetime
    exists: bool = True

    def copy(self) -> "Record":
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "url": self.url,
            "owner": self.owner,
            "updated_at": self.updated_at.isoformat(),
            "exists": self.exists,
        }


@dataclass
class ServiceState:
    """Registry-wide administrative state."""
    administrator: Principal
    paused: bool = False
