"""
Record Registry - owned, pausable identifier records.

Maps caller-supplied identifiers (by one-way digest) to metadata records
with single-owner semantics, idempotent registration, authorized mutation
and a global emergency pause.

Architecture:
    caller ──▶ Registry ──▶ state (one lock)
                   │
                   ├──▶ EventLog (ordered, in-memory)
                   └──▶ external EventSinks (after commit)

Public API:
    Registry        - The state machine. register/update/transfer/remove,
                      batch_register, queries, pause/unpause.
    RegistryConfig  - Limits, digest algorithm, logging settings.
    Record          - Copy of a stored record returned by get_record().
    RecordKey       - Digest of an identifier; the storage key.
    RegistryError   - Base of the typed error taxonomy (see errors).

Example:
    from record_registry import Registry

    registry = Registry(administrator="ops")
    registry.register("paper-17", "Draft", "https://example.org/p17", caller="alice")

    registry.pause(caller="ops")
    registry.remove("paper-17", caller="alice")   # removal still allowed
    assert registry.is_registered("paper-17")
"""

from record_registry.clock import MonotonicClock
from record_registry.config import (
    MAX_IDENTIFIER_BYTES,
    MAX_NAME_BYTES,
    MAX_URL_BYTES,
    RegistryConfig,
)
from record_registry.errors import (
    AlreadyRegisteredError,
    ErrorKind,
    InvalidInputError,
    LengthMismatchError,
    NotAuthorizedError,
    NotOwnerError,
    NotRegisteredError,
    RecordRemovedError,
    RegistryError,
    ServicePausedError,
)
from record_registry.events import (
    AdministrationTransferred,
    CallbackSink,
    EventKind,
    EventLog,
    EventSink,
    Paused,
    Registered,
    RegistryEvent,
    Removed,
    Transferred,
    Unpaused,
    Updated,
)
from record_registry.keys import RecordKey, derive_key
from record_registry.records import Principal, Record, RecordStatus, ServiceState
from record_registry.registry import Registry

__version__ = "1.0.0"

__all__ = [
    # Core
    "Registry",
    "RegistryConfig",
    "MonotonicClock",
    # Limits
    "MAX_IDENTIFIER_BYTES",
    "MAX_NAME_BYTES",
    "MAX_URL_BYTES",
    # Data
    "Principal",
    "Record",
    "RecordKey",
    "RecordStatus",
    "ServiceState",
    "derive_key",
    # Events
    "RegistryEvent",
    "EventKind",
    "EventLog",
    "EventSink",
    "CallbackSink",
    "Registered",
    "Updated",
    "Transferred",
    "Removed",
    "Paused",
    "Unpaused",
    "AdministrationTransferred",
    # Errors
    "RegistryError",
    "ErrorKind",
    "InvalidInputError",
    "AlreadyRegisteredError",
    "NotRegisteredError",
    "RecordRemovedError",
    "NotOwnerError",
    "NotAuthorizedError",
    "ServicePausedError",
    "LengthMismatchError",
]
