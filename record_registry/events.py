"""
Registry Events — Records of committed mutations.

Every successful mutation produces exactly one event. Events are
immutable once created and carry a registry-wide sequence number,
so a log of them can be replayed in linearization order.

Field order follows the published event shapes:

    Registered   {key, identifier, name, url, caller, timestamp}
    Updated      {key, name, url, caller, timestamp}
    Transferred  {key, previous_owner, new_owner, timestamp}
    Removed      {key, caller, timestamp}
"""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, fields
from datetime import datetime
from enum import Enum
from typing import Any, Callable, ClassVar, Protocol, runtime_checkable

from .keys import RecordKey
from .records import Principal


class EventKind(Enum):
    """Kinds of registry events."""
    REGISTERED = "Registered"
    UPDATED = "Updated"
    TRANSFERRED = "Transferred"
    REMOVED = "Removed"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"
    ADMINISTRATION_TRANSFERRED = "AdministrationTransferred"


class RegistryEvent:
    """Base for all event dataclasses."""

    kind: ClassVar[EventKind]

    # Principal that caused the event; used for actor queries
    @property
    def actor(self) -> Principal | None:
        return getattr(self, "caller", None)

    @property
    def record_key(self) -> RecordKey | None:
        return getattr(self, "key", None)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"event": self.kind.value}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, RecordKey):
                value = value.hex
            elif isinstance(value, datetime):
                value = value.isoformat()
            data[f.name] = value
        return data


@dataclass(frozen=True)
class Registered(RegistryEvent):
    kind: ClassVar[EventKind] = EventKind.REGISTERED

    key: RecordKey
    identifier: str
    name: str
    url: str
    caller: Principal
    timestamp: datetime
    sequence: int = 0


@dataclass(frozen=True)
class Updated(RegistryEvent):
    kind: ClassVar[EventKind] = EventKind.UPDATED

    key: RecordKey
    name: str
    url: str
    caller: Principal
    timestamp: datetime
    sequence: int = 0


@dataclass(frozen=True)
class Transferred(RegistryEvent):
    kind: ClassVar[EventKind] = EventKind.TRANSFERRED

    key: RecordKey
    previous_owner: Principal
    new_owner: Principal
    timestamp: datetime
    sequence: int = 0

    @property
    def actor(self) -> Principal:
        return self.previous_owner


@dataclass(frozen=True)
class Removed(RegistryEvent):
    kind: ClassVar[EventKind] = EventKind.REMOVED

    key: RecordKey
    caller: Principal
    timestamp: datetime
    sequence: int = 0


@dataclass(frozen=True)
class Paused(RegistryEvent):
    kind: ClassVar[EventKind] = EventKind.PAUSED

    caller: Principal
    timestamp: datetime
    sequence: int = 0


@dataclass(frozen=True)
class Unpaused(RegistryEvent):
    kind: ClassVar[EventKind] = EventKind.UNPAUSED

    caller: Principal
    timestamp: datetime
    sequence: int = 0


@dataclass(frozen=True)
class AdministrationTransferred(RegistryEvent):
    kind: ClassVar[EventKind] = EventKind.ADMINISTRATION_TRANSFERRED

    previous_administrator: Principal
    new_administrator: Principal
    timestamp: datetime
    sequence: int = 0

    @property
    def actor(self) -> Principal:
        return self.previous_administrator


@runtime_checkable
class EventSink(Protocol):
    """
    Anything that accepts committed registry events.

    Sinks are called after the registry lock is released. Events from
    one operation arrive in order, but two concurrent operations may
    reach a sink in either order. Order by ``event.sequence`` when the
    global order matters; it matches ``Registry.events``.

    An exception raised by ``emit`` is logged and does not reach the
    caller of the operation.
    """

    def emit(self, event: RegistryEvent) -> None:
        ...


class CallbackSink:
    """Adapts a plain callable to the EventSink protocol."""

    def __init__(self, callback: Callable[[RegistryEvent], None]) -> None:
        self._callback = callback

    def emit(self, event: RegistryEvent) -> None:
        self._callback(event)

    def __repr__(self) -> str:
        return f"CallbackSink({self._callback!r})"


class EventLog:
    """
    In-memory, ordered event store.

    Events are:
    - Immutable once stored
    - Kept in emission order
    - Queryable by kind, key, actor and time

    With ``limit`` set, the oldest events are dropped first.
    """

    def __init__(self, limit: int | None = None) -> None:
        self._events: deque[RegistryEvent] = deque(maxlen=limit)
        self._lock = threading.Lock()

    def emit(self, event: RegistryEvent) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        kind: EventKind | None = None,
        key: RecordKey | None = None,
        actor: Principal | None = None,
        since: datetime | None = None,
    ) -> list[RegistryEvent]:
        """Query events by criteria."""
        results = self.all()

        if kind:
            results = [e for e in results if e.kind == kind]
        if key:
            results = [e for e in results if e.record_key == key]
        if actor:
            results = [e for e in results if e.actor == actor]
        if since:
            results = [e for e in results if e.timestamp >= since]

        return results

    def all(self) -> list[RegistryEvent]:
        with self._lock:
            return list(self._events)

    def count(self) -> int:
        with self._lock:
            return len(self._events)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
