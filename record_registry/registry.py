"""
Record Registry — single authority for identifier records.

All state changes go through this class. Each operation:
    1. Takes the state lock
    2. Checks pause state, input bounds and authority
    3. Mutates state (or raises a typed RegistryError with no change)
    4. Records one event per mutation in the event log
    5. Releases the lock, then delivers events to external sinks

Key principle:
    > One operation is fully applied, or not applied at all, before the
    > next one observes the state.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, Sequence

from .clock import MonotonicClock
from .config import RegistryConfig
from .errors import (
    AlreadyRegisteredError,
    LengthMismatchError,
    NotAuthorizedError,
    NotOwnerError,
    NotRegisteredError,
    RecordRemovedError,
    RegistryError,
    ServicePausedError,
)
from .events import (
    AdministrationTransferred,
    CallbackSink,
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
from .keys import RecordKey, derive_key
from .monitoring.logging import LogLevel, StructuredLogger
from .monitoring.metrics import RegistryMetrics
from .records import Principal, Record, RecordStatus, ServiceState
from .validation import require_principal, require_text


class Registry:
    """
    Maps identifier digests to metadata records with single-owner semantics.

    Usage:
        registry = Registry(administrator="admin")

        key = registry.register("doc-42", "Design notes", "https://example.org/42", caller="alice")
        registry.update("doc-42", "Design notes v2", "https://example.org/42", caller="alice")
        registry.transfer_ownership("doc-42", new_owner="bob", caller="alice")

        record = registry.get_record("doc-42")
        assert record.owner == "bob"
    """

    def __init__(
        self,
        administrator: Principal,
        config: RegistryConfig | None = None,
        clock: MonotonicClock | None = None,
        sinks: Iterable[EventSink] | None = None,
        logger: StructuredLogger | None = None,
        metrics: RegistryMetrics | None = None,
    ) -> None:
        require_principal("administrator", administrator)

        self.config = config or RegistryConfig()
        self._clock = clock or MonotonicClock()
        self._logger = logger or StructuredLogger(
            name="record_registry",
            level=LogLevel(self.config.log_level),
            json_format=self.config.json_logs,
        )
        self.metrics = metrics or RegistryMetrics()

        # Guarded by _lock
        self._registered: dict[RecordKey, bool] = {}
        self._records: dict[RecordKey, Record] = {}
        self._service = ServiceState(administrator=administrator)
        self._sequence = 0
        self._sinks: list[EventSink] = list(sinks or [])
        self._lock = threading.Lock()

        self._events = EventLog(limit=self.config.event_history_limit)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def events(self) -> EventLog:
        """Every committed event, in linearization order."""
        return self._events

    @property
    def paused(self) -> bool:
        with self._lock:
            return self._service.paused

    @property
    def administrator(self) -> Principal:
        with self._lock:
            return self._service.administrator

    def subscribe(self, sink: EventSink | Callable[[RegistryEvent], None]) -> EventSink:
        """Attach an external sink (or plain callback) for committed events."""
        if not isinstance(sink, EventSink):
            sink = CallbackSink(sink)
        with self._lock:
            self._sinks.append(sink)
        return sink

    def unsubscribe(self, sink: EventSink) -> None:
        with self._lock:
            self._sinks.remove(sink)

    def key_for(self, identifier: str) -> RecordKey:
        """The RecordKey an identifier maps to."""
        return derive_key(identifier, self.config.digest_algorithm)

    # ------------------------------------------------------------------
    # Record mutations
    # ------------------------------------------------------------------

    def register(
        self,
        identifier: str,
        name: str,
        url: str,
        caller: Principal,
    ) -> RecordKey:
        """
        Register a new record owned by ``caller``.

        Raises:
            ServicePausedError: Registry is paused.
            InvalidInputError: A field is empty or oversized.
            AlreadyRegisteredError: The identifier was used before,
                even if that record has since been removed.
        """
        with self._operation("register", caller=caller) as pending:
            require_principal("caller", caller)
            self._require_not_paused("register")
            key = self._check_registration(identifier, name, url, staged=None)
            now = self._clock.now()
            self._commit_registration(key, identifier, name, url, caller, now, pending)

        self._logger.info("record_registered", "Record registered", key=key.hex, caller=caller)
        return key

    def update(
        self,
        identifier: str,
        name: str,
        url: str,
        caller: Principal,
    ) -> None:
        """
        Overwrite name and url of a record the caller owns.

        A removed record can still be updated by its owner; it stays
        removed (``exists`` is left untouched).
        """
        with self._operation("update", caller=caller) as pending:
            require_principal("caller", caller)
            self._require_not_paused("update")
            require_text("name", name, self.config.max_name_bytes)
            require_text("url", url, self.config.max_url_bytes)
            key = self.key_for(identifier)
            record = self._require_owner(key, caller)

            now = self._clock.now()
            record.name = name
            record.url = url
            record.updated_at = now
            self._record_event(pending, Updated, key=key, name=name, url=url, caller=caller, timestamp=now)

        self._logger.info("record_updated", "Record updated", key=key.hex, caller=caller)

    def transfer_ownership(
        self,
        identifier: str,
        new_owner: Principal,
        caller: Principal,
    ) -> None:
        """Hand a record to ``new_owner``. ``updated_at`` is not changed."""
        with self._operation("transfer_ownership", caller=caller) as pending:
            require_principal("caller", caller)
            self._require_not_paused("transfer_ownership")
            require_principal("new_owner", new_owner)
            key = self.key_for(identifier)
            record = self._require_owner(key, caller)

            previous = record.owner
            record.owner = new_owner
            self._record_event(
                pending,
                Transferred,
                key=key,
                previous_owner=previous,
                new_owner=new_owner,
                timestamp=self._clock.now(),
            )

        self._logger.info(
            "record_transferred",
            "Record ownership transferred",
            key=key.hex,
            previous_owner=previous,
            new_owner=new_owner,
        )

    def remove(self, identifier: str, caller: Principal) -> None:
        """
        Soft-delete a record.

        Allowed for the owner or the administrator, and allowed while
        paused. The key stays registered, so the identifier can never be
        registered again.
        """
        with self._operation("remove", caller=caller) as pending:
            require_principal("caller", caller)
            key = self.key_for(identifier)
            if not self._registered.get(key, False):
                raise NotRegisteredError(key.hex)

            record = self._records[key]
            if caller != record.owner and caller != self._service.administrator:
                raise NotAuthorizedError("remove", caller, owner=record.owner, details={"key": key.hex})

            if record.exists:
                record.exists = False
                self.metrics.active_records.dec()
                self.metrics.removed_records.inc()
            self._record_event(pending, Removed, key=key, caller=caller, timestamp=self._clock.now())

        self._logger.info("record_removed", "Record removed", key=key.hex, caller=caller)

    def batch_register(
        self,
        identifiers: Sequence[str],
        names: Sequence[str],
        urls: Sequence[str],
        caller: Principal,
    ) -> list[RecordKey]:
        """
        Register many records atomically.

        Elements are checked in order against committed state and against
        the elements before them in the same batch. The first failing
        element aborts the whole batch; its error carries the element
        ``index`` and nothing is committed.
        """
        identifiers, names, urls = list(identifiers), list(names), list(urls)

        with self._operation("batch_register", caller=caller, size=len(identifiers)) as pending:
            require_principal("caller", caller)
            self._require_not_paused("batch_register")
            if not len(identifiers) == len(names) == len(urls):
                raise LengthMismatchError(
                    {"identifiers": len(identifiers), "names": len(names), "urls": len(urls)}
                )

            staged: dict[RecordKey, str] = {}
            for index, (identifier, name, url) in enumerate(zip(identifiers, names, urls)):
                try:
                    key = self._check_registration(identifier, name, url, staged=staged)
                except RegistryError as exc:
                    raise exc.at_index(index)
                staged[key] = identifier

            now = self._clock.now()
            for (key, identifier), name, url in zip(staged.items(), names, urls):
                self._commit_registration(key, identifier, name, url, caller, now, pending)

        keys = list(staged)
        self._logger.info("batch_registered", f"Registered {len(keys)} records", count=len(keys), caller=caller)
        return keys

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_registered(self, identifier: str) -> bool:
        """True for active and removed records; False if never registered."""
        key = self.key_for(identifier)
        with self._lock:
            return self._registered.get(key, False)

    def get_record(self, identifier: str) -> Record:
        """
        Return a copy of an active record.

        Raises:
            NotRegisteredError: Identifier never registered.
            RecordRemovedError: Record was removed.
        """
        key = self.key_for(identifier)
        with self._lock:
            if not self._registered.get(key, False):
                raise NotRegisteredError(key.hex)
            record = self._records[key]
            if not record.exists:
                raise RecordRemovedError(key.hex)
            return record.copy()

    def status(self, identifier: str) -> RecordStatus:
        key = self.key_for(identifier)
        with self._lock:
            if not self._registered.get(key, False):
                return RecordStatus.UNREGISTERED
            return RecordStatus.ACTIVE if self._records[key].exists else RecordStatus.REMOVED

    def snapshot(self) -> dict[str, Any]:
        """
        Summary of registry state for debugging and health checks.

        Contains counts only; no record content or identifiers.
        """
        with self._lock:
            active = sum(1 for r in self._records.values() if r.exists)
            return {
                "registered": len(self._registered),
                "active": active,
                "removed": len(self._records) - active,
                "paused": self._service.paused,
                "administrator": self._service.administrator,
                "last_sequence": self._sequence,
                "event_count": self._events.count(),
                "limits": {
                    "identifier": self.config.max_identifier_bytes,
                    "name": self.config.max_name_bytes,
                    "url": self.config.max_url_bytes,
                },
            }

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def pause(self, caller: Principal) -> None:
        """Block register, update, transfer and batch_register."""
        with self._operation("pause", caller=caller) as pending:
            self._require_administrator("pause", caller)
            self._service.paused = True
            self._record_event(pending, Paused, caller=caller, timestamp=self._clock.now())

        self._logger.info("service_paused", "Registry paused", caller=caller)

    def unpause(self, caller: Principal) -> None:
        with self._operation("unpause", caller=caller) as pending:
            self._require_administrator("unpause", caller)
            self._service.paused = False
            self._record_event(pending, Unpaused, caller=caller, timestamp=self._clock.now())

        self._logger.info("service_unpaused", "Registry unpaused", caller=caller)

    def transfer_administration(self, new_administrator: Principal, caller: Principal) -> None:
        """Hand the administrator role to another principal."""
        with self._operation("transfer_administration", caller=caller) as pending:
            self._require_administrator("transfer_administration", caller)
            require_principal("new_administrator", new_administrator)
            self._service.administrator = new_administrator
            self._record_event(
                pending,
                AdministrationTransferred,
                previous_administrator=caller,
                new_administrator=new_administrator,
                timestamp=self._clock.now(),
            )

        self._logger.info(
            "administration_transferred",
            "Administrator changed",
            previous_administrator=caller,
            new_administrator=new_administrator,
        )

    # ------------------------------------------------------------------
    # Internals (callers hold _lock)
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, operation: str, **context: Any) -> Iterator[list[RegistryEvent]]:
        """
        Run one operation under the state lock.

        Rejections are counted and logged. Events collected in the
        yielded list are delivered to sinks once the lock is released.
        """
        pending: list[RegistryEvent] = []
        try:
            with self._lock:
                yield pending
                sinks = list(self._sinks)
        except RegistryError as exc:
            self._reject(operation, exc, **context)
            raise

        self.metrics.succeeded(operation)
        self._deliver(sinks, pending)

    def _reject(self, operation: str, error: RegistryError, **context: Any) -> None:
        self.metrics.rejected(operation, error)
        if not self.config.log_rejections:
            return
        if error.index is not None:
            context["index"] = error.index
        self._logger.operation_rejected(operation, error, **context)

    def _deliver(self, sinks: list[EventSink], events: list[RegistryEvent]) -> None:
        for event in events:
            for sink in sinks:
                try:
                    sink.emit(event)
                except Exception as exc:
                    # The mutation is already committed; one bad sink must not starve the rest
                    self._logger.sink_failed(sink, exc, sequence=event.sequence, event_kind=event.kind.value)

    def _record_event(self, pending: list[RegistryEvent], event_type: type, **fields: Any) -> RegistryEvent:
        self._sequence += 1
        event = event_type(sequence=self._sequence, **fields)
        self._events.emit(event)
        pending.append(event)
        return event

    def _require_not_paused(self, operation: str) -> None:
        if self._service.paused:
            raise ServicePausedError(operation)

    def _require_administrator(self, operation: str, caller: Principal) -> None:
        if caller != self._service.administrator:
            raise NotAuthorizedError(operation, caller)

    def _require_owner(self, key: RecordKey, caller: Principal) -> Record:
        if not self._registered.get(key, False):
            raise NotRegisteredError(key.hex)
        record = self._records[key]
        if record.owner != caller:
            raise NotOwnerError(key.hex, caller, record.owner)
        return record

    def _check_registration(
        self,
        identifier: str,
        name: str,
        url: str,
        staged: dict[RecordKey, str] | None,
    ) -> RecordKey:
        require_text("identifier", identifier, self.config.max_identifier_bytes)
        require_text("name", name, self.config.max_name_bytes)
        require_text("url", url, self.config.max_url_bytes)

        key = self.key_for(identifier)
        if self._registered.get(key, False):
            raise AlreadyRegisteredError(key.hex)
        if staged is not None and key in staged:
            raise AlreadyRegisteredError(key.hex, details={"within_batch": True})
        return key

    def _commit_registration(
        self,
        key: RecordKey,
        identifier: str,
        name: str,
        url: str,
        caller: Principal,
        now: datetime,
        pending: list[RegistryEvent],
    ) -> None:
        self._registered[key] = True
        self._records[key] = Record(name=name, url=url, owner=caller, updated_at=now, exists=True)
        self.metrics.active_records.inc()
        self._record_event(
            pending,
            Registered,
            key=key,
            identifier=identifier,
            name=name,
            url=url,
            caller=caller,
            timestamp=now,
        )
