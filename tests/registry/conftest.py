"""
Registry Test Fixtures — Shared infrastructure for registry tests.

Provides:
    - Isolated registry instances with a deterministic clock
    - Silent structured logger with captured output
    - Event capture sink
    - Concurrency helpers
"""

from __future__ import annotations

import io
import json
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from record_registry import (
    MonotonicClock,
    RegistryConfig,
    Registry,
    RegistryError,
    RegistryEvent,
)
from record_registry.monitoring import StructuredLogger


ADMIN = "admin"
ALICE = "alice"
BOB = "bob"
CAROL = "carol"

URL = "https://example.org/records/1"


# =============================================================================
# Deterministic Time
# =============================================================================

class FakeTime:
    """
    Controllable wall clock for MonotonicClock.

    Each read advances by ``step`` so consecutive operations get
    distinct timestamps. ``rewind`` simulates a wall clock stepping back.
    """

    def __init__(
        self,
        start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value

    def rewind(self, delta: timedelta) -> None:
        self.current = self.current - delta


# =============================================================================
# Event / Log Capture
# =============================================================================

class RecordingSink:
    """EventSink that keeps every delivered event."""

    def __init__(self) -> None:
        self.events: list[RegistryEvent] = []

    def emit(self, event: RegistryEvent) -> None:
        self.events.append(event)

    def kinds(self) -> list[str]:
        return [e.kind.value for e in self.events]


class FailingSink:
    """EventSink that always raises."""

    def emit(self, event: RegistryEvent) -> None:
        raise RuntimeError("sink unavailable")


def captured_logger(level: str = "debug") -> tuple[StructuredLogger, io.StringIO]:
    output = io.StringIO()
    return StructuredLogger("test", level=level, output=output), output


def log_lines(output: io.StringIO) -> list[dict[str, Any]]:
    return [json.loads(line) for line in output.getvalue().splitlines() if line.strip()]


def make_registry(
    administrator: str = ADMIN,
    config: RegistryConfig | None = None,
    **kwargs: Any,
) -> Registry:
    """Registry with a fake clock and a logger that writes nowhere visible."""
    kwargs.setdefault("clock", MonotonicClock(FakeTime()))
    if "logger" not in kwargs:
        kwargs["logger"], _ = captured_logger()
    return Registry(administrator, config=config, **kwargs)


# =============================================================================
# Concurrency Helpers
# =============================================================================

def parallel(
    operations: list[Callable[[], Any]],
    max_workers: int = 8,
) -> list[Any]:
    """
    Execute operations in parallel and collect results.

    Returns results in the same order as operations; a raised
    exception takes the place of its result.
    """
    results: list[Any] = [None] * len(operations)

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(op): i
            for i, op in enumerate(operations)
        }

        for future in as_completed(futures):
            idx = futures[future]
            try:
                results[idx] = future.result()
            except Exception as e:
                results[idx] = e

    return results


def exactly_one_succeeded(results: list[Any]) -> bool:
    failures = [r for r in results if isinstance(r, RegistryError)]
    return len(failures) == len(results) - 1


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_time() -> FakeTime:
    return FakeTime()


@pytest.fixture
def log_output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def registry(fake_time: FakeTime, log_output: io.StringIO) -> Registry:
    """Isolated registry administered by ADMIN."""
    return Registry(
        ADMIN,
        clock=MonotonicClock(fake_time),
        logger=StructuredLogger("test", level="debug", output=log_output),
    )


@pytest.fixture
def sink(registry: Registry) -> RecordingSink:
    recording = RecordingSink()
    registry.subscribe(recording)
    return recording


@pytest.fixture
def registered(registry: Registry) -> str:
    """Identifier of an active record owned by ALICE."""
    registry.register("record-1", "First record", URL, caller=ALICE)
    return "record-1"


@pytest.fixture
def removed(registry: Registry) -> str:
    """Identifier of a removed record last owned by ALICE."""
    registry.register("record-gone", "Gone", URL, caller=ALICE)
    registry.remove("record-gone", caller=ALICE)
    return "record-gone"
