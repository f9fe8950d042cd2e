"""
Metrics collection for the record registry.
"""

from __future__ import annotations

import threading
from typing import Any, Iterator


class Counter:
    """Counter metric (monotonically increasing).

    Example:
        ops = Counter("operations_total", "Registry operations")
        ops.inc(operation="register", outcome="ok")
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        labels: list[str] | None = None,
    ):
        self.name = name
        self.description = description
        self._labels = labels or []
        self._values: dict[tuple, float] = {}
        self._lock = threading.Lock()

    def inc(self, value: float = 1, **labels: str) -> None:
        """Increment the counter.

        Args:
            value: Amount to increment by.
            **labels: Label values.
        """
        if value < 0:
            raise ValueError("Counter can only increase")
        key = tuple(sorted(labels.items()))
        with self._lock:
            self._values[key] = self._values.get(key, 0) + value

    def get(self, **labels: str) -> float:
        """Get current counter value."""
        key = tuple(sorted(labels.items()))
        with self._lock:
            return self._values.get(key, 0)

    def total(self) -> float:
        """Sum across every label combination."""
        with self._lock:
            return sum(self._values.values())

    def values(self) -> Iterator[tuple[dict[str, str], float]]:
        """Iterate over all values with labels."""
        with self._lock:
            items = list(self._values.items())
        for key, value in items:
            yield dict(key), value


class Gauge:
    """Gauge metric (can go up or down)."""

    def __init__(
        self,
        name: str,
        description: str = "",
    ):
        self.name = name
        self.description = description
        self._value: float = 0
        self._lock = threading.Lock()

    def set(self, value: float) -> None:
        with self._lock:
            self._value = value

    def inc(self, value: float = 1) -> None:
        with self._lock:
            self._value += value

    def dec(self, value: float = 1) -> None:
        with self._lock:
            self._value -= value

    def get(self) -> float:
        with self._lock:
            return self._value


class RegistryMetrics:
    """Operation counters and record gauges for one registry."""

    OK = "ok"

    def __init__(self) -> None:
        self.operations = Counter(
            "registry_operations_total",
            "Registry operations by name and outcome",
            labels=["operation", "outcome"],
        )
        self.active_records = Gauge("registry_active_records", "Active records")
        self.removed_records = Gauge("registry_removed_records", "Soft-deleted records")

    def succeeded(self, operation: str, count: int = 1) -> None:
        self.operations.inc(count, operation=operation, outcome=self.OK)

    def rejected(self, operation: str, error: Exception) -> None:
        kind = getattr(error, "kind", None)
        outcome = kind.value if kind is not None else type(error).__name__
        self.operations.inc(operation=operation, outcome=outcome)

    def snapshot(self) -> dict[str, Any]:
        return {
            "operations": [
                {**labels, "count": value}
                for labels, value in self.operations.values()
            ],
            "active_records": self.active_records.get(),
            "removed_records": self.removed_records.get(),
        }
