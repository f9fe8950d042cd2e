"""
Observability for the record registry.

Components:
    StructuredLogger - JSON structured logging of registry decisions
    RegistryMetrics  - operation counters and record gauges

Example:
    from record_registry import Registry
    from record_registry.monitoring import StructuredLogger

    registry = Registry("ops", logger=StructuredLogger(level="debug", json_format=False))
"""

from record_registry.monitoring.logging import (
    StructuredLogger,
    LogLevel,
)
from record_registry.monitoring.metrics import (
    Counter,
    Gauge,
    RegistryMetrics,
)

__all__ = [
    # Logging
    "StructuredLogger",
    "LogLevel",
    # Metrics
    "Counter",
    "Gauge",
    "RegistryMetrics",
]
