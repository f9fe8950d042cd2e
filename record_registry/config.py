"""
Registry configuration.

Defaults match the fixed limits of the registry:
identifiers up to 64 bytes, names up to 128 bytes, URLs up to 256 bytes.
"""

from __future__ import annotations

import hashlib
import os
from dataclasses import dataclass, fields
from typing import Any, Mapping

MAX_IDENTIFIER_BYTES = 64
MAX_NAME_BYTES = 128
MAX_URL_BYTES = 256

DEFAULT_DIGEST = "sha3_256"

ENV_PREFIX = "RECORD_REGISTRY_"

_LOG_LEVELS = ("debug", "info", "warning", "error", "critical")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class RegistryConfig:
    """Configuration for a Registry instance."""

    # Field limits (UTF-8 bytes, inclusive)
    max_identifier_bytes: int = MAX_IDENTIFIER_BYTES
    max_name_bytes: int = MAX_NAME_BYTES
    max_url_bytes: int = MAX_URL_BYTES

    # RecordKey derivation
    digest_algorithm: str = DEFAULT_DIGEST

    # Logging
    log_level: str = "info"
    json_logs: bool = True
    log_rejections: bool = True

    # Event history kept in memory (None = unbounded)
    event_history_limit: int | None = None

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Raise ValueError if any setting is unusable."""
        for name in ("max_identifier_bytes", "max_name_bytes", "max_url_bytes"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        if self.digest_algorithm not in hashlib.algorithms_available:
            raise ValueError(f"Unknown digest algorithm: {self.digest_algorithm!r}")
        # Variable-length digests would make keys depend on a caller-chosen width
        if self.digest_algorithm.startswith("shake"):
            raise ValueError("Fixed-width digest required; shake algorithms are not supported")

        if self.log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got {self.log_level!r}")

        if self.event_history_limit is not None and self.event_history_limit < 1:
            raise ValueError("event_history_limit must be positive or None")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RegistryConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_env(
        cls,
        prefix: str = ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
    ) -> "RegistryConfig":
        """Build a config from ``<prefix><FIELD>`` environment variables."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None:
                continue
            values[f.name] = _coerce(f.name, raw)

        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def _coerce(name: str, raw: str) -> Any:
    if name in ("json_logs", "log_rejections"):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"{name} expects a boolean, got {raw!r}")

    if name == "event_history_limit":
        return None if raw.strip().lower() in ("", "none") else int(raw)

    if name.startswith("max_"):
        return int(raw)

    return raw.strip().lower() if name == "log_level" else raw.strip()
