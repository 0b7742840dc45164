from __future__ import annotations

from .value_types import ShardKey


class RangeError(Exception):
    """Base class for every error the downloader raises on purpose."""


class SetupError(RangeError):
    """The fetch capability could not be built; nothing was requested."""


class FetchError(RangeError):
    """One physical request failed (transport, timeout or non-2xx). Retriable."""

    def __init__(self, key: ShardKey, message: str) -> None:
        super().__init__(f"range {key}: {message}")
        self.key = key


class RetriesExhaustedError(RangeError):
    """Every attempt for a single shard failed; the dataset would be incomplete."""

    def __init__(self, key: ShardKey, attempts: int) -> None:
        super().__init__(f"range {key}: giving up after {attempts} attempts")
        self.key = key
        self.attempts = attempts


class DecodeError(RangeError):
    """A body line does not look like `<35 hex>:<count>`. Never retried."""

    def __init__(self, key: ShardKey, line: bytes, reason: str) -> None:
        super().__init__(f"range {key}: {reason}: {line[:64]!r}")
        self.key = key
        self.line = line


class SinkError(RangeError):
    """Output destination could not be created, written or flushed."""
