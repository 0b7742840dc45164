from __future__ import annotations

from typing import Protocol
from ..domain.value_types import ShardKey


class RecordSink(Protocol):
    """Port for writing decoded range bodies to the output destination."""

    def write(self, key: ShardKey, body: bytes) -> int:
        """Encode one body and buffer it; return how many records it held."""

    def flush(self) -> None:
        """Push buffered bytes to the destination. Called once, after the last write."""

    def close(self) -> None:
        """Release the destination (stdout is flushed but never closed)."""
