from __future__ import annotations
from typing import Protocol

class ProgressReporter(Protocol):
    def advance(self, n: int = 1) -> None:
        """Report `n` more shards delivered to the output stage."""

class NullProgress:
    def advance(self, n: int = 1) -> None:
        return None
