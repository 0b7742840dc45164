# pwnedranges/ports/fetch.py
from __future__ import annotations

from typing import Protocol
from ..domain.value_types import ShardKey


class RangeFetcher(Protocol):
    """Port for the remote range service: one shard key in, one whole body out."""

    async def fetch(self, key: ShardKey) -> tuple[ShardKey, bytes]:
        """Return (key, body) for a single physical request, or raise FetchError."""
