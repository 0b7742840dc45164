from __future__ import annotations
from dataclasses import dataclass

HASH_SIZE   = 20
RECORD_SIZE = HASH_SIZE + 8   # raw sha1 + big-endian u64 count

@dataclass(slots=True, frozen=True)
class DecodedRecord:
    hash: bytes          # 20 raw bytes, first 5 hex chars == owning key
    count: int           # unsigned 64-bit

    def to_bytes(self) -> bytes:
        return self.hash + self.count.to_bytes(8, "big")

@dataclass(slots=True, frozen=True)
class RunStats:
    shards: int
    records: int
    ordered: bool
    elapsed_s: float
