from __future__ import annotations
from itertools import product
from typing import Iterator
from ..domain.value_types import ShardKey

ALPHABET = "0123456789ABCDEF"
KEY_LEN  = 5

def iter_shard_keys() -> Iterator[ShardKey]:
    """All 16**5 range keys, `00000` … `FFFFF`, leftmost char varying slowest.

    Every call starts a fresh iterator.
    """
    for chars in product(ALPHABET, repeat=KEY_LEN):
        yield ShardKey("".join(chars))

def total_shards() -> int: return len(ALPHABET) ** KEY_LEN
