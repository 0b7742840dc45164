from __future__ import annotations
from typing import NewType, Literal

ShardKey = NewType("ShardKey", str)   # 5 chars from 0-9A-F
Format   = Literal["text", "binary"]
