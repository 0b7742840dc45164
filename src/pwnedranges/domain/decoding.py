from __future__ import annotations

from typing import Iterator

from pwnedranges.domain.errors import DecodeError
from pwnedranges.domain.models import HASH_SIZE, DecodedRecord
from pwnedranges.domain.value_types import ShardKey


SUFFIX_LEN = 35                # hex chars after the 5-char key
SEPARATOR  = ord(":")
CRLF       = b"\r\n"
U64_MAX    = (1 << 64) - 1

_LF = 0x0A
_CR = 0x0D

# ---------- line splitting -----------------------------------------------------

def split_lines(body: bytes) -> Iterator[bytes]:
    """Split a range body into lines, keeping each line's terminator.

    A line ends after an LF unless the next byte is a CR. The final line is
    yielded whether or not it is terminated, so `b"A\\r\\nB"` and
    `b"A\\r\\nB\\r\\n"` both give two lines. An empty body gives none.
    """
    start = 0
    n = len(body)
    pos = body.find(b"\n")
    while pos != -1:
        nxt = pos + 1
        if nxt < n and body[nxt] != _CR:
            yield body[start:nxt]
            start = nxt
        pos = body.find(b"\n", nxt)
    if start < n:
        yield body[start:]

# ---------- text encoding ------------------------------------------------------

def encode_text(key: ShardKey, body: bytes) -> tuple[bytes, int]:
    """Prefix every line with its key and close the body with one CRLF.

    Returns the encoded chunk and how many lines it holds.
    """
    prefix = key.encode("ascii")
    parts = [prefix + line for line in split_lines(body)]
    parts.append(CRLF)
    return b"".join(parts), len(parts) - 1

# ---------- binary decoding ----------------------------------------------------

def _strip_crlf(raw: bytes) -> bytes:
    return raw[:-2] if raw.endswith(CRLF) else raw

def decode_line(key: ShardKey, line: bytes) -> DecodedRecord:
    """`<35 hex>:<count>[\\r\\n]` → (20-byte hash, count)."""
    if len(line) <= SUFFIX_LEN or line[SUFFIX_LEN] != SEPARATOR:
        raise DecodeError(key, line, "expected '<35 hex digits>:<count>'")

    try:
        digest = bytes.fromhex(key + line[:SUFFIX_LEN].decode("ascii"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(key, line, "suffix is not hexadecimal") from e
    # fromhex skips whitespace, so a short digest means the suffix had some
    if len(digest) != HASH_SIZE:
        raise DecodeError(key, line, "suffix is not hexadecimal")

    raw = _strip_crlf(line[SUFFIX_LEN + 1:])
    if not raw.isdigit():
        raise DecodeError(key, line, "count is not a decimal number")
    count = int(raw)
    if count > U64_MAX:
        raise DecodeError(key, line, "count does not fit in 64 bits")

    return DecodedRecord(hash=digest, count=count)

def decode_body(key: ShardKey, body: bytes) -> Iterator[DecodedRecord]:
    for line in split_lines(body):
        yield decode_line(key, line)

def encode_binary(key: ShardKey, body: bytes) -> tuple[bytes, int]:
    """Decode every line of a body into packed 28-byte records."""
    records = [rec.to_bytes() for rec in decode_body(key, body)]
    return b"".join(records), len(records)
