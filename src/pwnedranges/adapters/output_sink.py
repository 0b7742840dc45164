from __future__ import annotations
import os, sys
from typing import BinaryIO, Callable

from ..domain.decoding import encode_binary, encode_text
from ..domain.errors import SinkError
from ..domain.value_types import Format, ShardKey
from ..log import get_logger
from ..ports.storage import RecordSink

logger = get_logger(__name__)

STDOUT = "-"

Encoder = Callable[[ShardKey, bytes], tuple[bytes, int]]


class _StreamSink(RecordSink):
    """Buffered writer around one destination stream; subclasses pick the encoding."""

    encode: Encoder

    def __init__(self, stream: BinaryIO, *, name: str, owns_stream: bool) -> None:
        self.stream = stream
        self.name = name
        self.owns_stream = owns_stream
        self.records = 0
        self._flushed = False

    def write(self, key: ShardKey, body: bytes) -> int:
        chunk, n = self.encode(key, body)
        try:
            self.stream.write(chunk)
        except OSError as e:
            raise SinkError(f"failed to write into {self.name}: {e}") from e
        self.records += n
        return n

    def flush(self) -> None:
        if self._flushed:
            raise SinkError(f"{self.name} was already flushed")
        self._flushed = True
        try:
            self.stream.flush()
        except OSError as e:
            raise SinkError(f"flush error on {self.name}: {e}") from e

    def close(self) -> None:
        if not self.owns_stream:
            return
        try:
            self.stream.close()
        except OSError as e:
            raise SinkError(f"failed to close {self.name}: {e}") from e


class TextLineSink(_StreamSink):
    """`<KEY><line>` for every line, then one CRLF per body."""
    encode = staticmethod(encode_text)


class BinaryRecordSink(_StreamSink):
    """Flat 28-byte records: raw sha1 followed by big-endian u64 count."""
    encode = staticmethod(encode_binary)


def _create_file(path: str) -> BinaryIO:
    try:
        return open(path, "wb", buffering=1 << 20)
    except OSError as e:
        raise SinkError(f"failed to create output file {path}: {e}") from e


def open_sink(output: str, fmt: Format, *, stdout: BinaryIO | None = None) -> _StreamSink:
    """Pick the sink for a destination (`-` is stdout) and a format.

    Stdout always receives text; the binary layout only applies to files.
    """
    if output == STDOUT:
        if fmt == "binary":
            logger.warning("binary format only applies to file output; writing text to stdout")
        return TextLineSink(stdout if stdout is not None else sys.stdout.buffer,
                            name="stdout", owns_stream=False)

    path = os.fspath(output)
    if fmt == "text":
        return TextLineSink(_create_file(path), name=path, owns_stream=True)
    return BinaryRecordSink(_create_file(path), name=path, owns_stream=True)
