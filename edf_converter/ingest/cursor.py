from __future__ import annotations

import io
from typing import BinaryIO

from edf_converter.errors import IoError, ParseError


class ByteCursor:
    """
    Sequential positioned reader over a binary stream.

    The cursor owns the stream and the current offset; every decoder takes the
    cursor explicitly and advances it. There is no seeking: skipped fields are
    read and discarded so that truncation is detected where it happens.
    """

    def __init__(self, stream: BinaryIO, *, source: str = "<stream>"):
        self._stream = stream
        self.source = source
        self.offset = 0

    @classmethod
    def from_bytes(cls, data: bytes, *, source: str = "<bytes>") -> "ByteCursor":
        return cls(io.BytesIO(data), source=source)

    def read_exact(self, n: int, *, field: str = "data") -> bytes:
        """Read exactly n bytes or raise IoError (stream ended early)."""
        if n < 0:
            raise ValueError("n must be >= 0")
        try:
            buf = self._stream.read(n)
        except OSError as e:
            raise IoError(f"{self.source}: reading {field} at offset {self.offset} failed ({e})") from e
        if len(buf) != n:
            raise IoError(
                f"{self.source}: stream ended while reading {field} at offset {self.offset} "
                f"(needed {n} bytes, got {len(buf)})"
            )
        self.offset += n
        return buf

    def skip(self, n: int, *, field: str = "reserved") -> None:
        self.read_exact(n, field=field)

    def read_text(self, n: int, *, field: str) -> str:
        """Read an n-byte ASCII field, untrimmed."""
        start = self.offset
        raw = self.read_exact(n, field=field)
        try:
            return raw.decode("ascii")
        except UnicodeDecodeError as e:
            raise ParseError(f"{self.source}: {field} at offset {start} is not ASCII: {raw!r}") from e
