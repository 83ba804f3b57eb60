"""Byte sources: the only collaborator the decoder talks to.

The decoder needs two operations from a source:

    read_byte()        -> int   one byte, or EOFError / OSError
    readinto(buffer)   -> int   fill as much of buffer as available

Sources are sequential: no seek, no peek.  Anything with those two methods
works (a socket wrapper that enforces its own deadline, say); the adapters
below cover in-memory buffers and binary file objects.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class ByteSource(Protocol):
    def read_byte(self) -> int: ...

    def readinto(self, buffer: Any) -> int: ...


class BytesSource:
    """Sequential reader over an in-memory bytes-like object.

    Knows how much input is left, which lets the decoder reject an
    oversized length prefix before allocating for it.
    """

    def __init__(self, data: Any) -> None:
        self._view = memoryview(data).cast("B")
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._view) - self._pos

    def read_byte(self) -> int:
        if self._pos >= len(self._view):
            raise EOFError("end of data at offset {}".format(self._pos))
        b = self._view[self._pos]
        self._pos += 1
        return b

    def readinto(self, buffer: Any) -> int:
        out = memoryview(buffer).cast("B")
        n = min(len(out), self.remaining)
        out[:n] = self._view[self._pos:self._pos + n]
        self._pos += n
        return n


class StreamSource:
    """Reader over a binary file object (anything with read / readinto).

    Partial reads are retried until the buffer is full or the stream
    reports EOF, so pipes and sockets behave like regular files.
    """

    def __init__(self, fileobj: Any) -> None:
        self._f = fileobj
        self._readinto = getattr(fileobj, "readinto", None)

    def read_byte(self) -> int:
        chunk = self._f.read(1)
        if not chunk:
            raise EOFError("end of stream")
        if not isinstance(chunk, (bytes, bytearray)):
            raise TypeError("binary stream required, got {}"
                            .format(type(chunk).__name__))
        return chunk[0]

    def readinto(self, buffer: Any) -> int:
        out = memoryview(buffer).cast("B")
        total = 0
        while total < len(out):
            try:
                n = self._read_some(out[total:])
            except OSError as exc:
                logger.debug("stream read failed after %d of %d bytes: %s",
                             total, len(out), exc)
                raise
            if not n:
                break
            total += n
        if total < len(out):
            logger.debug("short read: wanted %d bytes, got %d", len(out), total)
        return total

    def _read_some(self, out: memoryview) -> Optional[int]:
        if self._readinto is not None:
            return self._readinto(out)
        chunk = self._f.read(len(out))
        if not chunk:
            return 0
        out[:len(chunk)] = chunk
        return len(chunk)


def as_source(obj: Any) -> ByteSource:
    """Return obj as a byte source, wrapping bytes-likes and file objects."""
    if hasattr(obj, "read_byte") and hasattr(obj, "readinto"):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return BytesSource(obj)
    if hasattr(obj, "read"):
        return StreamSource(obj)
    raise TypeError("not a byte source: {}".format(type(obj).__name__))
