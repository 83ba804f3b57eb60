"""pymarshal: decoder for the CPython marshal wire format.

Decodes the tagged binary values written by `marshal.dumps(value, 2)` and
older runtimes (None, 32-bit ints, binary floats, strings, tuples, lists,
dicts) into a plain value tree.

Quick start:
    >>> from pymarshal import loads
    >>> loads(b"[\\x02\\x00\\x00\\x00i\\x01\\x00\\x00\\x00i\\x02\\x00\\x00\\x00")
    [1, 2]

Strings come back as bytes and dicts as ordered (key, value) pairs:
    >>> pairs = loads(b"{i\\x01\\x00\\x00\\x00s\\x01\\x00\\x00\\x00x0")
    >>> pairs
    MarshalDict([(1, b'x')])
    >>> to_python(pairs, encoding="utf-8")
    {1: 'x'}
"""

from __future__ import annotations

from typing import Any

from ._constants import (
    DEFAULT_LIMITS,
    MAX_DEPTH,
    MAX_ITEMS,
    MAX_LENGTH,
    Limits,
)
from ._convert import to_json_compatible, to_python
from ._core import DecodedValue, MarshalDict, decode, decode_value
from ._errors import (
    ERR_DUP_KEY,
    ERR_INVALID_LENGTH,
    ERR_KEY_TYPE,
    ERR_RECURSION_LIMIT,
    ERR_SOURCE_EXHAUSTED,
    ERR_TRAILING_DATA,
    ERR_TRUNCATED,
    ERR_UNKNOWN_TAG,
    MarshalError,
)
from ._source import ByteSource, BytesSource, StreamSource, as_source

__version__ = "0.3.0"

__all__ = [
    # Decoding
    "decode",
    "decode_value",
    "loads",
    "load",
    # Value model
    "DecodedValue",
    "MarshalDict",
    # Conversion
    "to_python",
    "to_json_compatible",
    # Byte sources
    "ByteSource",
    "BytesSource",
    "StreamSource",
    "as_source",
    # Configuration
    "Limits",
    "DEFAULT_LIMITS",
    "MAX_DEPTH",
    "MAX_LENGTH",
    "MAX_ITEMS",
    # Exception
    "MarshalError",
    # Error codes
    "ERR_SOURCE_EXHAUSTED",
    "ERR_TRUNCATED",
    "ERR_INVALID_LENGTH",
    "ERR_UNKNOWN_TAG",
    "ERR_RECURSION_LIMIT",
    "ERR_TRAILING_DATA",
    "ERR_KEY_TYPE",
    "ERR_DUP_KEY",
]


def loads(data: Any, *,
          allow_trailing: bool = False,
          max_depth: int = MAX_DEPTH,
          max_length: int = MAX_LENGTH,
          max_items: int = MAX_ITEMS) -> DecodedValue:
    """Decode one value from a bytes-like object.

    Bytes left over after the root value raise ERR_TRAILING_DATA unless
    `allow_trailing` is set.
    """
    src = BytesSource(data)
    val = decode(src, max_depth=max_depth, max_length=max_length,
                 max_items=max_items)
    if not allow_trailing and src.remaining:
        raise MarshalError(ERR_TRAILING_DATA, "{} trailing bytes after root value"
                           .format(src.remaining))
    return val


def load(fileobj: Any, *,
         max_depth: int = MAX_DEPTH,
         max_length: int = MAX_LENGTH,
         max_items: int = MAX_ITEMS) -> DecodedValue:
    """Decode one value from a binary file object.

    The file is left positioned just past the value, so consecutive values
    can be read with repeated calls.
    """
    return decode(StreamSource(fileobj), max_depth=max_depth,
                  max_length=max_length, max_items=max_items)
