"""Marshal decode: tag dispatch, scalar readers, container readers.

Every value on the wire starts with a one-byte tag:

    N          None           no payload
    i  c       int            int32 little-endian
    g          float          IEEE-754 double little-endian
    s  u  t    bytes          int32 length, then that many raw bytes
    (  [       list           int32 count, then count tagged values
    {          MarshalDict    tagged key, tagged value, ... then '0'

Decoding is plain recursive descent over a sequential byte source.  A depth
counter is threaded through every recursive call; containers bump it, scalars
don't.  The root value sits at depth 0.

Tuples and lists are the same thing on the wire and both come back as lists.
Dicts come back as MarshalDict, an ordered list of (key, value) pairs: keys
can be lists (unhashable), and the wire allows repeated keys, so a real dict
would either fail or silently drop data.  Turning pairs into a dict is a
caller decision (see to_python).
"""

from __future__ import annotations

import struct
from typing import Any, List, Union

from ._constants import (
    BYTES_TAGS,
    DEFAULT_LIMITS,
    INT_TAGS,
    MAX_DEPTH,
    MAX_ITEMS,
    MAX_LENGTH,
    SEQUENCE_TAGS,
    TAG_DICT,
    TAG_FLOAT,
    TAG_NONE,
    TAG_STOP,
    Limits,
)
from ._errors import (
    ERR_INVALID_LENGTH,
    ERR_RECURSION_LIMIT,
    ERR_SOURCE_EXHAUSTED,
    ERR_TRUNCATED,
    ERR_UNKNOWN_TAG,
    MarshalError,
)
from ._source import ByteSource, as_source

_I32 = struct.Struct("<i")
_F64 = struct.Struct("<d")


class MarshalDict(list):
    """A decoded dict: (key, value) pairs in wire order, duplicates kept."""

    __slots__ = ()

    def keys(self) -> List[Any]:
        return [k for k, _ in self]

    def values(self) -> List[Any]:
        return [v for _, v in self]

    def get(self, key: Any, default: Any = None) -> Any:
        """Value of the first pair whose key equals `key`."""
        for k, v in self:
            if k == key:
                return v
        return default

    # A MarshalDict never equals a plain list, even one holding the same
    # pairs: a sequence of 2-tuples and a dict are different wire values.
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MarshalDict):
            return False
        return list.__eq__(self, other)

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "MarshalDict({})".format(list.__repr__(self))


DecodedValue = Union[None, int, float, bytes, List[Any], MarshalDict]


# ── Primitive reads ──────────────────────────────────────────
# Tag bytes come from read_byte(); running out there is ERR_SOURCE_EXHAUSTED.
# Fixed-size fields and payloads come from readinto(); any short count there
# is ERR_TRUNCATED.  A source that fails outright is treated the same way.

def _read_tag(source: ByteSource) -> int:
    try:
        return source.read_byte()
    except (EOFError, OSError) as exc:
        raise MarshalError(ERR_SOURCE_EXHAUSTED,
                           "source exhausted before tag byte") from exc


def _read_exact(source: ByteSource, n: int, what: str) -> bytearray:
    buf = bytearray(n)
    try:
        got = source.readinto(buf)
    except (EOFError, OSError) as exc:
        raise MarshalError(ERR_TRUNCATED,
                           "read failed in {}".format(what)) from exc
    if got != n:
        raise MarshalError(ERR_TRUNCATED, "truncated {}: wanted {} bytes, got {}"
                           .format(what, n, got or 0))
    return buf


def _read_int32(source: ByteSource, what: str) -> int:
    return _I32.unpack(_read_exact(source, 4, what))[0]


def _read_size(source: ByteSource, limit: int, what: str) -> int:
    n = _read_int32(source, what)
    if n < 0:
        raise MarshalError(ERR_INVALID_LENGTH, "negative {}: {}".format(what, n))
    if n > limit:
        raise MarshalError(ERR_INVALID_LENGTH,
                           "{} {} exceeds limit {}".format(what, n, limit))
    return n


# ── Scalar decoders ──────────────────────────────────────────

def _read_float(source: ByteSource) -> float:
    return _F64.unpack(_read_exact(source, 8, "float payload"))[0]


def _read_bytes(source: ByteSource, limits: Limits) -> bytes:
    n = _read_size(source, limits.max_length, "string length")
    # Sources that know their size let us refuse before allocating.
    remaining = getattr(source, "remaining", None)
    if remaining is not None and n > remaining:
        raise MarshalError(ERR_TRUNCATED, "string length {} exceeds remaining "
                           "input ({} bytes)".format(n, remaining))
    return bytes(_read_exact(source, n, "string payload"))


# ── Container decoders ───────────────────────────────────────

def _enter_container(depth: int, limits: Limits) -> None:
    if depth + 1 > limits.max_depth:
        raise MarshalError(ERR_RECURSION_LIMIT,
                           "nesting exceeds max_depth {}".format(limits.max_depth))


def _read_sequence(source: ByteSource, depth: int, limits: Limits) -> List[Any]:
    """Exactly `count` values in wire order, or an error; never a partial list."""
    count = _read_size(source, limits.max_items, "sequence count")
    items: List[Any] = []
    for _ in range(count):
        items.append(decode_value(_read_tag(source), source, depth, limits))
    return items


def _read_mapping(source: ByteSource, depth: int, limits: Limits) -> MarshalDict:
    pairs = MarshalDict()
    while True:
        tag = _read_tag(source)
        if tag == TAG_STOP:
            return pairs
        if len(pairs) >= limits.max_items:
            raise MarshalError(ERR_INVALID_LENGTH,
                               "mapping exceeds {} pairs".format(limits.max_items))
        key = decode_value(tag, source, depth, limits)
        value = decode_value(_read_tag(source), source, depth, limits)
        pairs.append((key, value))


# ── Dispatch ─────────────────────────────────────────────────

def decode_value(tag: int, source: ByteSource, depth: int = 0,
                 limits: Limits = DEFAULT_LIMITS) -> DecodedValue:
    """Decode the value introduced by an already-read `tag` byte.

    An unknown tag raises ERR_UNKNOWN_TAG without touching the source.
    """
    if tag == TAG_NONE:
        return None
    if tag in INT_TAGS:
        return _read_int32(source, "int payload")
    if tag == TAG_FLOAT:
        return _read_float(source)
    if tag in BYTES_TAGS:
        return _read_bytes(source, limits)
    if tag in SEQUENCE_TAGS:
        _enter_container(depth, limits)
        return _read_sequence(source, depth + 1, limits)
    if tag == TAG_DICT:
        _enter_container(depth, limits)
        return _read_mapping(source, depth + 1, limits)

    raise MarshalError(ERR_UNKNOWN_TAG, "unknown tag 0x{:02x}".format(tag), tag=tag)


def decode(source: Any, *,
           max_depth: int = MAX_DEPTH,
           max_length: int = MAX_LENGTH,
           max_items: int = MAX_ITEMS) -> DecodedValue:
    """Decode one value starting at the source's current position.

    On success the source is left just past the value.  On failure its
    position is unspecified and it should not be reused.
    """
    src = as_source(source)
    limits = Limits(max_depth, max_length, max_items)
    try:
        return decode_value(_read_tag(src), src, 0, limits)
    except RecursionError as exc:
        # max_depth set above what the interpreter stack can hold
        raise MarshalError(ERR_RECURSION_LIMIT,
                           "nesting exceeds the interpreter recursion limit") from exc
