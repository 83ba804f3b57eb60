"""Wire tags, the mapping sentinel, and default decode limits.

Tags are single ASCII bytes.  Several tags share one decoder because the
runtime that writes this format has used more than one encoding of the same
logical type over its history.
"""

from __future__ import annotations

from typing import NamedTuple

# ── Wire tags (single byte each) ─────────────────────────────
TAG_NONE: int = ord("N")
TAG_INT: int = ord("i")
TAG_INT_ALT: int = ord("c")
TAG_FLOAT: int = ord("g")      # binary double; the older text float 'f' is not accepted
TAG_STRING: int = ord("s")
TAG_UNICODE: int = ord("u")
TAG_TSTRING: int = ord("t")    # interned string
TAG_TUPLE: int = ord("(")
TAG_LIST: int = ord("[")
TAG_DICT: int = ord("{")

# Terminates the key/value stream of a dict.  Never a key or value itself.
TAG_STOP: int = ord("0")

INT_TAGS = frozenset((TAG_INT, TAG_INT_ALT))
BYTES_TAGS = frozenset((TAG_STRING, TAG_UNICODE, TAG_TSTRING))
SEQUENCE_TAGS = frozenset((TAG_TUPLE, TAG_LIST))

# ── Signed 32-bit range ──────────────────────────────────────
INT32_MIN: int = -(2**31)
INT32_MAX: int = 2**31 - 1

# ── Default safety limits ────────────────────────────────────
# The format itself has no limits.  These keep corrupt or hostile input
# from exhausting the stack or forcing huge allocations.
# Each nesting level costs two Python frames (dispatch + container reader).
MAX_DEPTH: int = 200
MAX_LENGTH: int = 64 * 1024 * 1024   # 64 MiB per bytes payload
MAX_ITEMS: int = 16_777_216          # per sequence / per mapping


class Limits(NamedTuple):
    max_depth: int = MAX_DEPTH
    max_length: int = MAX_LENGTH
    max_items: int = MAX_ITEMS


DEFAULT_LIMITS = Limits()
