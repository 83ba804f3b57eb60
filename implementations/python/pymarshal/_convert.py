"""Caller-side conversion of decoded value trees.

The decoder hands back raw bytes and ordered pairs.  Whether bytes are text,
and which of two repeated keys wins, are caller decisions; this module holds
the usual answers to them.
"""

from __future__ import annotations

import base64
import math
from typing import Any, Dict, Optional

from ._core import MarshalDict
from ._errors import ERR_DUP_KEY, ERR_KEY_TYPE, MarshalError

DUPLICATE_POLICIES = ("last", "first", "error")


def to_python(value: Any, *,
              encoding: Optional[str] = None,
              errors: str = "strict",
              duplicates: str = "last") -> Any:
    """Convert a decoded tree to native Python containers.

      - MarshalDict → dict.  `duplicates` picks the winner for repeated keys:
        "last" (plain dict assignment), "first", or "error" (ERR_DUP_KEY).
      - list keys → tuples, recursively.  MarshalDict keys raise ERR_KEY_TYPE.
      - bytes → str when `encoding` is given, else left alone.
      - lists and scalars otherwise pass through.
    """
    if duplicates not in DUPLICATE_POLICIES:
        raise ValueError("unknown duplicates policy: {!r}".format(duplicates))
    return _convert(value, encoding, errors, duplicates)


def _convert(val: Any, enc: Optional[str], errors: str, dups: str) -> Any:
    if isinstance(val, MarshalDict):
        out: Dict[Any, Any] = {}
        for k, v in val:
            key = _convert_key(k, enc, errors)
            if key in out:
                if dups == "first":
                    continue
                if dups == "error":
                    raise MarshalError(ERR_DUP_KEY, "duplicate key {!r}".format(key))
            out[key] = _convert(v, enc, errors, dups)
        return out

    if isinstance(val, list):
        return [_convert(item, enc, errors, dups) for item in val]

    if isinstance(val, bytes) and enc is not None:
        return val.decode(enc, errors)

    return val


def _convert_key(key: Any, enc: Optional[str], errors: str) -> Any:
    if isinstance(key, MarshalDict):
        raise MarshalError(ERR_KEY_TYPE, "dict used as a dict key")
    if isinstance(key, list):
        return tuple(_convert_key(item, enc, errors) for item in key)
    if isinstance(key, bytes) and enc is not None:
        return key.decode(enc, errors)
    return key


def to_json_compatible(value: Any) -> Any:
    """Render a decoded tree with JSON-safe types, for display.

    UTF-8 bytes become text, other bytes {"$bytes": base64}.  Dicts become
    {"$pairs": [[k, v], ...]} so order, duplicates and non-string keys
    survive.  NaN and the infinities become strings.
    """
    if value is None or isinstance(value, int):
        return value

    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        return value

    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return {"$bytes": base64.b64encode(value).decode("ascii")}

    if isinstance(value, MarshalDict):
        return {"$pairs": [[to_json_compatible(k), to_json_compatible(v)]
                           for k, v in value]}

    if isinstance(value, list):
        return [to_json_compatible(item) for item in value]

    raise TypeError("not a decoded value: {}".format(type(value).__name__))
