#!/usr/bin/env python3
# tools/fuzz_runner.py
#
# Differential fuzzing (pymarshal vs CPython's marshal module).
#
# Generates three fuzz categories:
#   A) random VALID value trees -> marshal.dumps(v, 2) -> loads -> compare
#   B) random proper prefixes of valid encodings -> must fail as truncated
#   C) random byte mutations of valid encodings -> value or MarshalError only
#
# Any mismatch prints a minimal repro payload and exits non-zero.

import os, sys, json, marshal, random
from typing import Any

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, os.path.join(ROOT, "implementations", "python"))

from pymarshal import (
    ERR_SOURCE_EXHAUSTED,
    ERR_TRUNCATED,
    MarshalError,
    loads,
    to_python,
)

SEED = int(os.environ.get("PYMARSHAL_SEED", "4242"))
ROUNDS = int(os.environ.get("PYMARSHAL_FUZZ_ROUNDS", "5000"))

random.seed(SEED)

def mismatch(label: str, data: bytes, detail: Any) -> None:
    print("MISMATCH:", label)
    print("INPUT:", data.hex())
    print("DETAIL:", json.dumps(repr(detail))[:4000])
    raise SystemExit(1)

# --- generators ---

def rand_text(nmax: int) -> str:
    n = random.randint(0, nmax)
    return "".join(chr(random.choice([random.randint(0x20, 0x7E),
                                      random.randint(0xA0, 0xD7FF)]))
                   for _ in range(n))

def rand_scalar() -> Any:
    r = random.random()
    if r < 0.15:
        return None
    if r < 0.40:
        return random.randint(-(2**31), 2**31 - 1)
    if r < 0.55:
        return random.uniform(-1e12, 1e12)
    if r < 0.75:
        return bytes(random.getrandbits(8) for _ in range(random.randint(0, 24)))
    return rand_text(16)

def rand_key() -> Any:
    k = rand_scalar()
    if isinstance(k, float):
        return random.randint(0, 999)
    if random.random() < 0.1:
        return (rand_key(), rand_key())
    return k

def rand_value(depth: int = 0) -> Any:
    if depth > 5 or random.random() < 0.4:
        return rand_scalar()
    r = random.random()
    if r < 0.35:
        return [rand_value(depth + 1) for _ in range(random.randint(0, 6))]
    if r < 0.6:
        return tuple(rand_value(depth + 1) for _ in range(random.randint(0, 6)))
    return {rand_key(): rand_value(depth + 1) for _ in range(random.randint(0, 6))}

def normalize(v: Any) -> Any:
    # str and bytes share one decoded form; tuples and lists too
    if isinstance(v, str):
        return v.encode("utf-8")
    if isinstance(v, tuple):
        return tuple(normalize(x) for x in v)
    if isinstance(v, list):
        return [normalize(x) for x in v]
    if isinstance(v, dict):
        return {normalize(k): normalize(x) for k, x in v.items()}
    return v

def listify(v: Any) -> Any:
    if isinstance(v, (list, tuple)):
        return [listify(x) for x in v]
    if isinstance(v, dict):
        return {k: listify(x) for k, x in v.items()}
    return v

# --- categories ---

def fuzz_valid() -> bytes:
    v = rand_value()
    data = marshal.dumps(v, 2)
    try:
        got = to_python(loads(data))
    except MarshalError as e:
        mismatch("valid input rejected", data, e.code)
    if got != listify(normalize(v)):
        mismatch("decoded value differs", data, {"want": v, "got": got})
    return data

def fuzz_truncated(data: bytes) -> None:
    if not data:
        return
    cut = random.randrange(len(data))
    try:
        got = loads(data[:cut])
    except MarshalError as e:
        if e.code not in (ERR_TRUNCATED, ERR_SOURCE_EXHAUSTED):
            mismatch("truncation gave wrong code", data[:cut], e.code)
        return
    mismatch("truncated input decoded", data[:cut], got)

def fuzz_mutated(data: bytes) -> None:
    buf = bytearray(data or b"N")
    for _ in range(random.randint(1, 4)):
        buf[random.randrange(len(buf))] = random.getrandbits(8)
    try:
        loads(bytes(buf), allow_trailing=True, max_length=1 << 20, max_items=1 << 16)
    except MarshalError:
        pass
    except Exception as e:  # anything else is a decoder bug
        mismatch("unexpected exception", bytes(buf), e)

def main() -> None:
    for _ in range(ROUNDS):
        data = fuzz_valid()
        fuzz_truncated(data)
        fuzz_mutated(data)
    print("FUZZ OK: {} rounds (seed {})".format(ROUNDS, SEED))

if __name__ == "__main__":
    main()
