"""pymarshal command-line interface.

Usage:
    pymarshal dump --input data.marshal
    python -c 'import marshal,sys; sys.stdout.buffer.write(marshal.dumps([1, "a"], 2))' | pymarshal dump
    echo '4e' | pymarshal dump --hex
    pymarshal -v dump --all --format repr --input stream.bin
    pymarshal version
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from . import (
    BytesSource,
    MAX_DEPTH,
    MAX_ITEMS,
    MAX_LENGTH,
    MarshalError,
    __version__,
    decode,
    loads,
    to_json_compatible,
)

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pymarshal",
        description="Decode CPython marshal data",
    )
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log decoding details to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── dump ──
    dump_p = sub.add_parser("dump", help="Decode and print marshal data")
    dump_p.add_argument("--input", "-i", metavar="FILE",
                        help="Read from FILE instead of stdin")
    dump_p.add_argument("--hex", action="store_true",
                        help="Input is hex text rather than raw bytes")
    dump_p.add_argument("--format", choices=("json", "repr"), default="json",
                        help="Output format (default: json)")
    dump_p.add_argument("--all", action="store_true",
                        help="Decode consecutive values until the input ends")
    dump_p.add_argument("--max-depth", type=int, default=MAX_DEPTH, metavar="N")
    dump_p.add_argument("--max-length", type=int, default=MAX_LENGTH, metavar="N")
    dump_p.add_argument("--max-items", type=int, default=MAX_ITEMS, metavar="N")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _read_input(filepath: Optional[str]) -> bytes:
    """Read input bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("pymarshal: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _render(val: Any, fmt: str) -> str:
    if fmt == "repr":
        return repr(val)
    return json.dumps(to_json_compatible(val), ensure_ascii=False)


def _cmd_dump(args: argparse.Namespace) -> None:
    raw = _read_input(args.input)
    if args.hex:
        raw = bytes.fromhex("".join(raw.decode("ascii").split()))
    limits = dict(max_depth=args.max_depth, max_length=args.max_length,
                  max_items=args.max_items)

    if not args.all:
        val = loads(raw, **limits)
        logger.debug("decoded %s from %d bytes", type(val).__name__, len(raw))
        print(_render(val, args.format))
        return

    src = BytesSource(raw)
    while src.remaining:
        start = src.position
        val = decode(src, **limits)
        logger.debug("decoded %s at offset %d", type(val).__name__, start)
        print(_render(val, args.format))


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(name)s: %(message)s", stream=sys.stderr)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"pymarshal {__version__}")
        return

    try:
        if args.command == "dump":
            _cmd_dump(args)
    except MarshalError as e:
        print(f"pymarshal: error [{e.code}]: {e}", file=sys.stderr)
        sys.exit(2)
    except ValueError as e:
        # bad --hex text
        print(f"pymarshal: input error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
