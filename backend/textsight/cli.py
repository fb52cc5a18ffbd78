"""
Command line interface for text-region detection.

Usage examples
--------------

Print the rectangles found in a screenshot::

    textsight screenshot.png

Use the sliding-window strategy with a custom grid and emit JSON::

    textsight scan.jpg --strategy window --option horizontal_spacing=6 --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional, Sequence

from textsight.engine.config import STRATEGIES
from textsight.engine.detector import detect
from textsight.errors import InputError
from textsight.utils.pixels import PixelBuffer

EXIT_INPUT_ERROR = 2


def _parse_option(raw: str) -> tuple[str, Any]:
    """Split ``key=value``; the value is read as JSON when it parses, else kept as text."""
    key, sep, value = raw.partition("=")
    if not sep or not key:
        raise InputError(f"Options must look like key=value, got {raw!r}")
    try:
        return key.strip(), json.loads(value)
    except json.JSONDecodeError:
        return key.strip(), value


def build_options(args: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = dict(_parse_option(raw) for raw in args.option)
    if args.strategy is not None:
        options["strategy"] = args.strategy
    if args.min_confidence is not None:
        options["minimum_confidence"] = args.min_confidence
    return options


def _format_table(rectangles: list[dict]) -> str:
    lines = [f"{'x':>6} {'y':>6} {'width':>6} {'height':>6} {'confidence':>10}"]
    for rect in rectangles:
        lines.append(
            f"{rect['x']:>6} {rect['y']:>6} {rect['width']:>6} {rect['height']:>6} "
            f"{rect['confidence']:>10.3f}"
        )
    lines.append(f"{len(rectangles)} rectangle(s)")
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="textsight",
        description="Find rectangular text-like regions in a raster image.",
    )
    parser.add_argument("image", type=Path, help="Image file to scan")
    parser.add_argument("--strategy", choices=STRATEGIES, default=None, help="Detector variant")
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Detection option override; may be repeated",
    )
    parser.add_argument("--min-confidence", type=float, default=None, help="Drop weaker rectangles")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log pipeline progress")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    try:
        if not args.image.is_file():
            raise InputError(f"Image not found: {args.image}")
        buffer = PixelBuffer.from_encoded(args.image.read_bytes())
        rectangles = [r.as_dict() for r in detect(buffer, build_options(args))]
    except InputError as e:
        print(f"textsight: error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR

    if args.json:
        print(json.dumps(rectangles, indent=2))
    else:
        print(_format_table(rectangles))
    return 0


if __name__ == "__main__":
    sys.exit(main())
