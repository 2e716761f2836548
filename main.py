"""Command-line entry point for the Follow Rotator overlay."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

ROOT_DIR = Path(__file__).resolve().parent
SRC_DIR = ROOT_DIR / "src"

if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from follow_rotator import registry, share  # noqa: E402
from follow_rotator.codec import TokenCodec  # noqa: E402
from follow_rotator.errors import ShareError  # noqa: E402
from follow_rotator.models import DEFAULT_ANIM_IN_MS, DEFAULT_ANIM_OUT_MS  # noqa: E402

_LOGGER = logging.getLogger(__name__)


def _item(value: str) -> Tuple[str, str]:
    platform, sep, text = value.partition("=")
    if not sep or not platform.strip():
        raise argparse.ArgumentTypeError(
            f"expected PLATFORM=TEXT, got {value!r}"
        )
    return platform.strip().lower(), text


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Python logging level (default: INFO)",
    )
    commands = parser.add_subparsers(dest="command")

    overlay = commands.add_parser("overlay", help="Run the rotating overlay window")
    overlay.add_argument(
        "query",
        nargs="?",
        default="",
        help="Overlay URL or query string, e.g. '?t=<token>' or '?hold=5000'",
    )
    overlay.add_argument("--x", type=int, default=None, help="Overlay X position")
    overlay.add_argument("--y", type=int, default=None, help="Overlay Y position")

    encode = commands.add_parser("encode", help="Generate a shareable overlay link")
    encode.add_argument(
        "--item",
        dest="items",
        action="append",
        type=_item,
        required=True,
        metavar="PLATFORM=TEXT",
        help="Platform and display text; repeat to add more in rotation order",
    )
    encode.add_argument("--hold-seconds", type=float, default=9, help="Hold time (s)")
    encode.add_argument("--anim-in", type=int, default=DEFAULT_ANIM_IN_MS, help="ms")
    encode.add_argument("--anim-out", type=int, default=DEFAULT_ANIM_OUT_MS, help="ms")
    encode.add_argument(
        "--compact", action="store_true", help="Use short platform codes"
    )
    encode.add_argument(
        "--origin", default="http://localhost", help="Origin of the overlay site"
    )
    encode.add_argument("--path", default="/", help="Path of the overlay site")

    decode = commands.add_parser("decode", help="Show the configuration in a token")
    decode.add_argument("token", help="Full or compact token")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _codec() -> TokenCodec:
    return TokenCodec(known_platforms=registry.get_registry().keys())


def run_encode(args: argparse.Namespace) -> int:
    try:
        configuration = share.build_configuration(
            args.items,
            hold_seconds=args.hold_seconds,
            anim_in_ms=args.anim_in,
            anim_out_ms=args.anim_out,
        )
    except ShareError as exc:
        print(exc, file=sys.stderr)
        return 1

    link = share.build_share_link(
        configuration, args.origin, args.path, compact=args.compact, codec=_codec()
    )
    print(link.url)
    print(f"Token: {link.token}")
    print(f"Token length: {len(link.token)} characters")
    print(f"URL length: {len(link.url)} vs {len(link.full_url)} (Full URL)")
    print(f"Saved {link.savings} characters ({link.savings_percent}% shorter)")
    return 0


def run_decode(args: argparse.Namespace) -> int:
    try:
        configuration = share.load_token(args.token, codec=_codec())
    except ShareError as exc:
        print(exc, file=sys.stderr)
        return 1

    values = share.editor_values(configuration)
    print(
        json.dumps(
            {
                "platforms": [
                    {"platform": platform, "text": text}
                    for platform, text in values.selections
                ],
                "holdSeconds": values.hold_seconds,
                "animInTime": values.anim_in_ms,
                "animOutTime": values.anim_out_ms,
            },
            indent=2,
            ensure_ascii=False,
        )
    )
    return 0


def run_overlay(args: argparse.Namespace) -> int:
    from follow_rotator import application

    position = None
    if args.x is not None and args.y is not None:
        position = (args.x, args.y)
    return application.run_overlay(args.query, position=position)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.command == "encode":
        return run_encode(args)
    if args.command == "decode":
        return run_decode(args)
    if args.command == "overlay":
        return run_overlay(args)

    _LOGGER.info("No command given; starting the overlay with default settings")
    return run_overlay(argparse.Namespace(query="", x=None, y=None))


if __name__ == "__main__":
    sys.exit(main())
