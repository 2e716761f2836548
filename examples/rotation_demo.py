"""Manual demonstration script for the rotating overlay window."""

from __future__ import annotations

import argparse
import sys

from PySide6.QtWidgets import QApplication

from follow_rotator.application import OverlayApplication
from follow_rotator.models import Configuration, TimingConfig, build_items


def _pair(value: str) -> tuple[str, str]:
    platform, _, text = value.partition("=")
    return platform, text


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "items",
        nargs="+",
        type=_pair,
        help="PLATFORM=TEXT pairs in rotation order, e.g. twitch=@me",
    )
    parser.add_argument("--hold", type=int, default=3000, help="Hold time in ms")
    parser.add_argument("--anim-in", type=int, default=600, help="Enter fade in ms")
    parser.add_argument("--anim-out", type=int, default=600, help="Exit fade in ms")
    parser.add_argument("--x", type=int, default=None, help="Overlay X position")
    parser.add_argument("--y", type=int, default=None, help="Overlay Y position")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    app = QApplication.instance() or QApplication(sys.argv)
    configuration = Configuration(
        items=tuple(build_items(args.items)),
        timing=TimingConfig(
            hold_ms=args.hold, anim_in_ms=args.anim_in, anim_out_ms=args.anim_out
        ),
    )
    overlay = OverlayApplication(
        configuration,
        position=(
            (args.x, args.y) if args.x is not None and args.y is not None else None
        ),
    )
    overlay.start()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
