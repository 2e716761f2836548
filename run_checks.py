#!/usr/bin/env python3
"""Run formatting, linting, and the test suite for Follow Rotator."""

from __future__ import annotations

import subprocess
import sys
from typing import Iterable

STEPS = (
    ("Formatting (black)", ["black", "src", "tests", "examples", "main.py"], (0,)),
    ("Linting (ruff)", ["ruff", "check", "."], (0,)),
    ("Testing (pytest)", ["pytest"], (0, 5)),
)


def run_step(description: str, args: list[str], ok_codes: Iterable[int] = (0,)) -> None:
    print(f"\n=== {description} ===", flush=True)
    result = subprocess.run(args)
    if result.returncode not in ok_codes:
        print(f"{description} failed with exit code {result.returncode}.")
        sys.exit(result.returncode)


def main() -> None:
    for description, args, ok_codes in STEPS:
        run_step(description, args, ok_codes)
    print("\nAll checks passed!")


if __name__ == "__main__":
    main()
