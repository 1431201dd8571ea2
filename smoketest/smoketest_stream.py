from __future__ import annotations

import argparse
import logging
import random
from collections.abc import Iterator
from string import ascii_lowercase

from scan_rollup.scanmodel import RawLine

LINE_COUNT = 2_000_000
FOLDER_COUNT = 500
MAX_DEPTH = 6
CHANCE_OF_NOISE = 0.001  # out of 1.0
CHANCE_OF_ERROR = 0.0005  # out of 1.0

OWNERS = ["S-1-5-21-1000", "S-1-5-21-1001", "CORP\\jdoe", "BUILTIN\\Administrators"]
SIZE_UNITS = ["", "KiB", "MiB", "GiB"]
AGE_UNITS = ["s", "m", "h", "d", "y"]

logger = logging.getLogger(__name__)


def parse_args() -> tuple[int, int]:
    """Parse command line arguments, return line count and folder count."""
    parser = argparse.ArgumentParser(description="Synthetic scanner output stream.")
    parser.add_argument("--lines", type=int, default=LINE_COUNT)
    parser.add_argument("--folders", type=int, default=FOLDER_COUNT)
    args = parser.parse_args()
    return args.lines, args.folders


def _name(length: int = 8) -> str:
    """Create a random lowercase name."""
    return "".join(random.choices(ascii_lowercase, k=length))


def _size_token() -> str:
    unit = random.choice(SIZE_UNITS)
    if unit:
        return f"{random.uniform(0, 1000):.1f}{unit}"
    return str(random.randint(0, 1023))


def _age_token() -> str:
    unit = random.choice(AGE_UNITS)
    prefix = "+" if unit == "s" else ""
    return f"{prefix}{random.randint(0, 59)}{unit}"


def synthetic_lines(line_count: int, folder_count: int) -> Iterator[RawLine]:
    """Yield scanner-like lines spread over `folder_count` first-level folders."""
    folders = [f"path\\{_name()}" for _ in range(folder_count)]

    yield RawLine("XCP 1.9.3; (c) 2023 NetApp, Inc.")
    yield RawLine(f"d {OWNERS[0]} 0 1d path")
    for folder in folders:
        yield RawLine(f"d {random.choice(OWNERS)} 4.0KiB {_age_token()} {folder}")

    for _ in range(line_count):
        roll = random.random()
        if roll < CHANCE_OF_ERROR:
            yield RawLine(f"access denied: {random.choice(folders)}", is_error=True)
            continue

        if roll < CHANCE_OF_ERROR + CHANCE_OF_NOISE:
            yield RawLine(f"unexpected output {_name(20)}")
            continue

        depth = random.randint(0, MAX_DEPTH)
        parts = [random.choice(folders)] + [_name() for _ in range(depth + 1)]
        path = "\\".join(parts) + " copy.txt"
        yield RawLine(
            f"f {random.choice(OWNERS)} {_size_token()} {_age_token()} {path}"
        )

    yield RawLine(f"{line_count} scanned, 0 errors")


def run() -> int:
    """Print a synthetic stream to stdout, usable as a fake scanning tool."""
    line_count, folder_count = parse_args()
    for line in synthetic_lines(line_count, folder_count):
        print(line.text)
    return 0


if __name__ == "__main__":
    raise SystemExit(run())
