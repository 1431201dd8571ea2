from __future__ import annotations

import re

KIB = 1024
MIB = KIB * 1024
GIB = MIB * 1024
TIB = GIB * 1024

# KB/MB/GB/TB are treated as binary multiples, same as their iB counterparts.
SIZE_UNITS = {
    "": 1,
    "b": 1,
    "kb": KIB,
    "kib": KIB,
    "mb": MIB,
    "mib": MIB,
    "gb": GIB,
    "gib": GIB,
    "tb": TIB,
    "tib": TIB,
}

# Display thresholds, largest first. Must mirror SIZE_UNITS.
DISPLAY_UNITS = (
    ("TB", TIB),
    ("GB", GIB),
    ("MB", MIB),
    ("KB", KIB),
)

MINUTE = 60
HOUR = 60 * MINUTE
DAY = 24 * HOUR
YEAR = 365 * DAY

AGE_UNITS = {
    "y": YEAR,
    "d": DAY,
    "h": HOUR,
    "m": MINUTE,
    "s": 1,
}

SIZE_TOKEN = r"\d+(?:\.\d+)?(?:[kmgt]i?b|b)?"
AGE_TOKEN = r"\+?(?:\d+[a-z]+)+"

_size_pattern = re.compile(r"(\d+(?:\.\d+)?)([a-z]*)", re.IGNORECASE)
_size_token_pattern = re.compile(SIZE_TOKEN, re.IGNORECASE)
_age_token_pattern = re.compile(AGE_TOKEN, re.IGNORECASE)
_age_group_pattern = re.compile(r"(\d+)([a-z]+)", re.IGNORECASE)


def is_size_token(token: str) -> bool:
    """True if the token is a number with an optional known size unit."""
    return bool(_size_token_pattern.fullmatch(token))


def is_age_token(token: str) -> bool:
    """True if the token is an optional '+' followed by digit/letter groups."""
    return bool(_age_token_pattern.fullmatch(token))


def size_to_bytes(token: str) -> int:
    """
    Convert a size token such as "65.1KiB" or "729" to a whole number of bytes.

    Unrecognized tokens return 0. Fractional bytes are truncated.
    """
    match = _size_pattern.fullmatch(token.strip())
    if not match:
        return 0

    multiplier = SIZE_UNITS.get(match.group(2).lower())
    if multiplier is None:
        return 0

    return int(float(match.group(1)) * multiplier)


def bytes_to_size(size_bytes: int) -> str:
    """Format a byte count with the largest unit the value reaches."""
    for unit, threshold in DISPLAY_UNITS:
        if size_bytes >= threshold:
            return f"{size_bytes / threshold:.2f} {unit}"

    return f"{size_bytes} B"


def age_to_seconds(token: str) -> int:
    """
    Convert an age token such as "59d4h", "7y0d" or "+0s" to seconds.

    A leading '+' marks a very recent entry and carries no value of its own.
    Each <digits><unit> group adds independently. Groups with an unknown unit
    add nothing, and a token without any group is 0.
    """
    total = 0
    for amount, unit in _age_group_pattern.findall(token.strip().lstrip("+")):
        total += int(amount) * AGE_UNITS.get(unit.lower(), 0)

    return total


def seconds_to_age(age_seconds: int) -> str:
    """Format seconds as age components, largest first ("59d4h"). Zero is "0s"."""
    parts: list[str] = []
    remainder = age_seconds
    for unit, seconds in AGE_UNITS.items():
        amount, remainder = divmod(remainder, seconds)
        if amount:
            parts.append(f"{amount}{unit}")

    return "".join(parts) or "0s"
