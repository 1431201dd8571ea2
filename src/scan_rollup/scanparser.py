from __future__ import annotations

import logging
import re
from collections.abc import Callable

from .scanmodel import EntryType
from .scanmodel import LineKind
from .scanmodel import ParsedLine
from .scanmodel import ParsedRecord
from .scanmodel import RawLine
from .scanunits import AGE_TOKEN
from .scanunits import SIZE_TOKEN
from .scanunits import SIZE_UNITS
from .scanunits import age_to_seconds
from .scanunits import is_age_token
from .scanunits import is_size_token
from .scanunits import size_to_bytes

DENSE_PATTERN = re.compile(
    rf"""
    (?P<type>[df])\s+
    (?P<owner>\S+)\s+
    (?P<size>{SIZE_TOKEN})\s+
    (?P<age>{AGE_TOKEN})\s+
    (?P<path>.+)
    """,
    re.IGNORECASE | re.VERBOSE,
)

HEADER_PATTERN = re.compile(
    r"^(?:scanned\b|xcp\b|-{3,}\s*$|\d[\d,]*\s+scanned\b)",
    re.IGNORECASE,
)

ERROR_PATTERN = re.compile(r"^(?:xcp:\s*)?error\b", re.IGNORECASE)

# Digit-led size column, possibly with a malformed number.
LEGACY_SIZE_PATTERN = re.compile(r"\d[\d.,]*([a-z]*)", re.IGNORECASE)

_FormatParser = Callable[[str], "tuple[ParsedRecord, bool] | None"]


def parse_dense(line: str) -> tuple[ParsedRecord, bool] | None:
    """Parse '<d|f> <owner> <size> <age> <path>' in a single pattern."""
    match = DENSE_PATTERN.fullmatch(line)
    if not match:
        return None

    record = ParsedRecord(
        entry_type=EntryType.from_token(match.group("type")),
        owner=match.group("owner"),
        size_bytes=size_to_bytes(match.group("size")),
        age_seconds=age_to_seconds(match.group("age")),
        path=match.group("path"),
    )
    return record, False


def parse_legacy(line: str) -> tuple[ParsedRecord, bool] | None:
    """
    Parse the older whitespace column layout.

    Columns are type, owner, size, age and path. The size can be split into
    a number column and a unit column ("65.1 KiB"). Everything after the age
    column is the path, internal whitespace included.

    The age column must be a valid age token. A size column with a known unit
    but an unreadable number ("12,5KiB") degrades to 0 and is reported as a
    fallback. Any other size column rejects the line.
    """
    fields = line.split(maxsplit=4)
    if len(fields) < 5 or fields[0].lower() not in ("d", "f"):
        return None

    entry_type, owner, size_token, age_token, rest = fields
    if age_token.lower() in SIZE_UNITS:
        # Split size column: the unit sits where the age would be.
        size_token += age_token
        remaining = rest.split(maxsplit=1)
        if len(remaining) < 2:
            return None
        age_token, rest = remaining

    if not is_age_token(age_token):
        return None

    fallback = not is_size_token(size_token)
    if fallback:
        match = LEGACY_SIZE_PATTERN.fullmatch(size_token)
        if not match or match.group(1).lower() not in SIZE_UNITS:
            return None

    record = ParsedRecord(
        entry_type=EntryType.from_token(entry_type),
        owner=owner,
        size_bytes=size_to_bytes(size_token),
        age_seconds=age_to_seconds(age_token),
        path=rest,
    )
    return record, fallback


# Tried in order, first match wins.
LINE_FORMATS: tuple[_FormatParser, ...] = (parse_dense, parse_legacy)


class LineParser:
    """Classify raw scanner lines and extract records from data lines."""

    logger = logging.getLogger(__name__)

    def __init__(self, formats: tuple[_FormatParser, ...] = LINE_FORMATS) -> None:
        self._formats = formats

    def parse(self, raw: RawLine) -> ParsedLine:
        """Classify a line. Never raises for malformed input."""
        line = raw.text.rstrip("\r\n")

        if raw.is_error or ERROR_PATTERN.match(line):
            return ParsedLine(LineKind.ERROR)

        stripped = line.strip()
        if not stripped or HEADER_PATTERN.match(stripped):
            return ParsedLine(LineKind.IGNORED)

        for parse_format in self._formats:
            result = parse_format(stripped)
            if result is not None:
                record, fallback = result
                return ParsedLine(LineKind.RECORD, record, fallback)

        self.logger.debug("Skipped unrecognized line: %s", line)
        return ParsedLine(LineKind.SKIPPED)
