from __future__ import annotations

import dataclasses
import enum

from .scanerrors import PreconditionError

UNC_PREFIX = "\\\\"
SEPARATOR = "\\"


class EntryType(enum.Enum):
    FILE = "f"
    DIRECTORY = "d"

    @classmethod
    def from_token(cls, token: str) -> EntryType:
        """Return the entry type for a 'd' or 'f' token (any case)."""
        return cls(token.lower())


class LineKind(enum.Enum):
    RECORD = "record"
    ERROR = "error"
    IGNORED = "ignored"
    SKIPPED = "skipped"


@dataclasses.dataclass(frozen=True)
class ScanRoot:
    """A UNC path split into server, share and the path below the share."""

    server: str
    share: str
    sub_path: str = ""

    @classmethod
    def from_path(cls, path: str) -> ScanRoot:
        """
        Parse a UNC path such as \\\\server\\share\\sub\\path.

        Raises:
            PreconditionError: When the path is not UNC shaped.
        """
        if not path.startswith(UNC_PREFIX):
            raise PreconditionError(f"Root path must start with '\\\\': {path!r}")

        if path.endswith(SEPARATOR):
            raise PreconditionError(f"Root path has a trailing separator: {path!r}")

        parts = path[len(UNC_PREFIX) :].split(SEPARATOR)
        if len(parts) < 2 or not all(parts):
            raise PreconditionError(f"Root path needs a server and share: {path!r}")

        return cls(parts[0], parts[1], SEPARATOR.join(parts[2:]))

    @property
    def path(self) -> str:
        """Return the full UNC path."""
        return SEPARATOR.join(
            part for part in (UNC_PREFIX + self.server, self.share, self.sub_path) if part
        )

    @property
    def parent(self) -> str:
        """Return the UNC path one level above the scanned folder."""
        return self.path.rsplit(SEPARATOR, 1)[0]

    def full_path(self, folder_key: str) -> str:
        """Join a folder key (which starts with the scanned folder) to the parent."""
        return f"{self.parent}{SEPARATOR}{folder_key}"

    def __str__(self) -> str:
        return self.path


@dataclasses.dataclass(frozen=True)
class RawLine:
    """One line of scanner output. is_error marks lines read from stderr."""

    text: str
    is_error: bool = False


@dataclasses.dataclass(frozen=True)
class ParsedRecord:
    """A scanner record with size and age already in bytes and seconds."""

    entry_type: EntryType
    owner: str
    size_bytes: int
    age_seconds: int
    path: str


@dataclasses.dataclass(frozen=True)
class ParsedLine:
    """Outcome of classifying one raw line."""

    kind: LineKind
    record: ParsedRecord | None = None
    unit_fallback: bool = False


@dataclasses.dataclass
class FolderStats:
    """Running totals for one first-level folder."""

    owner: str
    total_bytes: int
    newest_age_seconds: int
    is_directory_entry_seen: bool = False


@dataclasses.dataclass(frozen=True)
class FolderRow:
    """A finished folder line of the report."""

    owner: str
    key: str
    total_bytes: int
    newest_age_seconds: int


@dataclasses.dataclass
class ScanSummary:
    """Counters collected while consuming one scanner stream."""

    total_lines: int = 0
    processed: int = 0
    skipped: int = 0
    ignored: int = 0
    unit_fallbacks: int = 0
    errors: list[str] = dataclasses.field(default_factory=list)
    exit_code: int | None = None

    def __str__(self) -> str:
        return (
            f"{self.total_lines} lines, {self.processed} processed, "
            f"{self.skipped} skipped, {self.ignored} ignored, "
            f"{len(self.errors)} errors, {self.unit_fallbacks} unit fallbacks"
        )
