from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .scanmodel import SEPARATOR
from .scanmodel import EntryType
from .scanmodel import FolderRow
from .scanmodel import FolderStats

if TYPE_CHECKING:
    from types import TracebackType


def resolve_folder_key(
    path: str,
    depth: int = 1,
    separator: str = SEPARATOR,
) -> str | None:
    """
    Return the first-level folder a relative path belongs to.

    Args:
        path: Path relative to the scan root's parent, e.g. "path\\sub1\\a.txt".
        depth: Number of separators in a first-level folder path.
        separator: Path component separator.

    Returns:
        None for paths with fewer than `depth` separators (the scan root or
        above). The path itself with exactly `depth` separators. Otherwise the
        prefix ending before separator number `depth + 1`.
    """
    index = -1
    for _ in range(depth):
        index = path.find(separator, index + 1)
        if index == -1:
            return None

    cut = path.find(separator, index + 1)
    if cut == -1:
        return path

    return path[:cut]


class FolderStore:
    """In-memory running totals keyed by first-level folder."""

    logger = logging.getLogger(__name__)

    def __init__(self) -> None:
        self._folders: dict[str, FolderStats] = {}

    def __enter__(self) -> FolderStore:
        """Start a run with an empty store."""
        self.clear()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        """End the run."""
        self.logger.debug("Store closed with %s folders", len(self._folders))

    def __len__(self) -> int:
        return len(self._folders)

    def __contains__(self, key: object) -> bool:
        return key in self._folders

    def clear(self) -> None:
        """Discard all folders."""
        self._folders = {}

    def get(self, key: str) -> FolderStats | None:
        """Return the stats for a folder key, if seen."""
        return self._folders.get(key)

    def absorb(
        self,
        key: str,
        entry_type: EntryType,
        owner: str,
        size_bytes: int,
        age_seconds: int,
        is_exact_key_match: bool,
    ) -> None:
        """
        Fold one record into the totals of its folder.

        Sizes are summed and the smallest age is kept. The owner is taken from
        the first record seen unless the record is the folder's own directory
        entry, which replaces it.
        """
        is_folder_entry = entry_type is EntryType.DIRECTORY and is_exact_key_match
        stats = self._folders.get(key)

        if stats is None:
            self._folders[key] = FolderStats(
                owner=owner,
                total_bytes=size_bytes,
                newest_age_seconds=age_seconds,
                is_directory_entry_seen=is_folder_entry,
            )
            return

        stats.total_bytes += size_bytes
        if age_seconds < stats.newest_age_seconds:
            stats.newest_age_seconds = age_seconds

        if is_folder_entry:
            if stats.is_directory_entry_seen:
                self.logger.debug("Repeated directory entry for '%s'", key)
            stats.owner = owner
            stats.is_directory_entry_seen = True

    def get_folders(self) -> list[FolderRow]:
        """Return one row per folder, sorted by folder key."""
        return [
            FolderRow(
                owner=stats.owner,
                key=key,
                total_bytes=stats.total_bytes,
                newest_age_seconds=stats.newest_age_seconds,
            )
            for key, stats in sorted(self._folders.items())
        ]
