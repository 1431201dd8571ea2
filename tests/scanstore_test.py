from __future__ import annotations

import itertools

import pytest

from scan_rollup.scanmodel import EntryType
from scan_rollup.scanmodel import FolderRow
from scan_rollup.scanstore import FolderStore
from scan_rollup.scanstore import resolve_folder_key

FILE = EntryType.FILE
DIRECTORY = EntryType.DIRECTORY


@pytest.fixture
def store() -> FolderStore:
    return FolderStore()


@pytest.mark.parametrize(
    "path, depth, expected",
    [
        ("path", 1, None),
        ("path\\sub1", 1, "path\\sub1"),
        ("path\\sub1\\file.txt", 1, "path\\sub1"),
        ("path\\sub1\\deeper\\file.txt", 1, "path\\sub1"),
        ("path\\sub1", 2, None),
        ("dept\\path\\sub1", 2, "dept\\path\\sub1"),
        ("dept\\path\\sub1\\a\\b", 2, "dept\\path\\sub1"),
        ("", 1, None),
    ],
)
def test_resolve_folder_key(path: str, depth: int, expected: str | None) -> None:
    assert resolve_folder_key(path, depth) == expected


def test_resolve_folder_key_custom_separator() -> None:
    assert resolve_folder_key("path/sub1/file.txt", 1, "/") == "path/sub1"
    assert resolve_folder_key("path\\sub1\\file.txt", 1, "/") is None


def test_absorb_creates_folder(store: FolderStore) -> None:
    store.absorb("path\\sub1", FILE, "S-1-5-21-500", 100, 50, False)

    stats = store.get("path\\sub1")
    assert stats is not None
    assert stats.owner == "S-1-5-21-500"
    assert stats.total_bytes == 100
    assert stats.newest_age_seconds == 50
    assert stats.is_directory_entry_seen is False
    assert len(store) == 1
    assert "path\\sub1" in store


def test_absorb_directory_entry_marks_seen(store: FolderStore) -> None:
    store.absorb("path\\sub1", DIRECTORY, "S-1-5-21", 4096, 10, True)

    stats = store.get("path\\sub1")
    assert stats is not None
    assert stats.is_directory_entry_seen is True


RECORDS = [
    (FILE, "owner-a", 10, 500),
    (FILE, "owner-b", 2048, 30),
    (DIRECTORY, "owner-c", 4096, 30),
    (FILE, "owner-d", 7, 9000),
]


@pytest.mark.parametrize("order", list(itertools.permutations(RECORDS)))
def test_absorb_sum_and_min_ignore_order(order: tuple) -> None:
    store = FolderStore()
    for entry_type, owner, size, age in order:
        store.absorb("path\\sub1", entry_type, owner, size, age, False)

    stats = store.get("path\\sub1")
    assert stats is not None
    assert stats.total_bytes == 10 + 2048 + 4096 + 7
    assert stats.newest_age_seconds == 30


def test_directory_entry_owner_wins_when_late(store: FolderStore) -> None:
    store.absorb("path\\sub1", FILE, "file-owner-1", 10, 100, False)
    store.absorb("path\\sub1", FILE, "file-owner-2", 10, 100, False)
    store.absorb("path\\sub1", DIRECTORY, "dir-owner", 0, 100, True)

    stats = store.get("path\\sub1")
    assert stats is not None
    assert stats.owner == "dir-owner"
    assert stats.is_directory_entry_seen is True


def test_first_owner_stands_without_directory_entry(store: FolderStore) -> None:
    store.absorb("path\\sub1", FILE, "first", 10, 100, False)
    store.absorb("path\\sub1", DIRECTORY, "nested-dir", 0, 100, False)
    store.absorb("path\\sub1", FILE, "third", 10, 100, False)

    stats = store.get("path\\sub1")
    assert stats is not None
    assert stats.owner == "first"


def test_directory_entry_owner_not_replaced_by_later_files(store: FolderStore) -> None:
    store.absorb("path\\sub1", DIRECTORY, "dir-owner", 0, 100, True)
    store.absorb("path\\sub1", FILE, "file-owner", 10, 100, False)

    stats = store.get("path\\sub1")
    assert stats is not None
    assert stats.owner == "dir-owner"


def test_repeated_directory_entry_last_write_wins(store: FolderStore) -> None:
    store.absorb("path\\sub1", DIRECTORY, "first-dir", 0, 100, True)
    store.absorb("path\\sub1", DIRECTORY, "second-dir", 0, 100, True)

    stats = store.get("path\\sub1")
    assert stats is not None
    assert stats.owner == "second-dir"


def test_get_folders_sorted_by_key(store: FolderStore) -> None:
    store.absorb("path\\sub2", FILE, "b", 2, 20, False)
    store.absorb("path\\Sub3", FILE, "c", 3, 30, False)
    store.absorb("path\\sub1", FILE, "a", 1, 10, False)

    rows = store.get_folders()

    assert rows == [
        FolderRow("c", "path\\Sub3", 3, 30),
        FolderRow("a", "path\\sub1", 1, 10),
        FolderRow("b", "path\\sub2", 2, 20),
    ]


def test_context_manager_starts_empty(store: FolderStore) -> None:
    store.absorb("path\\old", FILE, "a", 1, 10, False)

    with store as active:
        assert len(active) == 0
        active.absorb("path\\new", FILE, "a", 1, 10, False)

    assert [row.key for row in store.get_folders()] == ["path\\new"]
