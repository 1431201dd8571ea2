from __future__ import annotations

import csv
import dataclasses
import logging
import os
from datetime import datetime

from .scanconfig import ScanConfig
from .scanmodel import FolderRow
from .scanmodel import ScanRoot
from .scanunits import bytes_to_size
from .scanunits import seconds_to_age

CSV_HEADER = ["Folder", "Owner", "Size", "SizeBytes", "NewestAge", "NewestAgeSeconds"]


@dataclasses.dataclass(frozen=True)
class ReportLine:
    folder: str
    owner: str
    size: str
    size_bytes: int
    newest_age: str
    newest_age_seconds: int

    def as_row(self) -> list[str | int]:
        return [
            self.folder,
            self.owner,
            self.size,
            self.size_bytes,
            self.newest_age,
            self.newest_age_seconds,
        ]


class ReportEmitter:
    """Write finished folder rows to the configured targets."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: ScanConfig) -> None:
        """Initialize the emitter."""
        self._config = config

    def emit(self, scan_root: ScanRoot, rows: list[FolderRow]) -> str | None:
        """
        Emit the report for a scan root to all enabled targets.

        Returns:
            The path of the CSV file written, or None if none was written.
        """
        lines = self.build_lines(scan_root, rows)

        self.to_stdout(lines)
        filename = self.to_csv(lines)

        self.logger.info("Emitted %d report lines.", len(lines))
        return filename

    @staticmethod
    def build_lines(scan_root: ScanRoot, rows: list[FolderRow]) -> list[ReportLine]:
        """Convert folder rows to display lines with full paths and units."""
        return [
            ReportLine(
                folder=scan_root.full_path(row.key),
                owner=row.owner,
                size=bytes_to_size(row.total_bytes),
                size_bytes=row.total_bytes,
                newest_age=seconds_to_age(row.newest_age_seconds),
                newest_age_seconds=row.newest_age_seconds,
            )
            for row in rows
        ]

    def to_csv(self, lines: list[ReportLine]) -> str | None:
        """
        Write report lines to a CSV file.

        Output:
            A file named <config_name>_<date>-<time>_report.csv in the
            configured output directory.
        """
        if not self._config.emit_csv:
            return None

        date = datetime.now().strftime("%Y%m%d-%H%M%S")
        filename = os.path.join(
            self._config.output_directory,
            f"{self._config.config_name}_{date}_report.csv",
        )

        with open(filename, "w", newline="", encoding="utf-8") as file_out:
            writer = csv.writer(file_out)
            writer.writerow(CSV_HEADER)
            writer.writerows(line.as_row() for line in lines)

        self.logger.debug("Emitted %d lines to %s", len(lines), filename)
        return filename

    def to_stdout(self, lines: list[ReportLine]) -> None:
        """Print report lines to stdout as a table."""
        if not self._config.emit_stdout or not lines:
            return

        print(self.format_table(lines))

        self.logger.debug("Emitted %d lines to stdout", len(lines))

    @staticmethod
    def format_table(lines: list[ReportLine]) -> str:
        """Return the lines as a left-aligned table with a header row."""
        header = ["Folder", "Owner", "Size", "Newest"]
        table = [header] + [
            [line.folder, line.owner, line.size, line.newest_age] for line in lines
        ]
        widths = [max(len(row[col]) for row in table) for col in range(len(header))]

        rendered = [
            "  ".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()
            for row in table
        ]
        rendered.insert(1, "  ".join("-" * width for width in widths))
        return "\n".join(rendered)
