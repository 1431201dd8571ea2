from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from contextlib import closing

from .scanconfig import ScanConfig
from .scanemitter import ReportEmitter
from .scanerrors import CollaboratorFailure
from .scanerrors import PreconditionError
from .scanmodel import LineKind
from .scanmodel import RawLine
from .scanmodel import ScanRoot
from .scanmodel import ScanSummary
from .scanparser import LineParser
from .scanprocess import ScanProcess
from .scanstore import FolderStore
from .scanstore import resolve_folder_key


class Scanner:
    """Roll up scanner output into per-folder owner, size and newest age."""

    logger = logging.getLogger(__name__)

    def __init__(self, config: ScanConfig, root_path: str | None = None) -> None:
        """
        Initialize a new Scanner.

        Args:
            config: The configuration to use for this scanner.
            root_path: UNC path to scan. Defaults to the configured root_path.
        """
        self._config = config
        self._root_path = root_path or config.root_path
        self._parser = LineParser()
        self._store = FolderStore()
        self._emitter = ReportEmitter(config)
        self._scan_root: ScanRoot | None = None
        self.summary = ScanSummary()

    @property
    def scan_root(self) -> ScanRoot:
        """
        Return the parsed root path. Parsed once per scanner.

        Raises:
            PreconditionError: When no root is set or it is not UNC shaped.
        """
        if self._scan_root is None:
            if not self._root_path:
                raise PreconditionError("No root path given")
            self._scan_root = ScanRoot.from_path(self._root_path)

        return self._scan_root

    def run_once(self) -> str | None:
        """Scan the root and emit the report. Returns the CSV path, if written."""
        self.scan()
        return self.emit()

    def scan(self) -> ScanSummary:
        """
        Run the scanning tool over the root and aggregate its output.

        Raises:
            PreconditionError: The root path is malformed.
            CollaboratorUnavailable: The scanning tool was not found.
            CollaboratorFailure: The tool exited non-zero with no results.
        """
        scan_root = self.scan_root
        process = ScanProcess.from_config(self._config, scan_root)

        self.logger.info("Scanning %s...", scan_root)
        tic = time.perf_counter()

        with self._store, closing(process.lines()) as lines:
            summary = self.consume(lines)

        summary.exit_code = process.returncode
        toc = time.perf_counter()
        self.logger.info("Scan finished in %s seconds", toc - tic)
        self.logger.info("Scan summary: %s", summary)

        if summary.exit_code:
            if not len(self._store):
                raise CollaboratorFailure(summary.exit_code, summary.errors)

            self.logger.warning(
                "Scanner exited with code %s, reporting %s folders found before exit",
                summary.exit_code,
                len(self._store),
            )

        return summary

    def consume(self, lines: Iterable[RawLine]) -> ScanSummary:
        """Classify, group and aggregate every line of a scanner stream."""
        summary = ScanSummary()
        self.summary = summary
        depth = self._config.target_depth
        separator = self._config.separator
        progress_interval = self._config.progress_interval

        for raw in lines:
            summary.total_lines += 1
            if progress_interval > 0 and summary.total_lines % progress_interval == 0:
                self.logger.info(
                    "Read %s lines, %s records processed",
                    summary.total_lines,
                    summary.processed,
                )

            parsed = self._parser.parse(raw)

            if parsed.kind is LineKind.ERROR:
                summary.errors.append(raw.text)
                self.logger.debug("Scanner error: %s", raw.text)
                continue

            if parsed.kind is LineKind.IGNORED:
                summary.ignored += 1
                continue

            if parsed.record is None:
                summary.skipped += 1
                continue

            record = parsed.record
            if parsed.unit_fallback:
                summary.unit_fallbacks += 1
                self.logger.warning("Unreadable size or age, counted as 0: %s", raw.text)

            key = resolve_folder_key(record.path, depth, separator)
            if key is not None:
                self._store.absorb(
                    key,
                    record.entry_type,
                    record.owner,
                    record.size_bytes,
                    record.age_seconds,
                    key == record.path,
                )
            summary.processed += 1

        return summary

    def emit(self) -> str | None:
        """Emit the aggregated folders to the configured outputs."""
        self.logger.info("Emitting report...")
        tic = time.perf_counter()

        filename = self._emitter.emit(self.scan_root, self._store.get_folders())

        toc = time.perf_counter()
        self.logger.info("Emitting finished in %s seconds", toc - tic)
        if filename:
            self.logger.info("Report written to %s", filename)
        return filename
