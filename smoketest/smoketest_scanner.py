from __future__ import annotations

import logging
import time
import tracemalloc
from unittest.mock import MagicMock

from smoketest_stream import FOLDER_COUNT
from smoketest_stream import LINE_COUNT
from smoketest_stream import synthetic_lines

from scan_rollup.scanner import Scanner


def main() -> int:
    """Push a large synthetic stream through the scanner and report cost."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(message)s")
    config = MagicMock(
        root_path="\\\\smoketest\\share\\path",
        target_depth=1,
        separator="\\",
        progress_interval=250_000,
        emit_stdout=False,
        emit_csv=False,
    )
    scanner = Scanner(config)

    tracemalloc.start()
    tic = time.perf_counter()
    summary = scanner.consume(synthetic_lines(LINE_COUNT, FOLDER_COUNT))
    toc = time.perf_counter()
    _, peak = tracemalloc.get_traced_memory()
    tracemalloc.stop()

    logging.info("Summary: %s", summary)
    logging.info("Folders: %s", len(scanner._store))
    logging.info("Elapsed: %.2f seconds, peak memory %.1f MiB", toc - tic, peak / 2**20)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
