from __future__ import annotations

import argparse
import logging
from pathlib import Path

from scan_rollup.scanconfig import ScanConfig
from scan_rollup.scanconfig import validate_parallel
from scan_rollup.scanconfig import write_new_config
from scan_rollup.scanerrors import CollaboratorFailure
from scan_rollup.scanerrors import ScanRollupError
from scan_rollup.scanner import Scanner

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MAX_ERROR_LINES = 20

logger = logging.getLogger(__name__)


def parallel_type(value: str) -> int:
    """argparse type for the scanner parallelism."""
    try:
        return validate_parallel(int(value))
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from error


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Scan a share and report owner, total size and newest file age for each first-level folder.",
    )
    parser.add_argument(
        "config",
        type=str,
        help="The path to the configuration file.",
    )
    parser.add_argument(
        "--root",
        help="UNC path to scan, e.g. \\\\server\\share\\folder. Overrides the config.",
        default=None,
    )
    parser.add_argument(
        "--parallel",
        help="Number of parallel scanner workers (1-61). Overrides the config.",
        type=parallel_type,
        default=None,
    )
    parser.add_argument(
        "--debug",
        help="Enable debug logging.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--log-file",
        help="Enable logging to a file next to the config file.",
        default=False,
        action="store_true",
    )
    parser.add_argument(
        "--make-config",
        help="Create a default configuration file.",
        default=False,
        action="store_true",
    )
    return parser.parse_args(args)


def add_file_handler_to_logging(config_filepath: str) -> None:
    """Add a file handler to the root logger next to the config file provided."""
    filepath = Path(config_filepath).absolute()
    log_filepath = filepath.parent / f"{filepath.stem}.log"
    file_handler = logging.FileHandler(log_filepath)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logging.getLogger().addHandler(file_handler)


def main(*, cli_args: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(cli_args)

    if args.make_config:
        write_new_config(args.config)
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )

    if args.log_file:
        add_file_handler_to_logging(args.config)

    config = ScanConfig(args.config)
    if args.parallel is not None:
        config.set_parallel(args.parallel)

    scanner = Scanner(config, args.root)

    try:
        scanner.run_once()

    except ScanRollupError as error:
        logger.error("Scan failed: %s", error)
        if isinstance(error, CollaboratorFailure):
            for line in error.errors[:MAX_ERROR_LINES]:
                logger.error("  %s", line)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
