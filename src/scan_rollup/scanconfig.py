from __future__ import annotations

import logging
import os
from configparser import ConfigParser

from .scanerrors import PreconditionError

MIN_PARALLEL = 1
MAX_PARALLEL = 61

NEW_CONFIG = """\
[system]
# config_name is used to name the report files.
config_name = {config_name}

[scanner]
# UNC path to scan. Can be overridden with --root.
root_path =
tool_path = xcp
# {{path}} and {{parallel}} are replaced before the scanner is started.
tool_arguments = scan -l -ownership -parallel {{parallel}} {{path}}
# Number of parallel scanner workers, 1 to 61.
parallel = 8
# Separators in a first-level folder path ("share\\folder" is 1).
target_depth = 1
encoding = utf-8
# Lines between progress messages, 0 disables them.
progress_interval = 10000

[emit]
# Write the report to the following destinations.
stdout = false
csv = true
output_directory = .

    """


def validate_parallel(value: int) -> int:
    """
    Return the value if it is a valid scanner parallelism.

    Raises:
        PreconditionError: When the value is outside 1 to 61.
    """
    if not MIN_PARALLEL <= value <= MAX_PARALLEL:
        raise PreconditionError(
            f"parallel must be between {MIN_PARALLEL} and {MAX_PARALLEL}, got {value}"
        )
    return value


class ScanConfig:
    """Configuration for the Scanner."""

    logger = logging.getLogger(__name__)

    def __init__(self, filepath: str) -> None:
        """Load the configuration from the given file."""
        # Interpolation off: tool arguments contain '%' and '{}' freely.
        self._config = ConfigParser(interpolation=None)
        success = self._config.read(filepath)

        if not success:
            raise ValueError(f"Could not read config file at {filepath}")

        self.logger.debug("Loaded config from %s", filepath)

    @property
    def config_name(self) -> str:
        """Return the name of the config."""
        return self._config.get("system", "config_name", fallback="scan_rollup")

    @property
    def root_path(self) -> str | None:
        """Return the UNC path to scan, or None if not set."""
        return self._config.get("scanner", "root_path", fallback="") or None

    @property
    def tool_path(self) -> str:
        """Return the name or path of the scanning tool."""
        return self._config.get("scanner", "tool_path", fallback="xcp")

    @property
    def tool_arguments(self) -> str:
        """Return the argument template passed to the scanning tool."""
        return self._config.get(
            "scanner",
            "tool_arguments",
            fallback="scan -l -ownership -parallel {parallel} {path}",
        )

    @property
    def parallel(self) -> int:
        """Return the scanner parallelism. Will raise if out of range."""
        return validate_parallel(self._config.getint("scanner", "parallel", fallback=8))

    def set_parallel(self, value: int) -> None:
        """Override the scanner parallelism for this run."""
        if not self._config.has_section("scanner"):
            self._config.add_section("scanner")
        self._config.set("scanner", "parallel", str(validate_parallel(value)))

    @property
    def target_depth(self) -> int:
        """Return the separator count of a first-level folder path."""
        return self._config.getint("scanner", "target_depth", fallback=1)

    @property
    def separator(self) -> str:
        """Return the path separator used in scanner output."""
        return self._config.get("scanner", "separator", fallback="\\")

    @property
    def encoding(self) -> str:
        """Return the text encoding of the scanner output."""
        return self._config.get("scanner", "encoding", fallback="utf-8")

    @property
    def progress_interval(self) -> int:
        """Return the lines between progress messages, 0 or less disables them."""
        return self._config.getint("scanner", "progress_interval", fallback=10000)

    @property
    def emit_stdout(self) -> bool:
        """Return whether to print the report table to stdout."""
        return self._config.getboolean("emit", "stdout", fallback=False)

    @property
    def emit_csv(self) -> bool:
        """Return whether to write the report to a CSV file."""
        return self._config.getboolean("emit", "csv", fallback=True)

    @property
    def output_directory(self) -> str:
        """Return the directory CSV reports are written to."""
        return self._config.get("emit", "output_directory", fallback=".")


def write_new_config(filename: str) -> None:
    """Write a new config file if one does not exist."""
    if os.path.exists(filename):
        return

    config_name = os.path.splitext(os.path.basename(filename))[0]
    config = NEW_CONFIG.format(config_name=config_name)

    with open(filename, "w") as config_file:
        config_file.write(config)
