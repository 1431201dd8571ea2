from __future__ import annotations


class ScanRollupError(Exception):
    """Base for errors that end a run."""


class PreconditionError(ScanRollupError, ValueError):
    """The run cannot start with the given input (e.g. a malformed root path)."""


class CollaboratorUnavailable(ScanRollupError, FileNotFoundError):
    """The scanning tool could not be located."""


class CollaboratorFailure(ScanRollupError, RuntimeError):
    """The scanning tool exited non-zero and nothing was aggregated."""

    def __init__(self, exit_code: int, errors: list[str]) -> None:
        super().__init__(
            f"Scanner exited with code {exit_code} and produced no results "
            f"({len(errors)} error lines)"
        )
        self.exit_code = exit_code
        self.errors = errors
