from __future__ import annotations

import logging
import queue
import shutil
import subprocess
import threading
from collections.abc import Iterator
from typing import IO
from typing import TYPE_CHECKING
from typing import cast

from .scanerrors import CollaboratorUnavailable
from .scanmodel import RawLine
from .scanmodel import ScanRoot

if TYPE_CHECKING:
    from typing import Protocol

    class _ScanConfig(Protocol):
        @property
        def tool_path(self) -> str:
            ...

        @property
        def tool_arguments(self) -> str:
            ...

        @property
        def parallel(self) -> int:
            ...

        @property
        def encoding(self) -> str:
            ...


class ScanProcess:
    """Run the external scanning tool and stream its output lines."""

    logger = logging.getLogger(__name__)

    def __init__(self, command: list[str], *, encoding: str = "utf-8") -> None:
        """
        Initialize a scan process. Nothing is started until lines() is iterated.

        Args:
            command: Full argv of the scanning tool.

        Keyword Args:
            encoding: Text encoding of the tool's output. Undecodable bytes
                are replaced rather than raising.
        """
        self.command = command
        self.returncode: int | None = None
        self._encoding = encoding

    @classmethod
    def from_config(cls, config: _ScanConfig, scan_root: ScanRoot) -> ScanProcess:
        """
        Build the scan command for a root from the given configuration.

        Raises:
            PreconditionError: When the parallel setting is out of range.
            CollaboratorUnavailable: When the tool cannot be found.
        """
        parallel = config.parallel
        tool = shutil.which(config.tool_path)
        if tool is None:
            raise CollaboratorUnavailable(
                f"Scanning tool '{config.tool_path}' was not found"
            )

        # Formatted per token and run without a shell so UNC backslashes survive.
        arguments = [
            argument.format(path=scan_root.path, parallel=parallel)
            for argument in config.tool_arguments.split()
        ]
        return cls([tool, *arguments], encoding=config.encoding)

    def lines(self) -> Iterator[RawLine]:
        """
        Start the tool and yield its output in arrival order.

        Stdout lines are yielded as data. Stderr is drained by a reader thread
        and yielded as error lines between stdout lines and after stdout ends.
        The exit code is stored in `returncode` once the iterator is exhausted.
        """
        self.logger.debug("Starting scanner: %s", self.command)
        process = subprocess.Popen(
            self.command,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding=self._encoding,
            errors="replace",
            bufsize=1,
        )
        # Both pipes are always set when PIPE is requested.
        stdout = cast(IO[str], process.stdout)
        stderr = cast(IO[str], process.stderr)

        errors: queue.Queue[str] = queue.Queue()
        reader = threading.Thread(
            target=self._drain,
            args=(stderr, errors),
            daemon=True,
        )
        reader.start()

        finished = False
        try:
            for line in stdout:
                yield from self._pending_errors(errors)
                yield RawLine(line.rstrip("\r\n"))

            reader.join()
            yield from self._pending_errors(errors)
            finished = True

        finally:
            if not finished and process.poll() is None:
                self.logger.warning("Scanner output abandoned, stopping scanner")
                process.kill()

            stdout.close()
            self.returncode = process.wait()
            reader.join()
            self.logger.debug("Scanner exited with code %s", self.returncode)

    @staticmethod
    def _drain(stream: IO[str], errors: queue.Queue[str]) -> None:
        """Move every line of a stream onto the queue."""
        with stream:
            for line in stream:
                errors.put(line.rstrip("\r\n"))

    @staticmethod
    def _pending_errors(errors: queue.Queue[str]) -> Iterator[RawLine]:
        """Yield the error lines queued so far."""
        while True:
            try:
                line = errors.get_nowait()
            except queue.Empty:
                return
            yield RawLine(line, is_error=True)
