"""Service for running a single chdman invocation.

This service launches chdman as a child process, reads its standard
output and standard error incrementally while it runs, turns each output
line into a progress callback, and resolves a Future with the RunOutcome
once the process exits.
"""

import codecs
import os
import subprocess
import threading
from collections import deque
from concurrent.futures import Future
from typing import Callable, Iterable, List, Optional

from disc_image_tools.batch.exceptions import ExecutableNotFoundError, ProcessLaunchError
from disc_image_tools.batch.models import ExecutableLocation, RunOutcome
from disc_image_tools.chdman_tools import (
    build_process_environment,
    format_command_line,
    parse_chdman_progress,
    split_output_lines,
)
from disc_image_tools.services.base_service import BaseService
from disc_image_tools.utils.filesystem import is_executable_file

OutputLineCallback = Callable[[str, Optional[float]], None]

# Number of trailing lines attached to a failure
DIAGNOSTIC_LINE_COUNT = 5


class OutputHistory:
    """Bounded tail of the output lines captured from one run.

    Not thread-safe on its own; the owning relay serializes access.

    Parameters
    ----------
    max_lines : int, default=50
        Number of most recent lines kept
    """

    def __init__(self, max_lines: int = 50):
        if max_lines < DIAGNOSTIC_LINE_COUNT:
            raise ValueError(
                f"max_lines must be at least {DIAGNOSTIC_LINE_COUNT}, got {max_lines}"
            )
        self._lines = deque(maxlen=max_lines)
        self.total_lines = 0

    def append(self, line: str) -> None:
        self._lines.append(line)
        self.total_lines += 1

    def lines(self) -> List[str]:
        return list(self._lines)

    def tail(self, count: int = DIAGNOSTIC_LINE_COUNT) -> List[str]:
        """Return the last ``count`` non-blank lines, oldest first."""
        non_blank = [line.strip() for line in self._lines if line.strip()]
        return non_blank[-count:] if count > 0 else []

    def __len__(self) -> int:
        return len(self._lines)


class _OutputRelay:
    """Delivers decoded lines from both stream readers of one run.

    A single lock guards the history and callback delivery so stdout and
    stderr lines never race. After ``detach()`` any late output is dropped.
    """

    def __init__(self, callback: Optional[OutputLineCallback], logger):
        self._callback = callback
        self._logger = logger
        self._lock = threading.Lock()
        self._detached = False
        self.history = OutputHistory()

    def deliver(self, text: str) -> None:
        with self._lock:
            if self._detached:
                return
            for line in split_output_lines(text):
                self.history.append(line)
                progress = parse_chdman_progress(line)
                if self._callback is None:
                    continue
                try:
                    self._callback(line, progress)
                except Exception:
                    self._logger.exception("Output line callback raised an exception")

    def detach(self) -> None:
        with self._lock:
            self._detached = True

    def trailing_lines(self, count: int = DIAGNOSTIC_LINE_COUNT) -> List[str]:
        with self._lock:
            return self.history.tail(count)


class ProcessRunner(BaseService):
    """Service running chdman to completion while streaming its progress.

    The runner handles one process per ``run`` call. Calls return at once
    with a Future, so a caller's event loop keeps running while chdman
    works. There is no cancellation or timeout: once launched, a process
    runs until it exits.

    Examples
    --------
    >>> runner = ProcessRunner()
    >>> future = runner.run(
    ...     "/opt/homebrew/bin/chdman",
    ...     ["createcd", "-i", "game.cue", "-o", "game.chd"],
    ...     on_output_line=lambda line, pct: print(pct, line),
    ... )
    >>> outcome = future.result()
    >>> outcome.success
    True
    """

    CHUNK_SIZE = 4096
    READER_JOIN_TIMEOUT = 5.0

    def __init__(self, environment: Optional[dict] = None):
        """Initialize the ProcessRunner.

        Parameters
        ----------
        environment : dict, optional
            Base environment for child processes; defaults to the
            current process environment at launch time
        """
        super().__init__()
        self._base_environment = environment

    @staticmethod
    def _executable_path(executable) -> str:
        if isinstance(executable, ExecutableLocation):
            return executable.path
        return os.fspath(executable)

    def run(
        self,
        executable,
        arguments: Iterable[str],
        on_output_line: Optional[OutputLineCallback] = None,
    ) -> "Future[RunOutcome]":
        """Launch chdman and return a Future resolving to its RunOutcome.

        Parameters
        ----------
        executable : str, Path or ExecutableLocation
            Path to the chdman executable
        arguments : iterable of str
            Argument vector, starting with the subcommand
        on_output_line : callable, optional
            Called as ``on_output_line(line, progress)`` for every output
            line, where progress is a fraction in [0, 1] or None when the
            line carries no percentage. Called from reader threads, never
            concurrently.

        Returns
        -------
        concurrent.futures.Future
            Resolved exactly once with a RunOutcome after the process exits

        Raises
        ------
        ExecutableNotFoundError
            If the executable does not exist or is not executable. Raised
            before any process is spawned
        ProcessLaunchError
            If the operating system fails to start the process or rejects
            the argument vector
        """
        executable_path = self._executable_path(executable)
        if not is_executable_file(executable_path):
            self.logger.error(f"chdman executable not found or not executable: {executable_path}")
            raise ExecutableNotFoundError(executable_path)

        arguments = tuple(str(arg) for arg in arguments)
        environment = build_process_environment(self._base_environment)

        self.logger.info(f"Running: {format_command_line(executable_path, arguments)}")

        try:
            process = subprocess.Popen(
                [executable_path, *arguments],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=environment,
                bufsize=0,
            )
        except (OSError, ValueError) as e:
            self.logger.error(f"Failed to launch {executable_path}: {e}")
            raise ProcessLaunchError(executable_path, str(e)) from e

        self.logger.debug(f"chdman process {process.pid} started")

        future: "Future[RunOutcome]" = Future()
        future.set_running_or_notify_cancel()
        relay = _OutputRelay(on_output_line, self.logger)

        readers = [
            threading.Thread(
                target=self._read_stream,
                args=(stream, name, relay),
                name=f"chdman-{process.pid}-{name}",
                daemon=True,
            )
            for name, stream in (("stdout", process.stdout), ("stderr", process.stderr))
        ]
        for reader in readers:
            reader.start()

        waiter = threading.Thread(
            target=self._wait_for_exit,
            args=(process, readers, relay, future),
            name=f"chdman-{process.pid}-wait",
            daemon=True,
        )
        waiter.start()

        return future

    def run_to_completion(
        self,
        executable,
        arguments: Iterable[str],
        on_output_line: Optional[OutputLineCallback] = None,
    ) -> RunOutcome:
        """Blocking form of ``run`` for scripts and worker threads."""
        return self.run(executable, arguments, on_output_line).result()

    def _read_stream(self, stream, stream_name: str, relay: _OutputRelay) -> None:
        """Read one pipe in chunks until EOF, relaying decoded text."""
        decoder = codecs.getincrementaldecoder("utf-8")()
        try:
            while True:
                chunk = stream.read(self.CHUNK_SIZE)
                if not chunk:
                    break
                try:
                    text = decoder.decode(chunk)
                except UnicodeDecodeError:
                    # Garbled output must not abort an otherwise good run
                    self.logger.debug(
                        f"Dropped {len(chunk)} undecodable bytes from {stream_name}"
                    )
                    decoder.reset()
                    continue
                if text:
                    relay.deliver(text)
        except (OSError, ValueError) as e:
            self.logger.debug(f"Stopped reading {stream_name}: {e}")
        finally:
            try:
                stream.close()
            except OSError:
                pass

    def _wait_for_exit(
        self,
        process: subprocess.Popen,
        readers: List[threading.Thread],
        relay: _OutputRelay,
        future: "Future[RunOutcome]",
    ) -> None:
        """Wait for the process, drain the readers, and resolve the future."""
        try:
            exit_code = process.wait()

            for reader in readers:
                reader.join(timeout=self.READER_JOIN_TIMEOUT)
                if reader.is_alive():
                    self.logger.warning(
                        f"{reader.name} still open after exit; dropping further output"
                    )

            relay.detach()

            if exit_code == 0:
                outcome = RunOutcome(exit_code=0)
                self.logger.info(f"chdman process {process.pid} completed successfully")
            else:
                outcome = RunOutcome(
                    exit_code=exit_code,
                    trailing_lines=tuple(relay.trailing_lines(DIAGNOSTIC_LINE_COUNT)),
                )
                self.logger.error(
                    f"chdman process {process.pid} failed: {outcome.message}"
                )
        except Exception as e:
            relay.detach()
            self.logger.exception("Error while waiting for chdman to exit")
            if not future.done():
                future.set_exception(e)
            return

        future.set_result(outcome)
