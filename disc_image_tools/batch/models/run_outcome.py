"""Models describing a single chdman invocation."""

from dataclasses import dataclass
from typing import Tuple

from disc_image_tools.batch.exceptions import ProcessExitedNonZeroError


@dataclass(frozen=True)
class ExecutableLocation:
    """Resolved location of the chdman executable.

    Attributes
    ----------
    path : str
        Absolute path when verified, otherwise the best guess
    verified : bool
        True when the path names an executable file
    source : str
        How the path was found: "configured", "environment",
        "candidate", "search_path" or "unresolved"
    """

    path: str
    verified: bool = False
    source: str = "unresolved"

    def __str__(self) -> str:
        return self.path


@dataclass(frozen=True)
class RunOutcome:
    """Result of one chdman run.

    A zero exit code is a success. Failures carry the exit code and the
    trailing output lines captured for diagnostics.
    """

    exit_code: int
    trailing_lines: Tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def message(self) -> str:
        """Human-readable description of the outcome."""
        if self.success:
            return "chdman completed successfully"
        return str(self.to_error())

    def to_error(self) -> ProcessExitedNonZeroError:
        return ProcessExitedNonZeroError(self.exit_code, self.trailing_lines)

    def raise_for_status(self) -> None:
        """Raise ProcessExitedNonZeroError if the run failed."""
        if not self.success:
            raise self.to_error()
