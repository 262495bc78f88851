"""Custom exceptions for conversion and batch processing operations."""


class ConversionError(Exception):
    """Base exception for all disc_image_tools errors.

    Catching this exception will catch every error raised by the package.
    """

    pass


class ExecutableNotFoundError(ConversionError):
    """Raised when the chdman executable is missing or not executable.

    This check happens before any process is spawned, so the message can
    point the user at a path configuration mistake rather than at a
    generic launch failure.
    """

    def __init__(self, executable: str, message: str = None):
        self.executable = executable
        if message is None:
            message = (
                f"chdman executable not found or not accessible at: {executable}. "
                f"Check the configured chdman path or install MAME "
                f"(e.g. 'brew install mame')."
            )
        super().__init__(message)


class ProcessLaunchError(ConversionError):
    """Raised when the operating system refuses to start the tool."""

    def __init__(self, executable: str, reason: str):
        self.executable = executable
        self.reason = reason
        super().__init__(f"Failed to launch {executable}: {reason}")


class ProcessExitedNonZeroError(ConversionError):
    """Raised when chdman ran but reported an error.

    Attributes
    ----------
    exit_code : int
        Exit status of the process
    trailing_lines : tuple of str
        Last captured output lines, used as diagnostic context
    """

    def __init__(self, exit_code: int, trailing_lines=(), message: str = None):
        self.exit_code = exit_code
        self.trailing_lines = tuple(trailing_lines)
        if message is None:
            if self.trailing_lines:
                context = "\n".join(self.trailing_lines)
                message = f"chdman error (exit code {exit_code}):\n{context}"
            else:
                message = f"chdman exited with code {exit_code}"
        super().__init__(message)


class InvalidJobTransitionError(ConversionError):
    """Raised when a job is moved out of a terminal status.

    Examples
    --------
    - Marking a completed job as processing again
    - Skipping a job that already started
    """

    pass


class BatchProcessingError(ConversionError):
    """Base exception for batch-level errors."""

    pass


class BatchValidationError(BatchProcessingError):
    """Raised when a batch cannot start.

    Examples
    --------
    - Empty job list
    - Invalid batch configuration
    - Duplicate job identifiers
    """

    pass


class InvalidJobListError(BatchProcessingError):
    """Raised when a job list CSV file is malformed.

    Examples
    --------
    - CSV file doesn't exist
    - Required ``input_path`` column missing
    - Rows with empty input paths
    """

    pass
