"""BatchConfig model representing batch conversion settings."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


@dataclass
class BatchConfig:
    """Settings for a batch conversion run.

    The configuration is read-only while a batch is running.

    Parameters
    ----------
    skip_existing : bool, default=True
        If True, jobs whose output file already exists are skipped
        without running chdman
    stop_on_error : bool, default=False
        If True, stop the batch at the first failed job; remaining jobs
        stay pending
    max_concurrent : int, default=1
        Number of simultaneous conversions. Only 1 is supported; the
        wrapped tool may saturate I/O and CPU on its own
    output_dir : Optional[str], default=None
        Directory for generated output paths. None places each output
        next to its input

    Examples
    --------
    >>> config = BatchConfig(stop_on_error=True)
    >>> config.validate()
    []
    """

    skip_existing: bool = True
    stop_on_error: bool = False
    max_concurrent: int = 1
    output_dir: Optional[str] = None

    def validate(self) -> List[str]:
        """Validate configuration parameters.

        Returns
        -------
        list of str
            Validation error messages, empty if the configuration is valid
        """
        errors = []

        if self.max_concurrent != 1:
            errors.append(
                f"max_concurrent must be 1 (sequential conversion only), "
                f"got {self.max_concurrent}"
            )

        if self.output_dir:
            output_dir = Path(self.output_dir)
            if output_dir.exists() and not output_dir.is_dir():
                errors.append(f"Output path is not a directory: {output_dir}")

        return errors
