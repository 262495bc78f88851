"""BatchSummary model with aggregate results of a batch run."""

from dataclasses import dataclass


@dataclass
class BatchSummary:
    """Counts of job outcomes for one batch run.

    Notes
    -----
    ``total`` is the number of jobs handed to the batch, not the number
    attempted. When a batch stops early on an error, the jobs it never
    reached stay pending and are not counted in any bucket, so
    ``succeeded + failed + skipped`` may be less than ``total``.
    """

    total: int
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    processing_time_seconds: float = 0.0

    @property
    def success_rate(self) -> float:
        """Succeeded jobs as a fraction of all jobs, 0.0 for an empty batch."""
        if self.total <= 0:
            return 0.0
        return self.succeeded / self.total

    @property
    def attempted(self) -> int:
        return self.succeeded + self.failed + self.skipped

    @property
    def not_attempted(self) -> int:
        return self.total - self.attempted

    def __str__(self) -> str:
        return (
            f"Total: {self.total}\n"
            f"Succeeded: {self.succeeded}\n"
            f"Failed: {self.failed}\n"
            f"Skipped: {self.skipped}"
        )
