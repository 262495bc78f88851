"""BatchJob model representing a single conversion within a batch."""

import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from disc_image_tools.batch.exceptions import InvalidJobTransitionError


class JobStatus(Enum):
    """Enumeration of possible job statuses."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.SKIPPED)


@dataclass
class BatchJob:
    """Model representing one (input, output) conversion unit.

    Parameters
    ----------
    input_path : str
        Path to the source disc image or CHD archive
    output_path : str
        Path the converted file is written to
    job_id : str, optional
        Opaque unique identifier, a random hex string by default

    Attributes
    ----------
    status : JobStatus
        Current processing status of the job
    progress : float
        Last known progress fraction in [0, 1]
    error_message : Optional[str]
        Failure diagnostic, or the reason a job was skipped
    processing_time : Optional[float]
        Wall-clock seconds spent running chdman for this job

    Notes
    -----
    - Status transitions: PENDING -> PROCESSING -> COMPLETED/FAILED,
      or PENDING -> SKIPPED
    - No transition leaves a terminal status
    """

    input_path: str
    output_path: str
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    status: JobStatus = field(default=JobStatus.PENDING, init=False)
    progress: float = field(default=0.0, init=False)
    error_message: Optional[str] = field(default=None, init=False)
    processing_time: Optional[float] = field(default=None, init=False)

    def __post_init__(self):
        """Validate job parameters after initialization."""
        if not self.job_id:
            raise ValueError("job_id cannot be empty")
        if not self.input_path:
            raise ValueError("input_path cannot be empty")
        if not self.output_path:
            raise ValueError("output_path cannot be empty")
        self.input_path = str(self.input_path)
        self.output_path = str(self.output_path)

    def _check_transition(self, allowed_from: JobStatus, target: JobStatus) -> None:
        if self.status != allowed_from:
            raise InvalidJobTransitionError(
                f"Job {self.job_id} is {self.status.value}; "
                f"cannot mark it {target.value}"
            )

    def mark_processing(self) -> None:
        """Mark job as currently processing and reset its progress."""
        self._check_transition(JobStatus.PENDING, JobStatus.PROCESSING)
        self.status = JobStatus.PROCESSING
        self.progress = 0.0
        self.error_message = None

    def update_progress(self, fraction: float) -> None:
        """Record a progress fraction, clamped to [0, 1]."""
        if self.status != JobStatus.PROCESSING:
            return
        self.progress = min(max(float(fraction), 0.0), 1.0)

    def mark_completed(self, processing_time: Optional[float] = None) -> None:
        """Mark job as successfully completed."""
        self._check_transition(JobStatus.PROCESSING, JobStatus.COMPLETED)
        self.status = JobStatus.COMPLETED
        self.progress = 1.0
        self.error_message = None
        self.processing_time = processing_time

    def mark_failed(self, error_message: str, processing_time: float = 0.0) -> None:
        """Mark job as failed.

        Parameters
        ----------
        error_message : str
            Description of what went wrong
        processing_time : float, default=0.0
            Time spent before failure in seconds
        """
        self._check_transition(JobStatus.PROCESSING, JobStatus.FAILED)
        self.status = JobStatus.FAILED
        self.error_message = error_message
        self.processing_time = processing_time

    def mark_skipped(self, reason: str) -> None:
        """Mark a pending job as skipped without running it."""
        self._check_transition(JobStatus.PENDING, JobStatus.SKIPPED)
        self.status = JobStatus.SKIPPED
        self.error_message = reason

    def snapshot(self) -> "BatchJob":
        """Return an independent copy for delivery to callbacks."""
        return copy.copy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert job to dictionary representation."""
        return {
            "job_id": self.job_id,
            "input_path": self.input_path,
            "output_path": self.output_path,
            "status": self.status.value,
            "progress": self.progress,
            "error_message": self.error_message,
            "processing_time": self.processing_time,
        }

    @property
    def input_name(self) -> str:
        """File name of the input, without directories."""
        return Path(self.input_path).name

    def __repr__(self) -> str:
        return (
            f"BatchJob(job_id='{self.job_id}', "
            f"input='{self.input_name}', "
            f"status={self.status.value})"
        )
