"""Reporting helpers for finished or running batches.

Provides the batch summary CSV written after a run and the per-job
console lines shown while a batch progresses.
"""

import csv
import logging
from pathlib import Path
from typing import List, Optional

from disc_image_tools.batch.models import BatchJob, BatchSummary, JobStatus

SUMMARY_COLUMNS = [
    "job_id",
    "status",
    "input_path",
    "output_path",
    "progress",
    "processing_time_seconds",
    "error_message",
]

_STATUS_MARKERS = {
    JobStatus.PROCESSING: ("▶", "Processing"),
    JobStatus.COMPLETED: ("✓", "Completed"),
    JobStatus.FAILED: ("✗", "Failed"),
    JobStatus.SKIPPED: ("-", "Skipped"),
}


def format_console_line(job: BatchJob) -> Optional[str]:
    """Render the console line for a job's current status.

    Failed jobs get an indented ``Error:`` line and skipped jobs an
    indented ``Reason:`` line. Pending jobs produce no output.

    Returns
    -------
    str or None
    """
    if job.status not in _STATUS_MARKERS:
        return None

    marker, label = _STATUS_MARKERS[job.status]
    line = f"{marker} {label}: {job.input_name}"

    if job.error_message:
        if job.status == JobStatus.FAILED:
            line += f"\n   Error: {job.error_message}"
        elif job.status == JobStatus.SKIPPED:
            line += f"\n   Reason: {job.error_message}"

    return line


def save_batch_summary(jobs: List[BatchJob], summary: BatchSummary, csv_path) -> Path:
    """Write the batch summary CSV with one row per job.

    Parameters
    ----------
    jobs : list of BatchJob
        Jobs of the batch, in batch order
    summary : BatchSummary
        Aggregate counts of the run
    csv_path : str or Path
        Destination file; parent directories are created

    Returns
    -------
    Path
        The path written
    """
    csv_path = Path(csv_path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with open(csv_path, "w", newline="", encoding="utf-8") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(SUMMARY_COLUMNS)

        for job in jobs:
            writer.writerow([
                job.job_id,
                job.status.value,
                job.input_path,
                job.output_path,
                f"{job.progress:.2f}",
                f"{job.processing_time:.2f}" if job.processing_time is not None else "",
                job.error_message if job.error_message else "",
            ])

    logging.info(
        f"Summary report saved: {csv_path} "
        f"({summary.succeeded} succeeded, {summary.failed} failed, "
        f"{summary.skipped} skipped of {summary.total})"
    )
    return csv_path
