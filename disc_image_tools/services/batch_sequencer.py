"""Service for running a list of conversion jobs one after another.

This service applies the batch policy (skip existing outputs, stop or
continue on failure) to a list of BatchJob objects, runs each remaining
job through the ProcessRunner, and reports every status change and every
output line through caller-supplied callbacks.
"""

import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Iterable, List, Optional

from disc_image_tools.batch.exceptions import (
    BatchProcessingError,
    BatchValidationError,
    ExecutableNotFoundError,
    ProcessLaunchError,
)
from disc_image_tools.batch.models import (
    BatchConfig,
    BatchJob,
    BatchSummary,
    ConversionDirection,
    ConversionOption,
    JobStatus,
)
from disc_image_tools.chdman_tools import PROGRESS_UNKNOWN, create_chdman_arguments
from disc_image_tools.services.base_service import BaseService
from disc_image_tools.services.process_runner import ProcessRunner
from disc_image_tools.utils.filesystem import ensure_directory

JobUpdateCallback = Callable[[BatchJob], None]
JobProgressCallback = Callable[[str, float, str], None]

SKIP_EXISTING_MESSAGE = "Output file already exists"


class BatchSequencer(BaseService):
    """Service for sequential batch conversion with chdman.

    Jobs run strictly one at a time, in list order. Each job reaches a
    terminal status (COMPLETED, FAILED or SKIPPED) unless the batch stops
    early because of ``stop_on_error``, in which case the jobs after the
    failing one stay PENDING.

    Callbacks receive snapshots of the job, never the live object, and a
    callback that raises is logged without affecting the batch.

    Examples
    --------
    >>> sequencer = BatchSequencer()
    >>> jobs = [BatchJob("a.cue", "a.chd"), BatchJob("b.cue", "b.chd")]
    >>> summary = sequencer.run_batch(
    ...     executable="/opt/homebrew/bin/chdman",
    ...     jobs=jobs,
    ...     direction=ConversionDirection.CUE_TO_CHD,
    ...     options=[],
    ...     config=BatchConfig(),
    ... )
    >>> print(f"{summary.succeeded}/{summary.total} converted")
    """

    def __init__(self, runner: Optional[ProcessRunner] = None):
        """Initialize the BatchSequencer.

        Parameters
        ----------
        runner : ProcessRunner, optional
            Runner used for each chdman invocation. A new one is created
            when not given
        """
        super().__init__()
        self.runner = runner if runner is not None else ProcessRunner()
        self._run_lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None

    @property
    def is_running(self) -> bool:
        return self._run_lock.locked()

    def validate_batch(self, jobs: List[BatchJob], config: BatchConfig) -> None:
        """Check that a batch can start.

        Raises
        ------
        BatchValidationError
            If the job list is empty, the configuration is invalid, job
            ids repeat, or a job is not pending
        """
        self._validate_not_none(config, "config")
        if not jobs:
            raise BatchValidationError("Job list is empty; nothing to convert")

        validation_errors = config.validate()
        if validation_errors:
            error_summary = "\n".join(validation_errors)
            raise BatchValidationError(
                f"Configuration validation failed:\n{error_summary}"
            )

        seen = set()
        duplicates = []
        for job in jobs:
            if job.job_id in seen:
                duplicates.append(job.job_id)
            seen.add(job.job_id)
        if duplicates:
            raise BatchValidationError(
                f"Duplicate job ids in batch: {', '.join(sorted(set(duplicates)))}"
            )

        not_pending = [job.job_id for job in jobs if job.status != JobStatus.PENDING]
        if not_pending:
            raise BatchValidationError(
                f"Jobs must be pending when a batch starts; build fresh jobs "
                f"(for instance with create_jobs) instead of reusing: "
                f"{', '.join(not_pending)}"
            )

    def run_batch(
        self,
        executable,
        jobs: List[BatchJob],
        direction: ConversionDirection,
        options: Iterable[ConversionOption],
        config: BatchConfig,
        on_job_update: Optional[JobUpdateCallback] = None,
        on_job_progress: Optional[JobProgressCallback] = None,
    ) -> BatchSummary:
        """Run every job of the batch in order.

        Parameters
        ----------
        executable : str, Path or ExecutableLocation
            chdman executable used for every job
        jobs : list of BatchJob
            Pending jobs, mutated in place as they progress
        direction : ConversionDirection
            Conversion applied to every job
        options : iterable of ConversionOption
            Options appended to every chdman invocation
        config : BatchConfig
            Skip and stop policy
        on_job_update : callable, optional
            Called with a job snapshot at every status change
        on_job_progress : callable, optional
            Called as ``on_job_progress(job_id, fraction, line)`` for every
            output line; fraction is PROGRESS_UNKNOWN (-1.0) when the line
            carries no percentage

        Returns
        -------
        BatchSummary
            Counts of succeeded, failed and skipped jobs

        Raises
        ------
        BatchValidationError
            If the batch cannot start. No job is touched in that case
        BatchProcessingError
            If this sequencer is already running a batch
        """
        self._validate_not_none(direction, "direction")
        self.validate_batch(jobs, config)

        if not self._run_lock.acquire(blocking=False):
            raise BatchProcessingError("A batch is already running on this sequencer")

        try:
            return self._run_jobs(
                executable, jobs, direction, list(options), config,
                on_job_update, on_job_progress,
            )
        finally:
            self._run_lock.release()

    def submit_batch(
        self,
        executable,
        jobs: List[BatchJob],
        direction: ConversionDirection,
        options: Iterable[ConversionOption],
        config: BatchConfig,
        on_job_update: Optional[JobUpdateCallback] = None,
        on_job_progress: Optional[JobProgressCallback] = None,
    ) -> "Future[BatchSummary]":
        """Start ``run_batch`` on a background worker and return a Future.

        Validation happens before submission, so a batch that cannot
        start raises BatchValidationError here rather than through the
        Future. Callbacks are invoked from worker threads.
        """
        self.validate_batch(jobs, config)
        options = list(options)

        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="batch-sequencer"
            )

        return self._executor.submit(
            self.run_batch,
            executable, jobs, direction, options, config,
            on_job_update, on_job_progress,
        )

    def shutdown(self, wait: bool = True) -> None:
        """Release the background worker used by ``submit_batch``."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None

    def _run_jobs(
        self,
        executable,
        jobs: List[BatchJob],
        direction: ConversionDirection,
        options: List[ConversionOption],
        config: BatchConfig,
        on_job_update: Optional[JobUpdateCallback],
        on_job_progress: Optional[JobProgressCallback],
    ) -> BatchSummary:
        summary = BatchSummary(total=len(jobs))
        batch_start_time = time.time()

        self.logger.info("=" * 60)
        self.logger.info(f"Starting batch: {direction.title}")
        self.logger.info(f"  Jobs: {len(jobs)}")
        self.logger.info(f"  Executable: {executable}")
        self.logger.info(f"  Skip existing: {config.skip_existing}")
        self.logger.info(f"  Stop on error: {config.stop_on_error}")
        self.logger.info("=" * 60)

        for idx, job in enumerate(jobs, 1):
            self.logger.info("")
            self.logger.info(f"Job {idx}/{len(jobs)}: {job.input_name}")
            self.logger.info("-" * 60)

            if config.skip_existing and os.path.exists(job.output_path):
                job.mark_skipped(SKIP_EXISTING_MESSAGE)
                summary.skipped += 1
                self.logger.info(f"[{job.job_id}] SKIPPED - {SKIP_EXISTING_MESSAGE}")
                self._notify(on_job_update, job)
                continue

            job.mark_processing()
            self._notify(on_job_update, job)

            job_start_time = time.time()
            error_message = self._convert(
                executable, job, direction, options, on_job_progress
            )
            processing_time = time.time() - job_start_time

            if error_message is None:
                job.mark_completed(processing_time=processing_time)
                summary.succeeded += 1
                self.logger.info(
                    f"[{job.job_id}] SUCCESS - Time: {processing_time:.1f}s"
                )
                self._notify(on_job_update, job)
                continue

            job.mark_failed(error_message=error_message, processing_time=processing_time)
            summary.failed += 1
            self.logger.error(f"[{job.job_id}] FAILED - {error_message}")
            self._notify(on_job_update, job)

            if config.stop_on_error:
                self.logger.error(
                    "Stopping batch due to job failure (stop_on_error=True)"
                )
                break

        summary.processing_time_seconds = time.time() - batch_start_time

        self.logger.info("")
        self.logger.info("=" * 60)
        self.logger.info(
            f"Batch complete: {summary.succeeded} succeeded, "
            f"{summary.failed} failed, {summary.skipped} skipped"
        )
        if summary.not_attempted:
            self.logger.info(f"  Not attempted: {summary.not_attempted}")
        self.logger.info("=" * 60)

        return summary

    def _convert(
        self,
        executable,
        job: BatchJob,
        direction: ConversionDirection,
        options: List[ConversionOption],
        on_job_progress: Optional[JobProgressCallback],
    ) -> Optional[str]:
        """Run chdman for one job; return None on success or the error text."""
        output_dir = os.path.dirname(job.output_path)
        if output_dir:
            try:
                ensure_directory(output_dir)
            except (OSError, ValueError) as e:
                return f"Failed to create output directory {output_dir}: {e}"

        arguments = create_chdman_arguments(
            direction, job.input_path, job.output_path, options
        )

        def relay_line(line: str, progress: Optional[float]) -> None:
            if progress is not None:
                job.update_progress(progress)
            if on_job_progress is not None:
                on_job_progress(
                    job.job_id,
                    progress if progress is not None else PROGRESS_UNKNOWN,
                    line,
                )

        try:
            outcome = self.runner.run(executable, arguments, relay_line).result()
        except (ExecutableNotFoundError, ProcessLaunchError) as e:
            return str(e)

        if outcome.success:
            return None
        return outcome.message

    def _notify(self, callback: Optional[JobUpdateCallback], job: BatchJob) -> None:
        if callback is None:
            return
        try:
            callback(job.snapshot())
        except Exception:
            self.logger.exception(f"[{job.job_id}] Job update callback raised an exception")

    @staticmethod
    def get_progress(jobs: List[BatchJob]) -> Dict[str, Any]:
        """Get the progress of a batch from its job list.

        Returns
        -------
        dict
            Dictionary containing:
            - total_jobs: Total number of jobs
            - completed: Number of completed jobs
            - failed: Number of failed jobs
            - skipped: Number of skipped jobs
            - pending: Number of pending jobs
            - processing: Number of jobs currently processing
            - percent_complete: Percentage of jobs in a terminal status
        """
        if not jobs:
            return {
                "total_jobs": 0,
                "completed": 0,
                "failed": 0,
                "skipped": 0,
                "pending": 0,
                "processing": 0,
                "percent_complete": 0.0,
            }

        total = len(jobs)
        counts = {status: 0 for status in JobStatus}
        for job in jobs:
            counts[job.status] += 1

        finished = sum(count for status, count in counts.items() if status.is_terminal)

        return {
            "total_jobs": total,
            "completed": counts[JobStatus.COMPLETED],
            "failed": counts[JobStatus.FAILED],
            "skipped": counts[JobStatus.SKIPPED],
            "pending": counts[JobStatus.PENDING],
            "processing": counts[JobStatus.PROCESSING],
            "percent_complete": finished / total * 100,
        }
