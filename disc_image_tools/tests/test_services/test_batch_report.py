"""Tests for batch reporting helpers."""

import pandas as pd
import pytest

from disc_image_tools.batch.models import BatchJob, BatchSummary
from disc_image_tools.services.batch_report import (
    SUMMARY_COLUMNS,
    format_console_line,
    save_batch_summary,
)


@pytest.fixture
def finished_jobs():
    """Jobs in every status a finished batch can contain."""
    completed = BatchJob("/games/alpha.cue", "/chd/alpha.chd", job_id="job_001")
    completed.mark_processing()
    completed.mark_completed(processing_time=3.25)

    failed = BatchJob("/games/beta.cue", "/chd/beta.chd", job_id="job_002")
    failed.mark_processing()
    failed.update_progress(0.4)
    failed.mark_failed("chdman error (exit code 1):\nError: bad track", processing_time=1.0)

    skipped = BatchJob("/games/gamma.cue", "/chd/gamma.chd", job_id="job_003")
    skipped.mark_skipped("Output file already exists")

    pending = BatchJob("/games/delta.cue", "/chd/delta.chd", job_id="job_004")

    return [completed, failed, skipped, pending]


class TestFormatConsoleLine:
    """Tests for format_console_line."""

    def test_processing(self):
        job = BatchJob("/games/alpha.cue", "/chd/alpha.chd")
        job.mark_processing()
        assert format_console_line(job) == "▶ Processing: alpha.cue"

    def test_completed(self, finished_jobs):
        assert format_console_line(finished_jobs[0]) == "✓ Completed: alpha.cue"

    def test_failed_includes_error(self, finished_jobs):
        line = format_console_line(finished_jobs[1])
        assert line.startswith("✗ Failed: beta.cue\n   Error: chdman error (exit code 1)")

    def test_skipped_includes_reason(self, finished_jobs):
        assert format_console_line(finished_jobs[2]) == (
            "- Skipped: gamma.cue\n   Reason: Output file already exists"
        )

    def test_pending_has_no_line(self, finished_jobs):
        assert format_console_line(finished_jobs[3]) is None


class TestSaveBatchSummary:
    """Tests for save_batch_summary."""

    def test_writes_one_row_per_job(self, finished_jobs, tmp_path):
        summary = BatchSummary(total=4, succeeded=1, failed=1, skipped=1)
        csv_path = save_batch_summary(finished_jobs, summary, tmp_path / "reports" / "summary.csv")

        assert csv_path.exists()
        df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)

        assert list(df.columns) == SUMMARY_COLUMNS
        assert list(df["job_id"]) == ["job_001", "job_002", "job_003", "job_004"]
        assert list(df["status"]) == ["completed", "failed", "skipped", "pending"]
        assert df.loc[0, "processing_time_seconds"] == "3.25"
        assert df.loc[1, "progress"] == "0.40"
        assert df.loc[1, "error_message"].startswith("chdman error (exit code 1):")
        assert df.loc[3, "processing_time_seconds"] == ""
