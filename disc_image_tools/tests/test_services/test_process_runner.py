"""Tests for ProcessRunner service.

These tests launch small shell scripts in place of chdman, so they run the
real subprocess, reader thread and Future machinery.
"""

import threading
from unittest.mock import patch

import pytest

from disc_image_tools.batch.exceptions import (
    ExecutableNotFoundError,
    ProcessExitedNonZeroError,
    ProcessLaunchError,
)
from disc_image_tools.batch.models import ExecutableLocation, RunOutcome
from disc_image_tools.services.process_runner import OutputHistory, ProcessRunner

RESULT_TIMEOUT = 10


@pytest.fixture
def runner():
    """Fixture providing a ProcessRunner instance."""
    return ProcessRunner()


class LineRecorder:
    """Callback collecting (line, progress) pairs from reader threads."""

    def __init__(self):
        self.lock = threading.Lock()
        self.calls = []

    def __call__(self, line, progress):
        with self.lock:
            self.calls.append((line, progress))

    @property
    def lines(self):
        with self.lock:
            return [line for line, _ in self.calls]

    @property
    def progress_values(self):
        with self.lock:
            return [progress for _, progress in self.calls if progress is not None]


class TestOutputHistory:
    """Tests for OutputHistory."""

    def test_tail_skips_blank_lines(self):
        history = OutputHistory()
        for line in ["one", "", "two", "   ", "three"]:
            history.append(line)
        assert history.tail(5) == ["one", "two", "three"]

    def test_tail_returns_last_lines(self):
        history = OutputHistory()
        for i in range(10):
            history.append(f"line {i}")
        assert history.tail(5) == [f"line {i}" for i in range(5, 10)]

    def test_history_is_bounded(self):
        history = OutputHistory(max_lines=5)
        for i in range(20):
            history.append(f"line {i}")
        assert len(history) == 5
        assert history.total_lines == 20
        assert history.lines()[0] == "line 15"

    def test_max_lines_must_cover_diagnostics(self):
        with pytest.raises(ValueError):
            OutputHistory(max_lines=2)


class TestProcessRunnerRun:
    """Tests for ProcessRunner.run."""

    def test_missing_executable_raises_before_spawning(self, runner, tmp_path):
        with patch("disc_image_tools.services.process_runner.subprocess.Popen") as mock_popen:
            with pytest.raises(ExecutableNotFoundError) as excinfo:
                runner.run(str(tmp_path / "no-such-chdman"), ["createcd"])

        mock_popen.assert_not_called()
        assert "no-such-chdman" in str(excinfo.value)

    def test_non_executable_file_raises(self, runner, make_fake_chdman):
        script = make_fake_chdman("exit 0", executable=False)
        with pytest.raises(ExecutableNotFoundError):
            runner.run(script, ["createcd"])

    def test_launch_failure_raises(self, runner, succeeding_chdman):
        with patch(
            "disc_image_tools.services.process_runner.subprocess.Popen",
            side_effect=OSError("Exec format error"),
        ):
            with pytest.raises(ProcessLaunchError, match="Exec format error"):
                runner.run(succeeding_chdman, ["createcd"])

    def test_rejected_argument_raises_launch_error(self, runner, succeeding_chdman):
        with pytest.raises(ProcessLaunchError):
            runner.run(succeeding_chdman, ["createcd", "-i", "bad\x00name.cue"])

    def test_success_streams_progress(self, runner, succeeding_chdman, tmp_path):
        output = tmp_path / "out.chd"
        recorder = LineRecorder()

        future = runner.run(
            succeeding_chdman,
            ["createcd", "-i", "in.cue", "-o", str(output)],
            on_output_line=recorder,
        )
        outcome = future.result(timeout=RESULT_TIMEOUT)

        assert outcome == RunOutcome(exit_code=0)
        assert outcome.success
        assert output.exists()
        assert 0.1 in recorder.progress_values
        assert 0.5 in recorder.progress_values
        assert "Compression complete" in recorder.lines

    def test_lines_without_percentage_report_none(self, runner, make_fake_chdman):
        script = make_fake_chdman("echo 'chdman - MAME Compressed Hunks of Data (CHD) manager'")
        recorder = LineRecorder()

        runner.run(script, ["createcd"], recorder).result(timeout=RESULT_TIMEOUT)

        banner = [c for c in recorder.calls if c[0].startswith("chdman - MAME")]
        assert banner == [("chdman - MAME Compressed Hunks of Data (CHD) manager", None)]

    def test_failure_carries_trailing_lines(self, runner, failing_chdman):
        outcome = runner.run(failing_chdman, ["createcd"]).result(timeout=RESULT_TIMEOUT)

        assert not outcome.success
        assert outcome.exit_code == 3
        assert outcome.trailing_lines == (
            "Error opening input file (missing.cue)",
            "Fatal error occurred: 3",
        )
        assert outcome.message == (
            "chdman error (exit code 3):\n"
            "Error opening input file (missing.cue)\n"
            "Fatal error occurred: 3"
        )

    def test_stdout_and_stderr_share_one_history(self, runner, make_fake_chdman):
        script = make_fake_chdman(
            "printf 'Compressing, 40%% complete... (ratio=60.0%%)\\n'\n"
            "echo 'Error reading track 2' >&2\n"
            "echo 'Fatal error occurred: 1' >&2\n"
            "exit 1"
        )
        recorder = LineRecorder()

        outcome = runner.run(script, ["createcd"], recorder).result(timeout=RESULT_TIMEOUT)

        assert 0.4 in recorder.progress_values
        assert "Fatal error occurred: 1" in recorder.lines
        assert set(outcome.trailing_lines) == {
            "Compressing, 40% complete... (ratio=60.0%)",
            "Error reading track 2",
            "Fatal error occurred: 1",
        }

    def test_failure_keeps_only_last_five_lines(self, runner, make_fake_chdman):
        script = make_fake_chdman(
            "i=1\n"
            "while [ $i -le 8 ]; do echo \"line $i\" >&2; i=$((i + 1)); done\n"
            "exit 1"
        )
        outcome = runner.run(script, []).result(timeout=RESULT_TIMEOUT)
        assert outcome.trailing_lines == tuple(f"line {i}" for i in range(4, 9))

    def test_silent_failure_message(self, runner, make_fake_chdman):
        script = make_fake_chdman("exit 2")
        outcome = runner.run(script, []).result(timeout=RESULT_TIMEOUT)
        assert outcome.trailing_lines == ()
        assert outcome.message == "chdman exited with code 2"

    def test_no_callbacks_after_resolution(self, runner, failing_chdman):
        recorder = LineRecorder()
        runner.run(failing_chdman, ["createcd"], recorder).result(timeout=RESULT_TIMEOUT)
        count = len(recorder.calls)

        assert count > 0
        threading.Event().wait(0.2)
        assert len(recorder.calls) == count

    def test_callback_exception_does_not_break_run(self, runner, succeeding_chdman):
        def broken_callback(line, progress):
            raise RuntimeError("display went away")

        outcome = runner.run(succeeding_chdman, ["createcd"], broken_callback).result(
            timeout=RESULT_TIMEOUT
        )
        assert outcome.success

    def test_undecodable_output_is_dropped(self, runner, make_fake_chdman):
        script = make_fake_chdman(
            "printf '\\377\\376\\n' >&2\necho 'after garbage'\nexit 0"
        )
        recorder = LineRecorder()
        outcome = runner.run(script, [], recorder).result(timeout=RESULT_TIMEOUT)
        assert outcome.success
        assert "after garbage" in recorder.lines
        assert not any("\ufffd" in line or "\xff" in line for line in recorder.lines)

    def test_path_is_extended_for_child(self, runner, make_fake_chdman):
        script = make_fake_chdman('echo "PATH=$PATH"')
        recorder = LineRecorder()
        runner.run(script, [], recorder).result(timeout=RESULT_TIMEOUT)

        path_lines = [line for line in recorder.lines if line.startswith("PATH=")]
        assert path_lines
        assert path_lines[0].startswith("PATH=/opt/homebrew/bin:/usr/local/bin:")

    def test_accepts_executable_location(self, runner, succeeding_chdman):
        location = ExecutableLocation(path=succeeding_chdman, verified=True)
        outcome = runner.run(location, ["createcd"]).result(timeout=RESULT_TIMEOUT)
        assert outcome.success


class TestProcessRunnerRunToCompletion:
    """Tests for ProcessRunner.run_to_completion."""

    def test_returns_outcome(self, runner, failing_chdman):
        outcome = runner.run_to_completion(failing_chdman, ["createcd"])
        assert outcome.exit_code == 3
        with pytest.raises(ProcessExitedNonZeroError):
            outcome.raise_for_status()
