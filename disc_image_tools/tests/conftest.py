"""Shared pytest fixtures for disc_image_tools tests."""

import stat
import sys
from concurrent.futures import Future

import pytest

from disc_image_tools.batch.models import RunOutcome

# Shell prologue shared by the fake chdman scripts: remembers the value
# following -o so a script can create the output file like chdman does.
_ARGUMENT_PROLOGUE = """
out=""
while [ $# -gt 0 ]; do
  case "$1" in
    -o) out="$2"; shift ;;
  esac
  shift
done
"""


@pytest.fixture
def make_fake_chdman(tmp_path):
    """Return a factory writing executable shell scripts that stand in for chdman.

    Args:
        tmp_path: pytest's tmp_path fixture

    Returns:
        Callable ``make(body, name="chdman", executable=True)`` returning the
        script path as a string
    """
    if sys.platform == "win32":
        pytest.skip("fake chdman scripts need a POSIX shell")

    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()

    def make(body: str, name: str = "chdman", executable: bool = True) -> str:
        script = bin_dir / name
        script.write_text("#!/bin/sh\n" + _ARGUMENT_PROLOGUE + body + "\n")
        mode = script.stat().st_mode
        if executable:
            script.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        else:
            script.chmod(mode & ~(stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH))
        return str(script)

    return make


@pytest.fixture
def succeeding_chdman(make_fake_chdman):
    """Fake chdman that reports progress, writes the output file and exits 0."""
    return make_fake_chdman(
        "printf 'Compressing, 10%% complete... (ratio=50.0%%)\\r'\n"
        "printf 'Compressing, 50%% complete... (ratio=48.0%%)\\r'\n"
        "printf 'Compression complete\\n'\n"
        '[ -n "$out" ] && : > "$out"\n'
        "exit 0"
    )


@pytest.fixture
def failing_chdman(make_fake_chdman):
    """Fake chdman that writes diagnostics to stderr and exits 3."""
    return make_fake_chdman(
        "echo 'Error opening input file (missing.cue)' >&2\n"
        "echo 'Fatal error occurred: 3' >&2\n"
        "exit 3"
    )


@pytest.fixture
def disc_images(tmp_path):
    """Create three empty .cue files and return their paths.

    Returns:
        List of three input paths as strings
    """
    image_dir = tmp_path / "images"
    image_dir.mkdir()
    paths = []
    for name in ("alpha.cue", "beta.cue", "gamma.cue"):
        path = image_dir / name
        path.write_text('FILE "track.bin" BINARY\n')
        paths.append(str(path))
    return paths


@pytest.fixture
def temp_output_dir(tmp_path):
    """Create a temporary directory for test outputs.

    Args:
        tmp_path: pytest's tmp_path fixture

    Returns:
        Path to temporary output directory
    """
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture
def resolved_future():
    """Return a factory for Futures already resolved with a RunOutcome."""

    def make(exit_code: int = 0, trailing_lines=()) -> Future:
        future = Future()
        future.set_result(RunOutcome(exit_code=exit_code, trailing_lines=tuple(trailing_lines)))
        return future

    return make
