"""User-friendly Python API for disc image conversion.

This module provides a simple interface for converting one disc image or
a whole batch with chdman. It wraps the lower-level ProcessRunner and
BatchSequencer services with an API suitable for scripting and
automation.

Example
-------
Convert a single image::

    from disc_image_tools.api import convert_file

    result = convert_file("game.cue", "cue_to_chd", options=["-c=cdlz"])
    print(f"Wrote {result.output_path} in {result.processing_time_seconds:.1f}s")

Convert every file of a folder::

    from pathlib import Path
    from disc_image_tools.api import convert_batch

    summary = convert_batch(
        sorted(Path("isos").glob("*.iso")),
        "iso_to_chd",
        output_dir="chd",
        summary_csv="chd/batch_summary.csv",
    )
    print(f"{summary.succeeded}/{summary.total} converted")
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from disc_image_tools.batch.models import (
    BatchConfig,
    BatchJob,
    BatchSummary,
    ConversionDirection,
    ConversionOption,
    ExecutableLocation,
    parse_option_spec,
)
from disc_image_tools.chdman_tools import (
    create_chdman_arguments,
    generate_output_path,
    locate_chdman,
)
from disc_image_tools.services.batch_report import save_batch_summary
from disc_image_tools.services.batch_sequencer import (
    BatchSequencer,
    JobProgressCallback,
    JobUpdateCallback,
)
from disc_image_tools.services.job_list_parser import create_jobs
from disc_image_tools.services.process_runner import OutputLineCallback, ProcessRunner

DirectionLike = Union[ConversionDirection, str]
OptionLike = Union[ConversionOption, str]


@dataclass
class ConversionResult:
    """Result of a single successful conversion.

    Attributes
    ----------
    input_path : str
        Source file
    output_path : str
        Converted file written by chdman
    direction : ConversionDirection
        Conversion performed
    executable : str
        chdman executable used
    processing_time_seconds : float
        Wall-clock duration of the chdman run
    """

    input_path: str
    output_path: str
    direction: ConversionDirection
    executable: str
    processing_time_seconds: float

    def __str__(self) -> str:
        return (
            f"{Path(self.input_path).name} -> {Path(self.output_path).name} "
            f"({self.processing_time_seconds:.1f}s)"
        )


def resolve_direction(direction: DirectionLike) -> ConversionDirection:
    """Accept a ConversionDirection or a string like ``"cue_to_chd"``."""
    if isinstance(direction, ConversionDirection):
        return direction
    return ConversionDirection.from_string(direction)


def resolve_options(
    options: Iterable[OptionLike], direction: ConversionDirection
) -> List[ConversionOption]:
    """Turn option specs like ``"-c=cdlz"`` into ConversionOption objects."""
    resolved = []
    for option in options:
        if isinstance(option, ConversionOption):
            resolved.append(option)
        else:
            resolved.append(parse_option_spec(option, direction))
    return resolved


def resolve_executable(chdman_path=None) -> ExecutableLocation:
    """Find chdman, honouring an explicit path when one is given."""
    if isinstance(chdman_path, ExecutableLocation):
        return chdman_path
    return locate_chdman(str(chdman_path) if chdman_path else None)


def convert_file(
    input_path,
    direction: DirectionLike,
    output_path=None,
    options: Iterable[OptionLike] = (),
    chdman_path=None,
    on_output_line: Optional[OutputLineCallback] = None,
) -> ConversionResult:
    """Convert a single file with chdman.

    Parameters
    ----------
    input_path : str or Path
        Source disc image or CHD file
    direction : ConversionDirection or str
        Conversion to perform, e.g. ``"iso_to_chd"``
    output_path : str or Path, optional
        Destination; defaults to the input's stem with the output
        extension, next to the input
    options : iterable of ConversionOption or str
        Extra chdman options, as objects or specs like ``"-c=cdlz"``
    chdman_path : str, Path or ExecutableLocation, optional
        chdman executable; located automatically when omitted
    on_output_line : callable, optional
        Called as ``on_output_line(line, progress)`` for each output line

    Returns
    -------
    ConversionResult

    Raises
    ------
    ExecutableNotFoundError
        If chdman cannot be found or is not executable
    ProcessLaunchError
        If chdman could not be started
    ProcessExitedNonZeroError
        If chdman reported an error; the message holds its last output lines
    ValueError
        If the direction or an option spec is invalid
    """
    direction = resolve_direction(direction)
    resolved_options = resolve_options(options, direction)
    executable = resolve_executable(chdman_path)

    input_path = str(input_path)
    if output_path is None:
        output_path = generate_output_path(input_path, direction)
    output_path = str(output_path)

    arguments = create_chdman_arguments(direction, input_path, output_path, resolved_options)

    start_time = time.time()
    outcome = ProcessRunner().run_to_completion(executable, arguments, on_output_line)
    outcome.raise_for_status()

    return ConversionResult(
        input_path=input_path,
        output_path=output_path,
        direction=direction,
        executable=executable.path,
        processing_time_seconds=time.time() - start_time,
    )


def convert_batch(
    inputs: Iterable,
    direction: DirectionLike,
    output_dir: Optional[str] = None,
    options: Iterable[OptionLike] = (),
    chdman_path=None,
    skip_existing: bool = True,
    stop_on_error: bool = False,
    summary_csv: Optional[str] = None,
    on_job_update: Optional[JobUpdateCallback] = None,
    on_job_progress: Optional[JobProgressCallback] = None,
) -> BatchSummary:
    """Convert many files, one after another.

    Parameters
    ----------
    inputs : iterable of str, Path or BatchJob
        Input files, or prepared jobs (for instance from
        ``JobListParser.parse_csv``). Jobs are updated in place
    direction : ConversionDirection or str
        Conversion applied to every input
    output_dir : str, optional
        Directory for generated output paths; defaults to each input's
        directory. Ignored for prepared jobs
    options : iterable of ConversionOption or str
        Extra chdman options applied to every job
    chdman_path : str, Path or ExecutableLocation, optional
        chdman executable; located automatically when omitted
    skip_existing : bool, default=True
        Skip jobs whose output already exists
    stop_on_error : bool, default=False
        Stop at the first failed job; later jobs stay pending
    summary_csv : str, optional
        If given, write a per-job summary CSV there after the run
    on_job_update, on_job_progress : callable, optional
        Forwarded to ``BatchSequencer.run_batch``

    Returns
    -------
    BatchSummary

    Raises
    ------
    BatchValidationError
        If there is nothing to convert or the settings are invalid
    ValueError
        If the direction or an option spec is invalid
    """
    direction = resolve_direction(direction)
    resolved_options = resolve_options(options, direction)
    executable = resolve_executable(chdman_path)

    inputs = list(inputs)
    if inputs and all(isinstance(item, BatchJob) for item in inputs):
        jobs = inputs
    else:
        jobs = create_jobs(inputs, direction, output_dir)

    config = BatchConfig(
        skip_existing=skip_existing,
        stop_on_error=stop_on_error,
        output_dir=output_dir,
    )

    sequencer = BatchSequencer()
    summary = sequencer.run_batch(
        executable=executable,
        jobs=jobs,
        direction=direction,
        options=resolved_options,
        config=config,
        on_job_update=on_job_update,
        on_job_progress=on_job_progress,
    )

    if summary_csv:
        save_batch_summary(jobs, summary, summary_csv)

    return summary
