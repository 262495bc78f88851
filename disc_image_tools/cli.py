"""Command-line interface for disc_image_tools conversions.

This module provides a command-line tool for converting disc images to
and from CHD with chdman. The CLI wraps the Python API and provides
progress reporting, validation, and output formatting.

Usage:
    # Convert a single image
    discimage-batch convert game.cue --direction cue-to-chd -O c=cdlz -O f

    # Convert every file given, or every row of a job list CSV
    discimage-batch batch isos/*.iso --direction iso-to-chd --output-dir chd/
    discimage-batch batch --csv jobs.csv --direction chd-to-cue

    # Find the chdman executable
    discimage-batch locate

    # List the options available for a conversion
    discimage-batch options --direction cue-to-chd
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from disc_image_tools import __version__
from disc_image_tools.api import (
    convert_batch,
    convert_file,
    resolve_executable,
)
from disc_image_tools.batch.exceptions import ConversionError
from disc_image_tools.batch.models import (
    CODEC_DESCRIPTIONS,
    ConversionDirection,
    JobStatus,
    OptionKind,
    advanced_options,
    known_options,
    parse_option_spec,
)
from disc_image_tools.chdman_tools import CHDMAN_ENV_VAR, CHDMAN_NOT_FOUND_HELP
from disc_image_tools.services.batch_report import format_console_line
from disc_image_tools.services.job_list_parser import JobListParser, create_jobs

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure root logging for a CLI run.

    Args:
        verbose: Log DEBUG messages to the console instead of WARNING only
        log_file: Optional file receiving INFO (or DEBUG) messages
    """
    level = logging.DEBUG if verbose else logging.INFO
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handlers: List[logging.Handler] = [console_handler]

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='w')
        file_handler.setLevel(level)
        handlers.append(file_handler)

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def _direction_arg(value: str) -> ConversionDirection:
    try:
        return ConversionDirection.from_string(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _add_conversion_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        "--direction",
        "-d",
        type=_direction_arg,
        required=True,
        help="Conversion to perform, e.g. iso-to-chd, cue-to-chd, chd-to-gdi",
    )
    subparser.add_argument(
        "--option",
        "-O",
        action="append",
        default=[],
        dest="options",
        metavar="SPEC",
        help="chdman option as KEY or KEY=VALUE without the leading dash (e.g. -O c=cdlz -O f). Repeatable",
    )
    subparser.add_argument(
        "--chdman",
        help=f"Path to chdman (default: ${CHDMAN_ENV_VAR}, Homebrew, or PATH)",
    )
    subparser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress progress output",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="discimage-batch",
        description="Convert disc images to and from CHD with chdman",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert single image
  discimage-batch convert game.cue --direction cue-to-chd

  # Convert many images into one folder
  discimage-batch batch isos/*.iso --direction iso-to-chd --output-dir chd/

  # Convert from a job list CSV (columns: input_path[, output_path, job_id])
  discimage-batch batch --csv jobs.csv --direction chd-to-cue --summary summary.csv

  # Find chdman
  discimage-batch locate
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"disc_image_tools {__version__}",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug logging on the console",
    )
    parser.add_argument(
        "--log-file",
        help="Write the log to this file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # ========================================
    # Command: convert
    # ========================================
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert a single file",
        description="Convert a single disc image or CHD file",
    )
    convert_parser.add_argument(
        "input",
        help="Path to input file",
    )
    convert_parser.add_argument(
        "--output",
        "-o",
        help="Output file (default: input name with the new extension, next to the input)",
    )
    _add_conversion_arguments(convert_parser)

    # ========================================
    # Command: batch
    # ========================================
    batch_parser = subparsers.add_parser(
        "batch",
        help="Convert many files",
        description="Convert a list of files, or the rows of a job list CSV, one after another",
    )
    batch_parser.add_argument(
        "inputs",
        nargs="*",
        help="Input files",
    )
    batch_parser.add_argument(
        "--csv",
        help="Job list CSV file with an input_path column",
    )
    batch_parser.add_argument(
        "--output-dir",
        help="Directory for outputs (default: next to each input)",
    )
    batch_parser.add_argument(
        "--no-skip-existing",
        action="store_false",
        dest="skip_existing",
        help="Convert even when the output file already exists",
    )
    batch_parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Stop at the first failed file",
    )
    batch_parser.add_argument(
        "--summary",
        help="Write a per-job summary CSV to this path",
    )
    _add_conversion_arguments(batch_parser)

    # ========================================
    # Command: locate
    # ========================================
    locate_parser = subparsers.add_parser(
        "locate",
        help="Find the chdman executable",
        description="Report which chdman executable would be used",
    )
    locate_parser.add_argument(
        "--chdman",
        help="Path to check before the default locations",
    )

    # ========================================
    # Command: options
    # ========================================
    options_parser = subparsers.add_parser(
        "options",
        help="List chdman options for a conversion",
        description="List the chdman options available for a conversion",
    )
    options_parser.add_argument(
        "--direction",
        "-d",
        type=_direction_arg,
        required=True,
        help="Conversion to list options for",
    )
    options_parser.add_argument(
        "--advanced",
        action="store_true",
        help="Include advanced options",
    )

    return parser


def command_convert(args) -> int:
    """Execute 'convert' command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 = success, 1 = error)
    """
    direction = args.direction
    print(f"Converting: {Path(args.input).name} ({direction.title})")

    progress_bar = tqdm(
        total=100,
        desc=Path(args.input).name,
        unit="%",
        disable=args.quiet,
    )

    def on_output_line(line, progress):
        if progress is not None:
            progress_bar.n = int(progress * 100)
            progress_bar.refresh()

    try:
        options = [parse_option_spec(spec, direction) for spec in args.options]
        result = convert_file(
            input_path=args.input,
            direction=direction,
            output_path=args.output,
            options=options,
            chdman_path=args.chdman,
            on_output_line=on_output_line,
        )
    except (ConversionError, ValueError) as e:
        progress_bar.close()
        print(f"\n✗ Error: {e}", file=sys.stderr)
        return 1

    progress_bar.n = 100
    progress_bar.close()

    print("\n" + "=" * 60)
    print("✓ Conversion completed successfully!\n")
    print(f"  Output:          {result.output_path}")
    print(f"  Processing time: {result.processing_time_seconds:.1f}s")
    return 0


def command_batch(args) -> int:
    """Execute 'batch' command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 = every job succeeded or was skipped, 1 = error)
    """
    direction = args.direction

    try:
        options = [parse_option_spec(spec, direction) for spec in args.options]

        jobs = []
        if args.csv:
            jobs = JobListParser().parse_csv(args.csv, direction, args.output_dir)
        known_inputs = {job.input_path for job in jobs}
        jobs.extend(
            job for job in create_jobs(args.inputs, direction, args.output_dir)
            if job.input_path not in known_inputs
        )
    except (ConversionError, ValueError) as e:
        print(f"\n✗ Error: {e}", file=sys.stderr)
        return 1

    print(f"Batch: {len(jobs)} file(s), {direction.title}")
    if args.output_dir:
        print(f"Output: {args.output_dir}")
    print()

    progress_bar = tqdm(total=len(jobs), unit="file", disable=args.quiet)

    def on_job_update(job):
        line = format_console_line(job)
        if line and not args.quiet:
            tqdm.write(line)
        if job.status.is_terminal:
            progress_bar.update(1)

    def on_job_progress(job_id, progress, line):
        if progress >= 0:
            progress_bar.set_postfix_str(f"current {int(progress * 100)}%")

    try:
        summary = convert_batch(
            jobs,
            direction,
            output_dir=args.output_dir,
            options=options,
            chdman_path=args.chdman,
            skip_existing=args.skip_existing,
            stop_on_error=args.stop_on_error,
            summary_csv=args.summary,
            on_job_update=on_job_update,
            on_job_progress=on_job_progress,
        )
    except (ConversionError, ValueError) as e:
        progress_bar.close()
        print(f"\n✗ Error: {e}", file=sys.stderr)
        return 1

    progress_bar.close()

    print("\n" + "=" * 60)
    print("Batch conversion complete!\n")
    print("Summary:")
    print(f"  Total files:     {summary.total}")
    print(f"  Succeeded:       {summary.succeeded}")
    print(f"  Failed:          {summary.failed}")
    print(f"  Skipped:         {summary.skipped}")
    if summary.not_attempted:
        print(f"  Not attempted:   {summary.not_attempted}")
    print(f"  Success rate:    {summary.success_rate * 100:.1f}%")
    print(f"  Processing time: {summary.processing_time_seconds:.1f}s")

    failed_jobs = [job for job in jobs if job.error_message and job.status == JobStatus.FAILED]
    if failed_jobs:
        print("\nFailed files:")
        for job in failed_jobs:
            first_line = job.error_message.splitlines()[0]
            print(f"  ✗ {job.input_name}: {first_line}")

    if args.summary:
        print(f"\nBatch summary: {args.summary}")

    return 0 if summary.failed == 0 and summary.not_attempted == 0 else 1


def command_locate(args) -> int:
    """Execute 'locate' command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 = found, 1 = not found)
    """
    location = resolve_executable(args.chdman)

    if location.verified:
        print(f"✓ chdman found: {location.path}")
        print(f"  Source: {location.source}")
        return 0

    print("✗ chdman not found\n")
    print(CHDMAN_NOT_FOUND_HELP)
    return 1


def command_options(args) -> int:
    """Execute 'options' command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (always 0)
    """
    direction = args.direction
    catalog = advanced_options(direction) if args.advanced else known_options(direction)

    print(f"{direction.title}: {direction.description}")
    print(f"chdman {direction.subcommand} -i <input> -o <output> [options]\n")
    print("Options:")
    for option in catalog:
        if option.kind == OptionKind.FLAG:
            usage = option.key
        elif option.kind == OptionKind.CHOICE:
            usage = f"{option.key}={{{','.join(option.choices)}}}"
        else:
            usage = f"{option.key}=VALUE"
        print(f"  {usage:<28} {option.help}")

    if direction.is_compression:
        print("\nCodecs:")
        for codec, description in CODEC_DESCRIPTIONS.items():
            print(f"  {codec:<6} {description}")

    return 0


def main(argv=None) -> int:
    """Main entry point for CLI.

    Args:
        argv: Command-line arguments (default: sys.argv[1:])

    Returns:
        Exit code (0 = success, non-zero = error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    configure_logging(verbose=args.verbose, log_file=args.log_file)

    # Execute command
    if args.command == "convert":
        return command_convert(args)
    elif args.command == "batch":
        return command_batch(args)
    elif args.command == "locate":
        return command_locate(args)
    elif args.command == "options":
        return command_options(args)
    else:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
