#!/usr/bin/env python
"""Example script demonstrating how to use the disc_image_tools batch API

This script converts every disc image listed in a job list CSV to CHD and
writes a per-file summary next to the outputs.

Usage:
    python run_batch_conversion.py

Requirements:
    1. chdman installed (``brew install mame`` or ``sudo apt install mame-tools``)
    2. A CSV file with an ``input_path`` column listing .cue files
       (``output_path`` and ``job_id`` columns are optional)
"""

import logging
import os
import sys

from disc_image_tools.api import convert_batch
from disc_image_tools.batch.exceptions import ConversionError
from disc_image_tools.batch.models import ConversionDirection, JobStatus
from disc_image_tools.services.job_list_parser import JobListParser


def main():
    """Main batch conversion function"""

    # ==================================================================
    # CONFIGURATION - Update these paths for your setup
    # ==================================================================

    script_dir = os.path.dirname(os.path.abspath(__file__))

    # CSV listing the disc images to convert
    job_list_csv = os.path.join(script_dir, "jobs.csv")

    # Output directory for the CHD files, log and summary
    output_directory = os.path.join(script_dir, "output")
    os.makedirs(output_directory, exist_ok=True)

    direction = ConversionDirection.CUE_TO_CHD
    options = ["-c=cdlz"]

    # Configure logging to output folder
    log_file = os.path.join(output_directory, "batch_conversion.log")
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, mode='w'),  # Overwrite log each run
            logging.StreamHandler(sys.stdout)
        ],
        force=True
    )

    print("="*60)
    print("Disc Image Batch Converter")
    print("="*60)
    print(f"Job list:  {job_list_csv}")
    print(f"Direction: {direction.title}")
    print(f"Output:    {output_directory}")
    print("="*60)

    try:
        jobs = JobListParser().parse_csv(job_list_csv, direction, output_dir=output_directory)
    except (ConversionError, ValueError) as e:
        print(f"ERROR: Failed to read job list: {e}")
        return 1

    print(f"\nLoaded {len(jobs)} files to convert")

    def on_job_update(job):
        """Print a line whenever a job changes state"""
        if job.status != JobStatus.PENDING:
            print(f"[{job.job_id}] {job.status.value}: {job.input_name}")

    summary_csv_path = os.path.join(output_directory, "batch_summary.csv")
    try:
        summary = convert_batch(
            jobs,
            direction,
            options=options,
            summary_csv=summary_csv_path,
            on_job_update=on_job_update,
        )
    except ConversionError as e:
        print(f"ERROR: Batch conversion failed: {e}")
        return 1

    print("\n" + "="*60)
    print("BATCH CONVERSION COMPLETE")
    print("="*60)
    print(f"\n{summary}")

    failed = [job for job in jobs if job.status == JobStatus.FAILED]
    if failed:
        print("\n✗ Failed files:")
        for job in failed:
            print(f"  {job.input_name}: {job.error_message}")

    print(f"\nResults saved to:")
    print(f"  CHD files:   {output_directory}/")
    print(f"  Summary CSV: {summary_csv_path}")
    print(f"  Log file:    {log_file}")

    return 0 if not failed else 1


if __name__ == "__main__":
    sys.exit(main())
