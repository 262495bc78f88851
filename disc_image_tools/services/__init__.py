"""Service classes for conversion logic."""

from .base_service import BaseService
from .process_runner import OutputHistory, ProcessRunner
from .batch_sequencer import BatchSequencer
from .job_list_parser import JobListParser, create_jobs
from .batch_report import format_console_line, save_batch_summary

__all__ = [
    "BaseService",
    "OutputHistory",
    "ProcessRunner",
    "BatchSequencer",
    "JobListParser",
    "create_jobs",
    "format_console_line",
    "save_batch_summary",
]
