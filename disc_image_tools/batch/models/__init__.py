"""Batch conversion models.

This module provides data models for conversion jobs and batch runs.
All models are framework-agnostic and hold no references to a UI.
"""

from disc_image_tools.batch.models.batch_job import BatchJob, JobStatus
from disc_image_tools.batch.models.batch_config import BatchConfig
from disc_image_tools.batch.models.batch_summary import BatchSummary
from disc_image_tools.batch.models.run_outcome import ExecutableLocation, RunOutcome
from disc_image_tools.batch.models.conversion_direction import (
    CODEC_DESCRIPTIONS,
    ConversionDirection,
    ConversionOption,
    OptionKind,
    advanced_options,
    known_options,
    parse_option_spec,
)

__all__ = [
    "BatchJob",
    "JobStatus",
    "BatchConfig",
    "BatchSummary",
    "ExecutableLocation",
    "RunOutcome",
    "CODEC_DESCRIPTIONS",
    "ConversionDirection",
    "ConversionOption",
    "OptionKind",
    "advanced_options",
    "known_options",
    "parse_option_spec",
]
