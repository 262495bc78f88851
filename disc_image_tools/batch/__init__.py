"""Batch conversion module for disc_image_tools.

This module provides the models and exceptions used to convert many disc
images in one run: each job is one (input, output) pair, and the batch
runs jobs one at a time under the skip/stop policy of a BatchConfig.

Key Components
--------------
- Models: BatchJob, JobStatus, BatchConfig, BatchSummary, RunOutcome
- Exceptions: ConversionError and subclasses
- Services: implemented in disc_image_tools.services

Examples
--------
>>> from disc_image_tools.batch.models import BatchConfig
>>> config = BatchConfig(skip_existing=True, stop_on_error=False)
>>> errors = config.validate()
>>> if not errors:
...     print("Configuration is valid!")
Configuration is valid!
"""

from disc_image_tools.batch.models import (
    BatchJob,
    JobStatus,
    BatchConfig,
    BatchSummary,
    ExecutableLocation,
    RunOutcome,
    ConversionDirection,
    ConversionOption,
    OptionKind,
)
from disc_image_tools.batch.exceptions import (
    ConversionError,
    ExecutableNotFoundError,
    ProcessLaunchError,
    ProcessExitedNonZeroError,
    InvalidJobTransitionError,
    BatchProcessingError,
    BatchValidationError,
    InvalidJobListError,
)

__all__ = [
    # Models
    "BatchJob",
    "JobStatus",
    "BatchConfig",
    "BatchSummary",
    "ExecutableLocation",
    "RunOutcome",
    "ConversionDirection",
    "ConversionOption",
    "OptionKind",
    # Exceptions
    "ConversionError",
    "ExecutableNotFoundError",
    "ProcessLaunchError",
    "ProcessExitedNonZeroError",
    "InvalidJobTransitionError",
    "BatchProcessingError",
    "BatchValidationError",
    "InvalidJobListError",
]
