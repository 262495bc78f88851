"""Base service class for conversion logic."""

import logging
from typing import Optional


class BaseService:
    """Base class for all service classes.

    Services are responsible for:
    - Launching and supervising chdman runs
    - Sequencing batches of conversion jobs
    - Reading and writing job lists and reports

    Services should be:
    - Framework-agnostic (usable from the CLI, scripts, or a GUI)
    - Fully unit testable
    - Free of caller state (jobs and summaries live in models)

    All service classes should inherit from this base class to ensure
    consistent behavior and logging support.
    """

    def __init__(self, logger_name: Optional[str] = None):
        """Initialize the base service.

        Args:
            logger_name: Optional name for the logger. If not provided,
                        uses the class name.
        """
        if logger_name is None:
            logger_name = self.__class__.__name__
        self.logger = logging.getLogger(logger_name)

    def _validate_not_none(self, value, param_name: str) -> None:
        """Validate that a parameter is not None.

        Args:
            value: Value to validate
            param_name: Name of the parameter (for error message)

        Raises:
            ValueError: If value is None
        """
        if value is None:
            raise ValueError(f"{param_name} cannot be None")

    def _validate_not_empty(self, value, param_name: str) -> None:
        """Validate that a sequence or string parameter is not empty.

        Args:
            value: Value to validate
            param_name: Name of the parameter (for error message)

        Raises:
            ValueError: If value is None or empty
        """
        self._validate_not_none(value, param_name)
        if len(value) == 0:
            raise ValueError(f"{param_name} cannot be empty")
