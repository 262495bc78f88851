"""Public API for disc_image_tools conversions.

This module provides a simple, user-friendly API for converting one disc
image or a batch of them with chdman.
"""

from .conversion_api import (
    convert_file,
    convert_batch,
    ConversionResult,
    resolve_direction,
    resolve_options,
    resolve_executable,
)

__all__ = [
    'convert_file',
    'convert_batch',
    'ConversionResult',
    'resolve_direction',
    'resolve_options',
    'resolve_executable',
]
