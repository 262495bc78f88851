"""Cross-platform utilities for disc_image_tools.

This module provides platform-independent utilities for file checks and
platform detection so chdman can be located and launched on Windows,
Linux, and macOS.
"""

from disc_image_tools.utils.platform import (
    get_platform,
    is_windows,
    is_linux,
    is_mac,
    get_executable_extension,
)

from disc_image_tools.utils.filesystem import (
    ensure_directory,
    is_executable_file,
)

__all__ = [
    # Platform detection
    "get_platform",
    "is_windows",
    "is_linux",
    "is_mac",
    "get_executable_extension",
    # Filesystem utilities
    "ensure_directory",
    "is_executable_file",
]
