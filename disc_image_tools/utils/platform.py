"""Platform detection and platform-specific utilities.

This module provides functions to detect the current platform and the
platform-specific details needed to locate and launch chdman.

Example
-------
>>> from disc_image_tools.utils.platform import get_executable_extension
>>> f"chdman{get_executable_extension()}"
'chdman'
"""

import sys


def get_platform() -> str:
    """Return current platform identifier.

    Returns
    -------
    str
        Platform identifier: 'win32', 'linux', or 'darwin' (macOS)
    """
    return sys.platform


def is_windows() -> bool:
    """Check if running on Windows."""
    return sys.platform == "win32"


def is_linux() -> bool:
    """Check if running on Linux."""
    return sys.platform.startswith("linux")


def is_mac() -> bool:
    """Check if running on macOS."""
    return sys.platform == "darwin"


def get_executable_extension() -> str:
    """Get platform-specific executable extension.

    Returns
    -------
    str
        '.exe' on Windows, empty string on other platforms

    Example
    -------
    >>> exe_ext = get_executable_extension()
    >>> chdman_name = f"chdman{exe_ext}"
    >>> print(chdman_name)
    chdman.exe  # on Windows
    chdman      # on Linux/macOS
    """
    return ".exe" if is_windows() else ""
