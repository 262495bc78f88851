"""Cross-platform filesystem utilities.

This module provides utilities for file operations that work consistently
across Windows, Linux, and macOS.
"""

import os
from pathlib import Path
from typing import Union


def ensure_directory(path: Union[str, Path], mode: int = 0o755) -> Path:
    """Create directory if it doesn't exist, with proper permissions.

    This function creates a directory and all necessary parent directories,
    similar to `mkdir -p` in Unix systems.

    Parameters
    ----------
    path : str or Path
        Path to directory to create
    mode : int, default=0o755
        Permission mode for created directories (Unix only)
        On Windows, this parameter is ignored

    Returns
    -------
    Path
        Absolute path to the created/existing directory

    Raises
    ------
    OSError
        If directory cannot be created due to permissions or other errors

    Example
    -------
    >>> ensure_directory("/tmp/chd_out")
    PosixPath('/tmp/chd_out')
    """
    path_obj = Path(path).resolve()
    path_obj.mkdir(parents=True, exist_ok=True, mode=mode)
    return path_obj


def is_executable_file(path: Union[str, Path]) -> bool:
    """Check that a path names a regular file this process may execute.

    Parameters
    ----------
    path : str or Path
        Path to check

    Returns
    -------
    bool
        True if the path exists, is a file, and has execute permission
        for the current process

    Example
    -------
    >>> is_executable_file("/bin/sh")
    True
    >>> is_executable_file("/etc/hostname")
    False
    """
    if not path:
        return False
    path_str = os.fspath(path)
    return os.path.isfile(path_str) and os.access(path_str, os.X_OK)
