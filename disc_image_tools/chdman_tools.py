"""disc_image_tools module containing helpers for driving chdman

chdman is the CHD (Compressed Hunks of Data) manager shipped with MAME.
It converts optical disc images to and from the compressed CHD format:
   chdman createcd  -i game.cue -o game.chd [-c cdlz] [-f]
   chdman extractcd -i game.chd -o game.cue [-ob game.bin] [-f]
MAME License: GNU General Public License v2 (https://www.mamedev.org/legal.html)
"""

import logging
import os
import re
import shutil
from pathlib import Path
from typing import Iterable, Mapping, Optional, Tuple

from disc_image_tools.batch.models import (
    ConversionDirection,
    ConversionOption,
    ExecutableLocation,
)
from disc_image_tools.utils.filesystem import is_executable_file
from disc_image_tools.utils.platform import get_executable_extension

# Priority: configured path > ENV var > Homebrew locations > System PATH
CHDMAN_ENV_VAR = "CHDMAN_DISCIMAGETOOLS"
CHDMAN_NAME = "chdman"

# Package-manager install directories searched before the inherited PATH
SEARCH_PATH_PREFIXES = ("/opt/homebrew/bin", "/usr/local/bin")
FALLBACK_SEARCH_PATH = ("/usr/bin", "/bin")

CHDMAN_CANDIDATES = tuple(f"{prefix}/{CHDMAN_NAME}" for prefix in SEARCH_PATH_PREFIXES)

# Progress sentinel handed to callbacks for lines without a percentage
PROGRESS_UNKNOWN = -1.0

INPUT_FLAG = "-i"
OUTPUT_FLAG = "-o"

CHDMAN_NOT_FOUND_HELP = """chdman was not found in the system PATH.

If you have Homebrew installed:

1. Open Terminal and run:
   brew install mame

2. After installation, chdman should be at:
   - Apple Silicon: /opt/homebrew/bin/chdman
   - Intel Mac: /usr/local/bin/chdman

3. Run 'discimage-batch locate' again, or pass the full path with --chdman.

On Linux, install the MAME tools package (e.g. 'apt install mame-tools').
You can also point the CHDMAN_DISCIMAGETOOLS environment variable at the
chdman executable."""

_PERCENT_RE = re.compile(r"([0-9]{1,3})%")
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def parse_chdman_progress(line_of_text) -> Optional[float]:
    """Parse a chdman output line and return progress as a fraction.

    Notes
    -----
    chdman reports progress with lines such as:
        'Compressing, 23% complete... (ratio=41.5%)'
        'Extracting, 100% complete... '
    The first run of 1-3 ASCII digits directly followed by '%' is taken as an
    integer percentage, divided by 100 and clamped to [0, 1].

    A line without a percentage returns None, never 0.0: callers keep the
    previously displayed value instead of resetting it. The pattern is an
    informal convention of the tool, so this is a best-effort heuristic.
    """
    if not isinstance(line_of_text, str):
        return None

    matcher = _PERCENT_RE.search(line_of_text)
    if matcher is None:
        return None

    percent = int(matcher.group(1))
    return min(max(percent / 100.0, 0.0), 1.0)


def split_output_lines(text: str) -> list:
    """Split a decoded output chunk into lines.

    chdman redraws its progress line with carriage returns, so '\\r' is a
    line terminator as well as '\\n'. A chunk ending with a terminator
    yields a trailing empty string.
    """
    return _LINE_BREAK_RE.split(text)


def create_chdman_arguments(
    direction: ConversionDirection,
    input_path,
    output_path,
    options: Iterable[ConversionOption] = (),
) -> Tuple[str, ...]:
    """Create the chdman argument vector for one conversion.

    Returns
    -------
    tuple of str
        ``(subcommand, "-i", input, "-o", output, *option_args)``

    Notes
    -----
    Disabled options are ignored. Options keyed ``-i`` or ``-o`` (any case)
    are dropped so exactly one input/output pair is emitted.
    """
    arguments = [
        direction.subcommand,
        INPUT_FLAG,
        os.fspath(input_path),
        OUTPUT_FLAG,
        os.fspath(output_path),
    ]

    for option in options:
        if not option.enabled:
            continue
        if option.key.strip().lower() in (INPUT_FLAG, OUTPUT_FLAG):
            logging.debug(f"[chdman] Ignoring duplicate {option.key} option")
            continue
        arguments.extend(option.as_arguments())

    return tuple(arguments)


def format_command_line(executable, arguments: Iterable[str]) -> str:
    """Render an executable and its arguments as a console line."""
    return " ".join([os.fspath(executable), *arguments])


def build_process_environment(base_environment: Optional[Mapping[str, str]] = None) -> dict:
    """Return the environment chdman is launched with.

    The parent's environment is inherited with the Homebrew install
    directories prepended to PATH, so chdman (and anything it calls) is
    found even when the parent's PATH is minimal. Existing PATH entries
    stay searchable after the prepended ones.
    """
    environment = dict(os.environ if base_environment is None else base_environment)
    existing_path = environment.get("PATH")

    if existing_path:
        entries = [*SEARCH_PATH_PREFIXES, existing_path]
    else:
        entries = [*SEARCH_PATH_PREFIXES, *FALLBACK_SEARCH_PATH]

    environment["PATH"] = os.pathsep.join(entries)
    return environment


def _normalize_configured_path(configured_path: str) -> str:
    """Turn a configured directory like '/opt/homebrew/bin' into a chdman path."""
    path = configured_path.strip()
    stripped = path.rstrip("/\\")
    if os.path.basename(stripped) == "bin" and os.path.isdir(stripped):
        return os.path.join(stripped, CHDMAN_NAME + get_executable_extension())
    return path


def locate_chdman(configured_path: Optional[str] = None) -> ExecutableLocation:
    """Find the chdman executable.

    Priority: configured path > CHDMAN_DISCIMAGETOOLS environment variable >
    Homebrew install locations > system PATH.

    Returns
    -------
    ExecutableLocation
        A verified location, or an unverified one pointing at the bare
        ``chdman`` name when nothing was found
    """
    if configured_path:
        path = _normalize_configured_path(configured_path)
        if os.path.isabs(path) and is_executable_file(path):
            return ExecutableLocation(path=path, verified=True, source="configured")
        if path != CHDMAN_NAME:
            logging.warning(f"[chdman] Configured path is not executable: {path}")

    env_path = os.environ.get(CHDMAN_ENV_VAR)
    if env_path:
        if is_executable_file(env_path):
            return ExecutableLocation(
                path=str(Path(env_path).resolve()), verified=True, source="environment"
            )
        logging.warning(f"[chdman] {CHDMAN_ENV_VAR} does not name an executable: {env_path}")

    for candidate in CHDMAN_CANDIDATES:
        if is_executable_file(candidate):
            return ExecutableLocation(path=candidate, verified=True, source="candidate")

    which_path = shutil.which(CHDMAN_NAME)
    if which_path and is_executable_file(which_path):
        return ExecutableLocation(
            path=str(Path(which_path).resolve()), verified=True, source="search_path"
        )

    logging.warning("[chdman] chdman executable could not be located")
    return ExecutableLocation(
        path=configured_path.strip() if configured_path else CHDMAN_NAME,
        verified=False,
        source="unresolved",
    )


def generate_output_path(input_path, direction: ConversionDirection, output_dir=None) -> str:
    """Return the default output path for an input file.

    The output keeps the input's stem, takes the direction's output
    extension, and lives in ``output_dir`` or next to the input.
    """
    input_path = Path(input_path)
    base_dir = Path(output_dir) if output_dir else input_path.parent
    return str(base_dir / f"{input_path.stem}.{direction.output_extension}")
