"""Conversion directions and the chdman option catalog."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ConversionDirection(Enum):
    """The six supported format-pair conversions.

    Three directions compress a disc image into a CHD archive and three
    extract a CHD archive back into a disc image.
    """

    ISO_TO_CHD = "iso_to_chd"
    CUE_TO_CHD = "cue_to_chd"
    GDI_TO_CHD = "gdi_to_chd"
    CHD_TO_ISO = "chd_to_iso"
    CHD_TO_CUE = "chd_to_cue"
    CHD_TO_GDI = "chd_to_gdi"

    @classmethod
    def from_string(cls, text: str) -> "ConversionDirection":
        """Look up a direction from user input such as ``"iso-to-chd"``.

        Raises
        ------
        ValueError
            If the text names no known direction
        """
        normalized = text.strip().lower().replace("->", " to ")
        normalized = "_".join(normalized.replace("-", " ").replace("_", " ").split())
        for direction in cls:
            if direction.value == normalized or direction.name.lower() == normalized:
                return direction
        valid = ", ".join(d.value.replace("_", "-") for d in cls)
        raise ValueError(f"Unknown conversion direction '{text}'. Expected one of: {valid}")

    @property
    def is_compression(self) -> bool:
        """True for the image -> archive directions."""
        return self.output_extension == "chd"

    @property
    def subcommand(self) -> str:
        """chdman subcommand shared by every direction of the same class."""
        return "createcd" if self.is_compression else "extractcd"

    @property
    def input_extension(self) -> str:
        return _EXTENSIONS[self][0]

    @property
    def output_extension(self) -> str:
        return _EXTENSIONS[self][1]

    @property
    def title(self) -> str:
        return f"{self.input_extension.upper()} -> {self.output_extension.upper()}"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_EXTENSIONS = {
    ConversionDirection.ISO_TO_CHD: ("iso", "chd"),
    ConversionDirection.CUE_TO_CHD: ("cue", "chd"),
    ConversionDirection.GDI_TO_CHD: ("gdi", "chd"),
    ConversionDirection.CHD_TO_ISO: ("chd", "iso"),
    ConversionDirection.CHD_TO_CUE: ("chd", "cue"),
    ConversionDirection.CHD_TO_GDI: ("chd", "gdi"),
}

_DESCRIPTIONS = {
    ConversionDirection.ISO_TO_CHD: "Convert single-track ISO to compressed CHD",
    ConversionDirection.CUE_TO_CHD: "Convert BIN/CUE (multi-track) to CHD",
    ConversionDirection.GDI_TO_CHD: "Convert Dreamcast GDI to CHD",
    ConversionDirection.CHD_TO_ISO: "Extract CHD to raw ISO",
    ConversionDirection.CHD_TO_CUE: "Extract CHD to BIN/CUE",
    ConversionDirection.CHD_TO_GDI: "Extract CHD to Dreamcast GDI",
}

CODEC_DESCRIPTIONS = {
    "cd": "Standard CD-ROM (recommended) - Best compatibility, fast compression",
    "cdlz": "CD-ROM + LZMA - Smaller size, slower compression, good for archival",
    "cdzl": "CD-ROM + Zlib - Balanced size/speed, good general purpose",
    "cdfl": "CD-ROM + FLAC - Best for audio-heavy games, preserves audio quality",
}

CD_CODECS = ("cd", "cdlz", "cdzl", "cdfl")


class OptionKind(Enum):
    """How an option is passed to chdman."""

    FLAG = "flag"  # key only, e.g. -f
    TEXT = "text"  # key followed by a free text value
    CHOICE = "choice"  # key followed by one of a fixed set of values


@dataclass
class ConversionOption:
    """A single chdman command-line option.

    Parameters
    ----------
    key : str
        Option flag as passed to chdman (e.g. ``"-c"``)
    value : Optional[str], default=None
        Option value; ignored for flags
    help : str, default=""
        Short description shown to the user
    kind : OptionKind, default=OptionKind.TEXT
        Whether the option is a flag or takes a value
    choices : tuple of str, default=()
        Allowed values for CHOICE options
    enabled : bool, default=True
        Disabled options never reach the argument vector

    Notes
    -----
    A valued option without a value contributes nothing to the argument
    vector. That keeps unconfigured catalog entries inert instead of
    turning them into errors.
    """

    key: str
    value: Optional[str] = None
    help: str = ""
    kind: OptionKind = OptionKind.TEXT
    choices: Tuple[str, ...] = field(default_factory=tuple)
    enabled: bool = True

    def __post_init__(self):
        if not self.key:
            raise ValueError("option key cannot be empty")

    def as_arguments(self) -> List[str]:
        """Return the argument tokens this option contributes."""
        if self.value:
            return [self.key, self.value]
        if self.kind == OptionKind.FLAG:
            return [self.key]
        return []


def _codec_option(enabled: bool = True) -> ConversionOption:
    return ConversionOption(
        key="-c",
        value="cd",
        help="Compression codec",
        kind=OptionKind.CHOICE,
        choices=CD_CODECS,
        enabled=enabled,
    )


def known_options(direction: ConversionDirection) -> List[ConversionOption]:
    """Return the options a user may add for a direction.

    A fresh list of fresh options is returned on each call so callers can
    edit values without touching the catalog.
    """
    if direction.is_compression:
        return [
            _codec_option(),
            ConversionOption("-hs", "", "Hunk size in bytes", OptionKind.TEXT),
            ConversionOption("-f", "", "Force overwrite", OptionKind.FLAG),
            ConversionOption("-np", "", "Proceed if not perfect", OptionKind.FLAG),
        ]
    if direction == ConversionDirection.CHD_TO_ISO:
        return [ConversionOption("-f", "", "Force overwrite", OptionKind.FLAG)]
    return [
        ConversionOption("-f", "", "Force overwrite", OptionKind.FLAG),
        ConversionOption("-ob", "", "Output BIN filename", OptionKind.TEXT),
    ]


def advanced_options(direction: ConversionDirection) -> List[ConversionOption]:
    """Return the full option set for a direction, all disabled."""
    if direction.is_compression:
        return [
            _codec_option(enabled=False),
            ConversionOption("-hs", "", "Hunk size in bytes (e.g., 2048, 4096)", OptionKind.TEXT, enabled=False),
            ConversionOption("-f", "", "Force overwrite existing files", OptionKind.FLAG, enabled=False),
            ConversionOption("-v", "", "Verify after compression", OptionKind.FLAG, enabled=False),
            ConversionOption("-np", "", "Proceed even if not perfect", OptionKind.FLAG, enabled=False),
        ]
    return [
        ConversionOption("-f", "", "Force overwrite existing files", OptionKind.FLAG, enabled=False),
        ConversionOption("-v", "", "Verify after extraction", OptionKind.FLAG, enabled=False),
        ConversionOption("-ob", "", "Output BIN filename", OptionKind.TEXT, enabled=False),
    ]


def parse_option_spec(spec: str, direction: ConversionDirection) -> ConversionOption:
    """Build an enabled option from a command-line token.

    ``"-c=cdlz"`` gives a valued option, ``"-f"`` a flag. The kind is taken
    from the direction's catalog; unknown keys become FLAG options when no
    value is given and TEXT options otherwise.

    Raises
    ------
    ValueError
        If the token is empty or a CHOICE value is not allowed
    """
    spec = spec.strip()
    if not spec:
        raise ValueError("option cannot be empty")

    key, sep, value = spec.partition("=")
    key = key.strip()
    value = value.strip() if sep else None
    if not key.startswith("-"):
        key = f"-{key}"

    catalog = {opt.key: opt for opt in advanced_options(direction) + known_options(direction)}
    template = catalog.get(key)

    if template is None:
        kind = OptionKind.TEXT if value else OptionKind.FLAG
        return ConversionOption(key=key, value=value, kind=kind)

    if template.kind == OptionKind.CHOICE and value and value not in template.choices:
        raise ValueError(
            f"Invalid value '{value}' for {key}. Expected one of: {', '.join(template.choices)}"
        )

    return ConversionOption(
        key=key,
        value=value if value is not None else (template.value if template.kind == OptionKind.CHOICE else None),
        help=template.help,
        kind=template.kind,
        choices=template.choices,
        enabled=True,
    )
