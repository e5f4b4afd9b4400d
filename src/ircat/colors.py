"""IRC colour index to ANSI SGR translation table."""

from __future__ import annotations

from typing import Final, Sequence


class UnknownColorError(ValueError):
    """Raised when a colour directive names an index outside the palette."""

    def __init__(self, index: int) -> None:
        super().__init__(f"unknown IRC color index: {index}")
        self.index = index


# SGR parameter suffixes appended to ``3`` (foreground) or ``4`` (background).
DEFAULT_PALETTE: Final[tuple[str, ...]] = (
    "7",  # white
    "8;5;235",  # black
    "4",  # blue
    "2",  # green
    "1",  # red
    "8;5;52",  # brown
    "5",  # magenta
    "8;5;209",  # orange
    "3",  # yellow
    "8;5;47",  # light green
    "6",  # cyan
    "6",  # light cyan
    "8;5;56",  # light blue
    "8;5;200",  # pink
    "8;5;241",  # grey
    "7",  # light grey
)

PALETTE_SIZE: Final[int] = len(DEFAULT_PALETTE)

ESCAPE: Final[bytes] = b"\x1b["
RESET_SEQUENCE: Final[bytes] = b"\x1b[39m\x1b[49m"


def lookup_irc_color(index: int, palette: Sequence[str] = DEFAULT_PALETTE) -> str:
    """Return the SGR suffix for IRC colour ``index``."""

    if not 0 <= index < len(palette):
        raise UnknownColorError(index)
    return palette[index]


def sgr_color(index: int, *, foreground: bool, palette: Sequence[str] = DEFAULT_PALETTE) -> bytes:
    """Build the escape sequence selecting colour ``index``."""

    layer = b"3" if foreground else b"4"
    return ESCAPE + layer + lookup_irc_color(index, palette).encode("ascii") + b"m"


__all__ = [
    "DEFAULT_PALETTE",
    "PALETTE_SIZE",
    "RESET_SEQUENCE",
    "UnknownColorError",
    "lookup_irc_color",
    "sgr_color",
]
