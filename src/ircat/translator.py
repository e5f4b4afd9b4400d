"""Incremental IRC colour code to ANSI escape translator."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Final, Sequence, Type, Union, cast

from .colors import DEFAULT_PALETTE, PALETTE_SIZE, RESET_SEQUENCE, UnknownColorError, sgr_color
from .filter import StreamFilter


LOGGER = logging.getLogger(__name__)

COLOR_INTRODUCER: Final[int] = 0x03
NEWLINE: Final[int] = ord("\n")
COMMA: Final[int] = ord(",")
_DIGITS: Final[range] = range(ord("0"), ord("9") + 1)


@dataclass(frozen=True)
class Normal:
    """Outside any colour directive."""


@dataclass(frozen=True)
class Start:
    """Saw the introducer; waiting for the first foreground digit."""


@dataclass(frozen=True)
class Foreground1:
    """One foreground digit read."""

    digit: int


@dataclass(frozen=True)
class Foreground2:
    """Two foreground digits read and emitted."""


@dataclass(frozen=True)
class Comma:
    """Foreground emitted; a comma may introduce the background."""


@dataclass(frozen=True)
class Background1:
    """One background digit read."""

    digit: int


ParseState = Union[Normal, Start, Foreground1, Foreground2, Comma, Background1]

_NORMAL: Final = Normal()
_START: Final = Start()
_FOREGROUND2: Final = Foreground2()
_COMMA: Final = Comma()


class IRCatFilter(StreamFilter):
    """Finite-state machine rewriting ``^C`` colour codes as SGR sequences."""

    def __init__(self, palette: Sequence[str] = DEFAULT_PALETTE) -> None:
        if len(palette) != PALETTE_SIZE:
            raise ValueError(f"palette must define {PALETTE_SIZE} colors")
        self.palette = tuple(palette)
        self.state: ParseState = _NORMAL
        self.in_color = False
        self._handlers: Dict[Type[ParseState], Callable[[ParseState, int, bytearray], ParseState]] = {
            Normal: self._handle_normal,
            Start: self._handle_start,
            Foreground1: self._handle_foreground1,
            Foreground2: self._handle_foreground2,
            Comma: self._handle_comma,
            Background1: self._handle_background1,
        }

    def reset(self) -> None:
        self.state = _NORMAL
        self.in_color = False

    def filter(self, data: bytes, output: bytearray) -> None:
        """Translate ``data``, carrying the parse state into the next call.

        When an unknown colour aborts the chunk, the parse state is left as it
        was before the call, so the same chunk can be offered again; bytes
        already appended to ``output`` for the aborted chunk are not removed.
        """

        state = self.state
        in_color = self.in_color
        handlers = self._handlers
        try:
            for byte in data:
                state = handlers[type(state)](state, byte, output)
        except UnknownColorError:
            self.in_color = in_color
            raise
        self.state = state

    # State handlers -----------------------------------------------------

    def _handle_normal(self, state: ParseState, byte: int, output: bytearray) -> ParseState:
        if byte == COLOR_INTRODUCER:
            return _START
        if byte == NEWLINE:
            self._close_span(output)
        output.append(byte)
        return _NORMAL

    def _handle_start(self, state: ParseState, byte: int, output: bytearray) -> ParseState:
        if byte in _DIGITS:
            self.in_color = True
            return Foreground1(byte - ord("0"))
        # An introducer without a colour number is the stop-colour marker.
        self._close_span(output)
        output.append(byte)
        return _NORMAL

    def _handle_foreground1(self, state: ParseState, byte: int, output: bytearray) -> ParseState:
        digit = cast(Foreground1, state).digit
        if byte in _DIGITS:
            self._emit(output, digit * 10 + byte - ord("0"), foreground=True)
            return _FOREGROUND2
        self._emit(output, digit, foreground=True)
        if byte == COMMA:
            return _COMMA
        output.append(byte)
        return _NORMAL

    def _handle_foreground2(self, state: ParseState, byte: int, output: bytearray) -> ParseState:
        if byte == COMMA:
            return _COMMA
        output.append(byte)
        return _NORMAL

    def _handle_comma(self, state: ParseState, byte: int, output: bytearray) -> ParseState:
        if byte in _DIGITS:
            return Background1(byte - ord("0"))
        output.append(COMMA)
        output.append(byte)
        return _NORMAL

    def _handle_background1(self, state: ParseState, byte: int, output: bytearray) -> ParseState:
        digit = cast(Background1, state).digit
        if byte in _DIGITS:
            self._emit(output, digit * 10 + byte - ord("0"), foreground=False)
            return _NORMAL
        self._emit(output, digit, foreground=False)
        output.append(byte)
        return _NORMAL

    # Output helpers -----------------------------------------------------

    def _close_span(self, output: bytearray) -> None:
        if self.in_color:
            output += RESET_SEQUENCE
            self.in_color = False

    def _emit(self, output: bytearray, index: int, *, foreground: bool) -> None:
        try:
            output += sgr_color(index, foreground=foreground, palette=self.palette)
        except UnknownColorError:
            LOGGER.error("aborting translation: unknown IRC color index %d", index)
            raise


def translate(data: bytes, *, palette: Sequence[str] = DEFAULT_PALETTE) -> bytes:
    """Translate a complete in-memory ``data`` payload."""

    output = bytearray()
    IRCatFilter(palette).filter(data, output)
    return bytes(output)


__all__ = [
    "Background1",
    "Comma",
    "Foreground1",
    "Foreground2",
    "IRCatFilter",
    "Normal",
    "ParseState",
    "Start",
    "translate",
]
