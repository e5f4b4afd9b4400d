"""Stream IRC colour codes into ANSI terminal colours."""
from __future__ import annotations

from .colors import DEFAULT_PALETTE, RESET_SEQUENCE, UnknownColorError, lookup_irc_color, sgr_color
from .config import ConfigError, IrcatConfig, load_config
from .filter import ByteSource, FilterReader, PassthroughFilter, StreamFilter, as_byte_source
from .pipeline import ByteSink, copy_stream, ircat
from .translator import IRCatFilter, translate

__all__ = [
    "ByteSink",
    "ByteSource",
    "ConfigError",
    "DEFAULT_PALETTE",
    "FilterReader",
    "IRCatFilter",
    "IrcatConfig",
    "PassthroughFilter",
    "RESET_SEQUENCE",
    "StreamFilter",
    "UnknownColorError",
    "as_byte_source",
    "copy_stream",
    "ircat",
    "load_config",
    "lookup_irc_color",
    "sgr_color",
    "translate",
]
