"""Translate IRC colour codes in FILEs (or stdin) into ANSI colours on stdout."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import BinaryIO, Sequence

from .colors import UnknownColorError
from .config import LOG_LEVELS, ConfigError, IrcatConfig, load_config
from .filter import FilterReader, as_byte_source
from .pipeline import ByteSink, copy_stream
from .translator import IRCatFilter


LOGGER = logging.getLogger(__name__)

STDIN_NAME = "-"


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("expected a positive integer") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError("expected a positive integer")
    return number


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Return parsed arguments for the ``ircat`` command."""

    parser = argparse.ArgumentParser(prog="ircat", description=__doc__)
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        default=[STDIN_NAME],
        help="Input files to translate in order; '-' reads stdin (default)",
    )
    parser.add_argument(
        "--buffer-size",
        type=_positive_int,
        default=None,
        help="Refill chunk size in bytes for opened input files",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a TOML file with [ircat] settings",
    )
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Logging verbosity written to stderr (default: WARNING)",
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> IrcatConfig:
    """Merge the optional configuration file with command-line overrides."""

    config = IrcatConfig()
    if args.config is not None:
        try:
            config = load_config(args.config)
        except (ConfigError, OSError) as exc:
            raise SystemExit(f"ircat: {exc}") from exc
    return IrcatConfig(
        buffer_size=args.buffer_size or config.buffer_size,
        log_level=args.log_level or config.log_level,
        palette=config.palette,
    )


def translate_file(name: str, sink: ByteSink, config: IrcatConfig) -> int:
    """Translate the input called ``name`` into ``sink``."""

    stream_filter = IRCatFilter(config.palette_table())
    if name == STDIN_NAME:
        LOGGER.info("translating <stdin>")
        reader = FilterReader(as_byte_source(sys.stdin.buffer, config.buffer_size), stream_filter)
        return copy_stream(reader, sink, flush=True)

    LOGGER.info("translating %s", name)
    handle: BinaryIO = open(name, "rb", buffering=config.buffer_size)
    with FilterReader(handle, stream_filter, close_source=True) as reader:
        return copy_stream(reader, sink, flush=True)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``ircat`` command."""

    args = parse_args(argv)
    config = resolve_config(args)
    logging.basicConfig(level=getattr(logging, config.log_level))

    sink = sys.stdout.buffer
    total = 0
    try:
        for name in args.files:
            try:
                total += translate_file(name, sink, config)
            except FileNotFoundError as exc:
                raise SystemExit(f"ircat: {name}: no such file") from exc
            except UnknownColorError as exc:
                raise SystemExit(f"ircat: {name}: {exc}") from exc
        sink.flush()
    except BrokenPipeError:
        # Python flushes stdout at exit; point it at devnull so that flush is silent.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 1
    except OSError as exc:
        raise SystemExit(f"ircat: {exc}") from exc
    LOGGER.debug("wrote %d bytes", total)
    return 0


if __name__ == "__main__":  # pragma: no cover - exercised via python -m
    raise SystemExit(main())
