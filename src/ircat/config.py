"""Load ircat settings from TOML configuration files."""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping

import tomllib

from .colors import DEFAULT_PALETTE, PALETTE_SIZE


DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

LOGGER = logging.getLogger(__name__)

_SGR_SUFFIX_PATTERN = re.compile(r"[0-9;]+")


class ConfigError(ValueError):
    """Raised when a configuration file fails validation."""


@dataclass(frozen=True)
class IrcatConfig:
    """Settings applied by the command-line front end."""

    buffer_size: int = io.DEFAULT_BUFFER_SIZE
    log_level: str = DEFAULT_LOG_LEVEL
    palette: Dict[int, str] = field(default_factory=dict)

    def palette_table(self) -> tuple[str, ...]:
        """Return the default palette with configured overrides applied."""

        table = list(DEFAULT_PALETTE)
        for index, suffix in self.palette.items():
            table[index] = suffix
        return tuple(table)


def load_config(config_path: Path) -> IrcatConfig:
    """Parse and validate the configuration stored at ``config_path``."""

    try:
        with config_path.open("rb") as stream:
            data = tomllib.load(stream)
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"{config_path}: {exc}") from exc

    section = _parse_ircat_section(data)
    return IrcatConfig(
        buffer_size=_coerce_buffer_size(section.get("buffer_size", io.DEFAULT_BUFFER_SIZE)),
        log_level=_coerce_log_level(section.get("log_level", DEFAULT_LOG_LEVEL)),
        palette=_parse_palette(section.get("palette", {})),
    )


def _parse_ircat_section(data: Mapping[str, Any]) -> Mapping[str, Any]:
    section = data.get("ircat", {})
    if not isinstance(section, Mapping):
        raise ConfigError("[ircat] section must be a mapping")
    return section


def _coerce_buffer_size(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ConfigError("buffer_size must be an integer")
    if isinstance(raw, str):
        try:
            raw = int(raw.strip(), base=10)
        except ValueError as exc:
            raise ConfigError(f"invalid buffer_size: {raw!r}") from exc
    if not isinstance(raw, int):
        raise ConfigError("buffer_size must be an integer")
    if raw <= 0:
        raise ConfigError(f"buffer_size must be positive, received {raw}")
    return raw


def _coerce_log_level(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ConfigError("log_level must be a string")
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"unknown log_level {raw!r}; expected one of {', '.join(LOG_LEVELS)}")
    return level


def _parse_palette(raw: Any) -> Dict[int, str]:
    if not isinstance(raw, Mapping):
        raise ConfigError("[ircat.palette] must map color indices to SGR suffixes")

    overrides: Dict[int, str] = {}
    for key, value in raw.items():
        index = _coerce_color_index(key)
        if not isinstance(value, str) or not _SGR_SUFFIX_PATTERN.fullmatch(value):
            raise ConfigError(f"palette entry {index} must be an SGR suffix such as '1' or '8;5;235'")
        overrides[index] = value
    if overrides:
        LOGGER.debug("palette overrides: %s", sorted(overrides))
    return overrides


def _coerce_color_index(raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        index = raw
    elif isinstance(raw, str):
        try:
            index = int(raw.strip(), base=10)
        except ValueError as exc:
            raise ConfigError(f"invalid palette index: {raw!r}") from exc
    else:
        raise ConfigError(f"invalid palette index: {raw!r}")
    if not 0 <= index < PALETTE_SIZE:
        raise ConfigError(f"palette index {index} outside 0-{PALETTE_SIZE - 1}")
    return index


__all__ = ["ConfigError", "DEFAULT_LOG_LEVEL", "IrcatConfig", "LOG_LEVELS", "load_config"]
