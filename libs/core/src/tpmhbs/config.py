"""Environment-driven defaults for the CLI.

Every setting can also be given as a command-line flag, which wins over the
environment.
"""

from __future__ import annotations

import logging
import os
import pathlib
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError
from .projection import DEFAULT_SORT_KEY, resolve_ordering
from .throughput import DEFAULT_SAMPLES_PER_SIZE

DEFAULT_DEVICE = "tpm2"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    device: str = DEFAULT_DEVICE
    tcti: Optional[str] = None
    samples_per_size: int = DEFAULT_SAMPLES_PER_SIZE
    sort_by: str = DEFAULT_SORT_KEY
    output_dir: pathlib.Path = pathlib.Path(".")
    log_level: str = DEFAULT_LOG_LEVEL


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got '{raw}'") from None
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1, got {value}")
    return value


def parse_log_level(raw: str) -> int:
    level = logging.getLevelName(raw.strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"unknown log level: '{raw}'")
    return level


def _sort_key(name: str, raw: str) -> str:
    resolve_ordering(raw)
    return raw


def _log_level(name: str, raw: str) -> str:
    parse_log_level(raw)
    return raw.upper()


# Settings field -> (environment variable, parser)
_ENV_FIELDS: Dict[str, Tuple[str, Callable[[str, str], Any]]] = {
    "device": ("TPMHBS_DEVICE", lambda _name, raw: raw),
    "tcti": ("TPMHBS_TCTI", lambda _name, raw: raw),
    "samples_per_size": ("TPMHBS_SAMPLES", _positive_int),
    "sort_by": ("TPMHBS_SORT_BY", _sort_key),
    "output_dir": ("TPMHBS_OUTPUT_DIR", lambda _name, raw: pathlib.Path(raw)),
    "log_level": ("TPMHBS_LOG_LEVEL", _log_level),
}


def load_settings(env: Mapping[str, str] | None = None, **overrides: Any) -> Settings:
    """Build settings from ``TPMHBS_*`` variables.

    Keyword overrides that are not ``None`` replace the matching variable,
    which is then neither read nor validated.
    """
    unknown = set(overrides) - set(_ENV_FIELDS)
    if unknown:
        raise TypeError(f"unknown settings: {', '.join(sorted(unknown))}")
    env_map = env if env is not None else os.environ
    kwargs: Dict[str, Any] = {}
    for field, (var, parse) in _ENV_FIELDS.items():
        override = overrides.get(field)
        if override is not None:
            kwargs[field] = override
            continue
        raw = env_map.get(var, "").strip()
        if raw:
            kwargs[field] = parse(var, raw)
    return Settings(**kwargs)
