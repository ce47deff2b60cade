"""Runtime settings read from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

ENV_OUTPUT_STAMP = "PARTICIPATION_INTAKE_OUTPUT_STAMP"
ENV_DATA_DIR = "PARTICIPATION_INTAKE_DATA_DIR"
ENV_LOG_LEVEL = "PARTICIPATION_INTAKE_LOG_LEVEL"

DEFAULT_DATA_DIR_NAME = "participation-intake-data"
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    output_stamp: str | None
    log_level: int


def _parse_log_level(value: str) -> int:
    level = logging.getLevelName(value.strip().upper())
    if not isinstance(level, int):
        raise ConfigError(f"invalid log level in {ENV_LOG_LEVEL}: {value!r}")
    return level


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    data_dir = env.get(ENV_DATA_DIR) or str(Path.cwd() / DEFAULT_DATA_DIR_NAME)
    return Settings(
        data_dir=Path(data_dir),
        output_stamp=env.get(ENV_OUTPUT_STAMP) or None,
        log_level=_parse_log_level(env.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL),
    )
