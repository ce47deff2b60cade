"""Logging setup with labeled prefixes (INFO|WARN|ERROR) on stderr."""

from __future__ import annotations

import logging
import sys

__all__ = [
    "setup_logging",
    "reset_logging",
]

LOGGER_NAME = "participation_intake"


class LabeledFormatter(logging.Formatter):
    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        return f"{level_label} {record.getMessage()}"


def setup_logging(level: int = logging.INFO, stream=None) -> logging.Logger:
    """Configure the package logger. Safe to call repeatedly; handlers are replaced."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    # keep records out of the root logger so CLI output is not duplicated
    logger.propagate = False
    return logger


def reset_logging() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
