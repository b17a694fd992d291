from __future__ import annotations

import logging
import sys
from typing import Dict, TextIO

# Extra levels so that every `logs.level` name has a Python counterpart.
HTTP = 17
VERBOSE = 15
SILLY = 5
SILENT = logging.CRITICAL + 10

logging.addLevelName(HTTP, "HTTP")
logging.addLevelName(VERBOSE, "VERBOSE")
logging.addLevelName(SILLY, "SILLY")

ROOT_LOGGER = "storyframe"
LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"

LEVELS: Dict[str, int] = {
    "silent": SILENT,
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "http": HTTP,
    "verbose": VERBOSE,
    "debug": logging.DEBUG,
    "silly": SILLY,
}

_HANDLER_ATTR = "_storyframe_handler"


def level_for(name: str) -> int:
    """Map a `logs.level` name (case-insensitive) to a Python logging level; unknown names mean INFO."""
    return LEVELS.get(str(name).strip().lower(), logging.INFO)


def get_logger(scope: str) -> logging.Logger:
    return logging.getLogger(f"{ROOT_LOGGER}.{scope}")


def configure_logging(level: str = "info", stream: TextIO | None = None) -> logging.Logger:
    """Install a single stream handler on the `storyframe` logger.

    Calling again replaces the handler installed by a previous call, so the
    effective level and stream always reflect the latest configuration.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for h in list(logger.handlers):
        if getattr(h, _HANDLER_ATTR, False):
            logger.removeHandler(h)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    logger.addHandler(handler)
    logger.setLevel(level_for(level))
    return logger


__all__ = [
    "HTTP",
    "LEVELS",
    "SILENT",
    "SILLY",
    "VERBOSE",
    "configure_logging",
    "get_logger",
    "level_for",
]
