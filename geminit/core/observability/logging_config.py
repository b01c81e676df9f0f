"""
Logging configuration for the geminit CLI.

``main.py`` calls ``setup_logging`` once per invocation; every module
logs through ``logging.getLogger(__name__)``.

Level precedence (see ``resolve_level``):
    --debug  >  --verbose  >  --quiet  >  GEMINIT_LOG_LEVEL  >  WARNING
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

LOG_LEVEL_ENV = "GEMINIT_LOG_LEVEL"
LOG_FILE_ENV = "GEMINIT_LOG_FILE"
LOG_FILE_LEVEL_ENV = "GEMINIT_LOG_FILE_LEVEL"

# Console format per threshold: (max level, format, datefmt)
_CONSOLE_FORMATS: list[tuple[int, str, str | None]] = [
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s %(message)s", "%H:%M:%S"),
]
_CONSOLE_DEFAULT = ("%(message)s", None)

_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s — %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Library deprecation chatter routed through logging.captureWarnings
_WARNINGS_LOGGER = "py.warnings"


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if env is None else env
    return env.get(LOG_LEVEL_ENV, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure the root logger for this process.

    Args:
        level: Console level name.
        log_file: Optional file that receives a full-detail copy.
        log_file_level: Level for the file, defaults to ``level``.
        quiet_third_party: Hide captured library warnings unless at DEBUG.
    """
    console_level = _parse_level(level)
    fmt, datefmt = _console_format(console_level)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        root.addHandler(_file_handler(log_file, file_level))
        root_level = min(root_level, file_level)

    root.setLevel(root_level)

    logging.captureWarnings(True)
    if quiet_third_party and console_level > logging.DEBUG:
        logging.getLogger(_WARNINGS_LOGGER).setLevel(logging.ERROR)

    logging.raiseExceptions = False


def _console_format(level: int) -> tuple[str, str | None]:
    for threshold, fmt, datefmt in _CONSOLE_FORMATS:
        if level <= threshold:
            return fmt, datefmt
    return _CONSOLE_DEFAULT


def _file_handler(path: str, level: int) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
    return handler


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    if not level:
        return logging.WARNING
    numeric = logging.getLevelName(level.strip().upper())
    return numeric if isinstance(numeric, int) else logging.WARNING
