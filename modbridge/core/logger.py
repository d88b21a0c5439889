"""
Logging for the ``modbridge`` logger tree.

Library modules log through ``logging.getLogger(__name__)`` and never attach
handlers themselves. A host (or the CLI) calls ``setup_logger`` once; the
level and log file come from ``MODBRIDGE_LOG_LEVEL`` / ``MODBRIDGE_LOG_FILE``
unless passed explicitly.
"""
import logging
import sys
from pathlib import Path
from typing import IO, Optional, Union

from .config import get_log_config

ROOT_LOGGER = "modbridge"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


class _OwnedHandlers:
    """Marker mixin for the handlers ``setup_logger`` installs."""


class _StreamHandler(_OwnedHandlers, logging.StreamHandler):
    pass


class _FileHandler(_OwnedHandlers, logging.FileHandler):
    pass


def _level_number(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    number = logging.getLevelName(str(level).strip().upper())
    return number if isinstance(number, int) else logging.INFO


def setup_logger(
    level: Union[str, int, None] = None,
    log_file: Union[Path, str, None] = None,
    *,
    name: str = ROOT_LOGGER,
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Attach a stderr handler (and a file handler when a log file is set) to ``name``.

    Args:
        level: Level name or number; None reads ``MODBRIDGE_LOG_LEVEL``.
            Unknown names fall back to INFO.
        log_file: Log file path; None reads ``MODBRIDGE_LOG_FILE``
        name: Logger to configure, the package root by default
        stream: Console stream (default ``sys.stderr``, keeping stdout for JSON output)

    Calling it again replaces the handlers a previous call installed. Handlers
    the host attached itself are kept.
    """
    log_config = get_log_config()
    log_level = _level_number(level if level is not None else log_config["level"])
    if log_file is None:
        log_file = log_config["log_file"]

    logger = logging.getLogger(name)
    for handler in [h for h in logger.handlers if isinstance(h, _OwnedHandlers)]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(log_level)

    formatter = logging.Formatter(LOG_FORMAT)
    handlers = [_StreamHandler(stream if stream is not None else sys.stderr)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(_FileHandler(log_path, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger inside the ``modbridge`` tree; names outside it are nested under the root."""
    if not name or name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name or ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
