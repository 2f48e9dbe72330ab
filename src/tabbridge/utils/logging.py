"""Logging setup for the tabbridge server process.

Application records (including uvicorn's own ``uvicorn.error`` output) go to
``tabbridge.log``. Request lines emitted on the ``tabbridge.access`` logger are
kept out of it and written to ``access.log`` instead. Both also go to the
console unless ``console`` is off.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["ACCESS_LOGGER_NAME", "LogPaths", "get_log_paths", "setup_logging"]

ACCESS_LOGGER_NAME = "tabbridge.access"

_DEFAULT_LOG_DIR = Path.home() / ".tabbridge" / "logs"
_APP_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_ACCESS_FORMAT = "%(asctime)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# uvicorn is started with log_config=None, so these only need levels and propagation.
_SERVER_LOGGERS: tuple[str, ...] = ("uvicorn", "uvicorn.error")
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio", "httpx", "uvicorn.access")

_PATHS: LogPaths | None = None


@dataclass(slots=True, frozen=True)
class LogPaths:
    """Files written by a configured process."""

    application: Path
    access: Path


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> LogPaths:
    """Configure application, server and access logging."""

    global _PATHS
    if _PATHS is not None and not force:
        return _PATHS

    target_dir = _resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    paths = LogPaths(application=target_dir / "tabbridge.log", access=target_dir / "access.log")

    app_formatter = logging.Formatter(fmt=_APP_FORMAT, datefmt=_DATE_FORMAT)
    handlers: list[logging.Handler] = [
        _rotating_handler(paths.application, level, app_formatter, max_bytes, backup_count)
    ]
    console_handler: logging.Handler | None = None
    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(app_formatter)
        handlers.append(console_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    _configure_access_logger(paths.access, console_handler, max_bytes, backup_count)
    _configure_server_loggers(level)

    _PATHS = paths
    return paths


def get_log_paths() -> LogPaths | None:
    """Return the files configured by :func:`setup_logging`, if any."""

    return _PATHS


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    env_override = os.environ.get("TABBRIDGE_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()


def _rotating_handler(
    path: Path,
    level: int,
    formatter: logging.Formatter,
    max_bytes: int,
    backup_count: int,
) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _configure_access_logger(
    path: Path,
    console_handler: logging.Handler | None,
    max_bytes: int,
    backup_count: int,
) -> None:
    access_logger = logging.getLogger(ACCESS_LOGGER_NAME)
    for handler in list(access_logger.handlers):
        access_logger.removeHandler(handler)
        handler.close()
    formatter = logging.Formatter(fmt=_ACCESS_FORMAT, datefmt=_DATE_FORMAT)
    access_logger.addHandler(_rotating_handler(path, logging.INFO, formatter, max_bytes, backup_count))
    if console_handler is not None:
        access_logger.addHandler(console_handler)
    # Request lines are recorded even when the application runs at WARNING.
    access_logger.setLevel(logging.INFO)
    access_logger.propagate = False


def _configure_server_loggers(root_level: int) -> None:
    for logger_name in _SERVER_LOGGERS:
        server_logger = logging.getLogger(logger_name)
        server_logger.handlers.clear()
        server_logger.setLevel(root_level)
        server_logger.propagate = True
    quiet_level = logging.WARNING if root_level < logging.WARNING else root_level
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)
