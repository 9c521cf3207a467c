"""
Logging utilities for the tabula application.

- Configure logging via `setup_logging(...)` at app startup.
- Get module-specific loggers via `get_logger(__name__)`.
- Reconfigure anytime by calling `setup_logging(...)` again.

This uses the *root logger* so background loader threads and NiceGUI/uvicorn
records end up in the same handlers. The log file lives in the per-user
platformdirs config directory (app name "tabula"), in a "logs" subfolder.
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, Union

from platformdirs import user_config_dir

# App name used for config/log paths; must match user_config.py.
_APP_NAME = "tabula"
_LOG_FILENAME = "tabula.log"


def setup_logging(
    level: Union[str, int] = "INFO",
    max_bytes: int = 5_000_000,
    backup_count: int = 5,
    log_dir: Optional[Path] = None,
) -> None:
    """
    Configure root logging with console and rotating file handler.

    Console uses the given level; file captures everything at DEBUG.
    Calling this multiple times will reconfigure logging (removes old handlers first).

    Parameters
    ----------
    level:
        Logging level for console (e.g. "DEBUG", "INFO").
    max_bytes:
        Max size in bytes for rotating log file.
    backup_count:
        Number of rotated log files to keep.
    log_dir:
        Folder for the log file. Defaults to ``<user_config_dir>/tabula/logs``.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()

    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)

    # root must pass DEBUG through so the file handler sees it
    root.setLevel(logging.DEBUG)

    # -------- Formatters --------
    console_fmt = "[%(levelname)s] %(name)s:%(funcName)s:%(lineno)d: %(message)s"
    file_fmt = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s:%(funcName)s:%(lineno)d: %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(fmt=console_fmt))
    root.addHandler(console)

    if log_dir is None:
        log_dir = Path(user_config_dir(_APP_NAME)) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / _LOG_FILENAME

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(fmt=file_fmt, datefmt=datefmt))
    root.addHandler(file_handler)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger by name.

    If name is None, returns a 'tabula' logger.

    Use like:
        logger = get_logger(__name__)
        logger.info("Hello")
    """
    if name is None:
        name = _APP_NAME
    return logging.getLogger(name)


