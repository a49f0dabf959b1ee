"""
Centralized logging configuration for claudy.

All loggers live under the "claudy" namespace so a single setup call
controls the whole package:

    from .logging_config import get_logger
    logger = get_logger("tailer")      # -> "claudy.tailer"

The TUI owns the terminal, so setup_tui_logging() sends records to a file
only; the CLI's one-shot commands log warnings to stderr.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from rich.logging import RichHandler

from .settings import get_log_dir

ROOT_LOGGER_NAME = "claudy"
DEFAULT_LOG_DIR = get_log_dir()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Get a logger in the claudy namespace."""
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def get_level_from_env(default: int = logging.INFO) -> int:
    """Resolve CLAUDY_LOG_LEVEL (DEBUG, INFO, ...) to a logging level."""
    level_name = os.environ.get("CLAUDY_LOG_LEVEL", "").upper()
    level = logging.getLevelName(level_name) if level_name else default
    return level if isinstance(level, int) else default


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    console: bool = True,
    rich_console: bool = False,
) -> logging.Logger:
    """Configure the claudy root logger.

    Existing handlers are removed first, so calling this twice does not
    duplicate output.

    Args:
        level: Logging level for the claudy namespace
        log_file: Also write to this file (parent directories are created)
        console: Attach a stderr handler
        rich_console: Use Rich's handler for the console instead of a plain one

    Returns:
        The configured "claudy" logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    if console:
        if rich_console:
            handler: logging.Handler = RichHandler(rich_tracebacks=True, show_path=False)
        else:
            handler = logging.StreamHandler()
            handler.setFormatter(formatter)
        handler.setLevel(level)
        logger.addHandler(handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)

    return logger


def setup_tui_logging(log_file: Optional[Path] = None) -> logging.Logger:
    """File-only logging for the TUI (the terminal belongs to Textual)."""
    if log_file is None:
        log_file = DEFAULT_LOG_DIR / "tui.log"
    setup_logging(
        level=get_level_from_env(logging.INFO),
        log_file=log_file,
        console=False,
    )
    return get_logger("tui")


def setup_cli_logging() -> logging.Logger:
    """Warnings and errors to stderr for one-shot CLI commands."""
    setup_logging(
        level=get_level_from_env(logging.WARNING),
        console=True,
        rich_console=True,
    )
    return get_logger("cli")


class StructuredLogger:
    """Logger wrapper that appends key=value context to every message.

    Example:
        log = get_structured_logger("tailer").with_context(session_id="abc")
        log.warning("read failed", offset=1024)
        # -> "read failed | session_id=abc offset=1024"
    """

    def __init__(self, logger: logging.Logger, context: Optional[Dict[str, Any]] = None):
        self._logger = logger
        self._context = dict(context or {})

    def with_context(self, **kwargs: Any) -> "StructuredLogger":
        merged = dict(self._context)
        merged.update(kwargs)
        return StructuredLogger(self._logger, merged)

    def _format(self, msg: str, **kwargs: Any) -> str:
        fields = dict(self._context)
        fields.update(kwargs)
        if not fields:
            return msg
        rendered = " ".join(f"{k}={v}" for k, v in fields.items())
        return f"{msg} | {rendered}"

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._logger.debug(self._format(msg, **kwargs))

    def info(self, msg: str, **kwargs: Any) -> None:
        self._logger.info(self._format(msg, **kwargs))

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._logger.warning(self._format(msg, **kwargs))

    def error(self, msg: str, **kwargs: Any) -> None:
        self._logger.error(self._format(msg, **kwargs))


def get_structured_logger(name: str) -> StructuredLogger:
    return StructuredLogger(get_logger(name))
