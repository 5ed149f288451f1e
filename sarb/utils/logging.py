"""
Logging for SARB.

Log records go to stderr through Rich (or as JSON lines), so stdout only
ever carries the report. Components log through ComponentLogger, which
appends ``key=value`` context to the message and attaches it to the record
for the JSON formatter.
"""

import logging
import sys
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Any
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler
from rich.console import Console

console = Console(stderr=True)

ROOT_LOGGER = "sarb"

FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            payload["context"] = context
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _stderr_handler(json_format: bool) -> logging.Handler:
    if json_format:
        handler: logging.Handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        return handler

    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = False,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure the ``sarb`` logger.

    Calling it again replaces the handlers of the previous call.

    Args:
        level: Level for stderr output (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional rotating log file. It receives every level.
        json_format: Emit JSON lines instead of Rich output.
        max_file_size_mb: Size at which the log file rotates.
        backup_count: Number of rotated files kept.

    Returns:
        The ``sarb`` logger.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = False

    stderr_handler = _stderr_handler(json_format)
    stderr_handler.setLevel(numeric_level)
    logger.addHandler(stderr_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setFormatter(JSONFormatter() if json_format else logging.Formatter(FILE_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(numeric_level)

    return logger


class ComponentLogger:
    """Logger named ``sarb.<parent>.<component>`` that carries key=value context."""

    def __init__(self, component: str, parent: Optional[str] = None):
        self.component = component
        name = ".".join(part for part in (ROOT_LOGGER, parent, component) if part)
        self._logger = logging.getLogger(name)

    def _format_message(self, msg: str, **context: Any) -> str:
        return " | ".join([msg, *(f"{key}={value}" for key, value in context.items())])

    def _log(self, level: int, msg: str, exc: Optional[BaseException] = None, **context: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return
        self._logger.log(
            level,
            self._format_message(msg, **context),
            exc_info=exc,
            extra={"context": {"component": self.component, **context}},
        )

    def debug(self, msg: str, **context: Any) -> None:
        self._log(logging.DEBUG, msg, **context)

    def info(self, msg: str, **context: Any) -> None:
        self._log(logging.INFO, msg, **context)

    def error(self, msg: str, exc: Optional[BaseException] = None, **context: Any) -> None:
        """Log an error, with the traceback of ``exc`` when given."""
        self._log(logging.ERROR, msg, exc, **context)
