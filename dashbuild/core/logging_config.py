"""
Centralized logging configuration with structured JSON output.

Console output is human-readable by default; `json_output=True` switches it
to one JSON object per line for CI log aggregation. A log file, when given,
is always JSON.

Usage:
    from dashbuild.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.warning("404 for /repos/o/r/dependabot/alerts", extra={"path": "/repos/o/r/dependabot/alerts"})
"""

import json
import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TextIO

# Attributes every LogRecord carries; anything else came in through extra={...}
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "hpack")

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per record.

    Carries the record's extra={...} fields, fields passed through
    log_with_context(), and static run fields (e.g. the collection profile)
    set once at setup.
    """

    def __init__(self, static_fields: dict[str, Any] | None = None):
        super().__init__()
        self.static_fields = dict(static_fields or {})

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
            **self.static_fields,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        log_data.update(getattr(record, "extra_fields", {}))

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and key != "extra_fields":
                log_data.setdefault(key, value)

        return json.dumps(log_data, default=str)


class ContextFormatter(logging.Formatter):
    """Human-readable console formatter, level names coloured on a terminal."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = False):
        super().__init__(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_color:
            return super().format(record)

        levelname = record.levelname
        record.levelname = f"{self.COLORS.get(levelname, '')}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _is_terminal(stream: TextIO) -> bool:
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    json_output: bool = False,
    static_fields: dict[str, Any] | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Configure the root logger for a collection run.

    Replaces any existing root handlers, so calling it twice is safe.

    Args:
        level: Log level name; unknown names fall back to INFO
        log_file: Optional JSON log file (parent directories are created)
        json_output: Emit JSON on the console instead of text
        static_fields: Fields added to every JSON record (e.g. {"profile": "dependabot"})
        stream: Console stream (default: stdout)

    Example:
        setup_logging(level="DEBUG")
        setup_logging(json_output=True, static_fields={"profile": "github-statistics"})
    """
    log_level = getattr(logging, str(level).upper(), logging.INFO)
    stream = stream or sys.stdout

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(log_level)
    if json_output:
        console_handler.setFormatter(JSONFormatter(static_fields))
    else:
        console_handler.setFormatter(ContextFormatter(use_color=_is_terminal(stream)))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(JSONFormatter(static_fields))
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger; use get_logger(__name__)."""
    return logging.getLogger(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: Any) -> None:
    """
    Log a message with structured context fields.

    Example:
        log_with_context(logger, "info", "Area collected", area="prs", metric_count=6)
    """
    log_func = getattr(logger, level.lower())
    log_func(message, extra={"extra_fields": context})
