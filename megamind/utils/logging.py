"""\
Logging
=======

Author: Akshay Mestry <xa@mes3.dev>
Created on: Friday, July 04 2025
Last updated on: Monday, October 19 2026

This module provides logging utilities and configuration helpers for
megamind. Bindings log every step of a call when their `debug` option
is on; this module decides how those records look and where they go.

It includes custom formatters for coloured and JSON output and
automatic extra field handling, built on top of the standard Python
logging library.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import re
import sys
import typing as t
from pathlib import Path

if t.TYPE_CHECKING:
    from megamind.core.config import LoggerConfig

__all__: list[str] = [
    "ColouredFormatter",
    "JSONFormatter",
    "MegamindFormatter",
    "configure",
    "dehumanise",
    "get_logger",
]


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    This formatter outputs log records as single-line JSON objects,
    which suits log shippers and observability platforms.

    :param extras: Whether to include extra fields in output, defaults
        to `True`.
    """

    def __init__(self, extras: bool = True):
        """Initialise the JSON formatter instance."""
        super().__init__()
        self.extras = extras

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        :param record: The log record to format.
        :return: JSON-formatted log message.
        """
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if self.extras:
            for key, value in record.__dict__.items():
                if (
                    key not in payload
                    and key not in MegamindFormatter.LOG_RECORD_ATTRS
                    and not key.startswith("_")
                ):
                    payload[key] = value
        return json.dumps(payload, default=str)


class MegamindFormatter(logging.Formatter):
    """Custom formatter that automatically includes extra fields.

    Fields passed through `extra=` that are not standard `LogRecord`
    attributes are rendered into the `%(extra)s` placeholder, so call
    sites can attach the binding id or invocation key without building
    the string themselves.

    :param fmt: The format string for log messages, defaults to `None`.
    :param datefmt: The format string for timestamps, defaults to
        `None`.
    :param extra_format: Format string for individual extra fields.
    :param extra_separator: Separator between multiple extra fields,
        defaults to a single space.
    :var LOG_RECORD_ATTRS: Set of standard `LogRecord` attributes.
    """

    LOG_RECORD_ATTRS = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "exc_info",
        "exc_text",
        "stack_info",
        "message",
        "asctime",
        "taskName",
        "qualName",
        "extra",
    }

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        extra_format: str = "{key}: {value}",
        extra_separator: str = " ",
    ) -> None:
        """Initialise the custom formatter."""
        super().__init__(fmt, datefmt)
        self.extra = extra_format
        self.extra_separator = extra_separator

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with automatic extra field handling.

        :param record: The log record to format.
        :return: Formatted log message with extra fields.
        """
        clone = logging.makeLogRecord(record.__dict__)
        extras = {
            key: value
            for key, value in record.__dict__.items()
            if key not in self.LOG_RECORD_ATTRS and not key.startswith("_")
        }
        entries = [
            self.extra.format(key=key, value=value)
            for key, value in sorted(extras.items())
        ]
        clone.extra = self.extra_separator.join(entries)
        if not hasattr(clone, "qualName"):
            clone.qualName = f"{record.name}.{record.funcName}"
        return super().format(clone)


class ColouredFormatter(MegamindFormatter):
    """Coloured formatter with qualified function names.

    Colours are only applied when `is_tty` is set, so log files remain
    free of ANSI escape sequences.

    :var COLORS: Dictionary mapping log levels to ANSI colour codes.
    """

    COLORS = {
        "DEBUG": "\x1b[38;5;14m",
        "INFO": "\x1b[38;5;41m",
        "WARNING": "\x1b[38;5;215m",
        "ERROR": "\x1b[38;5;204m",
        "CRITICAL": "\x1b[38;5;197m",
        "QUALNAME": "\x1b[38;5;140m",
        "RESET": "\x1b[0m",
    }

    is_tty: bool = False

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with padded, optionally coloured levels.

        :param record: The log record to format.
        :return: Formatted log message.
        """
        clone = logging.makeLogRecord(record.__dict__)
        qualname = f"{record.name}.{record.funcName}"
        if self.is_tty:
            colour = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            clone.levelname = (
                f"{colour}{record.levelname:>8s}{self.COLORS['RESET']}"
            )
            clone.qualName = (
                f"{self.COLORS['QUALNAME']}{qualname}{self.COLORS['RESET']}"
            )
        else:
            clone.levelname = f"{record.levelname:>8s}"
            clone.qualName = qualname
        return super().format(clone)


def configure(config: LoggerConfig) -> None:
    """Configure the `megamind` logger hierarchy.

    Attaches a console handler and, when enabled, a rotating file
    handler to the `megamind` logger. Only this package's logger is
    touched so embedding applications keep their own root setup.

    :param config: Logging configuration settings.
    """
    logger = logging.getLogger("megamind")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(getattr(logging, config.level.upper()))
    if config.tty.enable:
        tty = logging.StreamHandler(sys.stdout)
        tty.setLevel(getattr(logging, config.tty.level.upper()))
        if config.as_json:
            formatter: logging.Formatter = JSONFormatter()
        else:
            formatter = ColouredFormatter(
                fmt=config.tty.fmt,
                datefmt=config.datefmt,
                extra_format="[{key}: {value}]",
            )
            formatter.is_tty = config.tty.colour and sys.stdout.isatty()
        tty.setFormatter(formatter)
        logger.addHandler(tty)
    if config.file.enable:
        file = Path(config.file.path)
        file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(
            filename=file,
            maxBytes=dehumanise(config.file.max_size),
            backupCount=config.file.backups,
            encoding=config.file.encoding,
        )
        handler.setLevel(getattr(logging, config.file.level.upper()))
        if config.as_json:
            formatter = JSONFormatter()
        else:
            formatter = ColouredFormatter(
                fmt=config.file.fmt,
                datefmt=config.datefmt,
                extra_format="[{key}: {value}]",
            )
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def dehumanise(size: str) -> int:
    """Parse size string to bytes.

    :param size: Size string like `10MB`, `1GB`, etc.
    :return: Size in bytes.
    :raises ValueError: If the size string cannot be parsed.
    """
    size = size.upper().strip()
    multipliers = {
        "B": 1,
        "KB": 1024,
        "MB": 1024**2,
        "GB": 1024**3,
        "TB": 1024**4,
    }
    matched = re.match(r"^(\d+(?:\.\d+)?)\s*([KMGT]?B?)$", size)
    if not matched:
        raise ValueError(f"Invalid size format: {size}")
    value, unit = matched.groups()
    if unit and not unit.endswith("B"):
        unit += "B"
    return int(float(value) * multipliers.get(unit or "B", 1))


def get_logger(logger_name: str) -> logging.Logger:
    """Get a logger instance with the specified name."""
    return logging.getLogger(logger_name)
