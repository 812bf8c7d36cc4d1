# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for packwright.

Packaging runs inside CI builds, so every log entry is a single JSON line
that a log collector can parse: timestamped, leveled, tagged with the source
module. print() is not used anywhere in the package.

How this works:
  - We use Python's standard `logging` module under the hood, but replace the
    default formatter with JsonFormatter, which serializes every log record
    into a single JSON line.
  - One handler always writes to stdout, a second one optionally to a file.
  - `get_logger` is the only way to create loggers inside packwright.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "packwright.signing.signer", "msg": "Signing phase finished", ...}
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Attributes every LogRecord carries. Anything else came in through `extra`.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "relativeCreated",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "pathname",
        "filename",
        "module",
        "levelno",
        "levelname",
        "processName",
        "process",
        "threadName",
        "thread",
        "message",
        "msecs",
        "taskName",
    }
)


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Each entry contains four mandatory fields:
      ts      ISO 8601 UTC timestamp
      level   log level name
      module  the logger name (usually the Python module path)
      msg     the formatted message string

    Keyword args passed through `extra` are merged in as additional fields.
    That is how the pipeline attaches the command, exit code, step name, etc.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.name,
            "msg": record.getMessage(),
        }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_log_level(level_name: str) -> int:
    """Turn a level name string into the corresponding logging constant."""
    upper = level_name.upper()
    if upper not in _VALID_LOG_LEVELS:
        raise ValueError(
            f"Invalid log level '{level_name}'. Must be one of: {', '.join(sorted(_VALID_LOG_LEVELS))}"
        )
    return getattr(logging, upper)


def get_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """
    Create a structured JSON logger.

    Every module calls this once at import time and keeps the returned
    logger in a module-level `_logger`.

    Args:
        name: Logger name, typically __name__ of the calling module.
        log_level: One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
        log_file: Optional path to a log file. If provided, logs go to both
                  stdout and the file.

    Returns:
        A configured logging.Logger that outputs structured JSON.
    """
    logger = logging.getLogger(name)
    level = _resolve_log_level(log_level)
    logger.setLevel(level)

    # Calling get_logger twice for the same name must not stack handlers.
    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = JsonFormatter()

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def configure_package_logging(log_level: str, log_file: Optional[Path] = None) -> None:
    """
    Apply a log level (and optional file) to every packwright logger created so far.

    Module loggers are created at import time with the default INFO level.
    The CLI calls this once the config is known so `--log-level DEBUG`
    reaches the signer, notarizer and friends, not just the CLI logger.
    """
    level = _resolve_log_level(log_level)
    for name in list(logging.Logger.manager.loggerDict):
        if name != "packwright" and not name.startswith("packwright."):
            continue
        logger = logging.getLogger(name)
        if not logger.handlers:
            continue
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)
        if log_file is not None and not any(
            getattr(h, "baseFilename", None) == os.path.abspath(log_file) for h in logger.handlers
        ):
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(JsonFormatter())
            logger.addHandler(file_handler)
