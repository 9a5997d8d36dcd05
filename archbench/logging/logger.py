# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Structured JSON logger for archbench.

Every log entry is a single JSON line that is timestamped, leveled, and
tagged with the source module. Benchmark runs are long and mostly spent
waiting on the network, so the log is what an operator reads afterwards to
see which trials failed and why.

How this works:
  - We use Python's standard `logging` module, but replace the default
    formatter with JsonFormatter, which serializes each record to one line.
  - One handler always goes to stdout, a second one optionally to a file.
  - `get_logger` is the only way to create loggers in this codebase.

The JSON structure looks like:
  {"ts": "2026-...", "level": "INFO", "module": "archbench.evaluation.runner.executor",
   "msg": "Trial complete", "task_id": "validate-email", "variant": "with", "score": 80}
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Attributes every LogRecord carries. Anything else on the record came in
# through `extra=` and belongs in the JSON entry.
_STANDARD_ATTRS: frozenset[str] = frozenset({
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
})


class JsonFormatter(logging.Formatter):
    """
    Formats log records as single-line JSON objects.

    Mandatory fields:
      ts     — ISO 8601 UTC timestamp
      level  — log level name
      module — the logger name (usually the Python module path)
      msg    — the formatted message string

    Fields passed through `extra` are merged in as-is. Tracebacks from
    `exc_info=True` land under "exc".
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
            entry["exc"] = self.formatException(record.exc_info)

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
    logger. Calling it again for the same name only updates the level, it
    never stacks a second set of handlers.

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

    # Output is fully handled here; the root logger stays quiet.
    logger.propagate = False

    return logger


def configure_package_loggers(
    prefix: str,
    log_level: str,
    log_file: Optional[Path] = None,
) -> None:
    """
    Apply a level (and optionally a log file) to every logger already
    created under `prefix`.

    Module loggers are created at import time with the default level, long
    before the config is read. This brings them in line with the config.
    """
    level = _resolve_log_level(log_level)
    formatter = JsonFormatter()

    for name in list(logging.Logger.manager.loggerDict):
        if name != prefix and not name.startswith(prefix + "."):
            continue
        logger = get_logger(name, log_level=log_level)
        if log_file is None:
            continue
        target = str(log_file.resolve())
        has_file = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in logger.handlers
        )
        if not has_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(target, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
