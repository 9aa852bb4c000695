"""
Centralized Logging

Architectural Intent:
- One logger tree ("deploy_notifier") for the listener, broadcaster and
  Slack adapter; handlers are only configured here
- Log calls attach deployment context through ``extra=`` (the stage event,
  project name, broadcast action and Slack message handle) and both output
  formats carry it, so a single project's history can be grepped or queried
- Level comes from --verbose/--debug or the ``log_level`` config entry

Design Decisions:
- The OpenTelemetry SDK logs export retries at INFO; it is held at WARNING
  unless the notifier itself runs at DEBUG
"""

import json
import logging
import sys
from datetime import datetime, UTC
from typing import Any, Union

LOGGER_NAME = "deploy_notifier"

# Record attributes a log call may set through extra=
CONTEXT_FIELDS = ("event", "project", "action", "handle")

_NOISY_LOGGERS = ("opentelemetry",)


def log_context(record: logging.LogRecord) -> dict[str, Any]:
    """Deployment context attached to a record, in a stable order."""
    return {
        field: getattr(record, field)
        for field in CONTEXT_FIELDS
        if getattr(record, field, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per line, with deployment context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **log_context(record),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


class ConsoleFormatter(logging.Formatter):
    """Human-readable lines ending with ``key=value`` deployment context."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s [%(levelname)s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = log_context(record)
        if not context:
            return line
        # Traceback, if any, stays on the lines after the message
        head, sep, tail = line.partition("\n")
        pairs = " ".join(f"{key}={value!r}" for key, value in context.items())
        return f"{head} [{pairs}]{sep}{tail}"


def resolve_level(level: Union[int, str]) -> int:
    """Map a level name such as "debug" to its logging constant."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: Union[int, str] = logging.INFO,
    json_format: bool = False,
) -> logging.Logger:
    """Configure the notifier's logger tree and return its root logger.

    Args:
        level: Logging level, as int or name ("debug", "INFO", ...)
        json_format: If True, emit JSON lines for log shippers. Otherwise
            human-readable lines for the CI console.
    """
    level = resolve_level(level)
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else ConsoleFormatter())
    root.addHandler(handler)

    sdk_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(sdk_level)

    return root
