"""
Structured logging configuration.

Engine records carry context fields next to the message:
- subsystem
- engine_id
- tick (searches started so far)
- decision
- event (raise, clear, select)
- latency_ms

EngineLogAdapter attaches them; the formatters below render them for the
console, a plain log file and a JSON log file.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from typing import Any, Callable, Dict, Optional, Tuple

# Record attribute -> JSON key
CONTEXT_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("subsystem", "subsystem"),
    ("engine_id", "engine_id"),
    ("tick", "tick"),
    ("decision", "decision"),
    ("event_type", "event"),
    ("latency_ms", "latency_ms"),
)


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context fields present on a record, keyed by their JSON name."""
    context = {}
    for attr, key in CONTEXT_FIELDS:
        value = getattr(record, attr, None)
        if value is not None and value != "":
            context[key] = value
    return context


class EngineLogAdapter(logging.LoggerAdapter):
    """
    Adds an engine's context to every record it logs.

    The tick is read when the record is made, so records logged during a
    search carry that search's number.

    Example:
        >>> log = EngineLogAdapter(logging.getLogger("demo"), "guard-7", lambda: 0)
        >>> log.event("select", "Selected 'Patrol'", decision="Patrol")
    """

    def __init__(
        self,
        logger: logging.Logger,
        engine_id: str,
        tick: Callable[[], int],
        subsystem: str = "engine",
    ):
        super().__init__(logger, {"subsystem": subsystem, "engine_id": engine_id})
        self._tick = tick

    def process(self, msg, kwargs):
        extra = dict(self.extra)
        extra["tick"] = self._tick()
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def event(self, event_type: str, msg: str, level: int = logging.DEBUG, **fields) -> None:
        """Log an engine event (raise, clear, select)."""
        self.log(level, msg, extra={"event_type": event_type, **fields})

    def latency(self, operation: str, latency_ms: float, **fields) -> None:
        """Log how long an operation took."""
        self.debug(f"{operation} completed", extra={"latency_ms": latency_ms, **fields})


class JSONFormatter(logging.Formatter):
    """Format log records as JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "ts": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(record_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable format with colors."""

    COLORS = {
        "DEBUG": "\033[36m",    # Cyan
        "INFO": "\033[32m",     # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",    # Red
        "CRITICAL": "\033[35m", # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[:-3]
        context = record_context(record)

        parts = [f"{timestamp} {record.levelname[:4]}"]
        if "subsystem" in context:
            parts.append(f"[{context['subsystem']}]")
        if "engine_id" in context:
            parts.append(f"engine={context['engine_id']}")
        if "tick" in context:
            parts.append(f"tick={context['tick']}")

        line = f"{' '.join(parts)}: {record.getMessage()}"
        if "latency_ms" in context:
            line = f"{line} ({context['latency_ms']:.3f}ms)"

        if self.use_colors and sys.stderr.isatty():
            line = f"{self.COLORS.get(record.levelname, '')}{line}{self.RESET}"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)

        return line


def configure_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    json_file: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    Configure console and file logging for a host process.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files; console only when None
        json_file: Name of the JSON log (in log_dir if relative)
        max_bytes: Max size per log file
        backup_count: Number of backup files to keep
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    root_logger.handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(HumanFormatter())
    root_logger.addHandler(console)

    if not log_dir:
        return

    os.makedirs(log_dir, exist_ok=True)
    json_path = json_file or "behavior_engine.json.log"
    if not os.path.isabs(json_path):
        json_path = os.path.join(log_dir, json_path)

    for path, formatter in (
        (os.path.join(log_dir, "behavior_engine.log"), HumanFormatter(use_colors=False)),
        (json_path, JSONFormatter()),
    ):
        handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
