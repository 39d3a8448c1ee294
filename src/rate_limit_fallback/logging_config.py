"""Structured logging configuration using structlog.

Provides JSON output for production and pretty console output for
development, plus the EventLogger: the fallback core's best-effort event log,
appended to a file in the host's data directory.
"""

import contextlib
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional, Union

import structlog
from structlog.types import EventDict, WrappedLogger

LOG_FILENAME = "rate-limit-fallback.log"
EVENT_LOGGER_NAME = "rate_limit_fallback.events"


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application context to all log events."""
    event_dict["app"] = "rate-limit-fallback"
    return event_dict


def configure_logging(log_level: str = "INFO", environment: str = "development") -> None:
    """Configure structlog for structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Environment name (development, production)

    In production mode:
        - JSON output for machine parsing
        - ISO timestamps
        - Exception info included

    In development mode:
        - Pretty colored console output
        - Human-readable formatting
    """
    log_level_int = getattr(logging, log_level.upper(), logging.INFO)

    # Shared processors for all loggers
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    is_production = environment.lower() == "production"

    if is_production:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        shared_processors.append(structlog.processors.ExceptionPrettyPrinter())
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Configure standard library logging to work with structlog
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.setLevel(log_level_int)

    root_logger = logging.getLogger()
    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level_int)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )


# === Event log ===


def get_default_log_path() -> Path:
    """$XDG_DATA_HOME/opencode/logs/rate-limit-fallback.log (~/.local/share when unset)."""
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    return Path(data_home) / "opencode" / "logs" / LOG_FILENAME


def render_event_line(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> str:
    """Render '<timestamp> [LEVEL] message {extra}' lines for the event log."""
    timestamp = event_dict.pop("timestamp", "")
    level = event_dict.pop("level", method_name).upper()
    if level == "WARNING":
        level = "WARN"
    message = event_dict.pop("event", "")
    for key in ("_record", "_from_structlog", "logger"):
        event_dict.pop(key, None)
    extra = f" {json.dumps(event_dict, default=str)}" if event_dict else ""
    return f"{timestamp} [{level}] {message}{extra}"


class EventLogger:
    """
    Best-effort log for fallback events.

    Every call is fire-and-forget: when logging is disabled the methods return
    immediately, and failures to create or write the log file never reach the
    caller. Records are written to the event log file and also propagate to the
    application's root handlers.

    The message argument is positional-only, so extra fields may use any key,
    including "message".
    """

    def __init__(self, enabled: bool, log_path: Optional[Union[str, Path]] = None):
        self.enabled = enabled
        self.log_path = Path(log_path) if log_path else get_default_log_path()
        self._logger: Optional[structlog.stdlib.BoundLogger] = None
        if enabled:
            self._logger = self._build_logger()

    def _build_logger(self) -> structlog.stdlib.BoundLogger:
        stdlib_logger = logging.getLogger(f"{EVENT_LOGGER_NAME}.{abs(hash(str(self.log_path)))}")
        stdlib_logger.setLevel(logging.INFO)

        if not any(
            isinstance(h, logging.FileHandler) and h.baseFilename == str(self.log_path.absolute())
            for h in stdlib_logger.handlers
        ):
            with contextlib.suppress(OSError):
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.log_path, encoding="utf-8", delay=True)
            handler.setFormatter(structlog.stdlib.ProcessorFormatter(processor=render_event_line))
            stdlib_logger.addHandler(handler)

        return structlog.wrap_logger(
            stdlib_logger,
            processors=[
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
        )

    def _emit(self, method: str, message: str, extra: dict[str, Any]) -> None:
        if self._logger is None:
            return
        # Logging must never affect control flow
        with contextlib.suppress(Exception):
            getattr(self._logger, method)(message, **extra)

    def info(self, message: str, /, **extra: Any) -> None:
        self._emit("info", message, extra)

    def warn(self, message: str, /, **extra: Any) -> None:
        self._emit("warning", message, extra)

    def error(self, message: str, /, **extra: Any) -> None:
        self._emit("error", message, extra)


def create_event_logger(enabled: bool, log_path: Optional[Union[str, Path]] = None) -> EventLogger:
    """Create the fallback event logger (no-op when disabled)."""
    return EventLogger(enabled, log_path)
