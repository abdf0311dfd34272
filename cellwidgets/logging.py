from __future__ import annotations

import os
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from loguru import Logger

from loguru import logger

DEFAULT_LOG_DIR = Path(
    os.environ.get(
        "CELLWIDGETS_LOG_DIR",
        Path.home() / ".local" / "state" / "cellwidgets" / "logs",
    )
)

# Note: TRACE level already exists in loguru at level 5 (below DEBUG which is 10)


def _should_log_websocket(record) -> bool:
    """Filter WebSocket connection/disconnection logs to reduce noise."""
    message = record["message"].lower()
    tags = record["extra"].get("tags", [])

    # Always log errors
    if record["level"].no >= logger.level("WARNING").no:
        return True

    if "ws" in tags or "websocket" in tags:
        if "connected" in message or "disconnected" in message:
            return record["level"].no >= logger.level("DEBUG").no

    return True


def _should_log_input(record) -> bool:
    """Filter per-event key/mouse logs - only show in TRACE mode."""
    message = record["message"].lower()
    tags = record["extra"].get("tags", [])

    if "input" in tags or "button" in tags:
        if "key" in message or "mouse" in message or "press" in message:
            return record["level"].no <= logger.level("TRACE").no

    return True


def _combined_filter(record) -> bool:
    """Combined filter for all log suppression rules."""
    return _should_log_websocket(record) and _should_log_input(record)


def setup_logging(
    *,
    debug: bool = False,
    trace: bool = False,
    log_dir: Path | None = None,
    console: bool = True,
) -> Logger:
    """
    Setup multi-tier logging with separate sinks for different log levels.

    Logging Tiers:
    - CRITICAL/ERROR: Transport failures, contract violations
    - SUCCESS/INFO: Session start/stop, backend lifecycle
    - DEBUG: Flush sizes, routing decisions
    - TRACE: Ultra-verbose (every key press and mouse event)

    Log Files:
    - operations.log: INFO+ events (7 day retention)
    - debug.log: DEBUG+ events when debug is enabled (3 day retention)
    - trace.log: TRACE+ events when trace is enabled (1 day retention)
    - structured.jsonl: Structured JSON logs for analysis (7 day retention)

    Args:
        debug: Enable DEBUG level logging
        trace: Enable TRACE level logging (very verbose)
        log_dir: Custom log directory (defaults to ~/.local/state/cellwidgets/logs)
        console: Add the stderr sink. A terminal backend owns the tty, so the
            demo turns this off while a terminal session is running.
    """
    logger.remove()
    logger.configure(extra={"tags": [], "source": "APP"})

    if trace:
        level = "TRACE"
    elif debug:
        level = "DEBUG"
    else:
        level = "INFO"

    # SINK 1: Console (stderr) - User-facing, filtered
    if console:
        logger.add(
            sys.stderr,
            level=level,
            enqueue=True,
            backtrace=False,
            diagnose=False,
            filter=_combined_filter,
            colorize=True,
            format=(
                "<green>{time:HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[source]: <10}</cyan> | "
                "{message}"
            ),
        )

    log_dir = log_dir or DEFAULT_LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    # SINK 2: Operations Log - Important events only (INFO+)
    logger.add(
        log_dir / "operations.log",
        level="INFO",
        rotation="5 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        filter=lambda record: record["level"].no >= logger.level("INFO").no,
        format=(
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
            "{level: <8} | "
            "{extra[source]: <10} | "
            "{message}"
        ),
    )

    # SINK 3: Debug Log - Detailed diagnostics (DEBUG+ when debug=True)
    if debug or trace:
        logger.add(
            log_dir / "debug.log",
            level="DEBUG",
            rotation="10 MB",
            retention="3 days",
            compression="zip",
            enqueue=True,
            backtrace=True,
            diagnose=True,
            filter=_combined_filter,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{extra[source]: <10} | "
                "{extra[tags]} | "
                "{message}"
            ),
        )

    # SINK 4: Trace Log - Ultra-verbose (TRACE only, when trace=True)
    if trace:
        logger.add(
            log_dir / "trace.log",
            level="TRACE",
            rotation="50 MB",
            retention="1 day",
            compression="zip",
            enqueue=True,
            backtrace=False,
            diagnose=False,
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{extra[source]: <10} | "
                "{message}"
            ),
        )

    # SINK 5: Structured JSON Log - For analysis tools (INFO+)
    logger.add(
        log_dir / "structured.jsonl",
        level="INFO",
        rotation="10 MB",
        retention="7 days",
        compression="zip",
        enqueue=True,
        serialize=True,
        format="{message}",
    )

    return logger


def get_logger(
    *,
    tags: Iterable[str] | None = None,
    source: str | None = None,
) -> Logger:
    """
    Get a logger with bound context.

    Args:
        tags: Tags for filtering (e.g., ["backend", "terminal"])
        source: Source component (e.g., "backend", "menu", "web")

    Returns:
        Logger with bound context
    """
    extras: dict[str, object] = {}
    if tags is not None:
        extras["tags"] = list(tags)
    if source is not None:
        extras["source"] = source
    return logger.bind(**extras)


class LoggerFactory:
    """
    Factory for creating domain-specific loggers with automatic context.

    Each factory method returns a logger pre-configured with appropriate
    source and tags for the domain.
    """

    @staticmethod
    def for_backend(name: str = "-") -> Logger:
        """Logger for backend lifecycle and screen synchronisation."""
        return logger.bind(source="backend", tags=["backend"], backend=name)

    @staticmethod
    def for_input() -> Logger:
        """Logger for decoded key and mouse events."""
        return logger.bind(source="input", tags=["input"])

    @staticmethod
    def for_menu() -> Logger:
        """Logger for menu routing and dispatch."""
        return logger.bind(source="menu", tags=["ui", "menu"])

    @staticmethod
    def for_web(connection_id: str | None = None) -> Logger:
        """Logger for the websocket session server."""
        if connection_id is None:
            connection_id = "-"
        return logger.bind(
            source="web", tags=["web", "ws"], connection_id=connection_id
        )

    @staticmethod
    def for_gpio() -> Logger:
        """Logger for GPIO keypad operations."""
        return logger.bind(source="gpio", tags=["gpio", "hardware", "button"])

    @staticmethod
    def for_system() -> Logger:
        """Logger for application startup, shutdown and config."""
        return logger.bind(source="system", tags=["system"])


class ThrottledLogger:
    """
    Logger wrapper that throttles high-frequency log events.

    Useful for flush statistics or other high-volume logs that should
    only be emitted at intervals.
    """

    def __init__(self, log: Logger, interval_seconds: float = 5.0):
        self.log = log
        self.interval = interval_seconds
        self.last_log_time: dict[str, float] = {}

    def debug(self, key: str, message: str, **kwargs) -> None:
        """Log at DEBUG level, throttled by key."""
        self._throttled_log("DEBUG", key, message, **kwargs)

    def info(self, key: str, message: str, **kwargs) -> None:
        """Log at INFO level, throttled by key."""
        self._throttled_log("INFO", key, message, **kwargs)

    def _throttled_log(self, level: str, key: str, message: str, **kwargs) -> None:
        now = time.monotonic()
        last_time = self.last_log_time.get(key)

        if last_time is None or now - last_time >= self.interval:
            log_method = getattr(self.log, level.lower())
            log_method(message, **kwargs)
            self.last_log_time[key] = now
