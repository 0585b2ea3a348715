"""Structured logging configuration using structlog.

This module configures structlog on top of stdlib logging with:
- Pretty-printed (or JSON) console output
- Optional rotating JSON-lines file output
- UTC timestamps
- Component tracking derived from the logger name
"""

import logging
import logging.handlers
import pathlib
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 5


def _get_log_level() -> str:
    """Get log level before settings are loaded.

    Returns:
        Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    # Bootstrap from environment to avoid circular imports during startup.
    from unifi_metrics.config.bootstrap import get_bootstrap_log_level  # noqa: PLC0415

    return get_bootstrap_log_level()


def _add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add UTC timestamp to a foreign (stdlib) log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _add_component(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add component name to a foreign (stdlib) log event.

    Args:
        logger: The logger instance.
        method_name: The log method name (info, error, etc.).
        event_dict: The event dictionary.

    Returns:
        Event dictionary with component added.
    """
    # ProcessorFormatter passes no logger for foreign records; use the recorded name.
    if logger is None or not hasattr(logger, "name"):
        return _add_component_from_event_dict(logger, method_name, event_dict)

    event_dict["component"] = logger.name.split(".")[-1]
    return event_dict


def _add_component_from_event_dict(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add component name from the logger name recorded by add_logger_name.

    Example: "unifi_metrics.poller.cycles" -> "cycles".
    """
    logger_name = event_dict.get("logger", "")
    event_dict["component"] = logger_name.split(".")[-1] if logger_name else "unknown"
    return event_dict


def _foreign_pre_chain() -> list[Any]:
    return [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_timestamp,
        _add_component,
    ]


def _configure_file_handler(log_file: pathlib.Path) -> logging.handlers.RotatingFileHandler:
    """Configure rotating file handler for JSON-lines logs.

    Args:
        log_file: Path of the log file. Parent directories are created.

    Returns:
        Configured RotatingFileHandler.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=str(log_file),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.processors.JSONRenderer(),
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def _configure_console_handler(log_format: str) -> logging.StreamHandler[Any]:
    """Configure console handler.

    Args:
        log_format: "console" for colored key/value output, "json" for JSON lines.

    Returns:
        Configured StreamHandler writing to stdout.
    """
    handler = logging.StreamHandler(sys.stdout)

    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_foreign_pre_chain(),
        )
    )
    return handler


def configure_logging(
    log_level: str | None = None,
    log_format: str = "console",
    log_file: pathlib.Path | None = None,
) -> None:
    """Configure structlog for structured logging.

    Safe to call more than once: the root logger handlers are replaced on
    every call, so the CLI can reconfigure after settings are loaded.

    Args:
        log_level: Level name. Defaults to the bootstrap level from the environment.
        log_format: "console" or "json".
        log_file: Optional path for an additional JSON-lines log file.
    """
    level_name = log_level or _get_log_level()
    configured_level = getattr(logging, level_name.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(configured_level)
    root_logger.handlers.clear()

    # Silence noisy third-party loggers.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    console_handler = _configure_console_handler(log_format)
    console_handler.setLevel(configured_level)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        file_handler = _configure_file_handler(log_file)
        file_handler.setLevel(configured_level)
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            _add_component_from_event_dict,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:  # Returns structlog.stdlib.BoundLogger
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger instance.

    Example:
        >>> from unifi_metrics.telemetry import get_logger
        >>> log = get_logger(__name__)
        >>> log.info("poll_cycle_completed", source="network", success=True)
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(name)
