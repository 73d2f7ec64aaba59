"""Structured logging configuration."""
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, List, Optional

import structlog
from structlog.stdlib import LoggerFactory

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10MB
LOG_FILE_BACKUP_COUNT = 10

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(log_level: str) -> int:
    """Map a level name to its logging constant; raises ValueError for unknown names."""
    name = log_level.upper()
    if name not in _LEVELS:
        raise ValueError(f"Unknown log level {log_level!r}; expected one of {', '.join(_LEVELS)}")
    return getattr(logging, name)


def _processors(log_format: str) -> List[Any]:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())
    return processors


def _handlers(level: int, log_file: Optional[str], log_dir: str, echo: bool) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []

    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path / log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUP_COUNT,
            )
        )

    if echo or not log_file:
        # stderr keeps stdout free for CLI JSON output
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))
    return handlers


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    log_dir: str = "logs",
    echo: bool = False,
) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "console")
        log_file: Optional log file name (if None, logs to stderr)
        log_dir: Directory for log files (default: "logs")
        echo: Also log to stderr when writing to a file
    """
    level = resolve_level(log_level)

    structlog.configure(
        processors=_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Repeated calls (tests, CLI re-entry) must not stack handlers
    root_logger.handlers = []
    for handler in _handlers(level, log_file, log_dir, echo):
        root_logger.addHandler(handler)


def configure_from_settings(settings: Any, **overrides: Any) -> None:
    """Configure logging from an ``NcpdpSettings`` instance; keyword overrides win."""
    options = {
        "log_level": settings.log_level,
        "log_format": settings.log_format,
        "log_file": settings.log_file,
        "log_dir": settings.log_dir,
        "echo": settings.log_echo,
    }
    options.update({key: value for key, value in overrides.items() if value is not None})
    configure_logging(**options)


def get_logger(name: str) -> Any:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
