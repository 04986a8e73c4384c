"""
Structured logging for cmdrunner using structlog.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, Optional, TextIO

import structlog

if TYPE_CHECKING:
    from cmdrunner.models import RunnerSettings


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Route cmdrunner's structlog events through one stdlib handler.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_output: If True, render one JSON object per event
        stream: Destination, stderr by default
    """
    stream = stream or sys.stderr
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=stream.isatty(),
            exception_formatter=structlog.dev.plain_traceback,
        )

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper()),
        handlers=[handler],
        force=True,
    )


def configure_from_settings(settings: "RunnerSettings", stream: Optional[TextIO] = None) -> None:
    """Apply ``log_level`` and ``json_logs`` from a ``RunnerSettings``."""
    configure_logging(level=settings.log_level, json_output=settings.json_logs, stream=stream)


def get_logger(name: str = "cmdrunner") -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


@contextmanager
def log_operation(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    level: str = "debug",
    **kwargs,
) -> Iterator[structlog.stdlib.BoundLogger]:
    """
    Context manager for logging operation start/end.

    Usage:
        with log_operation(log, "command.execute", command="sh -c ls"):
            # do stuff
    """
    log = logger.bind(operation=operation, **kwargs)
    emit = getattr(log, level)
    start = time.monotonic()
    emit(f"{operation}.started")

    try:
        yield log
        duration_ms = (time.monotonic() - start) * 1000
        emit(f"{operation}.completed", duration_ms=round(duration_ms, 2))
    except Exception as e:
        duration_ms = (time.monotonic() - start) * 1000
        log.error(
            f"{operation}.failed",
            error=str(e),
            error_type=type(e).__name__,
            duration_ms=round(duration_ms, 2),
        )
        raise
