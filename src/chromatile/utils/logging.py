"""Structured logging configuration using structlog.

Provides correlation IDs for tracing a run through its channels and
pyramid levels, and configurable output formats (JSON for production,
colored console for dev).
"""

import logging
import sys
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Any, cast

import structlog
from structlog.types import Processor

from chromatile.config import settings

# Context variables for correlation IDs
_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)
_channel: ContextVar[str | None] = ContextVar("channel", default=None)
_zoom_level: ContextVar[int | None] = ContextVar("zoom_level", default=None)

_CORRELATION_VARS: tuple[tuple[str, ContextVar[Any]], ...] = (
    ("run_id", _run_id),
    ("channel", _channel),
    ("zoom_level", _zoom_level),
)


def set_correlation_context(run_id: str) -> None:
    """Tag every later event in this context with the invocation's run ID."""
    _run_id.set(run_id)


@contextmanager
def correlation_scope(
    channel: str | None = None,
    zoom_level: int | None = None,
) -> Iterator[None]:
    """Tag events emitted inside the block with a channel and/or zoom level.

    The previous values are restored on exit, so events logged after a
    channel loop or a pyramid level no longer carry them.

    Args:
        channel: Channel being processed ("red", "green", "blue")
        zoom_level: Pyramid level being written
    """
    tokens: list[tuple[ContextVar[Any], Token[Any]]] = []
    if channel is not None:
        tokens.append((_channel, _channel.set(channel)))
    if zoom_level is not None:
        tokens.append((_zoom_level, _zoom_level.set(zoom_level)))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


def clear_correlation_context() -> None:
    """Clear all correlation context variables."""
    for _, var in _CORRELATION_VARS:
        var.set(None)


def _add_correlation_ids(
    logger: logging.Logger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Structlog processor to add correlation IDs to log events."""
    _ = logger, method_name  # Required by structlog processor signature
    for key, var in _CORRELATION_VARS:
        value = var.get()
        if value is not None:
            event_dict[key] = value

    return event_dict


def configure_logging(
    level: str | None = None,
    log_format: str | None = None,
) -> None:
    """Configure structlog with the specified settings.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
               Defaults to settings.LOG_LEVEL.
        log_format: Output format ("console" or "json").
                    Defaults to settings.LOG_FORMAT.
    """
    level = level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_correlation_ids,
    ]

    if log_format == "json":
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging to match; basicConfig is a no-op once the
    # root logger has handlers, so the level is applied explicitly as well.
    stdlib_level = getattr(logging, level.upper())
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=stdlib_level,
    )
    logging.getLogger().setLevel(stdlib_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A bound structlog logger instance.
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
