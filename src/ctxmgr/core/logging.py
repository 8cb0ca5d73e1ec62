"""
ctxmgr logging - structured logging via structlog.

Library code only obtains loggers here and emits debug/warning events
(phase failures, lock acquire/release). Applications that want to see them
call ``configure_logging`` once at startup; importing ctxmgr never
configures logging by itself.

Architecture:
    ::

        configure_logging(level="DEBUG", json_format=True, service="worker")
            ↓
        structlog processor chain:
          1. TimeStamper (iso)
          2. add_log_level / add_logger_name
          3. StackInfoRenderer / set_exc_info
          4. service metadata (service.name)
          5. JSONRenderer (or ConsoleRenderer for a tty)

        logger = get_logger(__name__)
        logger.debug("context_phase_failed", phase="body", swallowed=True)

Examples:
    >>> from ctxmgr.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=True, service="worker")
    >>> logger = get_logger(__name__)
    >>> logger.debug("lock_acquired", guard="script", timeout_ms=500)

Tags:
    logging, structlog, observability, ctxmgr

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger


def _service_metadata(service: str) -> Processor:
    """Processor stamping ``service.name`` on every event that lacks one."""

    def add(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", service)
        return event_dict

    return add


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "ctxmgr",
    add_timestamp: bool = True,
) -> None:
    """Configure structlog for an application embedding ctxmgr.

    Args:
        level: Minimum level (DEBUG shows phase failures and lock events)
        json_format: True for JSON, False for console, None for JSON unless stdout is a tty
        service: Value of ``service.name`` on every event
        add_timestamp: Prepend an ISO timestamp
    """
    numeric_level = getattr(logging, level.upper())
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _service_metadata(service),
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
    processors.append(
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def configure_from_settings(settings: Any = None) -> None:
    """Configure logging from ``ContextSettings`` (env-driven)."""
    if settings is None:
        from ctxmgr.core.settings import get_settings

        settings = get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


def get_logger(name: str | None = None) -> Any:
    """Structured logger for a ctxmgr module (usually ``__name__``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach fields (e.g. ``run``, ``owner``) to every later event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Scoped fields for every event emitted inside the block.

    Nested scopes restore the outer values on exit.

    Example:
        with LogContext(guard="script", run="nightly"):
            ctx.execute()
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._scope: Any = None

    def __enter__(self) -> LogContext:
        self._scope = structlog.contextvars.bound_contextvars(**self._context)
        self._scope.__enter__()
        return self

    def __exit__(self, *args: Any) -> None:
        self._scope.__exit__(*args)
        self._scope = None

    async def __aenter__(self) -> LogContext:
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.__exit__(*args)


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
