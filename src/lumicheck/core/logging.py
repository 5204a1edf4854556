# src/lumicheck/core/logging.py
"""Structured logging for lumicheck.

structlog events and stdlib records (httpx, httpcore) share one
ProcessorFormatter, so they end up in the same stream and format.

Resolution scope travels in structlog contextvars. WorkflowResolver binds
``workflow``, DatasetStatsResolver binds ``dataset``, and BoundedTaskPool
runs every unit inside a copy of the submitting thread's context, so an
event logged from a block stream carries the workflow and dataset it was
fetched for. Each event is also tagged with the role of the emitting thread.
"""

import logging
import sys
import threading
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from lumicheck.core.config import LoggingSettings

# Loggers governed by LoggingSettings.http_level
HTTP_LOGGERS: tuple[str, ...] = (
    "httpx",
    "httpcore",
)

# Thread name prefixes set by BoundedTaskPool and BatchOrchestrator
_THREAD_ROLES: tuple[tuple[str, str], ...] = (
    ("lumicheck-pool", "pool"),
    ("lumicheck-workflow", "workflow"),
)


def add_thread_role(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Tag the event with ``thread_role``: pool, workflow or main."""
    name = threading.current_thread().name
    role = next((r for prefix, r in _THREAD_ROLES if name.startswith(prefix)), "main")
    event_dict.setdefault("thread_role", role)
    return event_dict


def _renderers(json_output: bool) -> list[Any]:
    if json_output:
        return [
            ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()),
    ]


def configure_logging(settings: LoggingSettings | None = None) -> None:
    """Route structlog and stdlib logging to stdout.

    Replaces any handlers already on the root logger, so calling it again
    reconfigures rather than duplicates output.

    Args:
        settings: Output format and levels (defaults if None)
    """
    settings = settings or LoggingSettings()
    root_level: int = getattr(logging, settings.level)
    http_level = max(root_level, getattr(logging, settings.http_level))

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_thread_role,
        structlog.processors.StackInfoRenderer(),
    ]

    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure logging; cached loggers would go stale
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=_renderers(settings.json_output), foreign_pre_chain=shared))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(root_level)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a bound logger for a module."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
