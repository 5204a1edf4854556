# src/lumicheck/core/__init__.py
"""Core infrastructure: configuration, logging, call accounting."""

from lumicheck.core.config import CheckerSettings, LoggingSettings, ServiceSettings
from lumicheck.core.context import CallCounter, CheckerContext
from lumicheck.core.logging import configure_logging, get_logger

__all__ = [
    "CallCounter",
    "CheckerContext",
    "CheckerSettings",
    "LoggingSettings",
    "ServiceSettings",
    "configure_logging",
    "get_logger",
]
