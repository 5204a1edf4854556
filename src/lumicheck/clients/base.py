# src/lumicheck/clients/base.py
"""Base class for clients that account for their upstream calls."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lumicheck.core.context import CheckerContext


class CountedClientBase:
    """Base class for upstream clients.

    Holds the process-scoped CheckerContext whose call counter is bumped
    once per upstream call.

    Thread Safety:
        The call counter is thread-safe; a client may be shared by every
        pool worker and workflow thread.
    """

    def __init__(self, context: CheckerContext) -> None:
        """Initialize counted client.

        Args:
            context: Process-scoped context owning the call counter
        """
        self._context = context

    @property
    def context(self) -> CheckerContext:
        return self._context

    def _count_call(self) -> int:
        """Record one upstream call and return the running total."""
        return self._context.calls.increment()

    def close(self) -> None:
        """Release any resources held by the client.

        Default implementation is a no-op.
        """
        pass
