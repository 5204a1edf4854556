# src/lumicheck/core/context.py
"""Process-scoped context shared by every upstream client."""

from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock


class CallCounter:
    """Monotonic, thread-safe counter of upstream calls.

    Only ever incremented; read for diagnostics.
    """

    def __init__(self) -> None:
        self._value = 0
        self._lock = Lock()

    def increment(self) -> int:
        """Count one call and return the new total."""
        with self._lock:
            self._value += 1
            return self._value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


@dataclass
class CheckerContext:
    """State owned by one checker and handed to each client it builds.

    Attributes:
        calls: Total upstream calls made through this context
    """

    calls: CallCounter = field(default_factory=CallCounter)

    @property
    def total_calls(self) -> int:
        return self.calls.value
