# src/lumicheck/pooling/pending.py
"""Set of in-flight work identifiers used as a fan-in completion signal."""

from __future__ import annotations

from collections.abc import Iterable
from threading import Lock


class PendingSet:
    """Thread-safe set of identifiers still being worked on.

    Owned by the call that seeds it; it becomes empty exactly when every
    seeded identifier has been marked done.
    """

    def __init__(self, ids: Iterable[str] = ()) -> None:
        self._ids: set[str] = set(ids)
        self._lock = Lock()

    def done(self, item: str) -> bool:
        """Mark an identifier finished.

        Returns:
            True if the identifier was pending, False if it was unknown or
            already marked done
        """
        with self._lock:
            if item in self._ids:
                self._ids.remove(item)
                return True
            return False

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def __bool__(self) -> bool:
        return len(self) > 0
