# src/lumicheck/engine/lumis.py
"""Lumi accounting: accumulate streamed block records into comparable counts.

Two independent aggregations feed DatasetStats:

- LumiAccumulator collects every (run, lumi-section) record streamed from
  the blocks' file-level lumi listings and reports (total, unique).
- SummaryLumiAccumulator sums the lumi count of every block summary record.
  It is a plain sum with no deduplication, used only as a cross-check
  against the dataset's top-level num_lumi.

Both are fed concurrently from pool workers, one record at a time.
"""

from __future__ import annotations

from collections.abc import Iterable
from threading import Lock

from lumicheck.contracts.records import LumiKey


def unique_lumis(records: Iterable[LumiKey]) -> list[LumiKey]:
    """Drop repeated (run, lumi-section) pairs, keeping first occurrences.

    Each record is compared against every record retained so far; two
    records are the same iff run and lumi both match.
    """
    out: list[LumiKey] = []
    for record in records:
        if record not in out:
            out.append(record)
    return out


class LumiAccumulator:
    """Thread-safe collector of streamed LumiKey records."""

    def __init__(self) -> None:
        self._records: list[LumiKey] = []
        self._lock = Lock()

    def add(self, record: LumiKey) -> None:
        with self._lock:
            self._records.append(record)

    @property
    def records(self) -> list[LumiKey]:
        """Snapshot of everything accumulated so far."""
        with self._lock:
            return list(self._records)

    def counts(self) -> tuple[int, int]:
        """Return (total, unique) record counts."""
        records = self.records
        return len(records), len(unique_lumis(records))


class SummaryLumiAccumulator:
    """Thread-safe running sum of per-block summary lumi counts."""

    def __init__(self) -> None:
        self._total = 0
        self._lock = Lock()

    def add(self, num_lumi: int) -> None:
        with self._lock:
            self._total += num_lumi

    @property
    def total(self) -> int:
        with self._lock:
            return self._total
