# src/lumicheck/engine/compare.py
"""Comparison of input and output dataset statistics."""

from __future__ import annotations

from collections.abc import Iterable

from lumicheck.contracts.enums import ComparisonField
from lumicheck.contracts.records import DatasetStats

DEFAULT_FIELDS: tuple[ComparisonField, ...] = (ComparisonField.LUMIS, ComparisonField.EVENTS)
STRICT_FIELDS: tuple[ComparisonField, ...] = (
    ComparisonField.LUMIS,
    ComparisonField.FILES,
    ComparisonField.EVENTS,
    ComparisonField.BLOCKS,
)


class StatsComparator:
    """Compares two DatasetStats over an explicit, ordered field list.

    Pure and deterministic. Each mismatched field contributes
    ``"<field> differ <input> != <output>"``; the status is ``"OK"`` when
    nothing differs and ``"WARNING: "`` plus the comma-joined descriptions
    otherwise.

    Example:
        comparator = StatsComparator(STRICT_FIELDS)
        comparator.compare(input_stats, output_stats)
        # 'WARNING: lumis differ 100 != 80'
    """

    def __init__(self, fields: Iterable[ComparisonField | str] = DEFAULT_FIELDS) -> None:
        self._fields = tuple(ComparisonField(f) for f in fields)
        if not self._fields:
            raise ValueError("StatsComparator needs at least one field to compare")

    @property
    def fields(self) -> tuple[ComparisonField, ...]:
        return self._fields

    def mismatches(self, input_stats: DatasetStats, output_stats: DatasetStats) -> list[str]:
        """Describe every compared field whose values differ, in field order."""
        out: list[str] = []
        for field in self._fields:
            input_value = getattr(input_stats, field.attribute)
            output_value = getattr(output_stats, field.attribute)
            if input_value != output_value:
                out.append(f"{field.value} differ {input_value} != {output_value}")
        return out

    def compare(self, input_stats: DatasetStats, output_stats: DatasetStats) -> str:
        """Return "OK" or "WARNING: <joined mismatch descriptions>"."""
        out = self.mismatches(input_stats, output_stats)
        if not out:
            return "OK"
        return "WARNING: " + ", ".join(out)


def compare_stats(
    input_stats: DatasetStats,
    output_stats: DatasetStats,
    fields: Iterable[ComparisonField | str] = DEFAULT_FIELDS,
) -> str:
    """Compare two stats records with a one-off comparator."""
    return StatsComparator(fields).compare(input_stats, output_stats)
