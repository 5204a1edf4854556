# tests/property/test_lumi_properties.py
"""Property-based tests for lumi accounting and stats comparison.

These tests verify:
- Deduplication is idempotent and keeps exactly the distinct pairs
- total >= unique for any split of records across blocks
- Comparing a stats record with itself is always OK
- The OK/WARNING verdict does not depend on argument order
"""

from __future__ import annotations

import dataclasses

from hypothesis import given
from hypothesis import strategies as st

from lumicheck.contracts import ComparisonField, DatasetStats, LumiKey
from lumicheck.engine.compare import StatsComparator
from lumicheck.engine.lumis import LumiAccumulator, unique_lumis

# =============================================================================
# Strategies
# =============================================================================

# Small ranges so generated lists contain plenty of repeats
lumi_keys = st.builds(LumiKey, run=st.integers(1, 4), lumi=st.integers(1, 6))
lumi_lists = st.lists(lumi_keys, max_size=60)
blocks = st.lists(lumi_lists, max_size=6)

counters = st.integers(min_value=0, max_value=10_000)


@st.composite
def dataset_stats(draw: st.DrawFn) -> DatasetStats:
    unique = draw(counters)
    total = unique + draw(counters)
    return DatasetStats(
        dataset=draw(st.sampled_from(["/A/B/RAW", "/A/C/AOD"])),
        num_lumi=draw(counters),
        num_files=draw(counters),
        num_events=draw(counters),
        num_blocks=draw(counters),
        num_invalid_files=draw(counters),
        total_block_lumis=total,
        unique_block_lumis=unique,
        filesummaries_lumis=draw(counters),
    )


field_lists = st.lists(st.sampled_from(list(ComparisonField)), min_size=1, unique=True)


# =============================================================================
# Deduplication Properties
# =============================================================================


class TestUniqueLumisProperties:
    @given(records=lumi_lists)
    def test_idempotent(self, records: list[LumiKey]) -> None:
        once = unique_lumis(records)
        assert unique_lumis(once) == once

    @given(records=lumi_lists)
    def test_keeps_exactly_the_distinct_pairs(self, records: list[LumiKey]) -> None:
        out = unique_lumis(records)
        assert len(out) == len({(k.run, k.lumi) for k in records})
        assert set(out) == set(records)

    @given(records=lumi_lists)
    def test_preserves_first_occurrence_order(self, records: list[LumiKey]) -> None:
        out = unique_lumis(records)
        positions = [records.index(k) for k in out]
        assert positions == sorted(positions)


class TestAccumulatorProperties:
    @given(per_block=blocks)
    def test_total_at_least_unique(self, per_block: list[list[LumiKey]]) -> None:
        accumulator = LumiAccumulator()
        for block in per_block:
            for key in block:
                accumulator.add(key)

        total, unique = accumulator.counts()

        assert total == sum(len(block) for block in per_block)
        assert total >= unique >= 0


# =============================================================================
# Comparator Properties
# =============================================================================


class TestComparatorProperties:
    @given(stats=dataset_stats(), fields=field_lists)
    def test_self_comparison_ok(self, stats: DatasetStats, fields: list[ComparisonField]) -> None:
        assert StatsComparator(fields).compare(stats, stats) == "OK"

    @given(first=dataset_stats(), second=dataset_stats(), fields=field_lists)
    def test_verdict_symmetric(self, first: DatasetStats, second: DatasetStats, fields: list[ComparisonField]) -> None:
        comparator = StatsComparator(fields)
        forward = comparator.compare(first, second)
        backward = comparator.compare(second, first)
        assert (forward == "OK") == (backward == "OK")
        assert len(comparator.mismatches(first, second)) == len(comparator.mismatches(second, first))

    @given(stats=dataset_stats(), delta=st.integers(min_value=1, max_value=100))
    def test_lumi_change_always_flagged(self, stats: DatasetStats, delta: int) -> None:
        changed = dataclasses.replace(stats, num_lumi=stats.num_lumi + delta)
        status = StatsComparator([ComparisonField.LUMIS]).compare(stats, changed)
        assert status == f"WARNING: lumis differ {stats.num_lumi} != {stats.num_lumi + delta}"
