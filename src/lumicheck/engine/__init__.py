# src/lumicheck/engine/__init__.py
"""Resolution engine: dataset stats, workflow comparison, batch fan-out."""

from lumicheck.engine.batch import BatchOrchestrator
from lumicheck.engine.checker import WorkflowChecker
from lumicheck.engine.compare import DEFAULT_FIELDS, STRICT_FIELDS, StatsComparator, compare_stats
from lumicheck.engine.dataset import DatasetStatsResolver
from lumicheck.engine.lumis import LumiAccumulator, SummaryLumiAccumulator, unique_lumis
from lumicheck.engine.workflow import WorkflowResolver

__all__ = [
    "DEFAULT_FIELDS",
    "STRICT_FIELDS",
    "BatchOrchestrator",
    "DatasetStatsResolver",
    "LumiAccumulator",
    "StatsComparator",
    "SummaryLumiAccumulator",
    "WorkflowChecker",
    "WorkflowResolver",
    "compare_stats",
    "unique_lumis",
]
