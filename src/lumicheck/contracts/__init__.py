# src/lumicheck/contracts/__init__.py
"""Shared records and errors.

Every other lumicheck package imports its data types from here so the
resolvers, clients and callers agree on one vocabulary.
"""

from lumicheck.contracts.enums import ComparisonField
from lumicheck.contracts.errors import (
    CheckerError,
    DecodeError,
    NetworkError,
    UpstreamDataError,
)
from lumicheck.contracts.records import (
    BlockRef,
    ComparisonRecord,
    DatasetStats,
    LumiKey,
    WorkflowDescriptor,
    dedupe_preserving_order,
    records_to_json,
)

__all__ = [
    "BlockRef",
    "CheckerError",
    "ComparisonField",
    "ComparisonRecord",
    "DatasetStats",
    "DecodeError",
    "LumiKey",
    "NetworkError",
    "UpstreamDataError",
    "WorkflowDescriptor",
    "dedupe_preserving_order",
    "records_to_json",
]
