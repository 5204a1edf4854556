# src/lumicheck/pooling/__init__.py
"""Concurrency primitives for bounded catalog fan-out and batch fan-in."""

from lumicheck.pooling.config import PoolConfig
from lumicheck.pooling.executor import BoundedTaskPool, TaskGroup
from lumicheck.pooling.pending import PendingSet

__all__ = [
    "BoundedTaskPool",
    "PendingSet",
    "PoolConfig",
    "TaskGroup",
]
