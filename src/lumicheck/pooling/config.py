# src/lumicheck/pooling/config.py
"""Pool configuration for block-level catalog fan-out."""

from __future__ import annotations

from pydantic import BaseModel, Field


class PoolConfig(BaseModel):
    """Bounded task pool configuration.

    Attributes:
        pool_size: Maximum number of units executing at once, across every
            dataset and workflow sharing the pool (must be >= 1)
    """

    model_config = {"extra": "forbid", "frozen": True}

    pool_size: int = Field(32, ge=1, description="Maximum concurrently executing units")
