# src/lumicheck/core/config.py
"""
Configuration schema for the workflow checker.

Uses Pydantic for validation. Settings are frozen (immutable) after
construction; collaborators build them from whatever source they own,
e.g. ``CheckerSettings.model_validate(mapping)``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from lumicheck.contracts.enums import ComparisonField
from lumicheck.pooling.config import PoolConfig

DEFAULT_REQMGR_URL = "https://cmsweb.cern.ch/reqmgr2/data/request"
DEFAULT_DBS_URL = "https://cmsweb.cern.ch/dbs/prod/global/DBSReader"


class ServiceSettings(BaseModel):
    """Location and call timeout of one upstream service."""

    model_config = {"extra": "forbid", "frozen": True}

    base_url: str = Field(description="Service base URL")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Timeout for bounded (non-streaming) calls")

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"base_url must be an http(s) URL, got {v!r}")
        return v.rstrip("/")


LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class LoggingSettings(BaseModel):
    """Log output configuration.

    ``http_level`` applies to the httpx/httpcore loggers, which log every
    connection and request. It never ends up less strict than ``level``.
    """

    model_config = {"extra": "forbid", "frozen": True}

    json_output: bool = Field(default=False, description="Render JSON lines instead of console output")
    level: LogLevel = Field(default="INFO", description="Root log level")
    http_level: LogLevel = Field(default="WARNING", description="Level for the httpx and httpcore loggers")


class CheckerSettings(BaseModel):
    """Top-level settings for WorkflowChecker.

    Attributes:
        reqmgr: Workflow descriptor service
        dbs: Dataset catalog service
        stream_timeout_seconds: Timeout for streamed (ndjson) catalog calls
        valid_file_only: Restrict dataset summaries to valid files
        pool: Bounded pool for block-level fan-out
        comparison_fields: Counters compared between input and output stats
        logging: Log output, applied by configure_logging
    """

    model_config = {"extra": "forbid", "frozen": True}

    reqmgr: ServiceSettings = Field(default_factory=lambda: ServiceSettings(base_url=DEFAULT_REQMGR_URL))
    dbs: ServiceSettings = Field(default_factory=lambda: ServiceSettings(base_url=DEFAULT_DBS_URL))
    stream_timeout_seconds: float = Field(default=180.0, gt=0)
    valid_file_only: bool = True
    pool: PoolConfig = Field(default_factory=PoolConfig)
    comparison_fields: tuple[ComparisonField, ...] = (ComparisonField.LUMIS, ComparisonField.EVENTS)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator("comparison_fields")
    @classmethod
    def validate_comparison_fields(cls, v: tuple[ComparisonField, ...]) -> tuple[ComparisonField, ...]:
        if not v:
            raise ValueError("comparison_fields must name at least one field")
        if len(set(v)) != len(v):
            raise ValueError(f"comparison_fields contains duplicates: {[f.value for f in v]}")
        return v
