# src/lumicheck/engine/checker.py
"""WorkflowChecker: the boundary exposed to command-line and web front ends.

Wires settings into clients, the shared bounded pool and the resolvers, and
owns their lifetimes.

Example:
    with WorkflowChecker(CheckerSettings()) as checker:
        records = checker.resolve_all_workflows(["wf_a", "wf_b"])
        print(records_to_json(records))
        print("upstream calls:", checker.total_calls)
"""

from __future__ import annotations

import ssl
from collections.abc import Sequence
from types import TracebackType

import structlog

from lumicheck.clients.dbs import DatasetCatalogClient
from lumicheck.clients.http import CountedHTTPClient
from lumicheck.clients.reqmgr import WorkflowServiceClient
from lumicheck.contracts.records import ComparisonRecord, DatasetStats
from lumicheck.core.config import CheckerSettings
from lumicheck.core.context import CheckerContext
from lumicheck.engine.batch import BatchOrchestrator
from lumicheck.engine.compare import StatsComparator
from lumicheck.engine.dataset import DatasetStatsResolver
from lumicheck.engine.workflow import WorkflowResolver
from lumicheck.pooling.executor import BoundedTaskPool

logger = structlog.get_logger(__name__)


class WorkflowChecker:
    """Process-scoped facade over the resolution engine."""

    def __init__(
        self,
        settings: CheckerSettings | None = None,
        *,
        verify: ssl.SSLContext | bool = True,
        context: CheckerContext | None = None,
    ) -> None:
        """Initialize checker.

        Args:
            settings: Checker settings (defaults if None)
            verify: TLS verification or client-identity SSL context, handed
                to both HTTP clients unchanged
            context: Context owning the call counter (a fresh one if None)
        """
        self._settings = settings or CheckerSettings()
        self._context = context or CheckerContext()

        self._reqmgr_http = CountedHTTPClient(
            self._context,
            service="reqmgr",
            base_url=self._settings.reqmgr.base_url,
            timeout=self._settings.reqmgr.timeout_seconds,
            verify=verify,
        )
        self._dbs_http = CountedHTTPClient(
            self._context,
            service="dbs",
            base_url=self._settings.dbs.base_url,
            timeout=self._settings.dbs.timeout_seconds,
            verify=verify,
        )
        self._pool = BoundedTaskPool(self._settings.pool)

        catalog = DatasetCatalogClient(
            self._dbs_http,
            stream_timeout=self._settings.stream_timeout_seconds,
            valid_file_only=self._settings.valid_file_only,
        )
        self._datasets = DatasetStatsResolver(catalog, self._pool)
        self._workflows = WorkflowResolver(
            WorkflowServiceClient(self._reqmgr_http),
            self._datasets,
            StatsComparator(self._settings.comparison_fields),
        )
        self._batch = BatchOrchestrator(self._workflows, context=self._context)

    @property
    def settings(self) -> CheckerSettings:
        return self._settings

    @property
    def total_calls(self) -> int:
        """Upstream calls made through this checker so far."""
        return self._context.total_calls

    def pool_stats(self) -> dict[str, int]:
        return self._pool.get_stats()

    def resolve_dataset(self, dataset: str) -> DatasetStats:
        """Resolve statistics of a single dataset."""
        return self._datasets.resolve(dataset)

    def resolve_workflow(self, workflow: str) -> list[ComparisonRecord]:
        """Compare every output dataset of one workflow against its input.

        Raises:
            CheckerError: Any failure while resolving the workflow
        """
        return self._workflows.resolve(workflow)

    def resolve_all_workflows(self, workflows: Sequence[str]) -> list[ComparisonRecord]:
        """Resolve many workflows concurrently; failed workflows yield no records."""
        return self._batch.resolve_all(workflows)

    def close(self) -> None:
        """Stop the pool and release HTTP connections."""
        self._pool.shutdown(wait=True)
        self._reqmgr_http.close()
        self._dbs_http.close()
        logger.debug("checker_closed", total_calls=self.total_calls)

    def __enter__(self) -> WorkflowChecker:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
