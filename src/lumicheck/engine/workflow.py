# src/lumicheck/engine/workflow.py
"""Resolution of one workflow into per-output comparison records."""

from __future__ import annotations

import time

import structlog
from structlog.contextvars import bound_contextvars

from lumicheck.clients.reqmgr import WorkflowServiceClient
from lumicheck.contracts.records import ComparisonRecord
from lumicheck.engine.compare import StatsComparator
from lumicheck.engine.dataset import DatasetStatsResolver

logger = structlog.get_logger(__name__)


class WorkflowResolver:
    """Compares every output dataset of a workflow against its input.

    The input dataset is resolved once; outputs are resolved one after the
    other in descriptor order and compared as soon as each is available.
    A failure anywhere aborts the whole workflow: no partial record list is
    returned.

    ``workflow`` is bound in the log context for the whole resolution,
    including the block-level units it fans out to the pool.
    """

    def __init__(
        self,
        descriptors: WorkflowServiceClient,
        datasets: DatasetStatsResolver,
        comparator: StatsComparator,
    ) -> None:
        self._descriptors = descriptors
        self._datasets = datasets
        self._comparator = comparator

    def resolve(self, workflow: str) -> list[ComparisonRecord]:
        """Produce one ComparisonRecord per output dataset.

        Raises:
            NetworkError, DecodeError, UpstreamDataError: From the descriptor
                fetch or any dataset resolution
        """
        with bound_contextvars(workflow=workflow):
            return self._resolve(workflow)

    def _resolve(self, workflow: str) -> list[ComparisonRecord]:
        descriptor = self._descriptors.fetch_descriptor(workflow)
        input_stats = self._datasets.resolve(descriptor.input_dataset)

        out: list[ComparisonRecord] = []
        for output in descriptor.output_datasets:
            start = time.perf_counter()
            output_stats = self._datasets.resolve(output)
            status = self._comparator.compare(input_stats, output_stats)
            record = ComparisonRecord(
                workflow=workflow,
                total_input_lumis=descriptor.total_input_lumis,
                input_dataset=descriptor.input_dataset,
                output_dataset=output,
                input_stats=input_stats,
                output_stats=output_stats,
                status=status,
                elapsed_seconds=time.perf_counter() - start,
            )
            logger.debug("output_compared", output_dataset=output, status=status)
            out.append(record)
        return out
