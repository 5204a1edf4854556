# src/lumicheck/engine/batch.py
"""Concurrent resolution of many workflows with per-workflow failure isolation."""

from __future__ import annotations

import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from queue import Queue
from typing import TYPE_CHECKING, Protocol

import structlog

from lumicheck.contracts.errors import CheckerError
from lumicheck.contracts.records import ComparisonRecord, dedupe_preserving_order
from lumicheck.pooling.pending import PendingSet

if TYPE_CHECKING:
    from lumicheck.core.context import CheckerContext

logger = structlog.get_logger(__name__)


class WorkflowResolverProtocol(Protocol):
    def resolve(self, workflow: str) -> list[ComparisonRecord]: ...


@dataclass(frozen=True, slots=True)
class _Completion:
    workflow: str
    records: list[ComparisonRecord]
    failed: bool


class BatchOrchestrator:
    """Fans a list of workflows out to one thread each and fans results in.

    Workflow-level parallelism is unbounded (one thread per distinct id);
    the catalog calls underneath are still throttled by the shared bounded
    pool. Each unit reports exactly once on a completion queue, success or
    failure. The orchestrator marks the unit's id done in a PendingSet when
    its message arrives and stops once the set is empty.

    A failed workflow is logged and contributes no records; resolve_all()
    itself never raises.
    """

    def __init__(self, resolver: WorkflowResolverProtocol, *, context: CheckerContext | None = None) -> None:
        self._resolver = resolver
        self._context = context

    def _run(self, workflow: str, completions: Queue[_Completion]) -> None:
        records: list[ComparisonRecord] = []
        failed = True
        try:
            records = self._resolver.resolve(workflow)
            failed = False
        except CheckerError as e:
            logger.error("workflow_failed", workflow=workflow, error_type=type(e).__name__, error=str(e))
        except Exception as e:
            # Bugs must not take down sibling workflows; keep the traceback
            logger.error(
                "workflow_failed_unexpectedly",
                workflow=workflow,
                error_type=type(e).__name__,
                error=str(e),
                exc_info=True,
            )
        finally:
            completions.put(_Completion(workflow=workflow, records=records, failed=failed))

    def resolve_all(self, workflows: Sequence[str]) -> list[ComparisonRecord]:
        """Resolve every workflow concurrently.

        Duplicate ids are resolved once. Records are returned grouped by
        workflow in request order, each group in descriptor order.
        """
        ids = dedupe_preserving_order(workflows)
        if not ids:
            return []

        start = time.perf_counter()
        pending = PendingSet(ids)
        completions: Queue[_Completion] = Queue()
        results: dict[str, list[ComparisonRecord]] = {}
        failures = 0

        with ThreadPoolExecutor(max_workers=len(ids), thread_name_prefix="lumicheck-workflow") as executor:
            for workflow in ids:
                executor.submit(self._run, workflow, completions)

            while pending:
                completion = completions.get()
                pending.done(completion.workflow)
                results[completion.workflow] = completion.records
                if completion.failed:
                    failures += 1

        out = [record for workflow in ids for record in results[workflow]]
        logger.info(
            "batch_complete",
            workflows=len(ids),
            failed=failures,
            records=len(out),
            warnings=sum(not record.ok for record in out),
            total_calls=self._context.total_calls if self._context is not None else None,
            elapsed_seconds=round(time.perf_counter() - start, 3),
        )
        return out
