# tests/unit/engine/test_workflow.py
"""Tests for WorkflowResolver."""

from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest

from lumicheck.clients.dbs import DatasetCatalogClient
from lumicheck.clients.reqmgr import WorkflowServiceClient
from lumicheck.contracts import NetworkError, UpstreamDataError
from lumicheck.engine.compare import STRICT_FIELDS, StatsComparator
from lumicheck.engine.dataset import DatasetStatsResolver
from lumicheck.engine.workflow import WorkflowResolver
from lumicheck.pooling import BoundedTaskPool, PoolConfig

WORKFLOW = "wf_reco_2023"
INPUT = "/Prim/Proc-v1/RAW"
AOD = "/Prim/Proc-v2/AOD"
MINIAOD = "/Prim/Proc-v2/MINIAOD"


@pytest.fixture
def resolver(dbs_http, reqmgr_http, upstream) -> Iterator[WorkflowResolver]:
    pool = BoundedTaskPool(PoolConfig(pool_size=4))
    datasets = DatasetStatsResolver(DatasetCatalogClient(dbs_http), pool)
    yield WorkflowResolver(WorkflowServiceClient(reqmgr_http), datasets, StatsComparator(STRICT_FIELDS))
    pool.shutdown(wait=True)


@pytest.fixture
def populated(catalog, reqmgr) -> None:
    reqmgr.add_workflow(WORKFLOW, input_dataset=INPUT, outputs=[AOD, MINIAOD], total_input_lumis=3)
    catalog.add_dataset(INPUT, blocks={"r1": [(1, 1), (1, 2)], "r2": [(1, 3)]}, num_lumi=3)
    catalog.add_dataset(AOD, blocks={"a1": [(1, 1), (1, 2)], "a2": [(1, 3)]}, num_lumi=3)
    catalog.add_dataset(MINIAOD, blocks={"m1": [(1, 1), (1, 2)]}, num_lumi=2)


@pytest.mark.usefixtures("populated")
class TestWorkflowResolver:
    def test_one_record_per_output_in_descriptor_order(self, resolver) -> None:
        records = resolver.resolve(WORKFLOW)

        assert [r.output_dataset for r in records] == [AOD, MINIAOD]
        assert all(r.workflow == WORKFLOW for r in records)
        assert all(r.input_dataset == INPUT for r in records)
        assert all(r.total_input_lumis == 3 for r in records)
        assert all(r.elapsed_seconds >= 0 for r in records)

    def test_statuses(self, resolver) -> None:
        aod, miniaod = resolver.resolve(WORKFLOW)

        assert aod.status == "OK"
        assert aod.ok
        assert miniaod.status == "WARNING: lumis differ 3 != 2, blocks differ 2 != 1"

    def test_input_resolved_once(self, resolver, catalog) -> None:
        records = resolver.resolve(WORKFLOW)

        assert len(catalog.requests_to("filesummaries", dataset=INPUT)) == 1
        assert records[0].input_stats is records[1].input_stats

    def test_output_failure_aborts_workflow(self, resolver, catalog) -> None:
        catalog.failures[("blocks", MINIAOD)] = httpx.Response(503)

        with pytest.raises(NetworkError) as exc_info:
            resolver.resolve(WORKFLOW)

        assert exc_info.value.status_code == 503

    def test_unknown_workflow(self, resolver, catalog) -> None:
        with pytest.raises(UpstreamDataError, match="not found"):
            resolver.resolve("wf_missing")

        assert catalog.requests == []


def test_workflow_without_outputs(resolver, catalog, reqmgr) -> None:
    reqmgr.add_workflow(WORKFLOW, input_dataset=INPUT, outputs=[])
    catalog.add_dataset(INPUT, blocks={"r1": [(1, 1)]})

    assert resolver.resolve(WORKFLOW) == []
