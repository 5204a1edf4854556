# tests/conftest.py
"""Shared test fixtures and helpers.

Upstream services are simulated with respx: every request to the fake hosts
is dispatched to an in-memory FakeCatalog (dataset catalog) or FakeReqMgr
(workflow descriptor service), which record the requests they serve so tests
can assert on fan-out and call counts.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterator
from threading import Lock
from typing import Any

import httpx
import pytest
import respx
from hypothesis import Phase, Verbosity, settings

from lumicheck.clients.http import CountedHTTPClient
from lumicheck.core.config import CheckerSettings
from lumicheck.core.context import CheckerContext

DBS_URL = "https://dbs.test/dbs/prod/global/DBSReader"
REQMGR_URL = "https://reqmgr.test/reqmgr2/data/request"


# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Upstream fakes
# =============================================================================


def ndjson(elements: list[Any]) -> bytes:
    """Encode elements as a newline-delimited JSON body."""
    return "".join(json.dumps(e) + "\n" for e in elements).encode()


class FakeCatalog:
    """In-memory dataset catalog answering the four DBS call shapes.

    A value in ``failures`` keyed by ``(endpoint, key)`` is raised (if it is
    an exception) or returned (if it is an httpx.Response) instead of the
    normal answer. ``key`` is the dataset or block name of the request.
    """

    def __init__(self) -> None:
        self.summaries: dict[str, list[dict[str, Any]]] = {}
        self.blocks: dict[str, list[str]] = {}
        self.lumis: dict[str, list[tuple[int, int]]] = {}
        self.block_summaries: dict[str, list[int]] = {}
        self.failures: dict[tuple[str, str], BaseException | httpx.Response] = {}
        self.requests: list[httpx.Request] = []
        self._lock = Lock()

    def add_dataset(
        self,
        name: str,
        *,
        blocks: dict[str, list[tuple[int, int]]],
        num_lumi: int | None = None,
        num_file: int = 10,
        num_event: int = 1000,
        block_summary_lumis: dict[str, int] | None = None,
    ) -> None:
        """Register a dataset whose blocks are keyed by block id suffix."""
        block_names = [f"{name}#{block_id}" for block_id in blocks]
        self.summaries[name] = [
            {
                "num_lumi": num_lumi if num_lumi is not None else sum(len(v) for v in blocks.values()),
                "num_file": num_file,
                "num_event": num_event,
                "num_block": len(block_names),
            }
        ]
        self.blocks[name] = block_names
        for block_id, pairs in blocks.items():
            block_name = f"{name}#{block_id}"
            self.lumis[block_name] = pairs
            summary_lumis = (block_summary_lumis or {}).get(block_id, len(set(pairs)))
            self.block_summaries[block_name] = [summary_lumis]

    def requests_to(self, endpoint: str, **params: str) -> list[httpx.Request]:
        with self._lock:
            return [
                r
                for r in self.requests
                if r.url.path.endswith(f"/{endpoint}") and all(r.url.params.get(k) == v for k, v in params.items())
            ]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        endpoint = request.url.path.rsplit("/", 1)[-1]
        params = request.url.params
        key = params.get("dataset") or params.get("block_name") or ""

        failure = self.failures.get((endpoint, key))
        if isinstance(failure, httpx.Response):
            return failure
        if failure is not None:
            raise failure

        if endpoint == "filesummaries" and "dataset" in params:
            return httpx.Response(200, json=self.summaries.get(key, []))
        if endpoint == "blocks":
            return httpx.Response(200, json=[{"block_name": b} for b in self.blocks.get(key, [])])
        if endpoint == "filelumis":
            pairs = self.lumis.get(key, [])
            body = ndjson([{"run_num": run, "lumi_section_num": lumi, "logical_file_name": "/store/f.root"} for run, lumi in pairs])
            return httpx.Response(200, content=body, headers={"content-type": "application/ndjson"})
        if endpoint == "filesummaries" and "block_name" in params:
            body = ndjson([{"num_lumi": n, "num_file": 1, "num_event": 1} for n in self.block_summaries.get(key, [])])
            return httpx.Response(200, content=body, headers={"content-type": "application/ndjson"})
        return httpx.Response(404, json={"error": f"unknown endpoint {endpoint}"})


class FakeReqMgr:
    """In-memory workflow descriptor service."""

    def __init__(self) -> None:
        self.records: dict[str, dict[str, Any]] = {}
        self.failures: dict[str, BaseException | httpx.Response] = {}
        self.requests: list[httpx.Request] = []
        self._lock = Lock()

    def add_workflow(
        self,
        name: str,
        *,
        input_dataset: str,
        outputs: list[str],
        total_input_lumis: int = 0,
    ) -> None:
        self.records[name] = {
            "RequestName": name,
            "InputDataset": input_dataset,
            "OutputDatasets": outputs,
            "TotalInputLumis": total_input_lumis,
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        name = request.url.params.get("name", "")
        failure = self.failures.get(name)
        if isinstance(failure, httpx.Response):
            return failure
        if failure is not None:
            raise failure
        result = [{name: self.records[name]}] if name in self.records else []
        return httpx.Response(200, json={"result": result})


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def reqmgr() -> FakeReqMgr:
    return FakeReqMgr()


@pytest.fixture
def upstream(catalog: FakeCatalog, reqmgr: FakeReqMgr) -> Iterator[respx.MockRouter]:
    """Route both fake services through respx for the duration of a test."""
    with respx.mock(assert_all_called=False) as router:
        router.route(host="dbs.test").mock(side_effect=catalog)
        router.route(host="reqmgr.test").mock(side_effect=reqmgr)
        yield router


@pytest.fixture
def checker_settings() -> CheckerSettings:
    return CheckerSettings.model_validate(
        {
            "reqmgr": {"base_url": REQMGR_URL, "timeout_seconds": 5},
            "dbs": {"base_url": DBS_URL, "timeout_seconds": 5},
            "stream_timeout_seconds": 5,
            "pool": {"pool_size": 4},
        }
    )


@pytest.fixture
def context() -> CheckerContext:
    return CheckerContext()


@pytest.fixture
def dbs_http(context: CheckerContext) -> Iterator[CountedHTTPClient]:
    client = CountedHTTPClient(context, service="dbs", base_url=DBS_URL, timeout=5.0)
    yield client
    client.close()


@pytest.fixture
def reqmgr_http(context: CheckerContext) -> Iterator[CountedHTTPClient]:
    client = CountedHTTPClient(context, service="reqmgr", base_url=REQMGR_URL, timeout=5.0)
    yield client
    client.close()
