# src/lumicheck/clients/reqmgr.py
"""Client for the workflow descriptor service (ReqMgr)."""

from __future__ import annotations

from typing import Any

import structlog

from lumicheck.clients.http import CountedHTTPClient
from lumicheck.contracts.errors import DecodeError, UpstreamDataError
from lumicheck.contracts.records import WorkflowDescriptor

logger = structlog.get_logger(__name__)


class WorkflowServiceClient:
    """Fetches workflow descriptors.

    The service answers ``GET <base>?name=<workflow>`` with
    ``{"result": [{"<workflow>": {...record...}}, ...]}``.
    """

    def __init__(self, http: CountedHTTPClient) -> None:
        self._http = http

    def fetch_descriptor(self, workflow: str) -> WorkflowDescriptor:
        """Fetch and parse the descriptor of one workflow.

        Raises:
            NetworkError: The call failed
            DecodeError: The response is not the expected JSON shape
            UpstreamDataError: The workflow is absent from the response or
                declares no input dataset
        """
        data = self._http.get_json("", params={"name": workflow})
        url = self._http.resolve_url("")

        if not isinstance(data, dict) or not isinstance(data.get("result"), list):
            raise DecodeError(f"descriptor response for {workflow!r} has no 'result' list", url=url)

        for entry in data["result"]:
            if isinstance(entry, dict) and workflow in entry:
                return _parse_descriptor(workflow, entry[workflow], url)

        raise UpstreamDataError(f"workflow {workflow!r} not found in descriptor response")


def _parse_descriptor(workflow: str, record: Any, url: str) -> WorkflowDescriptor:
    if not isinstance(record, dict):
        raise DecodeError(f"descriptor record for {workflow!r} is not an object", url=url)

    input_dataset = record.get("InputDataset") or ""
    if not input_dataset:
        task1 = record.get("Task1")
        if isinstance(task1, dict):
            input_dataset = task1.get("InputDataset") or ""
    if not isinstance(input_dataset, str) or not input_dataset:
        raise UpstreamDataError(f"workflow {workflow!r} declares no input dataset")

    outputs = record.get("OutputDatasets") or []
    if not isinstance(outputs, list) or not all(isinstance(o, str) for o in outputs):
        raise DecodeError(f"OutputDatasets of {workflow!r} is not a list of names", url=url)

    total_input_lumis = record.get("TotalInputLumis") or 0
    if type(total_input_lumis) is not int:
        raise DecodeError(f"TotalInputLumis of {workflow!r} is not an integer: {total_input_lumis!r}", url=url)

    logger.debug("descriptor_parsed", workflow=workflow, input_dataset=input_dataset, outputs=len(outputs))
    return WorkflowDescriptor(
        workflow=workflow,
        input_dataset=input_dataset,
        output_datasets=tuple(outputs),
        total_input_lumis=total_input_lumis,
    )
