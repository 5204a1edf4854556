# src/lumicheck/clients/dbs.py
"""Client for the dataset catalog service (DBS).

Four call shapes are used:

- ``filesummaries?dataset=...``   JSON array, first row used
- ``blocks?dataset=...``          JSON array of ``{"block_name": ...}``
- ``filelumis?block_name=...``    ndjson stream of (run, lumi-section) records
- ``filesummaries?block_name=...`` ndjson stream of per-block summaries
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import structlog

from lumicheck.clients.http import CountedHTTPClient
from lumicheck.contracts.errors import DecodeError, UpstreamDataError
from lumicheck.contracts.records import BlockRef, LumiKey, dedupe_preserving_order

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class DatasetSummary:
    """Top-level catalog counters of a dataset.

    Attributes:
        rows: Number of rows the summary endpoint returned
    """

    num_lumi: int
    num_files: int
    num_events: int
    num_blocks: int
    rows: int


def _counter(record: dict[str, Any], field: str) -> int:
    """Read an integer counter, treating missing/null as zero."""
    value = record.get(field)
    if value is None:
        return 0
    if type(value) is not int:
        raise TypeError(f"{field} must be an integer, got {value!r}")
    return value


def block_summary_lumis(record: Any) -> int:
    """Decode one per-block summary element to its lumi count."""
    if not isinstance(record, dict):
        raise TypeError(f"block summary must be an object, got {type(record).__name__}")
    return _counter(record, "num_lumi")


class DatasetCatalogClient:
    """Typed access to the catalog endpoints used for lumi accounting."""

    def __init__(
        self,
        http: CountedHTTPClient,
        *,
        stream_timeout: float = 180.0,
        valid_file_only: bool = True,
    ) -> None:
        """Initialize catalog client.

        Args:
            http: HTTP client bound to the catalog base URL
            stream_timeout: Timeout for streamed calls in seconds
            valid_file_only: Restrict summaries to valid files
        """
        self._http = http
        self._stream_timeout = stream_timeout
        self._valid_file_only = valid_file_only

    def _summary_params(self, key: str, value: str) -> dict[str, Any]:
        params: dict[str, Any] = {key: value}
        if self._valid_file_only:
            params["validFileOnly"] = 1
        return params

    def dataset_summary(self, dataset: str) -> DatasetSummary:
        """Fetch the dataset's top-level summary.

        Raises:
            NetworkError: The call failed
            DecodeError: The response is not an array of summary objects
            UpstreamDataError: The summary array is empty
        """
        rows = self._http.get_json("filesummaries", params=self._summary_params("dataset", dataset))
        url = self._http.resolve_url("filesummaries")
        if not isinstance(rows, list):
            raise DecodeError(f"summary for {dataset} is not a JSON array", url=url)
        if not rows:
            raise UpstreamDataError(f"catalog returned no summary for dataset {dataset}")

        first = rows[0]
        if not isinstance(first, dict):
            raise DecodeError(f"summary row for {dataset} is not an object", url=url)
        if len(rows) > 1:
            logger.warning(
                "summary_multiple_rows",
                dataset=dataset,
                rows=len(rows),
                note="num_invalid_files is num_files minus the row count",
            )
        try:
            return DatasetSummary(
                num_lumi=_counter(first, "num_lumi"),
                num_files=_counter(first, "num_file"),
                num_events=_counter(first, "num_event"),
                num_blocks=_counter(first, "num_block"),
                rows=len(rows),
            )
        except TypeError as e:
            raise DecodeError(f"summary row for {dataset}: {e}", url=url) from e

    def dataset_blocks(self, dataset: str) -> list[BlockRef]:
        """Fetch the dataset's blocks, deduplicated by name.

        Raises:
            NetworkError: The call failed
            DecodeError: The response is not an array of block objects
            UpstreamDataError: A block name has no id segment
        """
        records = self._http.get_json("blocks", params={"dataset": dataset})
        url = self._http.resolve_url("blocks")
        if not isinstance(records, list):
            raise DecodeError(f"block list for {dataset} is not a JSON array", url=url)

        names: list[str] = []
        for record in records:
            name = record.get("block_name") if isinstance(record, dict) else None
            if not isinstance(name, str):
                raise DecodeError(f"block record for {dataset} has no block_name: {record!r}", url=url)
            names.append(name)

        unique = dedupe_preserving_order(names)
        if len(unique) != len(names):
            logger.debug("duplicate_blocks_dropped", dataset=dataset, returned=len(names), unique=len(unique))
        return [BlockRef.from_name(name) for name in unique]

    def block_lumis(self, block: BlockRef) -> Iterator[LumiKey]:
        """Stream the (run, lumi-section) records of every file in a block."""
        return self._http.iter_ndjson(
            "filelumis",
            decode=LumiKey.from_record,
            params={"block_name": block.name},
            timeout=self._stream_timeout,
        )

    def block_summaries(self, block: BlockRef) -> Iterator[int]:
        """Stream the lumi counts of a block's summary records."""
        return self._http.iter_ndjson(
            "filesummaries",
            decode=block_summary_lumis,
            params=self._summary_params("block_name", block.name),
            timeout=self._stream_timeout,
        )
