# src/lumicheck/contracts/records.py
"""Data records exchanged between the fetchers, resolvers and callers.

All records are immutable snapshots of what the upstream services reported
at resolution time. Nothing here is cached across invocations.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from lumicheck.contracts.errors import UpstreamDataError


@dataclass(frozen=True, slots=True)
class LumiKey:
    """A (run, lumi-section) pair.

    Two keys are the same lumi iff both fields match exactly. Keys are only
    compared for equality, never ordered.
    """

    run: int
    lumi: int

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> LumiKey:
        """Build from a catalog filelumis record.

        Raises:
            KeyError: If run_num or lumi_section_num is missing
            TypeError: If either field is not an integer
        """
        run = record["run_num"]
        lumi = record["lumi_section_num"]
        if type(run) is not int or type(lumi) is not int:
            raise TypeError(f"run_num/lumi_section_num must be integers, got {run!r}/{lumi!r}")
        return cls(run=run, lumi=lumi)


@dataclass(frozen=True, slots=True)
class BlockRef:
    """A named block of a dataset.

    Block names look like ``/Primary/Processed/TIER#<uuid>``; the segment
    after ``#`` is the block id used as a short key in diagnostics.
    """

    name: str
    block_id: str

    @classmethod
    def from_name(cls, name: str) -> BlockRef:
        """Parse a block name.

        Raises:
            UpstreamDataError: If the name has no ``#<id>`` segment
        """
        _, sep, block_id = name.partition("#")
        if not sep or not block_id:
            raise UpstreamDataError(f"malformed block name {name!r}: missing '#<id>' segment")
        return cls(name=name, block_id=block_id)


@dataclass(frozen=True, slots=True)
class WorkflowDescriptor:
    """The subset of a workflow record needed for the cross-check.

    Attributes:
        workflow: Workflow identifier
        input_dataset: Declared input dataset
        output_datasets: Declared output datasets, in record order
        total_input_lumis: Lumi count declared by the workflow record itself
    """

    workflow: str
    input_dataset: str
    output_datasets: tuple[str, ...]
    total_input_lumis: int


@dataclass(frozen=True, slots=True)
class DatasetStats:
    """Statistics for one dataset.

    ``num_lumi``, ``num_files``, ``num_events`` and ``num_blocks`` come from the
    dataset's top-level catalog summary. ``total_block_lumis`` and
    ``unique_block_lumis`` are recomputed from every block's file-level lumi
    records; ``filesummaries_lumis`` is the sum of the per-block summaries.

    ``num_invalid_files`` is ``num_files`` minus the number of rows in the
    summary response. The summary endpoint normally returns a single row, so
    this is not a count of invalid files in the catalog sense.
    """

    dataset: str
    num_lumi: int
    num_files: int
    num_events: int
    num_blocks: int
    num_invalid_files: int
    total_block_lumis: int
    unique_block_lumis: int
    filesummaries_lumis: int

    def __post_init__(self) -> None:
        if not self.total_block_lumis >= self.unique_block_lumis >= 0:
            raise ValueError(
                f"block lumi counts violate total >= unique >= 0: "
                f"total={self.total_block_lumis}, unique={self.unique_block_lumis}"
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the catalog's field names."""
        return {
            "dataset": self.dataset,
            "num_lumi": self.num_lumi,
            "num_file": self.num_files,
            "num_event": self.num_events,
            "num_block": self.num_blocks,
            "num_block_lumis": self.total_block_lumis,
            "unique_block_lumis": self.unique_block_lumis,
            "num_invalid_files": self.num_invalid_files,
            "filesummaries_lumis": self.filesummaries_lumis,
        }


@dataclass(frozen=True, slots=True)
class ComparisonRecord:
    """Outcome of comparing one output dataset against its workflow's input.

    Attributes:
        workflow: Workflow identifier
        total_input_lumis: Lumi count declared by the workflow record
        input_dataset: Input dataset name
        output_dataset: Output dataset name
        input_stats: Stats of the input dataset
        output_stats: Stats of the output dataset
        status: "OK" or "WARNING: <mismatches>"
        elapsed_seconds: Wall-clock time spent producing this record
    """

    workflow: str
    total_input_lumis: int
    input_dataset: str
    output_dataset: str
    input_stats: DatasetStats
    output_stats: DatasetStats
    status: str
    elapsed_seconds: float

    @property
    def ok(self) -> bool:
        return self.status == "OK"

    def to_dict(self) -> dict[str, Any]:
        """Serialize with the field names existing consumers expect."""
        return {
            "Workflow": self.workflow,
            "TotalInputLumis": self.total_input_lumis,
            "InputDataset": self.input_dataset,
            "OutputDataset": self.output_dataset,
            "InputStats": self.input_stats.to_dict(),
            "OutputStats": self.output_stats.to_dict(),
            "Status": self.status,
            "Elapsed": self.elapsed_seconds,
        }


def records_to_json(records: Iterable[ComparisonRecord], *, indent: int | None = 3) -> str:
    """Serialize comparison records to a JSON array."""
    return json.dumps([record.to_dict() for record in records], indent=indent)


def dedupe_preserving_order(items: Sequence[str]) -> list[str]:
    """Drop repeated names, keeping the first occurrence of each."""
    seen: set[str] = set()
    out: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out
