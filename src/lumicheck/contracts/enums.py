# src/lumicheck/contracts/enums.py
"""Enumerations shared by configuration and the comparator."""

from enum import StrEnum


class ComparisonField(StrEnum):
    """A DatasetStats counter the comparator can check.

    The value is the label used in mismatch descriptions
    ("<label> differ <input> != <output>").
    """

    LUMIS = "lumis"
    FILES = "files"
    EVENTS = "events"
    BLOCKS = "blocks"
    INVALID_FILES = "invalid_files"
    BLOCK_LUMIS = "block_lumis"
    UNIQUE_BLOCK_LUMIS = "unique_block_lumis"
    FILESUMMARIES_LUMIS = "filesummaries_lumis"

    @property
    def attribute(self) -> str:
        """Name of the DatasetStats attribute holding this counter."""
        return _ATTRIBUTES[self]


_ATTRIBUTES: dict[ComparisonField, str] = {
    ComparisonField.LUMIS: "num_lumi",
    ComparisonField.FILES: "num_files",
    ComparisonField.EVENTS: "num_events",
    ComparisonField.BLOCKS: "num_blocks",
    ComparisonField.INVALID_FILES: "num_invalid_files",
    ComparisonField.BLOCK_LUMIS: "total_block_lumis",
    ComparisonField.UNIQUE_BLOCK_LUMIS: "unique_block_lumis",
    ComparisonField.FILESUMMARIES_LUMIS: "filesummaries_lumis",
}
