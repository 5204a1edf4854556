# src/lumicheck/engine/dataset.py
"""Resolution of one dataset into a full DatasetStats record."""

from __future__ import annotations

import structlog
from structlog.contextvars import bound_contextvars

from lumicheck.clients.dbs import DatasetCatalogClient
from lumicheck.contracts.records import BlockRef, DatasetStats
from lumicheck.engine.lumis import LumiAccumulator, SummaryLumiAccumulator
from lumicheck.pooling.executor import BoundedTaskPool, TaskGroup

logger = structlog.get_logger(__name__)


class DatasetStatsResolver:
    """Builds DatasetStats from the catalog.

    Steps:
    1. Fetch the dataset summary (num_lumi, num_files, num_events, num_blocks).
    2. Fetch the deduplicated block list.
    3. For every block submit two pool units: one streaming the block's
       file-level lumi records, one streaming its summary records. Wait on
       both groups.
    4. Fill the recomputed lumi counts from the two aggregations.

    Any failure aborts the resolution and propagates unchanged; a partially
    filled DatasetStats is never returned. Block-level units run on the
    shared bounded pool, so resolve() must be called from outside the pool.
    """

    def __init__(self, catalog: DatasetCatalogClient, pool: BoundedTaskPool) -> None:
        self._catalog = catalog
        self._pool = pool

    def _stream_block_lumis(self, block: BlockRef, accumulator: LumiAccumulator) -> int:
        count = 0
        for key in self._catalog.block_lumis(block):
            accumulator.add(key)
            count += 1
        logger.debug("block_lumis_streamed", block=block.block_id, records=count)
        return count

    def _stream_block_summaries(self, block: BlockRef, accumulator: SummaryLumiAccumulator) -> int:
        count = 0
        for num_lumi in self._catalog.block_summaries(block):
            accumulator.add(num_lumi)
            count += 1
        return count

    def resolve(self, dataset: str) -> DatasetStats:
        """Resolve full statistics for one dataset.

        ``dataset`` is bound in the log context, so the block units carry it.

        Raises:
            NetworkError, DecodeError, UpstreamDataError: From any sub-fetch
        """
        with bound_contextvars(dataset=dataset):
            return self._resolve(dataset)

    def _resolve(self, dataset: str) -> DatasetStats:
        summary = self._catalog.dataset_summary(dataset)
        blocks = self._catalog.dataset_blocks(dataset)
        logger.debug("dataset_fanout", blocks=len(blocks))

        lumis = LumiAccumulator()
        block_summaries = SummaryLumiAccumulator()
        lumi_group = self._pool.group()
        summary_group = self._pool.group()
        for block in blocks:
            lumi_group.submit(self._stream_block_lumis, block, lumis)
            summary_group.submit(self._stream_block_summaries, block, block_summaries)

        futures = lumi_group.wait() + summary_group.wait()
        failure = TaskGroup.first_exception(futures)
        if failure is not None:
            raise failure

        total, unique = lumis.counts()
        stats = DatasetStats(
            dataset=dataset,
            num_lumi=summary.num_lumi,
            num_files=summary.num_files,
            num_events=summary.num_events,
            num_blocks=summary.num_blocks,
            num_invalid_files=summary.num_files - summary.rows,
            total_block_lumis=total,
            unique_block_lumis=unique,
            filesummaries_lumis=block_summaries.total,
        )
        logger.debug(
            "dataset_resolved",
            num_lumi=stats.num_lumi,
            total_block_lumis=total,
            unique_block_lumis=unique,
            filesummaries_lumis=stats.filesummaries_lumis,
        )
        return stats
