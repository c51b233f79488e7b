"""Batched rsID lookup of genomic variants against a reference SNP database."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from .aggregator import ResultAggregator
from .batching import VariantBatcher
from .config import LookupConfig
from .exceptions import ConfigError, StoreQueryError
from .executor import BatchQueryExecutor
from .models import Batch, ResultTable, VariantTable
from .parser import parse_rows
from .store import ReferenceStore, open_store

logger = logging.getLogger(__name__)

TableLike = VariantTable | Sequence[Mapping[str, Any]]


class RsidLookup:
    """Resolve variants to rsIDs, one store query per batch.

    Each batch runs build -> execute -> parse -> append. With
    ``config.workers > 1`` batches run concurrently, but the result table is
    always assembled in input batch order.
    """

    def __init__(self, config: LookupConfig | None = None, store: ReferenceStore | None = None):
        self.config = config or LookupConfig()
        self._owns_store = store is None
        if store is None:
            store = open_store(self.config.db_path, workers=self.config.workers)
        self.store = store
        self.executor = BatchQueryExecutor(
            self.store, table_name=self.config.table_name, timeout=self.config.timeout
        )
        self._connected = not self._owns_store

    async def connect(self) -> None:
        """Open the reference store and verify the reference table."""
        if not self._connected:
            await self.store.connect()
            self._connected = True

        if self.config.verify_table:
            try:
                exists = await self.store.table_exists(self.config.table_name)
            except StoreQueryError as e:
                raise ConfigError(f"Cannot inspect reference database: {e}") from e
            if not exists:
                raise ConfigError(
                    f"Reference table '{self.config.table_name}' not found in "
                    f"{self.config.db_path}"
                )

    async def close(self) -> None:
        if self._owns_store and self._connected:
            await self.store.close()
            self._connected = False

    async def __aenter__(self) -> "RsidLookup":
        try:
            await self.connect()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def prepare(self, table: TableLike) -> VariantBatcher:
        """Validate the input table and batch size before any query runs."""
        if not isinstance(table, VariantTable):
            table = VariantTable.from_records(table)
        batcher = VariantBatcher.from_table(
            table, self.config.column_map, batch_size=self.config.batch_size
        )
        self.executor.check_batch_size(self.config.batch_size)
        return batcher

    async def _run_batch(
        self, batch: Batch, batches_total: int, aggregator: ResultAggregator
    ) -> None:
        logger.info("Processing batch %d of %d...", batch.index + 1, batches_total)

        result = await self.executor.execute(batch)
        if result.failed:
            aggregator.record_failure(result.error)
            return

        matches, warnings = parse_rows(batch.index, result.rows)
        aggregator.add(batch.index, matches)
        aggregator.record_warnings(warnings)
        logger.debug("Batch %d matched %d SNPs", batch.index + 1, len(matches))

    async def run(self, batcher: VariantBatcher) -> ResultTable:
        """Look up every batch and return the aggregated result table."""
        batches_total = len(batcher)
        aggregator = ResultAggregator()
        callback = self.config.progress_callback
        done = 0

        def report() -> None:
            nonlocal done
            done += 1
            if callback is not None:
                callback(done, batches_total, aggregator.match_count)

        if self.config.workers == 1:
            for batch in batcher:
                await self._run_batch(batch, batches_total, aggregator)
                report()
        else:
            semaphore = asyncio.Semaphore(self.config.workers)

            async def run_limited(batch: Batch) -> None:
                async with semaphore:
                    await self._run_batch(batch, batches_total, aggregator)
                    report()

            await asyncio.gather(*(run_limited(batch) for batch in batcher))

        table = aggregator.build(batches_total)
        logger.info(
            "Matched %d SNPs from %d variants in %d batches (%d failed, %d rows dropped)",
            len(table),
            len(batcher.records),
            batches_total,
            len(table.failed_batches),
            len(table.row_warnings),
        )
        return table


async def lookup_rsids(
    table: TableLike,
    config: LookupConfig | None = None,
    store: ReferenceStore | None = None,
) -> ResultTable:
    """Resolve the variants in ``table`` to reference SNPs.

    Args:
        table: Input rows with chromosome, position and allele columns
        config: Column names, store location and batching settings
        store: Optional already-connected store; the caller keeps ownership

    Returns:
        ResultTable with columns chromosome, rsID, position, allele1, allele2

    Raises:
        SchemaError: If a required column or value is missing
        ConfigError: If a setting is invalid or the store is unusable
    """
    lookup = RsidLookup(config, store=store)
    batcher = lookup.prepare(table)
    if len(batcher) == 0:
        return ResultTable()

    try:
        await lookup.connect()
        return await lookup.run(batcher)
    finally:
        await lookup.close()


def get_rsid(
    input_rows: TableLike,
    chr_col: str = "chr",
    pos_col: str = "pos",
    a1_col: str = "A1",
    a2_col: str = "A2",
    db_path: Path | str | None = None,
    table_name: str = "snp",
    batch_size: int = 100,
    workers: int = 1,
    timeout: float | None = 30.0,
) -> ResultTable:
    """Synchronous entry point for rsID lookup.

    Example:
        >>> variants = [
        ...     {"chr": "1", "pos": 123456, "A1": "A", "A2": "G"},
        ...     {"chr": "2", "pos": 234567, "A1": "C", "A2": "T"},
        ... ]
        >>> results = get_rsid(variants, db_path="1kg_GRCh37.db", batch_size=1000)
    """
    options: dict[str, Any] = {}
    if db_path is not None:
        options["db_path"] = str(db_path)

    config = LookupConfig(
        chr_col=chr_col,
        pos_col=pos_col,
        a1_col=a1_col,
        a2_col=a2_col,
        table_name=table_name,
        batch_size=batch_size,
        workers=workers,
        timeout=timeout,
        **options,
    )
    return asyncio.run(lookup_rsids(input_rows, config))
