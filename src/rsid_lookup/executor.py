"""Execution of one batch lookup against the reference store."""

import logging
from dataclasses import dataclass, field

from .exceptions import BatchExecutionError, ConfigError, StoreQueryError
from .models import Batch
from .predicates import PARAMS_PER_VARIANT, build_batch_predicate, max_batch_size
from .store import ReferenceStore
from .utils.validators import validate_table_name, validate_timeout

logger = logging.getLogger(__name__)

SELECT_COLUMNS = "chr, rsID, pos, A1, A2"
QUERY_PREVIEW_CHARS = 500


@dataclass
class BatchQueryResult:
    """Raw rows returned for one batch, or the error that prevented them."""

    batch_index: int
    rows: list[tuple] = field(default_factory=list)
    error: BatchExecutionError | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class BatchQueryExecutor:
    """Build and run the single lookup query for each batch."""

    def __init__(
        self,
        store: ReferenceStore,
        table_name: str = "snp",
        timeout: float | None = 30.0,
    ):
        self.store = store
        self.table_name = validate_table_name(table_name)
        self.timeout = validate_timeout(timeout)

    def check_batch_size(self, batch_size: int) -> None:
        """Raise ConfigError if a full batch would exceed the store's parameter limit."""
        limit = max_batch_size(self.store.max_parameters)
        if batch_size > limit:
            raise ConfigError(
                f"batch_size {batch_size} needs {batch_size * PARAMS_PER_VARIANT} bind "
                f"parameters; this store allows at most {self.store.max_parameters} "
                f"(batch_size <= {limit})"
            )

    def build_query(self, batch: Batch) -> tuple[str, tuple]:
        predicate = build_batch_predicate(batch.records, self.store.placeholder_style)
        sql = f"SELECT {SELECT_COLUMNS} FROM {self.table_name} WHERE {predicate.sql}"
        return sql, predicate.params

    async def execute(self, batch: Batch) -> BatchQueryResult:
        """Run the lookup for ``batch``.

        Store failures and timeouts are returned as a failed result rather than
        raised, so one bad batch does not abort the run.
        """
        if not batch.records:
            return BatchQueryResult(batch_index=batch.index)

        sql, params = self.build_query(batch)
        logger.debug(
            "Executing batch %d SQL query: %s ...", batch.index + 1, sql[:QUERY_PREVIEW_CHARS]
        )

        try:
            rows = await self.store.fetch(sql, params, timeout=self.timeout)
        except TimeoutError as e:
            error = BatchExecutionError(batch.index, str(e) or "query timed out")
        except StoreQueryError as e:
            error = BatchExecutionError(batch.index, e)
        else:
            return BatchQueryResult(batch_index=batch.index, rows=list(rows))

        logger.error("Error executing batch %d: %s", batch.index + 1, error.cause)
        return BatchQueryResult(batch_index=batch.index, error=error)
