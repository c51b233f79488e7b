"""Assembly of per-batch matches into the final result table."""

import logging
from collections.abc import Iterable

from .exceptions import BatchExecutionError, RowParseWarning
from .models import MatchedSNP, ResultTable

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Collect batch results in slots and concatenate them in batch order.

    Batches may be added in any order; the built table is always ordered by
    batch index. Rows are never deduplicated.
    """

    def __init__(self) -> None:
        self._slots: dict[int, list[MatchedSNP]] = {}
        self._failures: dict[int, BatchExecutionError] = {}
        self._warnings: list[RowParseWarning] = []

    @property
    def match_count(self) -> int:
        return sum(len(matches) for matches in self._slots.values())

    def add(self, batch_index: int, matches: Iterable[MatchedSNP]) -> None:
        if batch_index in self._slots or batch_index in self._failures:
            raise ValueError(f"batch {batch_index} was already recorded")
        self._slots[batch_index] = list(matches)

    def record_failure(self, error: BatchExecutionError) -> None:
        if error.batch_index in self._slots or error.batch_index in self._failures:
            raise ValueError(f"batch {error.batch_index} was already recorded")
        self._failures[error.batch_index] = error

    def record_warnings(self, warnings: Iterable[RowParseWarning]) -> None:
        self._warnings.extend(warnings)

    def build(self, batches_total: int) -> ResultTable:
        """Concatenate all recorded batches into a ResultTable."""
        rows: list[MatchedSNP] = []
        for index in sorted(self._slots):
            rows.extend(self._slots[index])

        missing = batches_total - len(self._slots) - len(self._failures)
        if missing > 0:
            logger.warning("%d of %d batches produced no result", missing, batches_total)

        return ResultTable(
            rows=rows,
            failed_batches=[self._failures[i] for i in sorted(self._failures)],
            row_warnings=sorted(self._warnings, key=lambda w: w.batch_index),
            batches_total=batches_total,
        )
