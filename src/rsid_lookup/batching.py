"""Validation of input variants and their partitioning into batches."""

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from .exceptions import SchemaError
from .models import Batch, VariantRecord, VariantTable
from .utils.validators import coerce_position, coerce_text, validate_batch_size

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColumnMap:
    """Names of the input columns holding each variant field."""

    chromosome: str = "chr"
    position: str = "pos"
    allele1: str = "A1"
    allele2: str = "A2"

    def required(self) -> list[str]:
        return [self.chromosome, self.position, self.allele1, self.allele2]


def check_columns(columns: Sequence[str], column_map: ColumnMap) -> None:
    """Raise SchemaError if any required column is absent from the table."""
    present = set(columns)
    missing = [name for name in column_map.required() if name not in present]
    if missing:
        raise SchemaError(
            "Input table must contain the specified columns: "
            f"{', '.join(column_map.required())} (missing: {', '.join(missing)})",
            missing_columns=missing,
        )


def record_from_row(
    row: Mapping[str, Any], column_map: ColumnMap, row_number: int
) -> VariantRecord:
    """Build a VariantRecord from one input row.

    Args:
        row: Mapping of column name to cell value
        column_map: Input column names
        row_number: 1-based row number used in error messages

    Raises:
        SchemaError: If a field is absent, empty, or the position is not an integer
    """
    missing = [name for name in column_map.required() if name not in row]
    if missing:
        raise SchemaError(
            f"Row {row_number} is missing columns: {', '.join(missing)}",
            missing_columns=missing,
        )

    chromosome = coerce_text(row[column_map.chromosome])
    allele1 = coerce_text(row[column_map.allele1])
    allele2 = coerce_text(row[column_map.allele2])
    position = coerce_position(row[column_map.position])

    empty = [
        name
        for name, value in (
            (column_map.chromosome, chromosome),
            (column_map.allele1, allele1),
            (column_map.allele2, allele2),
        )
        if value is None
    ]
    if empty:
        raise SchemaError(f"Row {row_number} has empty values in: {', '.join(empty)}")

    if position is None:
        raise SchemaError(
            f"Row {row_number} has a non-integer position in {column_map.position}: "
            f"{row[column_map.position]!r}"
        )

    return VariantRecord(
        chromosome=chromosome,
        position=position,
        allele1=allele1,
        allele2=allele2,
    )


class VariantBatcher:
    """Split validated variant records into consecutive batches.

    Iteration is restartable: each ``iter()`` walks the records from the start.
    """

    def __init__(self, records: Sequence[VariantRecord], batch_size: int = 100):
        self.batch_size = validate_batch_size(batch_size)
        self.records = tuple(records)

    @classmethod
    def from_table(
        cls,
        table: VariantTable,
        column_map: ColumnMap | None = None,
        batch_size: int = 100,
    ) -> "VariantBatcher":
        """Validate every row of ``table`` and return a batcher over them.

        Raises:
            SchemaError: If a required column or value is missing
            ConfigError: If batch_size is not a positive integer
        """
        column_map = column_map or ColumnMap()
        validate_batch_size(batch_size)
        # An empty record list carries no header to check.
        if table.columns or table.rows:
            check_columns(table.columns, column_map)

        records = [
            record_from_row(row, column_map, row_number)
            for row_number, row in enumerate(table.rows, start=1)
        ]

        logger.debug("Validated %d input variants", len(records))
        return cls(records, batch_size=batch_size)

    def __len__(self) -> int:
        return -(-len(self.records) // self.batch_size)

    def __iter__(self) -> Iterator[Batch]:
        for index, start in enumerate(range(0, len(self.records), self.batch_size)):
            yield Batch(index=index, records=self.records[start : start + self.batch_size])
