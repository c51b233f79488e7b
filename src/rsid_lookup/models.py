"""Data models for variant lookups."""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .exceptions import BatchExecutionError, RowParseWarning

RESULT_COLUMNS = ("chromosome", "rsID", "position", "allele1", "allele2")


@dataclass(frozen=True)
class VariantRecord:
    """One input variant, validated and immutable."""

    chromosome: str
    position: int
    allele1: str
    allele2: str


@dataclass(frozen=True)
class Batch:
    """A consecutive group of input variants queried together."""

    index: int
    records: tuple[VariantRecord, ...]

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class MatchedSNP:
    """A reference SNP that matched an input variant."""

    chromosome: str
    rsID: str
    position: int
    allele1: str
    allele2: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "chromosome": self.chromosome,
            "rsID": self.rsID,
            "position": self.position,
            "allele1": self.allele1,
            "allele2": self.allele2,
        }

    def to_tuple(self) -> tuple[str, str, int, str, str]:
        return (self.chromosome, self.rsID, self.position, self.allele1, self.allele2)


@dataclass
class VariantTable:
    """Input rows with named columns."""

    columns: tuple[str, ...]
    rows: Sequence[Mapping[str, Any]]

    @classmethod
    def from_records(cls, rows: Sequence[Mapping[str, Any]]) -> "VariantTable":
        """Build a table whose columns are the keys of the first row."""
        rows = list(rows)
        columns = tuple(rows[0].keys()) if rows else ()
        return cls(columns=columns, rows=rows)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass
class ResultTable:
    """Matched SNPs in batch order, with the diagnostics of the run.

    Equality compares rows only; diagnostics are observational.
    """

    rows: list[MatchedSNP] = field(default_factory=list)
    failed_batches: list[BatchExecutionError] = field(default_factory=list, compare=False)
    row_warnings: list[RowParseWarning] = field(default_factory=list, compare=False)
    batches_total: int = field(default=0, compare=False)

    columns = RESULT_COLUMNS

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[MatchedSNP]:
        return iter(self.rows)

    @property
    def ok(self) -> bool:
        """True when every batch ran and no row was dropped."""
        return not self.failed_batches and not self.row_warnings

    def to_dicts(self) -> list[dict[str, Any]]:
        return [row.to_dict() for row in self.rows]

    def to_tuples(self) -> list[tuple[str, str, int, str, str]]:
        return [row.to_tuple() for row in self.rows]
