"""Parameter-bound match predicates for reference SNP lookups.

Each variant becomes one condition matching both allele orientations:

    chr = c AND pos = p AND ((A1 = a1 AND A2 = a2) OR (A1 = a2 AND A2 = a1))

Values are always passed as bind parameters; the SQL text only ever
contains column names, operators and placeholders.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from .models import VariantRecord

PARAMS_PER_VARIANT = 6


class PlaceholderStyle(Enum):
    """Bind parameter syntax of a database driver."""

    QMARK = "qmark"  # sqlite3: ?
    NUMERIC = "numeric"  # asyncpg: $1, $2, ...


class Placeholders:
    """Generate successive placeholders for one statement."""

    def __init__(self, style: PlaceholderStyle, start: int = 1):
        self.style = style
        self._next = start

    def __call__(self) -> str:
        index = self._next
        self._next += 1
        if self.style is PlaceholderStyle.NUMERIC:
            return f"${index}"
        return "?"


@dataclass(frozen=True)
class MatchPredicate:
    """A SQL condition and the values bound to its placeholders."""

    sql: str
    params: tuple

    def __post_init__(self) -> None:
        if not self.sql:
            raise ValueError("predicate SQL must not be empty")


def build_predicate(record: VariantRecord, placeholders: Placeholders) -> MatchPredicate:
    """Build the two-orientation match condition for one variant."""
    chr_p, pos_p, a1_p, a2_p, a1_rev_p, a2_rev_p = (placeholders() for _ in range(6))
    sql = (
        f"(chr = {chr_p} AND pos = {pos_p} AND "
        f"((A1 = {a1_p} AND A2 = {a2_p}) OR (A1 = {a1_rev_p} AND A2 = {a2_rev_p})))"
    )
    params = (
        record.chromosome,
        record.position,
        record.allele1,
        record.allele2,
        record.allele2,
        record.allele1,
    )
    return MatchPredicate(sql=sql, params=params)


def combine_predicates(predicates: Sequence[MatchPredicate]) -> MatchPredicate:
    """OR together per-variant predicates into one batch condition.

    The predicates must have been built with a shared Placeholders instance
    so numbered placeholders line up with the concatenated params.
    """
    if not predicates:
        raise ValueError("cannot combine an empty list of predicates")

    sql = " OR ".join(p.sql for p in predicates)
    params: list = []
    for p in predicates:
        params.extend(p.params)
    return MatchPredicate(sql=sql, params=tuple(params))


def build_batch_predicate(
    records: Sequence[VariantRecord], style: PlaceholderStyle
) -> MatchPredicate:
    """Build the combined predicate for a batch of variants."""
    placeholders = Placeholders(style)
    return combine_predicates([build_predicate(r, placeholders) for r in records])


def max_batch_size(max_parameters: int) -> int:
    """Largest batch that fits within a driver's bind-parameter limit."""
    return max_parameters // PARAMS_PER_VARIANT
