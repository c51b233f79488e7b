"""Conversion of raw store rows into MatchedSNP records."""

import logging
from collections.abc import Sequence
from typing import Any

from .exceptions import RowParseWarning
from .models import RESULT_COLUMNS, MatchedSNP
from .utils.validators import coerce_position

logger = logging.getLogger(__name__)


def parse_row(row: Sequence[Any]) -> MatchedSNP:
    """Map one (chr, rsID, pos, A1, A2) row positionally to a MatchedSNP.

    Raises:
        ValueError: If the row does not have exactly five fields or the
            position is not an integer
    """
    if len(row) != len(RESULT_COLUMNS):
        raise ValueError(f"expected {len(RESULT_COLUMNS)} fields, got {len(row)}")

    chromosome, rsid, position, allele1, allele2 = row
    pos = coerce_position(position)
    if pos is None:
        raise ValueError(f"position is not an integer: {position!r}")
    if rsid is None:
        raise ValueError("rsID is missing")

    return MatchedSNP(
        chromosome=str(chromosome),
        rsID=str(rsid),
        position=pos,
        allele1=str(allele1),
        allele2=str(allele2),
    )


def parse_rows(
    batch_index: int, rows: Sequence[Sequence[Any]]
) -> tuple[list[MatchedSNP], list[RowParseWarning]]:
    """Parse all rows returned for a batch.

    Malformed rows are dropped and reported as RowParseWarning; they never
    fail the batch.
    """
    matches: list[MatchedSNP] = []
    warnings: list[RowParseWarning] = []

    for row in rows:
        try:
            matches.append(parse_row(row))
        except (TypeError, ValueError) as e:
            warning = RowParseWarning(batch_index, row, str(e))
            logger.warning("%s", warning)
            warnings.append(warning)

    return matches, warnings
