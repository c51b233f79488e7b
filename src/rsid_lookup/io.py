"""Reading variant tables and writing lookup results as delimited text."""

import csv
import gzip
import logging
from pathlib import Path
from typing import IO

from .models import RESULT_COLUMNS, ResultTable, VariantTable

logger = logging.getLogger(__name__)


def _open_text(path: Path, mode: str) -> IO[str]:
    if path.suffix == ".gz":
        return gzip.open(path, f"{mode}t", newline="")
    return open(path, mode, newline="")


def infer_delimiter(path: Path) -> str:
    """Comma for .csv / .csv.gz files, tab otherwise."""
    suffixes = [s.lower() for s in path.suffixes]
    if suffixes and suffixes[-1] == ".gz":
        suffixes = suffixes[:-1]
    return "," if suffixes and suffixes[-1] == ".csv" else "\t"


def read_variant_table(path: Path, delimiter: str | None = None) -> VariantTable:
    """Read a delimited variant file with a header row.

    Args:
        path: Path to a TSV or CSV file (can be gzipped)
        delimiter: Field separator; inferred from the extension if None

    Returns:
        VariantTable with the header as columns and one dict per data row
    """
    delimiter = delimiter or infer_delimiter(path)

    with _open_text(path, "r") as f:
        reader = csv.DictReader(f, delimiter=delimiter)
        rows = list(reader)
        columns = tuple(reader.fieldnames or ())

    logger.debug("Read %d variants from %s", len(rows), path.name)
    return VariantTable(columns=columns, rows=rows)


def write_result_table(table: ResultTable, path: Path) -> int:
    """Write matched SNPs as a tab-separated file with a header row.

    Returns:
        Number of data rows written
    """
    with _open_text(path, "w") as f:
        writer = csv.writer(f, delimiter="\t", lineterminator="\n")
        writer.writerow(RESULT_COLUMNS)
        writer.writerows(table.to_tuples())

    logger.debug("Wrote %d matches to %s", len(table), path.name)
    return len(table)
