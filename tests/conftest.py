"""Pytest configuration and fixtures for rsid-lookup tests."""

import sqlite3
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from rsid_lookup.exceptions import StoreQueryError
from rsid_lookup.predicates import PlaceholderStyle
from rsid_lookup.store import ReferenceStore, SQLiteReferenceStore

# (chr, rsID, pos, A1, A2) as stored in a bim-derived reference table.
REFERENCE_ROWS = [
    ("1", "rs1", 123456, "G", "A"),
    ("1", "rs2", 123457, "C", "T"),
    ("2", "rs3", 234567, "C", "T"),
    ("3", "rs4", 345678, "G", "T"),
    ("X", "rs5", 1000, "A", "C"),
    ("1", "rs6", 500, "AT", "A"),
    ("5", "rs8", 800, "A", "G"),
    ("5", "rs9", 800, "G", "A"),
    ("7", "rs10", 700, "A'", "G"),
]


def create_reference_db(path: Path, rows=REFERENCE_ROWS, table_name: str = "snp") -> Path:
    """Create a small SQLite reference database with the bim-style schema."""
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            f"CREATE TABLE {table_name} "
            "(chr TEXT NOT NULL, rsID TEXT, pos INTEGER NOT NULL, A1 TEXT NOT NULL, A2 TEXT NOT NULL)"
        )
        conn.execute(f"CREATE INDEX idx_{table_name}_chr_pos ON {table_name} (chr, pos)")
        conn.executemany(f"INSERT INTO {table_name} VALUES (?, ?, ?, ?, ?)", rows)
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def reference_db(tmp_path) -> Path:
    """Path to a populated SQLite reference database."""
    return create_reference_db(tmp_path / "reference.db")


@pytest.fixture
async def sqlite_store(reference_db):
    """Connected read-only store over the reference database."""
    store = SQLiteReferenceStore(reference_db)
    await store.connect()
    yield store
    await store.close()


class RecordingStore(ReferenceStore):
    """Delegating store that records every query and can fail on demand.

    A query fails with StoreQueryError when any bound value is in ``poison``.
    """

    def __init__(self, inner: ReferenceStore, poison: set | None = None):
        self.inner = inner
        self.poison = poison or set()
        self.placeholder_style = inner.placeholder_style
        self.max_parameters = inner.max_parameters
        self.queries: list[tuple[str, tuple]] = []

    async def connect(self) -> None:
        await self.inner.connect()

    async def close(self) -> None:
        await self.inner.close()

    async def fetch(
        self, sql: str, params: Sequence[Any], timeout: float | None = None
    ) -> list[tuple]:
        self.queries.append((sql, tuple(params)))
        if self.poison.intersection(params):
            raise StoreQueryError("simulated store outage")
        return await self.inner.fetch(sql, params, timeout=timeout)

    async def table_exists(self, table_name: str) -> bool:
        return await self.inner.table_exists(table_name)


class StaticStore(ReferenceStore):
    """Store returning canned rows, or raising a canned error, for every query."""

    placeholder_style = PlaceholderStyle.QMARK
    max_parameters = 32766

    def __init__(self, rows: list | None = None, error: BaseException | None = None):
        self.rows = rows or []
        self.error = error
        self.calls = 0

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def fetch(
        self, sql: str, params: Sequence[Any], timeout: float | None = None
    ) -> list[tuple]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.rows)

    async def table_exists(self, table_name: str) -> bool:
        return True


@pytest.fixture
def variant_rows():
    """Input rows with a forward match, a reverse match, and a miss."""
    return [
        {"chr": "1", "pos": 123456, "A1": "A", "A2": "G"},
        {"chr": "2", "pos": 234567, "A1": "C", "A2": "T"},
        {"chr": "3", "pos": 345678, "A1": "G", "A2": "T"},
        {"chr": "9", "pos": 999999, "A1": "A", "A2": "C"},
    ]


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring a PostgreSQL database")
