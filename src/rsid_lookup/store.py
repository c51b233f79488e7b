"""Read-only access to the reference SNP database.

Two backends are supported:

- SQLite files, such as the 1000 Genomes bim-derived reference database.
  Each query opens its own read-only connection in a worker thread, so
  concurrent batches never share a connection.
- PostgreSQL via an asyncpg pool, with read-only sessions.
"""

import asyncio
import logging
import sqlite3
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from contextlib import closing
from pathlib import Path
from typing import Any

import asyncpg

from .exceptions import ConfigError, StoreQueryError
from .predicates import PlaceholderStyle
from .utils.validators import validate_table_name

logger = logging.getLogger(__name__)

POSTGRES_SCHEMES = ("postgres://", "postgresql://")


class ReferenceStore(ABC):
    """A read-only source of reference SNP rows."""

    placeholder_style: PlaceholderStyle
    max_parameters: int

    @abstractmethod
    async def connect(self) -> None:
        """Open the store. Raises ConfigError if it is unreachable."""

    @abstractmethod
    async def close(self) -> None:
        """Release any connections held by the store."""

    @abstractmethod
    async def fetch(
        self, sql: str, params: Sequence[Any], timeout: float | None = None
    ) -> list[tuple]:
        """Run a read-only query and return its rows as tuples.

        Raises:
            StoreQueryError: If the query fails
            TimeoutError: If the query runs longer than ``timeout`` seconds
        """

    @abstractmethod
    async def table_exists(self, table_name: str) -> bool:
        """Check whether the reference table exists."""

    async def count_rows(self, table_name: str) -> int:
        table_name = validate_table_name(table_name)
        rows = await self.fetch(f"SELECT COUNT(*) FROM {table_name}", ())
        return int(rows[0][0])

    async def __aenter__(self) -> "ReferenceStore":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class SQLiteReferenceStore(ReferenceStore):
    """Reference store backed by a SQLite database file opened read-only."""

    placeholder_style = PlaceholderStyle.QMARK
    max_parameters = 32766

    def __init__(self, path: Path | str, progress_steps: int = 1000):
        self.path = Path(path)
        self.progress_steps = progress_steps
        self._connected = False

    @property
    def uri(self) -> str:
        return f"{self.path.resolve().as_uri()}?mode=ro"

    def _open(self) -> sqlite3.Connection:
        return sqlite3.connect(self.uri, uri=True, check_same_thread=False)

    def _probe(self) -> None:
        with closing(self._open()) as conn:
            conn.execute("SELECT name FROM sqlite_master LIMIT 1").fetchall()

    async def connect(self) -> None:
        if not self.path.is_file():
            raise ConfigError(f"Reference database not found: {self.path}")
        try:
            await asyncio.to_thread(self._probe)
        except sqlite3.Error as e:
            raise ConfigError(f"Cannot open reference database {self.path}: {e}") from e
        self._connected = True
        logger.debug("Opened SQLite reference database %s (read-only)", self.path)

    async def close(self) -> None:
        self._connected = False

    def _fetch_sync(self, sql: str, params: Sequence[Any], timeout: float | None) -> list[tuple]:
        deadline = time.monotonic() + timeout if timeout is not None else None
        try:
            with closing(self._open()) as conn:
                if deadline is not None:
                    conn.set_progress_handler(
                        lambda: int(time.monotonic() > deadline), self.progress_steps
                    )
                return [tuple(row) for row in conn.execute(sql, tuple(params)).fetchall()]
        except sqlite3.OperationalError as e:
            if deadline is not None and time.monotonic() > deadline:
                raise TimeoutError(f"query exceeded {timeout:g}s") from e
            raise StoreQueryError(str(e)) from e
        except sqlite3.Error as e:
            raise StoreQueryError(str(e)) from e
        except (OverflowError, ValueError) as e:
            # Values the driver cannot bind, such as out-of-range integers.
            raise StoreQueryError(f"cannot bind query parameters: {e}") from e

    async def fetch(
        self, sql: str, params: Sequence[Any], timeout: float | None = None
    ) -> list[tuple]:
        if not self._connected:
            raise StoreQueryError("reference store is not connected")
        return await asyncio.to_thread(self._fetch_sync, sql, params, timeout)

    async def table_exists(self, table_name: str) -> bool:
        rows = await self.fetch(
            "SELECT 1 FROM sqlite_master WHERE type IN ('table', 'view') AND name = ?",
            (table_name,),
        )
        return bool(rows)


class PostgresReferenceStore(ReferenceStore):
    """Reference store backed by PostgreSQL through an asyncpg pool."""

    placeholder_style = PlaceholderStyle.NUMERIC
    max_parameters = 32767

    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 4):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max(max_size, min_size)
        self.pool: asyncpg.Pool | None = None

    async def connect(self) -> None:
        try:
            self.pool = await asyncpg.create_pool(
                self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
                server_settings={"default_transaction_read_only": "on"},
            )
        except (OSError, TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError) as e:
            raise ConfigError(f"Cannot connect to reference database: {e}") from e
        logger.debug("Opened PostgreSQL reference pool (max_size=%d)", self.max_size)

    async def close(self) -> None:
        if self.pool is not None:
            await self.pool.close()
            self.pool = None

    async def fetch(
        self, sql: str, params: Sequence[Any], timeout: float | None = None
    ) -> list[tuple]:
        if self.pool is None:
            raise StoreQueryError("reference store is not connected")
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(sql, *params, timeout=timeout)
        except (
            OSError, OverflowError, ValueError, asyncpg.PostgresError, asyncpg.InterfaceError
        ) as e:
            raise StoreQueryError(str(e)) from e
        return [tuple(row) for row in rows]

    async def table_exists(self, table_name: str) -> bool:
        rows = await self.fetch("SELECT to_regclass($1) IS NOT NULL", (table_name,))
        return bool(rows[0][0])


def open_store(location: Path | str, workers: int = 1) -> ReferenceStore:
    """Create an unconnected store for a file path or PostgreSQL URL."""
    text = str(location)
    if text.startswith(POSTGRES_SCHEMES):
        return PostgresReferenceStore(text, min_size=1, max_size=workers)
    return SQLiteReferenceStore(location)
