"""Exception hierarchy for rsID lookups.

Only SchemaError and ConfigError abort a lookup. BatchExecutionError and
RowParseWarning are recorded on the result table and the run continues.
"""

from typing import Any


class RsidLookupError(Exception):
    """Base class for all rsid_lookup errors."""

    pass


class SchemaError(RsidLookupError):
    """Raised when the input table lacks a required column or value."""

    def __init__(self, message: str, missing_columns: list[str] | None = None):
        super().__init__(message)
        self.missing_columns = missing_columns or []


class ConfigError(RsidLookupError):
    """Raised for invalid settings or an unusable reference store."""

    pass


class StoreQueryError(RsidLookupError):
    """Raised by a reference store when a query cannot be completed."""

    pass


class BatchExecutionError(RsidLookupError):
    """A single batch's store query failed; the rest of the run continues."""

    def __init__(self, batch_index: int, cause: BaseException | str):
        self.batch_index = batch_index
        self.cause = cause
        super().__init__(f"batch {batch_index + 1} failed: {cause}")


class RowParseWarning(UserWarning):
    """A returned row did not fit the output schema and was dropped."""

    def __init__(self, batch_index: int, row: Any, reason: str):
        self.batch_index = batch_index
        self.row = row
        self.reason = reason
        super().__init__(f"batch {batch_index + 1}: dropped row {row!r}: {reason}")
