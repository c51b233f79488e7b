"""rsid-lookup: batched rsID resolution against a reference SNP database."""

__version__ = "0.1.0"

from .exceptions import (
    BatchExecutionError,
    ConfigError,
    RowParseWarning,
    RsidLookupError,
    SchemaError,
    StoreQueryError,
)
from .lookup import get_rsid, lookup_rsids
from .models import MatchedSNP, ResultTable, VariantRecord, VariantTable

__all__ = [
    "BatchExecutionError",
    "ConfigError",
    "MatchedSNP",
    "ResultTable",
    "RowParseWarning",
    "RsidLookupError",
    "SchemaError",
    "StoreQueryError",
    "VariantRecord",
    "VariantTable",
    "__version__",
    "get_rsid",
    "lookup_rsids",
]
