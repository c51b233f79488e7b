"""Configuration for rsID lookups.

Settings can come from keyword arguments, a TOML file with an
``[rsid_lookup]`` table, or the ``RSID_LOOKUP_DB`` environment variable
for the reference database location.
"""

import logging
import os
import tomllib
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .batching import ColumnMap
from .exceptions import ConfigError
from .utils.validators import (
    validate_batch_size,
    validate_table_name,
    validate_timeout,
    validate_workers,
)

logger = logging.getLogger(__name__)

DB_PATH_ENV_VAR = "RSID_LOOKUP_DB"
DEFAULT_DB_PATH = "/data1/myl4share/SQLite_base/10000genome_2015v3_GRCh37_bimSQLite.db"

ProgressCallback = Callable[[int, int, int], None]


def default_db_path() -> str:
    return os.environ.get(DB_PATH_ENV_VAR) or DEFAULT_DB_PATH


@dataclass
class LookupConfig:
    """Configuration for a batched rsID lookup."""

    chr_col: str = "chr"
    pos_col: str = "pos"
    a1_col: str = "A1"
    a2_col: str = "A2"
    db_path: str = field(default_factory=default_db_path)
    table_name: str = "snp"
    batch_size: int = 100
    workers: int = 1
    timeout: float | None = 30.0
    verify_table: bool = True
    progress_callback: ProgressCallback | None = None

    def __post_init__(self) -> None:
        validate_batch_size(self.batch_size)
        validate_workers(self.workers)
        validate_table_name(self.table_name)
        self.timeout = validate_timeout(self.timeout)
        self.db_path = str(self.db_path)

    @property
    def column_map(self) -> ColumnMap:
        return ColumnMap(
            chromosome=self.chr_col,
            position=self.pos_col,
            allele1=self.a1_col,
            allele2=self.a2_col,
        )


VALID_FIELDS = {
    "chr_col",
    "pos_col",
    "a1_col",
    "a2_col",
    "db_path",
    "table_name",
    "batch_size",
    "workers",
    "timeout",
    "verify_table",
}

COLUMN_FIELDS = ("chr_col", "pos_col", "a1_col", "a2_col")


def validate_config(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigError: If any configuration value is invalid.
    """
    if "batch_size" in config_dict:
        validate_batch_size(config_dict["batch_size"])

    if "workers" in config_dict:
        validate_workers(config_dict["workers"])

    if "timeout" in config_dict:
        validate_timeout(config_dict["timeout"])

    if "table_name" in config_dict:
        validate_table_name(config_dict["table_name"])

    for key in COLUMN_FIELDS:
        if key in config_dict:
            value = config_dict[key]
            if not isinstance(value, str) or not value:
                raise ConfigError(f"{key} must be a non-empty string, got {value!r}")

    if "db_path" in config_dict and not isinstance(config_dict["db_path"], str):
        raise ConfigError(
            f"db_path must be a string, got {type(config_dict['db_path']).__name__}"
        )

    if "verify_table" in config_dict and not isinstance(config_dict["verify_table"], bool):
        raise ConfigError(
            f"verify_table must be a boolean, got {type(config_dict['verify_table']).__name__}"
        )


def load_config(config_path: Path, overrides: dict[str, Any] | None = None) -> LookupConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to the TOML configuration file.
        overrides: Optional dict of values to override loaded config.

    Returns:
        LookupConfig instance with loaded values.

    Raises:
        ConfigError: If the file is missing, unreadable, or holds invalid values.
    """
    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e

    config_dict = dict(toml_data.get("rsid_lookup", {}))

    if overrides:
        config_dict.update({k: v for k, v in overrides.items() if v is not None})

    unknown = sorted(set(config_dict) - VALID_FIELDS)
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    validate_config(config_dict)

    filtered_config = {k: v for k, v in config_dict.items() if k in VALID_FIELDS}

    return LookupConfig(**filtered_config)
