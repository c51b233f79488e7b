"""Input validation utilities."""

import math
import re
from typing import Any

from ..exceptions import ConfigError

TABLE_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_table_name(value: Any) -> str:
    """Validate a reference table name.

    The table name is interpolated into the statement bare, without quoting,
    so it must be a plain SQL identifier.

    Raises:
        ConfigError: If the name is not a string or not an identifier
    """
    if not isinstance(value, str) or not TABLE_NAME_PATTERN.match(value):
        raise ConfigError(
            f"Invalid table_name: {value!r}. "
            "Expected a letter or underscore followed by letters, digits or underscores"
        )
    return value


def validate_batch_size(value: Any) -> int:
    """Validate batch size is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"batch_size must be an integer, got {type(value).__name__}")
    if value < 1:
        raise ConfigError(f"batch_size must be positive, got {value}")
    return value


def validate_workers(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"workers must be an integer, got {type(value).__name__}")
    if value < 1:
        raise ConfigError(f"workers must be positive, got {value}")
    return value


def validate_timeout(value: Any) -> float | None:
    """Validate a per-batch timeout in seconds; None disables it."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"timeout must be a number, got {type(value).__name__}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"timeout must be positive, got {value}")
    return float(value)


def coerce_position(value: Any) -> int | None:
    """Convert a position cell to int.

    Accepts ints, integral floats (e.g. 123456.0) and decimal strings.

    Returns:
        The position, or None if the value is not an integral number
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                return None
            if math.isfinite(number) and number.is_integer():
                return int(number)
    return None


def coerce_text(value: Any) -> str | None:
    """Convert a chromosome or allele cell to a stripped, non-empty string."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer():
            value = int(value)
    text = str(value).strip()
    return text or None
