"""Shared utility modules."""

from .validators import (
    coerce_position,
    coerce_text,
    validate_batch_size,
    validate_table_name,
    validate_timeout,
    validate_workers,
)

__all__ = [
    "coerce_position",
    "coerce_text",
    "validate_batch_size",
    "validate_table_name",
    "validate_timeout",
    "validate_workers",
]
