"""Shared utilities: exceptions and logging."""

from .bc_logging import LoggedOperation, configure_logging, get_logger
from .exceptions import (
    BCConfigurationError,
    BCError,
    CheckpointError,
    DimensionMismatchError,
    IndexShiftError,
    validate_array_dimensions,
)

__all__ = [
    "BCConfigurationError",
    "BCError",
    "CheckpointError",
    "DimensionMismatchError",
    "IndexShiftError",
    "LoggedOperation",
    "configure_logging",
    "get_logger",
    "validate_array_dimensions",
]
