"""Logging utilities for stagbc."""

from .logger import (
    BCFormatter,
    BCLogger,
    LoggedOperation,
    configure_logging,
    get_logger,
    log_bc_summary,
    log_constraint_counts,
    summarize_settings,
)

__all__ = [
    "BCFormatter",
    "BCLogger",
    "LoggedOperation",
    "configure_logging",
    "get_logger",
    "log_bc_summary",
    "log_constraint_counts",
    "summarize_settings",
]
