"""Observability module for the picklist matcher.

Provides structured logging with run correlation and Prometheus metrics.
"""

from .logging_config import configure_logging, get_logger, JSONFormatter, RunIDFilter
from .metrics import (
    match_outcomes_total,
    match_duration_seconds,
    picklist_lines_total,
    catalog_entries,
)
from .run_context import run_id_var, get_run_id, set_run_id, reset_run_id, generate_run_id

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "JSONFormatter",
    "RunIDFilter",
    # Metrics
    "match_outcomes_total",
    "match_duration_seconds",
    "picklist_lines_total",
    "catalog_entries",
    # Run ID
    "run_id_var",
    "get_run_id",
    "set_run_id",
    "reset_run_id",
    "generate_run_id",
]
