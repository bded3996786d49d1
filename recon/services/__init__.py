"""Services for reconciliation."""

from .ingest import ColumnMappingError, map_bank_rows, map_gl_rows
from .lifecycle import InvalidSelection, MatchGroupLifecycle, ReconciliationError
from .reconcile import MatchingRunResult, ReconciliationWorkspace
from .stats import ReconciliationStats, compute_stats

__all__ = [
    "ReconciliationWorkspace",
    "MatchingRunResult",
    "MatchGroupLifecycle",
    "ReconciliationError",
    "InvalidSelection",
    "ReconciliationStats",
    "compute_stats",
    "ColumnMappingError",
    "map_bank_rows",
    "map_gl_rows",
]
