"""Bank statement to general ledger reconciliation engine."""

__version__ = "1.0.0"
