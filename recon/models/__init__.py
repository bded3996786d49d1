"""Reconciliation records."""

from .mapping import BankColumnMapping, ColumnMapping, GLColumnMapping
from .recon import (
    BankTransaction,
    GLTransaction,
    GroupStatus,
    MatchGroup,
    MatchStatus,
    ProjectStatus,
    ReconciliationProject,
    ReconciliationState,
    Transaction,
)

__all__ = [
    "BankTransaction",
    "GLTransaction",
    "Transaction",
    "MatchGroup",
    "MatchStatus",
    "GroupStatus",
    "ProjectStatus",
    "ReconciliationProject",
    "ReconciliationState",
    "ColumnMapping",
    "BankColumnMapping",
    "GLColumnMapping",
]
