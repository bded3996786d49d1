"""Functional entry points to the matching engine.

All functions take and return values; none of them mutate their inputs.
"""

from datetime import datetime

from recon.models.recon import BankTransaction, GLTransaction, MatchGroup
from recon.services.lifecycle import confirm_group, create_group, edit_group, reject_group
from recon.services.matching import (
    AppliedMatches,
    ExactMatcher,
    FuzzyMatcher,
    apply_match_groups,
)
from recon.services.stats import ReconciliationStats, compute_stats

__all__ = [
    "find_exact_matches",
    "find_potential_matches",
    "apply_match_groups",
    "compute_stats",
    "create_group",
    "edit_group",
    "confirm_group",
    "reject_group",
    "AppliedMatches",
    "ReconciliationStats",
]


def find_exact_matches(
    bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
    gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
    now: datetime | None = None,
) -> list[MatchGroup]:
    """Propose groups for unmatched transactions with identical amounts."""
    return ExactMatcher().match(bank_transactions, gl_transactions, now)


def find_potential_matches(
    bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
    gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
    now: datetime | None = None,
) -> list[MatchGroup]:
    """Propose 1:1 groups by amount tolerance, date proximity and description."""
    return FuzzyMatcher().match(bank_transactions, gl_transactions, now)
