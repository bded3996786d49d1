"""Reconciliation progress statistics."""

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Any

from recon.models.recon import (
    BankTransaction,
    GLTransaction,
    MatchGroup,
    MatchStatus,
    sum_amounts,
)


@dataclass(frozen=True)
class ReconciliationStats:
    """Totals and counts derived from the current ledgers and groups."""

    bank_total: Decimal
    gl_total: Decimal
    difference: Decimal
    total_bank_transactions: int
    total_gl_transactions: int
    unmatched_bank_transactions: int
    unmatched_gl_transactions: int
    potential_bank_transactions: int
    potential_gl_transactions: int
    matched_bank_transactions: int
    matched_gl_transactions: int
    unmatched_bank_total: Decimal
    unmatched_gl_total: Decimal
    match_groups: int
    matched_rate: float

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, amounts as strings."""
        return {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in asdict(self).items()
        }


def compute_stats(
    bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
    gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
    match_groups: list[MatchGroup] | tuple[MatchGroup, ...],
) -> ReconciliationStats:
    """Compute reconciliation totals, per-status counts and match rate.

    The match rate counts only confirmed (``matched``) bank lines and is 0
    when there are no bank lines.
    """
    bank_by_status = _by_status(bank_transactions)
    gl_by_status = _by_status(gl_transactions)

    bank_total = sum_amounts(bank_transactions)
    gl_total = sum_amounts(gl_transactions)

    matched_bank = len(bank_by_status[MatchStatus.MATCHED])
    total_bank = len(bank_transactions)
    matched_rate = matched_bank / total_bank * 100 if total_bank else 0.0

    return ReconciliationStats(
        bank_total=bank_total,
        gl_total=gl_total,
        difference=bank_total - gl_total,
        total_bank_transactions=total_bank,
        total_gl_transactions=len(gl_transactions),
        unmatched_bank_transactions=len(bank_by_status[MatchStatus.UNMATCHED]),
        unmatched_gl_transactions=len(gl_by_status[MatchStatus.UNMATCHED]),
        potential_bank_transactions=len(bank_by_status[MatchStatus.POTENTIAL]),
        potential_gl_transactions=len(gl_by_status[MatchStatus.POTENTIAL]),
        matched_bank_transactions=matched_bank,
        matched_gl_transactions=len(gl_by_status[MatchStatus.MATCHED]),
        unmatched_bank_total=sum_amounts(bank_by_status[MatchStatus.UNMATCHED]),
        unmatched_gl_total=sum_amounts(gl_by_status[MatchStatus.UNMATCHED]),
        match_groups=sum(1 for group in match_groups if group.is_active),
        matched_rate=matched_rate,
    )


def _by_status(transactions) -> dict[MatchStatus, list]:
    grouped: dict[MatchStatus, list] = {status: [] for status in MatchStatus}
    for tx in transactions:
        grouped[tx.match_status].append(tx)
    return grouped
