"""Fuzzy matching for transactions."""

import logging
from collections import Counter
from datetime import UTC, datetime
from decimal import Decimal

from fuzzywuzzy import fuzz, process

from recon.config import settings
from recon.models.recon import BankTransaction, GLTransaction, GroupStatus, MatchGroup

logger = logging.getLogger(__name__)


class FuzzyMatcher:
    """Fuzzy matching engine for bank transactions.

    For each unmatched bank line, in order:
    - Amount within 1% of the bank amount
    - Date within 5 days (falls back to amount-only candidates when none are)
    - Description similar to the GL description (token set ratio)

    Each bank line yields at most one 1:1 group. GL lines are not reserved
    while a run is in progress, so two bank lines may pick the same GL line.
    """

    def __init__(
        self,
        amount_tolerance: Decimal | None = None,
        date_window_days: int | None = None,
        similarity_threshold: int | None = None,
    ):
        """Initialize fuzzy matcher.

        Args:
            amount_tolerance: Allowed difference as a ratio of the bank amount
            date_window_days: Maximum date distance for preferred candidates
            similarity_threshold: Minimum description score (0-100)
        """
        self.amount_tolerance = (
            settings.fuzzy_amount_tolerance if amount_tolerance is None else amount_tolerance
        )
        self.date_window_days = (
            settings.fuzzy_date_window_days if date_window_days is None else date_window_days
        )
        self.similarity_threshold = (
            settings.fuzzy_similarity_threshold
            if similarity_threshold is None
            else similarity_threshold
        )

    def match(
        self,
        bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
        gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
        now: datetime | None = None,
    ) -> list[MatchGroup]:
        """Find potential matches among unmatched transactions.

        Args:
            bank_transactions: Bank lines, in caller order
            gl_transactions: GL lines
            now: Timestamp for the created groups (defaults to now)

        Returns:
            New 1:1 match groups with status ``auto``
        """
        unmatched_bank = [tx for tx in bank_transactions if tx.is_unmatched]
        unmatched_gl = [tx for tx in gl_transactions if tx.is_unmatched]
        if not unmatched_bank or not unmatched_gl:
            return []

        now = now or datetime.now(UTC)
        descriptions = {tx.id: tx.description for tx in unmatched_gl}

        groups: list[MatchGroup] = []
        for bank_tx in unmatched_bank:
            gl_tx = self._best_candidate(bank_tx, unmatched_gl, descriptions)
            if gl_tx is not None:
                groups.append(MatchGroup.build([bank_tx], [gl_tx], GroupStatus.AUTO, now))

        self._report_double_claims(groups)
        logger.info(
            f"Fuzzy matching: {len(groups)} potential groups from {len(unmatched_bank)} bank lines"
        )
        return groups

    def _best_candidate(
        self,
        bank_tx: BankTransaction,
        unmatched_gl: list[GLTransaction],
        descriptions: dict[str, str],
    ) -> GLTransaction | None:
        """Pick the best GL line for a bank line, or None."""
        candidates = [tx for tx in unmatched_gl if self._amount_within_tolerance(bank_tx, tx)]
        if not candidates:
            return None

        nearby = [tx for tx in candidates if self._date_within_window(bank_tx, tx)]
        working = {tx.id: tx for tx in (nearby or candidates)}

        # Search every unmatched GL description, then keep the working set.
        # Results come back best first; ties keep GL order.
        results = process.extractBests(
            bank_tx.description,
            descriptions,
            scorer=fuzz.token_set_ratio,
            score_cutoff=self.similarity_threshold,
            limit=None,
        )
        for _description, score, gl_id in results:
            if gl_id in working:
                logger.debug(f"Fuzzy candidate {gl_id} for {bank_tx.id} (score {score})")
                return working[gl_id]

        return None

    def _amount_within_tolerance(self, bank_tx: BankTransaction, gl_tx: GLTransaction) -> bool:
        """Check if the GL amount is within the ratio tolerance of the bank amount."""
        if bank_tx.amount == 0:
            return False
        variance = abs(bank_tx.amount - gl_tx.amount) / abs(bank_tx.amount)
        return variance < self.amount_tolerance

    def _date_within_window(self, bank_tx: BankTransaction, gl_tx: GLTransaction) -> bool:
        return abs((bank_tx.date - gl_tx.date).days) <= self.date_window_days

    def _report_double_claims(self, groups: list[MatchGroup]) -> None:
        """Warn about GL lines proposed to more than one bank line."""
        claims = Counter(gl_id for group in groups for gl_id in group.gl_transaction_ids)
        doubled = sorted(gl_id for gl_id, count in claims.items() if count > 1)
        if doubled:
            logger.warning(f"GL lines proposed for more than one bank line: {', '.join(doubled)}")
