"""Exact matching for transactions."""

import logging
from collections import Counter, defaultdict
from datetime import UTC, datetime

from recon.models.recon import BankTransaction, GLTransaction, GroupStatus, MatchGroup

logger = logging.getLogger(__name__)


class ExactMatcher:
    """Exact matching engine for bank transactions.

    Only unmatched transactions take part; everything else is ignored.
    Amounts are compared after rounding to the cent:
    - Pass A pairs a bank line 1:1 with a GL line when the amount is unambiguous
    - Pass B gives each remaining bank line every remaining GL line of its amount

    Bank lines are visited in the order given, so earlier lines win ties.
    """

    def match(
        self,
        bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
        gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
        now: datetime | None = None,
    ) -> list[MatchGroup]:
        """Find exact amount matches.

        Args:
            bank_transactions: Bank lines, in caller order
            gl_transactions: GL lines, in caller order
            now: Timestamp for the created groups (defaults to now)

        Returns:
            New match groups with status ``auto``
        """
        now = now or datetime.now(UTC)
        gl_by_amount = self._bucket_by_amount(gl_transactions)
        eligible_bank = [tx for tx in bank_transactions if tx.is_unmatched]

        groups: list[MatchGroup] = []
        consumed_bank: set[str] = set()
        consumed_gl: set[str] = set()

        # Pass A: one-to-one. A bucket is unambiguous when a single GL line is
        # left, or when its GL lines and waiting bank lines pair off exactly.
        waiting = Counter(tx.amount_key for tx in eligible_bank)
        for bank_tx in eligible_bank:
            key = bank_tx.amount_key
            available = self._available(gl_by_amount.get(key, []), consumed_gl)
            if not available:
                continue
            if len(available) != 1 and len(available) != waiting[key]:
                continue

            gl_tx = available[0]
            groups.append(MatchGroup.build([bank_tx], [gl_tx], GroupStatus.AUTO, now))
            consumed_bank.add(bank_tx.id)
            consumed_gl.add(gl_tx.id)
            waiting[key] -= 1

        one_to_one = len(groups)

        # Pass B: one-to-many
        for bank_tx in eligible_bank:
            if bank_tx.id in consumed_bank:
                continue

            available = self._available(gl_by_amount.get(bank_tx.amount_key, []), consumed_gl)
            if not available:
                continue

            group = MatchGroup.build([bank_tx], available, GroupStatus.AUTO, now)
            if not group.is_balanced:
                logger.debug(
                    f"Unbalanced exact group for {bank_tx.id}: "
                    f"{group.bank_total} vs {group.gl_total} over {len(available)} GL lines"
                )
            groups.append(group)
            consumed_bank.add(bank_tx.id)
            consumed_gl.update(tx.id for tx in available)

        logger.info(
            f"Exact matching: {one_to_one} one-to-one, "
            f"{len(groups) - one_to_one} one-to-many groups"
        )
        return groups

    def _bucket_by_amount(
        self,
        gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
    ) -> dict[str, list[GLTransaction]]:
        """Group unmatched GL lines by rounded amount, preserving order."""
        buckets: dict[str, list[GLTransaction]] = defaultdict(list)
        for tx in gl_transactions:
            if tx.is_unmatched:
                buckets[tx.amount_key].append(tx)
        return buckets

    def _available(
        self,
        bucket: list[GLTransaction],
        consumed: set[str],
    ) -> list[GLTransaction]:
        return [tx for tx in bucket if tx.id not in consumed]
