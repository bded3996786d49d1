"""Project match groups onto transaction collections."""

from dataclasses import dataclass

from recon.models.recon import BankTransaction, GLTransaction, MatchGroup, MatchStatus


@dataclass(frozen=True)
class AppliedMatches:
    """Transaction collections after applying match groups."""

    bank_transactions: tuple[BankTransaction, ...]
    gl_transactions: tuple[GLTransaction, ...]


def apply_match_groups(
    bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
    gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
    match_groups: list[MatchGroup] | tuple[MatchGroup, ...],
) -> AppliedMatches:
    """Set match status and group reference on every grouped transaction.

    Members of confirmed groups become ``matched``, members of any other
    group ``potential``. Touched records are replaced by new objects;
    untouched ones pass through. Ids unknown to either collection are
    ignored. When several groups name the same transaction, the last wins.

    Rejected groups should not be passed in.
    """
    bank_updates: dict[str, tuple[str, MatchStatus]] = {}
    gl_updates: dict[str, tuple[str, MatchStatus]] = {}

    for group in match_groups:
        status = group.member_status
        for tx_id in group.bank_transaction_ids:
            bank_updates[tx_id] = (group.id, status)
        for tx_id in group.gl_transaction_ids:
            gl_updates[tx_id] = (group.id, status)

    return AppliedMatches(
        bank_transactions=tuple(_apply(tx, bank_updates) for tx in bank_transactions),
        gl_transactions=tuple(_apply(tx, gl_updates) for tx in gl_transactions),
    )


def _apply(tx, updates: dict[str, tuple[str, MatchStatus]]):
    update = updates.get(tx.id)
    if update is None:
        return tx
    group_id, status = update
    return tx.assigned_to(group_id, status)
