"""Match group lifecycle: create, edit, confirm and reject.

Every operation takes a ``ReconciliationState`` snapshot and returns a new
one; nothing is mutated in place. Operations naming a group (or transaction)
that does not exist log a warning and return the state unchanged.

Transitions::

    (none)            --create-->  manual
    any active        --edit---->  manual      (same id, new members)
    any active        --confirm->  confirmed
    any active        --reject-->  removed     (members back to unmatched)
"""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from recon.models.recon import (
    GroupStatus,
    MatchGroup,
    ReconciliationState,
)

from .matching import apply_match_groups

logger = logging.getLogger(__name__)


class ReconciliationError(Exception):
    """Base error for reconciliation operations."""

    pass


class InvalidSelection(ReconciliationError):
    """The selected transactions cannot form a match group."""

    pass


@dataclass(frozen=True)
class CreateGroup:
    bank_ids: tuple[str, ...]
    gl_ids: tuple[str, ...]


@dataclass(frozen=True)
class EditGroup:
    group_id: str
    bank_ids: tuple[str, ...]
    gl_ids: tuple[str, ...]


@dataclass(frozen=True)
class ConfirmGroup:
    group_id: str


@dataclass(frozen=True)
class RejectGroup:
    group_id: str


@dataclass(frozen=True)
class AnnotateTransaction:
    transaction_id: str
    notes: str | None


Command = CreateGroup | EditGroup | ConfirmGroup | RejectGroup | AnnotateTransaction


def create_group(
    state: ReconciliationState,
    bank_ids,
    gl_ids,
    now: datetime | None = None,
) -> ReconciliationState:
    """Create a manual group from a user selection.

    Selected transactions that sit in another unconfirmed group are taken
    over: that group is dissolved first. The new group is appended last.

    Raises:
        InvalidSelection: A side is empty, an id is unknown, or a transaction
            belongs to a confirmed group
    """
    now = now or datetime.now(UTC)
    bank_ids, gl_ids = _unique(bank_ids), _unique(gl_ids)
    state = _claim(state, bank_ids, gl_ids)

    bank_map, gl_map = state.bank_by_id(), state.gl_by_id()
    group = MatchGroup.build(
        [bank_map[tx_id] for tx_id in bank_ids],
        [gl_map[tx_id] for tx_id in gl_ids],
        GroupStatus.MANUAL,
        now,
    )

    applied = apply_match_groups(state.bank_transactions, state.gl_transactions, [group])
    logger.info(
        f"Created group {group.id}: {len(bank_ids)} bank / {len(gl_ids)} GL, "
        f"balanced={group.is_balanced}"
    )
    return ReconciliationState(
        bank_transactions=applied.bank_transactions,
        gl_transactions=applied.gl_transactions,
        match_groups=state.match_groups + (group,),
    )


def edit_group(
    state: ReconciliationState,
    group_id: str,
    bank_ids,
    gl_ids,
    now: datetime | None = None,
) -> ReconciliationState:
    """Replace a group's members in place; the group becomes manual.

    The group keeps its id and creation time. Old members are released
    before the new selection is claimed.

    Raises:
        InvalidSelection: Same conditions as ``create_group``
    """
    group = state.find_group(group_id)
    if group is None:
        logger.warning(f"Edit ignored, no match group {group_id}")
        return state

    now = now or datetime.now(UTC)
    bank_ids, gl_ids = _unique(bank_ids), _unique(gl_ids)
    state = _release(state, group)
    state = _claim(state, bank_ids, gl_ids, editing=group_id)

    bank_map, gl_map = state.bank_by_id(), state.gl_by_id()
    updated = group.regrouped(
        [bank_map[tx_id] for tx_id in bank_ids],
        [gl_map[tx_id] for tx_id in gl_ids],
        GroupStatus.MANUAL,
        now,
    )

    applied = apply_match_groups(state.bank_transactions, state.gl_transactions, [updated])
    logger.info(f"Edited group {group_id}: {len(bank_ids)} bank / {len(gl_ids)} GL")
    return ReconciliationState(
        bank_transactions=applied.bank_transactions,
        gl_transactions=applied.gl_transactions,
        match_groups=_replace_group(state.match_groups, updated),
    )


def confirm_group(
    state: ReconciliationState,
    group_id: str,
    now: datetime | None = None,
) -> ReconciliationState:
    """Mark a group confirmed; its members become matched."""
    group = state.find_group(group_id)
    if group is None:
        logger.warning(f"Confirm ignored, no match group {group_id}")
        return state

    confirmed = replace(group, status=GroupStatus.CONFIRMED, updated_at=now or datetime.now(UTC))
    applied = apply_match_groups(state.bank_transactions, state.gl_transactions, [confirmed])
    logger.info(f"Confirmed group {group_id}")
    return ReconciliationState(
        bank_transactions=applied.bank_transactions,
        gl_transactions=applied.gl_transactions,
        match_groups=_replace_group(state.match_groups, confirmed),
    )


def reject_group(state: ReconciliationState, group_id: str) -> ReconciliationState:
    """Remove a group and return its members to unmatched (or to another group listing them)."""
    group = state.find_group(group_id)
    if group is None:
        logger.warning(f"Reject ignored, no match group {group_id}")
        return state

    logger.info(f"Rejected group {group_id}")
    return _dissolve(state, group)


def annotate_transaction(
    state: ReconciliationState,
    transaction_id: str,
    notes: str | None,
) -> ReconciliationState:
    """Set the notes of a bank or GL transaction."""
    if transaction_id in state.bank_by_id():
        return replace(
            state,
            bank_transactions=tuple(
                tx.with_notes(notes) if tx.id == transaction_id else tx
                for tx in state.bank_transactions
            ),
        )
    if transaction_id in state.gl_by_id():
        return replace(
            state,
            gl_transactions=tuple(
                tx.with_notes(notes) if tx.id == transaction_id else tx
                for tx in state.gl_transactions
            ),
        )

    logger.warning(f"Note ignored, no transaction {transaction_id}")
    return state


class MatchGroupLifecycle:
    """Applies lifecycle commands to reconciliation state."""

    def dispatch(
        self,
        state: ReconciliationState,
        command: Command,
        now: datetime | None = None,
    ) -> ReconciliationState:
        """Apply one command and return the resulting state.

        Raises:
            InvalidSelection: From create and edit commands
            TypeError: Unknown command type
        """
        if isinstance(command, CreateGroup):
            return create_group(state, command.bank_ids, command.gl_ids, now)
        elif isinstance(command, EditGroup):
            return edit_group(state, command.group_id, command.bank_ids, command.gl_ids, now)
        elif isinstance(command, ConfirmGroup):
            return confirm_group(state, command.group_id, now)
        elif isinstance(command, RejectGroup):
            return reject_group(state, command.group_id)
        elif isinstance(command, AnnotateTransaction):
            return annotate_transaction(state, command.transaction_id, command.notes)
        raise TypeError(f"Unsupported lifecycle command: {command!r}")


def _unique(ids) -> tuple[str, ...]:
    """Drop repeated ids, keeping first-seen order."""
    return tuple(dict.fromkeys(ids))


def _claim(
    state: ReconciliationState,
    bank_ids: tuple[str, ...],
    gl_ids: tuple[str, ...],
    editing: str | None = None,
) -> ReconciliationState:
    """Validate a selection and dissolve groups it takes members from."""
    if not bank_ids or not gl_ids:
        raise InvalidSelection("A match group needs at least one bank and one GL transaction")

    bank_map, gl_map = state.bank_by_id(), state.gl_by_id()
    missing = [tx_id for tx_id in bank_ids if tx_id not in bank_map]
    missing += [tx_id for tx_id in gl_ids if tx_id not in gl_map]
    if missing:
        raise InvalidSelection(f"Unknown transactions: {', '.join(missing)}")

    selected = [bank_map[tx_id] for tx_id in bank_ids] + [gl_map[tx_id] for tx_id in gl_ids]
    owner_ids = _unique(
        tx.match_group for tx in selected if tx.match_group and tx.match_group != editing
    )

    owners = [g for g in (state.find_group(owner_id) for owner_id in owner_ids) if g is not None]
    for owner in owners:
        if owner.status == GroupStatus.CONFIRMED:
            raise InvalidSelection(f"Selection includes transactions confirmed in group {owner.id}")

    for owner in owners:
        logger.info(f"Dissolving group {owner.id} to reassign its transactions")
        state = _dissolve(state, owner)
    return state


def _release(state: ReconciliationState, group: MatchGroup) -> ReconciliationState:
    """Reset members still pointing at the group to unmatched.

    A released transaction that another active group also lists (a fuzzy
    double claim) goes back to that group instead.
    """
    bank_ids = {tx.id for tx in state.bank_transactions if tx.match_group == group.id}
    gl_ids = {tx.id for tx in state.gl_transactions if tx.match_group == group.id}
    state = replace(
        state,
        bank_transactions=tuple(
            tx.released() if tx.id in bank_ids else tx for tx in state.bank_transactions
        ),
        gl_transactions=tuple(
            tx.released() if tx.id in gl_ids else tx for tx in state.gl_transactions
        ),
    )
    return _restore_shared(state, bank_ids, gl_ids, group.id)


def _restore_shared(
    state: ReconciliationState,
    bank_ids: set[str],
    gl_ids: set[str],
    released_from: str,
) -> ReconciliationState:
    """Point released transactions back at other groups that list them."""
    shared = []
    for group in state.match_groups:
        if group.id == released_from or not group.is_active:
            continue
        shared_bank = tuple(tx_id for tx_id in group.bank_transaction_ids if tx_id in bank_ids)
        shared_gl = tuple(tx_id for tx_id in group.gl_transaction_ids if tx_id in gl_ids)
        if shared_bank or shared_gl:
            # Only the shared members are re-pointed
            shared.append(
                replace(group, bank_transaction_ids=shared_bank, gl_transaction_ids=shared_gl)
            )

    if not shared:
        return state

    applied = apply_match_groups(state.bank_transactions, state.gl_transactions, shared)
    logger.info(
        f"Returned transactions released from {released_from} to {len(shared)} other group(s)"
    )
    return replace(
        state,
        bank_transactions=applied.bank_transactions,
        gl_transactions=applied.gl_transactions,
    )


def _dissolve(state: ReconciliationState, group: MatchGroup) -> ReconciliationState:
    state = _release(state, group)
    return replace(
        state,
        match_groups=tuple(g for g in state.match_groups if g.id != group.id),
    )


def _replace_group(groups: tuple[MatchGroup, ...], updated: MatchGroup) -> tuple[MatchGroup, ...]:
    return tuple(updated if g.id == updated.id else g for g in groups)
