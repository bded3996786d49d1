"""Reconciliation workspace - holds state and coordinates the workflow."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime

from recon.models.recon import (
    BankTransaction,
    GLTransaction,
    MatchGroup,
    ProjectStatus,
    ReconciliationProject,
    ReconciliationState,
)

from .lifecycle import (
    AnnotateTransaction,
    Command,
    ConfirmGroup,
    CreateGroup,
    EditGroup,
    MatchGroupLifecycle,
    RejectGroup,
)
from .matching import ExactMatcher, FuzzyMatcher, apply_match_groups
from .stats import ReconciliationStats, compute_stats

logger = logging.getLogger(__name__)


@dataclass
class MatchingRunResult:
    """Result of an automatic matching run."""

    exact_matches: int = 0
    fuzzy_matches: int = 0
    unbalanced_groups: int = 0
    unmatched_bank_transactions: int = 0
    duration_seconds: float = 0.0


class ReconciliationWorkspace:
    """In-memory store for one reconciliation.

    Flow:
    1. Load bank and GL transactions (one batch per imported file)
    2. Run automatic matching (exact -> apply -> fuzzy -> apply)
    3. Review groups: create, edit, confirm, reject
    4. Read progress from ``stats`` and ``project``

    The workspace owns the only mutable reference; the state it holds is an
    immutable snapshot replaced on every action.
    """

    def __init__(
        self,
        project: ReconciliationProject | None = None,
        exact_matcher: ExactMatcher | None = None,
        fuzzy_matcher: FuzzyMatcher | None = None,
    ):
        """Initialize workspace.

        Args:
            project: Project record to keep up to date, if any
            exact_matcher: Exact matcher (default settings if omitted)
            fuzzy_matcher: Fuzzy matcher (default settings if omitted)
        """
        self.project = project
        self.exact_matcher = exact_matcher or ExactMatcher()
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()
        self.lifecycle = MatchGroupLifecycle()
        self.state = ReconciliationState()

    @property
    def bank_transactions(self) -> tuple[BankTransaction, ...]:
        return self.state.bank_transactions

    @property
    def gl_transactions(self) -> tuple[GLTransaction, ...]:
        return self.state.gl_transactions

    @property
    def match_groups(self) -> tuple[MatchGroup, ...]:
        return self.state.match_groups

    @property
    def stats(self) -> ReconciliationStats:
        return compute_stats(
            self.state.bank_transactions,
            self.state.gl_transactions,
            self.state.match_groups,
        )

    def add_bank_transactions(self, transactions: list[BankTransaction]) -> None:
        """Append one imported batch of bank transactions."""
        self.state = replace(
            self.state,
            bank_transactions=self.state.bank_transactions + tuple(transactions),
        )
        if self.project:
            self.project = replace(
                self.project,
                bank_file_count=self.project.bank_file_count + 1,
                bank_transaction_count=len(self.state.bank_transactions),
            )
        logger.info(f"Added {len(transactions)} bank transactions")
        self._touch()

    def add_gl_transactions(self, transactions: list[GLTransaction]) -> None:
        """Append one imported batch of GL transactions."""
        self.state = replace(
            self.state,
            gl_transactions=self.state.gl_transactions + tuple(transactions),
        )
        if self.project:
            self.project = replace(
                self.project,
                gl_file_count=self.project.gl_file_count + 1,
                gl_transaction_count=len(self.state.gl_transactions),
            )
        logger.info(f"Added {len(transactions)} GL transactions")
        self._touch()

    def run_automatic_matching(self) -> MatchingRunResult:
        """Run exact then fuzzy matching over the unmatched transactions.

        New groups are appended to the groups already under review, so the
        run can be repeated at any time.

        Returns:
            MatchingRunResult with statistics
        """
        start_time = datetime.now(UTC)
        now = start_time
        state = self.state

        exact = self.exact_matcher.match(state.bank_transactions, state.gl_transactions, now)
        applied = apply_match_groups(state.bank_transactions, state.gl_transactions, exact)

        fuzzy = self.fuzzy_matcher.match(applied.bank_transactions, applied.gl_transactions, now)
        applied = apply_match_groups(applied.bank_transactions, applied.gl_transactions, fuzzy)

        new_groups = tuple(exact) + tuple(fuzzy)
        self.state = ReconciliationState(
            bank_transactions=applied.bank_transactions,
            gl_transactions=applied.gl_transactions,
            match_groups=state.match_groups + new_groups,
        )
        if self.project:
            self.project = replace(self.project, status=ProjectStatus.IN_PROGRESS)
        self._touch()

        result = MatchingRunResult(
            exact_matches=len(exact),
            fuzzy_matches=len(fuzzy),
            unbalanced_groups=sum(1 for g in new_groups if not g.is_balanced),
            unmatched_bank_transactions=sum(
                1 for tx in self.state.bank_transactions if tx.is_unmatched
            ),
        )
        result.duration_seconds = (datetime.now(UTC) - start_time).total_seconds()
        logger.info(
            f"Automatic matching: {result.exact_matches} exact, {result.fuzzy_matches} fuzzy, "
            f"{result.unmatched_bank_transactions} bank lines left unmatched"
        )
        return result

    def create_match_group(self, bank_ids: list[str], gl_ids: list[str]) -> MatchGroup:
        """Create a manual group and return it."""
        self._dispatch(CreateGroup(tuple(bank_ids), tuple(gl_ids)))
        return self.state.match_groups[-1]

    def update_match_group(self, group_id: str, bank_ids: list[str], gl_ids: list[str]) -> None:
        self._dispatch(EditGroup(group_id, tuple(bank_ids), tuple(gl_ids)))

    def confirm_match_group(self, group_id: str) -> None:
        self._dispatch(ConfirmGroup(group_id))

    def reject_match_group(self, group_id: str) -> None:
        self._dispatch(RejectGroup(group_id))

    def add_transaction_note(self, transaction_id: str, note: str | None) -> None:
        self.state = self.lifecycle.dispatch(self.state, AnnotateTransaction(transaction_id, note))

    def reset(self) -> None:
        """Drop all transactions and groups; the project goes back to draft."""
        self.state = ReconciliationState()
        if self.project:
            self.project = replace(
                self.project,
                status=ProjectStatus.DRAFT,
                bank_file_count=0,
                gl_file_count=0,
                bank_transaction_count=0,
                gl_transaction_count=0,
            )
        self._touch()

    def _dispatch(self, command: Command) -> None:
        self.state = self.lifecycle.dispatch(self.state, command)
        self._touch()

    def _touch(self) -> None:
        """Refresh project progress after a state change."""
        if not self.project:
            return

        stats = self.stats
        # Project progress counts proposed and confirmed matches alike
        matched_count = stats.matched_bank_transactions + stats.potential_bank_transactions
        total = stats.total_bank_transactions
        now = datetime.now(UTC)
        self.project = replace(
            self.project,
            matched_transaction_count=matched_count,
            match_rate=matched_count / total * 100 if total else 0.0,
            last_activity=now,
            updated_at=now,
        )
