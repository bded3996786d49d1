"""Tests for the reconciliation workspace."""

from datetime import date

import pytest

from recon.models.recon import MatchStatus, ProjectStatus, ReconciliationProject
from recon.services import InvalidSelection, ReconciliationWorkspace


@pytest.fixture
def workspace(make_bank, make_gl):
    """Workspace loaded with one bank file and one GL file."""
    ws = ReconciliationWorkspace(project=ReconciliationProject(name="January operating account"))
    ws.add_bank_transactions(
        [
            make_bank("B1", "100.00", "ACME Corp"),
            make_bank("B2", "1000.00", "Globex consulting"),
            make_bank("B3", "42.00", "Payroll"),
        ]
    )
    ws.add_gl_transactions(
        [
            make_gl("G1", "100.00", "ACME Corp invoice"),
            make_gl("G2", "997.50", "Globex consulting retainer", tx_date=date(2026, 1, 18)),
            make_gl("G3", "13.00", "Zoning fee"),
        ]
    )
    return ws


class TestReconciliationWorkspace:
    """Tests for ReconciliationWorkspace."""

    def test_add_transactions_updates_project(self, workspace):
        """Test imported batches are counted on the project."""
        project = workspace.project

        assert project.bank_file_count == 1
        assert project.gl_file_count == 1
        assert project.bank_transaction_count == 3
        assert project.gl_transaction_count == 3
        assert project.status == ProjectStatus.DRAFT
        assert project.last_activity is not None

    def test_run_automatic_matching(self, workspace):
        """Test exact then fuzzy matching over the loaded ledgers."""
        result = workspace.run_automatic_matching()

        assert result.exact_matches == 1
        assert result.fuzzy_matches == 1
        assert result.unbalanced_groups == 1
        assert result.unmatched_bank_transactions == 1
        assert len(workspace.match_groups) == 2

        statuses = {tx.id: tx.match_status for tx in workspace.bank_transactions}
        assert statuses == {
            "B1": MatchStatus.POTENTIAL,
            "B2": MatchStatus.POTENTIAL,
            "B3": MatchStatus.UNMATCHED,
        }
        assert workspace.project.status == ProjectStatus.IN_PROGRESS
        assert workspace.project.matched_transaction_count == 2
        assert workspace.project.match_rate == pytest.approx(200 / 3)

    def test_rerun_keeps_existing_groups(self, workspace):
        """Test a second run adds nothing and keeps earlier groups."""
        workspace.run_automatic_matching()
        groups = workspace.match_groups

        result = workspace.run_automatic_matching()

        assert result.exact_matches == 0
        assert result.fuzzy_matches == 0
        assert workspace.match_groups == groups

    def test_review_flow(self, workspace):
        """Test confirm, reject and manual grouping after an automatic run."""
        workspace.run_automatic_matching()
        exact_group, fuzzy_group = workspace.match_groups

        workspace.confirm_match_group(exact_group.id)
        workspace.reject_match_group(fuzzy_group.id)

        assert workspace.stats.matched_bank_transactions == 1
        assert workspace.stats.unmatched_bank_transactions == 2
        assert workspace.stats.match_groups == 1

        group = workspace.create_match_group(["B2", "B3"], ["G2", "G3"])
        assert group.is_balanced is False
        assert workspace.project.matched_transaction_count == 3
        assert workspace.project.match_rate == pytest.approx(100.0)

        workspace.update_match_group(group.id, ["B2"], ["G2"])
        assert workspace.stats.unmatched_bank_transactions == 1

    def test_confirmed_transactions_cannot_be_regrouped(self, workspace):
        """Test manual grouping refuses confirmed members."""
        workspace.run_automatic_matching()
        workspace.confirm_match_group(workspace.match_groups[0].id)

        with pytest.raises(InvalidSelection):
            workspace.create_match_group(["B1"], ["G3"])

    def test_add_transaction_note(self, workspace):
        """Test notes land on the transaction without touching matching."""
        workspace.add_transaction_note("G3", "Belongs to February")

        assert workspace.gl_transactions[2].notes == "Belongs to February"
        assert workspace.gl_transactions[2].match_status == MatchStatus.UNMATCHED

    def test_reset(self, workspace):
        """Test reset clears transactions and groups."""
        workspace.run_automatic_matching()

        workspace.reset()

        assert workspace.bank_transactions == ()
        assert workspace.match_groups == ()
        assert workspace.project.match_rate == 0.0
        assert workspace.project.status == ProjectStatus.DRAFT
        assert workspace.project.bank_file_count == 0
        assert workspace.project.gl_file_count == 0
        assert workspace.project.matched_transaction_count == 0

    def test_workspace_without_project(self, make_bank, make_gl):
        """Test the workspace works without a project record."""
        ws = ReconciliationWorkspace()
        ws.add_bank_transactions([make_bank("B1", "5.00")])
        ws.add_gl_transactions([make_gl("G1", "5.00")])

        ws.run_automatic_matching()

        assert ws.project is None
        assert ws.stats.potential_bank_transactions == 1
