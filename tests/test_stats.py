"""Tests for reconciliation statistics."""

from decimal import Decimal

import pytest

from recon.engine import compute_stats
from recon.services.lifecycle import confirm_group, create_group


class TestComputeStats:
    """Tests for compute_stats."""

    def test_totals_and_counts(self, sample_state, now):
        """Test totals cover every transaction and counts follow status."""
        state = create_group(sample_state, ["B1"], ["G1"], now)
        state = confirm_group(state, state.match_groups[-1].id, now)
        state = create_group(state, ["B3"], ["G3"], now)

        stats = compute_stats(state.bank_transactions, state.gl_transactions, state.match_groups)

        assert stats.bank_total == Decimal("274.50")
        assert stats.gl_total == Decimal("324.50")
        assert stats.difference == Decimal("-50.00")
        assert stats.total_bank_transactions == 3
        assert stats.matched_bank_transactions == 1
        assert stats.potential_bank_transactions == 1
        assert stats.unmatched_bank_transactions == 1
        assert stats.matched_gl_transactions == 1
        assert stats.potential_gl_transactions == 1
        assert stats.unmatched_gl_transactions == 1
        assert stats.unmatched_bank_total == Decimal("250.00")
        assert stats.unmatched_gl_total == Decimal("300.00")
        assert stats.match_groups == 2

    def test_match_rate_counts_confirmed_only(self, sample_state, now):
        """Test potential matches do not raise the match rate."""
        state = create_group(sample_state, ["B1"], ["G1"], now)
        stats = compute_stats(state.bank_transactions, state.gl_transactions, state.match_groups)
        assert stats.matched_rate == 0.0

        state = confirm_group(state, state.match_groups[-1].id, now)
        stats = compute_stats(state.bank_transactions, state.gl_transactions, state.match_groups)
        assert stats.matched_rate == pytest.approx(100 / 3)

    def test_no_bank_transactions(self, make_gl):
        """Test the match rate is 0 without bank transactions."""
        stats = compute_stats([], [make_gl("G1", "10.00")], [])

        assert stats.matched_rate == 0.0
        assert stats.bank_total == Decimal("0")
        assert stats.difference == Decimal("-10.00")

    def test_match_rate_bounds(self, sample_state, now):
        """Test the rate stays within 0 and 100."""
        state = sample_state
        for bank_id, gl_id in (("B1", "G1"), ("B2", "G2"), ("B3", "G3")):
            state = create_group(state, [bank_id], [gl_id], now)
            state = confirm_group(state, state.match_groups[-1].id, now)
            stats = compute_stats(
                state.bank_transactions, state.gl_transactions, state.match_groups
            )
            assert 0 <= stats.matched_rate <= 100

        assert stats.matched_rate == 100.0

    def test_to_dict(self, sample_state):
        """Test amounts serialize as strings."""
        stats = compute_stats(sample_state.bank_transactions, sample_state.gl_transactions, ())

        data = stats.to_dict()

        assert data["bank_total"] == "274.50"
        assert data["match_groups"] == 0
        assert data["matched_rate"] == 0.0
