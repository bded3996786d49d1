"""Pytest configuration and fixtures."""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from recon.models.recon import BankTransaction, GLTransaction, ReconciliationState

BASE_DATE = date(2026, 1, 15)
NOW = datetime(2026, 1, 31, 12, 0, tzinfo=UTC)


@pytest.fixture
def now():
    """Fixed timestamp for created groups."""
    return NOW


@pytest.fixture
def make_bank():
    """Factory for bank transactions."""

    def _make(tx_id, amount, description="Payment", tx_date=BASE_DATE, **kwargs):
        return BankTransaction(
            id=tx_id,
            date=tx_date,
            amount=Decimal(str(amount)),
            description=description,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_gl():
    """Factory for GL transactions."""

    def _make(tx_id, amount, description="Payment", tx_date=BASE_DATE, **kwargs):
        return GLTransaction(
            id=tx_id,
            date=tx_date,
            amount=Decimal(str(amount)),
            description=description,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_state(make_bank, make_gl):
    """Small ledger pair with nothing matched yet."""
    return ReconciliationState(
        bank_transactions=(
            make_bank("B1", "100.00", "ACME Corp"),
            make_bank("B2", "250.00", "Office rent"),
            make_bank("B3", "-75.50", "Card fee"),
        ),
        gl_transactions=(
            make_gl("G1", "100.00", "ACME Corp invoice"),
            make_gl("G2", "300.00", "Rent"),
            make_gl("G3", "-75.50", "Bank charges"),
        ),
    )
