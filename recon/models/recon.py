"""Domain records for reconciliation."""

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, ClassVar
from uuid import uuid4

from recon.config import settings

CENT = Decimal("0.01")


class MatchStatus(str, Enum):
    """Reconciliation status of a single transaction."""

    UNMATCHED = "unmatched"
    POTENTIAL = "potential"
    MATCHED = "matched"


class GroupStatus(str, Enum):
    """Lifecycle state of a match group."""

    AUTO = "auto"
    MANUAL = "manual"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class ProjectStatus(str, Enum):
    """Progress of a reconciliation project."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def amount_key(amount: Decimal) -> str:
    """Bucket key for an amount, rounded to the cent."""
    rounded = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    # -0.00 and 0.00 share a bucket
    if rounded.is_zero():
        rounded = rounded.copy_abs()
    return str(rounded)


def totals_balance(
    bank_total: Decimal,
    gl_total: Decimal,
    tolerance: Decimal | None = None,
) -> bool:
    """Check whether two sides of a group agree within tolerance."""
    tolerance = settings.balance_tolerance if tolerance is None else tolerance
    return abs(bank_total - gl_total) < tolerance


def sum_amounts(transactions) -> Decimal:
    """Sum transaction amounts, starting from a Decimal zero."""
    return sum((tx.amount for tx in transactions), Decimal("0"))


@dataclass(frozen=True)
class Transaction:
    """Fields shared by bank and GL records.

    ``match_status`` and ``match_group`` are owned by the match applier and
    the group lifecycle; nothing else should set them.
    """

    source: ClassVar[str] = ""

    id: str
    date: date
    amount: Decimal
    description: str
    notes: str | None = None
    match_status: MatchStatus = MatchStatus.UNMATCHED
    match_group: str | None = None

    @property
    def amount_key(self) -> str:
        return amount_key(self.amount)

    @property
    def is_unmatched(self) -> bool:
        return self.match_status == MatchStatus.UNMATCHED

    def assigned_to(self, group_id: str, status: MatchStatus):
        """Copy of this record attached to a group."""
        return replace(self, match_status=status, match_group=group_id)

    def released(self):
        """Copy of this record detached from any group."""
        return replace(self, match_status=MatchStatus.UNMATCHED, match_group=None)

    def with_notes(self, notes: str | None):
        return replace(self, notes=notes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "source": self.source,
            "date": self.date.isoformat(),
            "amount": str(self.amount),
            "description": self.description,
            "notes": self.notes,
            "match_status": self.match_status.value,
            "match_group": self.match_group,
        }


@dataclass(frozen=True)
class BankTransaction(Transaction):
    """Bank statement line."""

    source: ClassVar[str] = "bank"

    bank_account: str | None = None
    check_number: str | None = None

    @property
    def unique_identifier(self) -> str:
        """Per-record key built from date and amount."""
        return f"{self.date.isoformat()}-{self.amount_key}"

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            unique_identifier=self.unique_identifier,
            bank_account=self.bank_account,
            check_number=self.check_number,
        )
        return data


@dataclass(frozen=True)
class GLTransaction(Transaction):
    """General ledger line."""

    source: ClassVar[str] = "gl"

    gl_account: str | None = None
    reference: str | None = None
    department: str | None = None
    gl_class: str | None = None

    # Adjusted entries keep the amount they were imported with
    is_modified: bool = False
    original_amount: Decimal | None = None

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            gl_account=self.gl_account,
            reference=self.reference,
            department=self.department,
            gl_class=self.gl_class,
            is_modified=self.is_modified,
            original_amount=str(self.original_amount) if self.original_amount is not None else None,
        )
        return data


@dataclass(frozen=True)
class MatchGroup:
    """Association between bank and GL transactions believed to be one event."""

    id: str
    bank_transaction_ids: tuple[str, ...]
    gl_transaction_ids: tuple[str, ...]
    status: GroupStatus
    bank_total: Decimal
    gl_total: Decimal
    is_balanced: bool
    created_at: datetime
    updated_at: datetime
    notes: str | None = None

    @classmethod
    def build(
        cls,
        bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
        gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
        status: GroupStatus,
        now: datetime | None = None,
    ) -> "MatchGroup":
        """Create a group, computing totals from the member records."""
        now = now or datetime.now(UTC)
        bank_total = sum_amounts(bank_transactions)
        gl_total = sum_amounts(gl_transactions)
        return cls(
            id=str(uuid4()),
            bank_transaction_ids=tuple(tx.id for tx in bank_transactions),
            gl_transaction_ids=tuple(tx.id for tx in gl_transactions),
            status=status,
            bank_total=bank_total,
            gl_total=gl_total,
            is_balanced=totals_balance(bank_total, gl_total),
            created_at=now,
            updated_at=now,
        )

    def regrouped(
        self,
        bank_transactions: list[BankTransaction] | tuple[BankTransaction, ...],
        gl_transactions: list[GLTransaction] | tuple[GLTransaction, ...],
        status: GroupStatus,
        now: datetime | None = None,
    ) -> "MatchGroup":
        """Copy of this group with new members and recomputed totals."""
        bank_total = sum_amounts(bank_transactions)
        gl_total = sum_amounts(gl_transactions)
        return replace(
            self,
            bank_transaction_ids=tuple(tx.id for tx in bank_transactions),
            gl_transaction_ids=tuple(tx.id for tx in gl_transactions),
            status=status,
            bank_total=bank_total,
            gl_total=gl_total,
            is_balanced=totals_balance(bank_total, gl_total),
            updated_at=now or datetime.now(UTC),
        )

    @property
    def is_active(self) -> bool:
        return self.status != GroupStatus.REJECTED

    @property
    def member_status(self) -> MatchStatus:
        """Status the group's members carry while it is active."""
        if self.status == GroupStatus.CONFIRMED:
            return MatchStatus.MATCHED
        return MatchStatus.POTENTIAL

    @property
    def difference(self) -> Decimal:
        return self.bank_total - self.gl_total

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "bank_transaction_ids": list(self.bank_transaction_ids),
            "gl_transaction_ids": list(self.gl_transaction_ids),
            "status": self.status.value,
            "bank_total": str(self.bank_total),
            "gl_total": str(self.gl_total),
            "is_balanced": self.is_balanced,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class ReconciliationState:
    """Immutable snapshot of both ledgers and the active match groups."""

    bank_transactions: tuple[BankTransaction, ...] = ()
    gl_transactions: tuple[GLTransaction, ...] = ()
    match_groups: tuple[MatchGroup, ...] = ()

    def find_group(self, group_id: str) -> MatchGroup | None:
        for group in self.match_groups:
            if group.id == group_id:
                return group
        return None

    def bank_by_id(self) -> dict[str, BankTransaction]:
        return {tx.id: tx for tx in self.bank_transactions}

    def gl_by_id(self) -> dict[str, GLTransaction]:
        return {tx.id: tx for tx in self.gl_transactions}


@dataclass(frozen=True)
class ReconciliationProject:
    """A reconciliation of one bank account over one period."""

    name: str
    id: str = field(default_factory=lambda: str(uuid4()))
    status: ProjectStatus = ProjectStatus.DRAFT
    period_start: date | None = None
    period_end: date | None = None
    bank_account: str | None = None

    bank_file_count: int = 0
    gl_file_count: int = 0
    bank_transaction_count: int = 0
    gl_transaction_count: int = 0
    matched_transaction_count: int = 0
    match_rate: float = 0.0

    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_activity: datetime | None = None

    def __repr__(self) -> str:
        return f"<ReconciliationProject {self.id} {self.name} {self.status.value}>"
