"""Convert parsed ledger rows into transaction records."""

import logging
import re
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

from recon.models.mapping import BankColumnMapping, ColumnMapping, GLColumnMapping
from recon.models.recon import CENT, BankTransaction, GLTransaction

logger = logging.getLogger(__name__)

DATE_FORMATS = ("%m/%d/%Y", "%Y-%m-%d", "%m-%d-%Y", "%d/%m/%Y")

DEFAULT_DESCRIPTION = "No description"

Row = Mapping[str, Any]


class ColumnMappingError(Exception):
    """Mapped columns are missing from the rows."""

    pass


def parse_date(raw: Any) -> date | None:
    """Parse a cell into a date, trying the supported formats in order."""
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        return None

    value = raw.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def parse_amount(raw: Any) -> Decimal | None:
    """Parse a cell into a cent-precision amount.

    Currency symbols and thousands separators are stripped; ``(12.50)``
    reads as -12.50.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float, Decimal)):
        value = Decimal(str(raw))
    else:
        text = re.sub(r"[$,£€]", "", str(raw)).strip()
        negative = text.startswith("(") and text.endswith(")")
        if negative:
            text = text[1:-1].strip()
        try:
            value = Decimal(text)
        except InvalidOperation:
            return None
        if negative:
            value = -value

    if not value.is_finite():
        return None
    try:
        return value.quantize(CENT)
    except InvalidOperation:
        # Too many digits for cent precision
        return None


def map_bank_rows(rows: Iterable[Row], mapping: BankColumnMapping) -> list[BankTransaction]:
    """Build bank transactions from parsed statement rows."""
    transactions = []
    for fields, row in _base_fields(rows, mapping):
        transactions.append(
            BankTransaction(
                **fields,
                bank_account=mapping.bank_account,
                check_number=_optional(row, mapping.check_number_column),
            )
        )
    logger.info(f"Mapped {len(transactions)} bank transactions")
    return transactions


def map_gl_rows(rows: Iterable[Row], mapping: GLColumnMapping) -> list[GLTransaction]:
    """Build GL transactions from parsed ledger rows."""
    transactions = []
    for fields, row in _base_fields(rows, mapping):
        transactions.append(
            GLTransaction(
                **fields,
                gl_account=_optional(row, mapping.account_column),
                reference=_optional(row, mapping.reference_column),
                department=_optional(row, mapping.department_column),
                gl_class=_optional(row, mapping.class_column),
            )
        )
    logger.info(f"Mapped {len(transactions)} GL transactions")
    return transactions


def _base_fields(rows: Iterable[Row], mapping: ColumnMapping):
    """Yield (shared fields, row) for every usable row."""
    checked = False
    for index, row in enumerate(rows):
        if not checked:
            missing = [col for col in mapping.required_columns() if col not in row]
            if missing:
                raise ColumnMappingError(f"Required columns not found: {', '.join(missing)}")
            checked = True

        if not any(value not in (None, "") for value in row.values()):
            continue

        tx_date = parse_date(row.get(mapping.date_column))
        if tx_date is None:
            logger.debug(f"Skipping row {index}: unparseable date {row.get(mapping.date_column)!r}")
            continue

        amount = parse_amount(row.get(mapping.amount_column))
        if amount is None:
            logger.debug(
                f"Skipping row {index}: unparseable amount {row.get(mapping.amount_column)!r}"
            )
            continue

        description = str(row.get(mapping.description_column) or "").strip()
        yield {
            "id": str(uuid4()),
            "date": tx_date,
            "amount": amount,
            "description": description or DEFAULT_DESCRIPTION,
        }, row


def _optional(row: Row, column: str | None) -> str | None:
    if not column:
        return None
    value = row.get(column)
    if value in (None, ""):
        return None
    return str(value)
