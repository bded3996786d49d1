"""Column mappings for turning parsed ledger rows into transactions."""

from pydantic import BaseModel


class ColumnMapping(BaseModel):
    """Columns every ledger export must provide."""

    date_column: str
    amount_column: str
    description_column: str

    def required_columns(self) -> list[str]:
        return [self.date_column, self.amount_column, self.description_column]


class BankColumnMapping(ColumnMapping):
    """Mapping for a bank statement export."""

    check_number_column: str | None = None

    # Applied to every row; statements rarely carry the account per line
    bank_account: str | None = None


class GLColumnMapping(ColumnMapping):
    """Mapping for a general ledger export."""

    account_column: str | None = None
    reference_column: str | None = None
    department_column: str | None = None
    class_column: str | None = None
