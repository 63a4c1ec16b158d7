"""Schemas and enums for accounts."""

from datetime import datetime
from enum import Enum

from ledger.core.errors import ValidationError
from ledger.core.money import Money
from ledger.core.schemas import LedgerModel
from ledger.core.storage import decode_money, decode_timestamp


class AccountType(str, Enum):
    CHECKING = "CHECKING"
    CREDIT = "CREDIT"
    SAVINGS = "SAVINGS"
    CASH = "CASH"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value) -> "AccountType":
        """Parse user input case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValidationError(f"Unknown account type: {value!r}") from None

    @classmethod
    def from_stored(cls, value: str) -> "AccountType":
        """Stored values outside the enum read as OTHER."""
        try:
            return cls(str(value).upper())
        except ValueError:
            return cls.OTHER


class Account(LedgerModel):
    """Account as seen by consumers of the ledger."""
    id: int
    name: str
    account_type: AccountType
    currency: str
    balance: Money
    created_at: datetime

    @classmethod
    def from_row(cls, row) -> "Account":
        return cls(
            id=row.id,
            name=row.name,
            account_type=AccountType.from_stored(row.account_type),
            currency=row.currency,
            balance=decode_money(row.balance, "accounts", row.id, "balance"),
            created_at=decode_timestamp(row.created_at, "accounts", row.id, "created_at"),
        )
