"""Schemas and enums for budgets."""

from datetime import datetime
from enum import Enum
from typing import Optional

from ledger.core.errors import ValidationError
from ledger.core.money import Money
from ledger.core.schemas import LedgerModel
from ledger.core.storage import decode_money, decode_timestamp


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value) -> "BudgetPeriod":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown budget period: {value!r}") from None


class Budget(LedgerModel):
    """
    Spending limit for one period.

    The ledger does not reset or roll budgets over; consumers scope their
    spending queries to the period window themselves.
    """
    id: int
    account_id: int
    category_id: Optional[int] = None
    period: str
    amount: Money
    currency: str
    start_date: datetime

    def used_percent(self, spent: Money) -> float:
        """Share of the limit consumed by ``spent``, for display."""
        return spent.abs().percent_of(self.amount)

    @classmethod
    def from_row(cls, row) -> "Budget":
        return cls(
            id=row.id,
            account_id=row.account_id,
            category_id=row.category_id,
            period=row.period,
            amount=decode_money(row.amount, "budgets", row.id, "amount"),
            currency=row.currency,
            start_date=decode_timestamp(row.start_date, "budgets", row.id, "start_date"),
        )
