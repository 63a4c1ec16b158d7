"""Schemas for recurring transactions."""

from datetime import datetime
from typing import Optional

from ledger.core.money import Money
from ledger.core.schemas import LedgerModel
from ledger.core.storage import decode_money, decode_timestamp


class RecurringTransaction(LedgerModel):
    """
    Template for a repeating transaction.

    ``recurrence_rule`` is an opaque label ("monthly", "weekly", ...). The
    ledger never does calendar arithmetic with it; whoever processes due
    items decides the next run date and calls ``advance``.
    """
    id: int
    account_id: int
    amount: Money
    currency: str
    category_id: Optional[int] = None
    description: Optional[str] = None
    recurrence_rule: str
    next_run_date: datetime

    @classmethod
    def from_row(cls, row) -> "RecurringTransaction":
        return cls(
            id=row.id,
            account_id=row.account_id,
            amount=decode_money(row.amount, "recurring_transactions", row.id, "amount"),
            currency=row.currency,
            category_id=row.category_id,
            description=row.description,
            recurrence_rule=row.recurrence_rule,
            next_run_date=decode_timestamp(
                row.next_run_date, "recurring_transactions", row.id, "next_run_date"
            ),
        )
