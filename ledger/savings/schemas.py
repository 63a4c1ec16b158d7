"""Schemas for savings goals."""

from datetime import datetime
from typing import Optional

from ledger.core.money import Money
from ledger.core.schemas import LedgerModel
from ledger.core.storage import decode_money, decode_optional_timestamp


class SavingsGoal(LedgerModel):
    id: int
    account_id: int
    name: str
    target_amount: Money
    current_amount: Money
    deadline: Optional[datetime] = None

    @property
    def progress_percent(self) -> float:
        """Progress towards the target, for display only."""
        return self.current_amount.percent_of(self.target_amount)

    @property
    def remaining(self) -> Money:
        remaining = self.target_amount - self.current_amount
        return Money.zero() if remaining.is_negative() else remaining

    @classmethod
    def from_row(cls, row) -> "SavingsGoal":
        return cls(
            id=row.id,
            account_id=row.account_id,
            name=row.name,
            target_amount=decode_money(row.target_amount, "savings_goals", row.id, "target_amount"),
            current_amount=decode_money(row.current_amount, "savings_goals", row.id, "current_amount"),
            deadline=decode_optional_timestamp(row.deadline, "savings_goals", row.id, "deadline"),
        )
