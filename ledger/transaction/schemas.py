"""Schemas for ledger transactions."""

from datetime import datetime
from typing import Optional

from ledger.core.money import Money
from ledger.core.schemas import LedgerModel
from ledger.core.storage import decode_money, decode_optional_money, decode_timestamp
from ledger.transaction.balance import signed_amount


class Transaction(LedgerModel):
    """
    Ledger entry.

    ``amount`` is the stored magnitude; ``signed_amount`` applies the
    expense flag, which is the only authority for the sign.
    """
    id: int
    account_id: int
    category_id: int
    amount: Money
    base_amount: Optional[Money] = None
    is_expense: bool
    memo: Optional[str] = None
    payee: Optional[str] = None
    currency: str
    transacted_at: datetime
    created_at: datetime

    @property
    def signed_amount(self) -> Money:
        return signed_amount(self.amount, self.is_expense)

    @property
    def signed_base_amount(self) -> Optional[Money]:
        if self.base_amount is None:
            return None
        return signed_amount(self.base_amount, self.is_expense)

    @classmethod
    def from_row(cls, row) -> "Transaction":
        return cls(
            id=row.id,
            account_id=row.account_id,
            category_id=row.category_id,
            amount=decode_money(row.amount, "transactions", row.id, "amount"),
            base_amount=decode_optional_money(row.base_amount, "transactions", row.id, "base_amount"),
            is_expense=bool(row.is_expense),
            memo=row.memo,
            payee=row.payee,
            currency=row.currency,
            transacted_at=decode_timestamp(row.transacted_at, "transactions", row.id, "transacted_at"),
            created_at=decode_timestamp(row.created_at, "transactions", row.id, "created_at"),
        )
