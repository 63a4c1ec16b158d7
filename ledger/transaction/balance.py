"""
Balance bookkeeping.

An account's ``balance`` column is a cache of

    round(sum(-amount if is_expense else +amount for its transactions), 2)

Every code path that inserts, updates or deletes a transaction calls
``recompute_balance`` inside the same storage transaction as the row
mutation. The recompute always sums the full transaction set; no deltas are
applied.
"""

from sqlalchemy import Float, case, cast, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.account.models import Account as AccountModel
from ledger.core.errors import NotFoundError
from ledger.core.logging import get_logger
from ledger.core.money import Money, sum_money
from ledger.core.storage import decode_money, encode_money
from ledger.transaction.models import Transaction as TransactionModel

logger = get_logger(__name__)


def signed_amount(amount: Money, is_expense: bool) -> Money:
    """Signed ledger value of a stored magnitude."""
    magnitude = amount.abs()
    return magnitude.negate() if is_expense else magnitude


def signed_amount_column(column, is_expense_column):
    """SQL twin of ``signed_amount`` for float report aggregates."""
    value = cast(column, Float)
    return case((is_expense_column, -value), else_=value)


async def ledger_balance(session: AsyncSession, account_id: int) -> Money:
    """Exact balance of an account computed from its transaction rows."""
    result = await session.execute(
        select(TransactionModel.id, TransactionModel.amount, TransactionModel.is_expense)
        .where(TransactionModel.account_id == account_id)
    )
    return sum_money(
        signed_amount(
            decode_money(row.amount, "transactions", row.id, "amount"),
            bool(row.is_expense),
        )
        for row in result.all()
    ).round(2)


async def recompute_balance(session: AsyncSession, account_id: int) -> Money:
    """
    Rewrite the cached balance of ``account_id`` from its transactions.

    Must be called inside the caller's open storage transaction; it does not
    commit. A DecodeError on any amount aborts the surrounding unit of work.
    """
    balance = await ledger_balance(session, account_id)
    result = await session.execute(
        update(AccountModel)
        .where(AccountModel.id == account_id)
        .values(balance=encode_money(balance))
    )
    if result.rowcount == 0:
        raise NotFoundError("Account", account_id)
    logger.debug("balance_recomputed", account_id=account_id, balance=str(balance))
    return balance
