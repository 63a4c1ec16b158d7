"""
Repository for transaction operations.

Every mutation here follows the same protocol inside one ``atomic`` block:
apply the row change, recompute the balance of every affected account from
scratch, commit. Any failure rolls both back together.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.account.models import Account
from ledger.category.models import Category
from ledger.core.config import get_settings
from ledger.core.database import atomic
from ledger.core.errors import NotFoundError, ValidationError
from ledger.core.logging import get_logger
from ledger.core.money import Money
from ledger.core.schemas import LedgerModel
from ledger.core.storage import (
    DecodedList,
    TimestampLike,
    decode_money,
    decode_rows,
    encode_money,
    encode_timestamp,
    parse_input_timestamp,
    range_end,
    utc_now,
)
from ledger.currency.repository import CurrencyRepository
from ledger.currency.schemas import normalize_currency
from ledger.tag.models import TransactionTag
from ledger.transaction.balance import ledger_balance, recompute_balance
from ledger.transaction.models import Transaction
from ledger.transaction import schemas

logger = get_logger(__name__)


class BalanceCheck(LedgerModel):
    """Cached balance next to the value recomputed from the ledger."""
    account_id: int
    cached: Money
    expected: Money

    @property
    def consistent(self) -> bool:
        return self.cached == self.expected


def parse_amount(amount, is_expense: Optional[bool]) -> Money:
    """
    Parse an amount and reject sign/flag combinations that contradict.

    A negative amount flagged as income is ambiguous and refused.
    """
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        raise ValidationError("Amount is required")
    money = Money.of(amount)
    if money.is_negative() and is_expense is False:
        raise ValidationError(
            f"Amount {money} is negative but the transaction is flagged as income"
        )
    return money


def resolve_expense_flag(money: Money, is_expense: Optional[bool], default: bool) -> bool:
    """Explicit flag wins; otherwise a negative amount means expense."""
    if is_expense is not None:
        return is_expense
    if money.is_negative():
        return True
    return default


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TransactionRepository:
    """Repository for transaction operations."""

    def __init__(self, session: AsyncSession, base_currency: Optional[str] = None):
        """Initialize repository with database session."""
        self.session = session
        self.currencies = CurrencyRepository(session, base_currency)

    async def _get_row(self, transaction_id: int, for_update: bool = False) -> Transaction:
        query = select(Transaction).where(Transaction.id == transaction_id)
        if for_update:
            # fresh owner under a row lock (SQLite: BEGIN IMMEDIATE already holds it)
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Transaction", transaction_id)
        return row

    async def _get_account_row(self, account_id: int) -> Account:
        result = await self.session.execute(
            select(Account).where(Account.id == account_id).execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Account", account_id)
        return row

    async def _ensure_category(self, category_id: int) -> None:
        result = await self.session.execute(
            select(Category.id).where(Category.id == category_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Category", category_id)

    async def add_row(
        self,
        account_id: int,
        category_id: int,
        magnitude: Money,
        is_expense: bool,
        transacted_at: datetime,
        memo: Optional[str] = None,
        payee: Optional[str] = None,
        currency: Optional[str] = None,
        base_amount: Optional[Money] = None,
    ) -> Transaction:
        """
        Insert a transaction row and recompute its account balance.

        Runs inside the caller's unit of work and does not commit.
        """
        account = await self._get_account_row(account_id)
        await self._ensure_category(category_id)
        currency = currency or account.currency
        if base_amount is None:
            rate = await self.currencies.rate_to_base(currency)
            base_amount = magnitude * rate

        row = Transaction(
            account_id=account_id,
            category_id=category_id,
            amount=encode_money(magnitude.abs()),
            base_amount=encode_money(base_amount.abs()),
            is_expense=is_expense,
            memo=memo,
            payee=payee,
            currency=currency,
            transacted_at=encode_timestamp(transacted_at),
            created_at=encode_timestamp(utc_now()),
        )
        self.session.add(row)
        await self.session.flush()
        await recompute_balance(self.session, account_id)
        return row

    async def create_transaction(
        self,
        account_id: int,
        category_id: Optional[int],
        amount,
        is_expense: Optional[bool] = None,
        memo: Optional[str] = None,
        payee: Optional[str] = None,
        currency: Optional[str] = None,
        transacted_at: Optional[TimestampLike] = None,
        base_amount=None,
    ) -> schemas.Transaction:
        """
        Record a transaction and update the account balance atomically.

        The stored amount is the absolute value; the sign lives in
        ``is_expense``. When ``is_expense`` is omitted it is derived from the
        sign of ``amount``. ``base_amount`` defaults to the amount converted
        with the latest stored rate for ``currency``.
        """
        money = parse_amount(amount, is_expense)
        flag = resolve_expense_flag(money, is_expense, default=False)
        if category_id is None:
            raise ValidationError("Category is required")
        when = (
            parse_input_timestamp(transacted_at, "transacted_at")
            if transacted_at is not None
            else utc_now()
        )
        if currency is not None:
            currency = normalize_currency(currency)
        base = Money.of(base_amount) if base_amount is not None else None

        async with atomic(self.session):
            row = await self.add_row(
                account_id=account_id,
                category_id=category_id,
                magnitude=money.abs(),
                is_expense=flag,
                transacted_at=when,
                memo=_clean_text(memo),
                payee=_clean_text(payee),
                currency=currency,
                base_amount=base,
            )
        logger.info(
            "transaction_created",
            transaction_id=row.id,
            account_id=account_id,
            amount=row.amount,
            is_expense=flag,
        )
        return schemas.Transaction.from_row(row)

    async def get_transaction(self, transaction_id: int) -> schemas.Transaction:
        """Get transaction by ID."""
        return schemas.Transaction.from_row(await self._get_row(transaction_id))

    async def update_transaction(
        self,
        transaction_id: int,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        amount=None,
        is_expense: Optional[bool] = None,
        memo: Optional[str] = None,
        payee: Optional[str] = None,
        currency: Optional[str] = None,
        transacted_at: Optional[TimestampLike] = None,
    ) -> schemas.Transaction:
        """
        Update a transaction; ``None`` leaves a field unchanged.

        Pass an empty string to clear ``memo`` or ``payee``. When the owning
        account changes, both the old and the new account are recomputed.
        The base amount is re-derived with the current rate whenever the
        amount or currency changes.
        """
        money = parse_amount(amount, is_expense) if amount is not None else None
        when = (
            parse_input_timestamp(transacted_at, "transacted_at")
            if transacted_at is not None
            else None
        )
        if currency is not None:
            currency = normalize_currency(currency)

        async with atomic(self.session):
            row = await self._get_row(transaction_id, for_update=True)
            previous_account_id = row.account_id

            if account_id is not None and account_id != row.account_id:
                await self._get_account_row(account_id)
                row.account_id = account_id
            if category_id is not None and category_id != row.category_id:
                await self._ensure_category(category_id)
                row.category_id = category_id
            if money is not None:
                row.is_expense = resolve_expense_flag(money, is_expense, default=bool(row.is_expense))
                row.amount = encode_money(money.abs())
            elif is_expense is not None:
                row.is_expense = is_expense
            if memo is not None:
                row.memo = _clean_text(memo)
            if payee is not None:
                row.payee = _clean_text(payee)
            if currency is not None:
                row.currency = currency
            if when is not None:
                row.transacted_at = encode_timestamp(when)
            if money is not None or currency is not None:
                stored = decode_money(row.amount, "transactions", row.id, "amount")
                rate = await self.currencies.rate_to_base(row.currency)
                row.base_amount = encode_money(stored * rate)

            await self.session.flush()
            for affected in sorted({previous_account_id, row.account_id}):
                await recompute_balance(self.session, affected)

        logger.info(
            "transaction_updated",
            transaction_id=transaction_id,
            account_id=row.account_id,
            previous_account_id=previous_account_id,
        )
        return schemas.Transaction.from_row(row)

    async def delete_transaction(self, transaction_id: int) -> None:
        """Delete a transaction and recompute the balance of its account."""
        async with atomic(self.session):
            row = await self._get_row(transaction_id, for_update=True)
            account_id = row.account_id
            await self.session.execute(
                delete(TransactionTag).where(TransactionTag.transaction_id == transaction_id)
            )
            await self.session.delete(row)
            await self.session.flush()
            await recompute_balance(self.session, account_id)
        logger.info("transaction_deleted", transaction_id=transaction_id, account_id=account_id)

    async def list_transactions(
        self,
        account_id: int,
        limit: Optional[int] = None,
        offset: int = 0,
        start: Optional[TimestampLike] = None,
        end: Optional[TimestampLike] = None,
    ) -> DecodedList:
        """
        Transactions of an account, newest first.

        Ordered by transacted_at descending, then id descending so that equal
        timestamps still come back in a stable order. ``start``/``end`` are
        inclusive; a bare date as ``end`` covers that whole day.
        """
        if limit is None:
            limit = get_settings().DEFAULT_PAGE_SIZE
        if limit < 1:
            raise ValidationError("limit must be positive")
        if offset < 0:
            raise ValidationError("offset must not be negative")
        lower = encode_timestamp(parse_input_timestamp(start, "start")) if start is not None else None
        upper = encode_timestamp(range_end(end)) if end is not None else None

        await self._get_account_row(account_id)
        query = select(Transaction).where(Transaction.account_id == account_id)
        if lower is not None:
            query = query.where(Transaction.transacted_at >= lower)
        if upper is not None:
            query = query.where(Transaction.transacted_at <= upper)
        query = (
            query.order_by(Transaction.transacted_at.desc(), Transaction.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return decode_rows(result.scalars().all(), schemas.Transaction.from_row)

    async def verify_balance(self, account_id: int) -> BalanceCheck:
        """Compare the cached balance with a fresh recompute, without writing."""
        account = await self._get_account_row(account_id)
        cached = decode_money(account.balance, "accounts", account.id, "balance")
        expected = await ledger_balance(self.session, account_id)
        return BalanceCheck(account_id=account_id, cached=cached, expected=expected)

