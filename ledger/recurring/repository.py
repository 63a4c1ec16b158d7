"""Repository for recurring transaction operations."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.account.models import Account
from ledger.category.models import Category
from ledger.core.database import atomic
from ledger.core.errors import NotFoundError, ValidationError
from ledger.core.logging import get_logger
from ledger.core.money import Money
from ledger.core.storage import (
    DecodedList,
    TimestampLike,
    decode_rows,
    encode_money,
    encode_timestamp,
    parse_input_timestamp,
)
from ledger.currency.schemas import normalize_currency
from ledger.recurring.models import RecurringTransaction
from ledger.recurring import schemas

logger = get_logger(__name__)


class RecurringRepository:
    """
    Pull-based recurring engine.

    Materialising an occurrence is two explicit steps for the caller:
    ``TransactionRepository.create_transaction`` for the entry itself, then
    ``advance`` with the next run date the caller computed.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def _get_row(self, recurring_id: int) -> RecurringTransaction:
        row = await self.session.get(RecurringTransaction, recurring_id)
        if row is None:
            raise NotFoundError("RecurringTransaction", recurring_id)
        return row

    async def create_recurring(
        self,
        account_id: int,
        amount,
        currency: str,
        recurrence_rule: str,
        next_run_date: TimestampLike,
        category_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a recurring transaction and return its id."""
        money = Money.of(amount)
        currency = normalize_currency(currency)
        rule = (recurrence_rule or "").strip()
        if not rule:
            raise ValidationError("Recurrence rule must not be empty")
        next_run = parse_input_timestamp(next_run_date, "next_run_date")

        async with atomic(self.session):
            if await self.session.get(Account, account_id) is None:
                raise NotFoundError("Account", account_id)
            if category_id is not None and await self.session.get(Category, category_id) is None:
                raise NotFoundError("Category", category_id)
            row = RecurringTransaction(
                account_id=account_id,
                amount=encode_money(money),
                currency=currency,
                category_id=category_id,
                description=(description or "").strip() or None,
                recurrence_rule=rule,
                next_run_date=encode_timestamp(next_run),
            )
            self.session.add(row)
            await self.session.flush()
        logger.info(
            "recurring_created",
            recurring_id=row.id,
            account_id=account_id,
            rule=rule,
            next_run_date=row.next_run_date,
        )
        return row.id

    async def get_recurring(self, recurring_id: int) -> schemas.RecurringTransaction:
        return schemas.RecurringTransaction.from_row(await self._get_row(recurring_id))

    async def list_recurring(self, account_id: Optional[int] = None) -> DecodedList:
        query = select(RecurringTransaction)
        if account_id is not None:
            query = query.where(RecurringTransaction.account_id == account_id)
        result = await self.session.execute(query.order_by(RecurringTransaction.id))
        return decode_rows(result.scalars().all(), schemas.RecurringTransaction.from_row)

    async def list_due(self, as_of: TimestampLike) -> DecodedList:
        """Recurring items whose next run date is at or before ``as_of``, by id."""
        cutoff = encode_timestamp(parse_input_timestamp(as_of, "as_of"))
        result = await self.session.execute(
            select(RecurringTransaction)
            .where(RecurringTransaction.next_run_date <= cutoff)
            .order_by(RecurringTransaction.id)
        )
        return decode_rows(result.scalars().all(), schemas.RecurringTransaction.from_row)

    async def advance(self, recurring_id: int, new_next_run_date: TimestampLike) -> None:
        """Move the next run date. Creates no transaction."""
        next_run = encode_timestamp(parse_input_timestamp(new_next_run_date, "next_run_date"))
        async with atomic(self.session):
            row = await self._get_row(recurring_id)
            row.next_run_date = next_run
        logger.info("recurring_advanced", recurring_id=recurring_id, next_run_date=next_run)

    async def delete_recurring(self, recurring_id: int) -> None:
        async with atomic(self.session):
            row = await self._get_row(recurring_id)
            await self.session.delete(row)
        logger.info("recurring_deleted", recurring_id=recurring_id)
