"""Repository for budget operations."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.account.models import Account
from ledger.budget.models import Budget
from ledger.budget import schemas
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

logger = get_logger(__name__)


def _parse_limit(amount) -> Money:
    money = Money.of(amount)
    if money.is_negative():
        raise ValidationError(f"Budget amount must not be negative, got {money}")
    return money


class BudgetRepository:
    """Repository for budget operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def _get_row(self, budget_id: int) -> Budget:
        row = await self.session.get(Budget, budget_id)
        if row is None:
            raise NotFoundError("Budget", budget_id)
        return row

    async def _ensure_category(self, category_id: Optional[int]) -> None:
        if category_id is not None and await self.session.get(Category, category_id) is None:
            raise NotFoundError("Category", category_id)

    async def create_budget(
        self,
        account_id: int,
        amount,
        period,
        currency: str,
        start_date: TimestampLike,
        category_id: Optional[int] = None,
    ) -> schemas.Budget:
        """Create a new budget."""
        limit = _parse_limit(amount)
        period = schemas.BudgetPeriod.parse(period)
        currency = normalize_currency(currency)
        start = parse_input_timestamp(start_date, "start_date")

        async with atomic(self.session):
            if await self.session.get(Account, account_id) is None:
                raise NotFoundError("Account", account_id)
            await self._ensure_category(category_id)
            row = Budget(
                account_id=account_id,
                category_id=category_id,
                period=period.value,
                amount=encode_money(limit),
                currency=currency,
                start_date=encode_timestamp(start),
            )
            self.session.add(row)
            await self.session.flush()
        logger.info("budget_created", budget_id=row.id, account_id=account_id, period=period.value)
        return schemas.Budget.from_row(row)

    async def get_budget(self, budget_id: int) -> schemas.Budget:
        return schemas.Budget.from_row(await self._get_row(budget_id))

    async def list_budgets(self, account_id: int) -> DecodedList:
        """Budgets of an account, by id."""
        result = await self.session.execute(
            select(Budget).where(Budget.account_id == account_id).order_by(Budget.id)
        )
        return decode_rows(result.scalars().all(), schemas.Budget.from_row)

    async def update_budget(
        self,
        budget_id: int,
        amount=None,
        period=None,
        currency: Optional[str] = None,
        start_date: Optional[TimestampLike] = None,
        category_id: Optional[int] = None,
    ) -> schemas.Budget:
        """Update budget fields; ``None`` leaves a field unchanged."""
        limit = _parse_limit(amount) if amount is not None else None
        period = schemas.BudgetPeriod.parse(period) if period is not None else None
        currency = normalize_currency(currency) if currency is not None else None
        start = parse_input_timestamp(start_date, "start_date") if start_date is not None else None

        async with atomic(self.session):
            row = await self._get_row(budget_id)
            if limit is not None:
                row.amount = encode_money(limit)
            if period is not None:
                row.period = period.value
            if currency is not None:
                row.currency = currency
            if start is not None:
                row.start_date = encode_timestamp(start)
            if category_id is not None:
                await self._ensure_category(category_id)
                row.category_id = category_id
        return schemas.Budget.from_row(row)

    async def delete_budget(self, budget_id: int) -> None:
        async with atomic(self.session):
            row = await self._get_row(budget_id)
            await self.session.delete(row)
        logger.info("budget_deleted", budget_id=budget_id)
