"""Repository for savings goal operations."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.account.models import Account
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
from ledger.savings.models import SavingsGoal
from ledger.savings import schemas

logger = get_logger(__name__)


class SavingsRepository:
    """Repository for savings goal operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def _get_row(self, goal_id: int) -> SavingsGoal:
        row = await self.session.get(SavingsGoal, goal_id)
        if row is None:
            raise NotFoundError("SavingsGoal", goal_id)
        return row

    async def create_goal(
        self,
        account_id: int,
        name: str,
        target_amount,
        current_amount="0",
        deadline: Optional[TimestampLike] = None,
    ) -> schemas.SavingsGoal:
        """Create a new savings goal."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Goal name must not be empty")
        target = Money.of(target_amount)
        if target.is_negative() or target.is_zero():
            raise ValidationError(f"Goal target must be positive, got {target}")
        current = Money.of(current_amount)
        due = parse_input_timestamp(deadline, "deadline") if deadline is not None else None

        async with atomic(self.session):
            if await self.session.get(Account, account_id) is None:
                raise NotFoundError("Account", account_id)
            row = SavingsGoal(
                account_id=account_id,
                name=name,
                target_amount=encode_money(target),
                current_amount=encode_money(current),
                deadline=encode_timestamp(due) if due is not None else None,
            )
            self.session.add(row)
            await self.session.flush()
        logger.info("savings_goal_created", goal_id=row.id, account_id=account_id)
        return schemas.SavingsGoal.from_row(row)

    async def get_goal(self, goal_id: int) -> schemas.SavingsGoal:
        return schemas.SavingsGoal.from_row(await self._get_row(goal_id))

    async def list_goals(self) -> DecodedList:
        """All goals, earliest deadline first, undated goals last."""
        result = await self.session.execute(
            select(SavingsGoal).order_by(
                SavingsGoal.deadline.is_(None), SavingsGoal.deadline, SavingsGoal.id
            )
        )
        return decode_rows(result.scalars().all(), schemas.SavingsGoal.from_row)

    async def update_goal_amount(self, goal_id: int, new_current) -> schemas.SavingsGoal:
        """
        Replace the current amount of a goal.

        This overwrites rather than adds: concurrent contributions are
        last-write-wins.
        """
        current = Money.of(new_current)
        async with atomic(self.session):
            row = await self._get_row(goal_id)
            row.current_amount = encode_money(current)
        logger.info("savings_goal_updated", goal_id=goal_id, current_amount=str(current))
        return schemas.SavingsGoal.from_row(row)

    async def delete_goal(self, goal_id: int) -> None:
        async with atomic(self.session):
            row = await self._get_row(goal_id)
            await self.session.delete(row)
        logger.info("savings_goal_deleted", goal_id=goal_id)
