"""
Repository for aggregate reports.

Report totals are computed by the database with floating point SUM over the
decimal text columns. They are approximations meant for display and can be
off in the last cent on large data sets; never use them as a balance. The
account balance cache and the transactions table remain the source of truth.
"""

from typing import List

from sqlalchemy import Float, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.category.models import Category
from ledger.core.money import Money
from ledger.core.storage import TimestampLike, encode_timestamp, parse_input_timestamp, range_end
from ledger.report import schemas
from ledger.transaction.balance import signed_amount_column
from ledger.transaction.models import Transaction


class ReportRepository:
    """Read-only aggregate queries over the transaction set."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def category_spending(
        self, start: TimestampLike, end: TimestampLike
    ) -> List[schemas.CategorySpending]:
        """
        Total expense per category with transacted_at in ``[start, end]``.

        Income rows are ignored. Sorted by total, largest first.
        """
        lower = encode_timestamp(parse_input_timestamp(start, "start"))
        upper = encode_timestamp(range_end(end))
        total = func.sum(cast(Transaction.amount, Float)).label("total")

        result = await self.session.execute(
            select(Category.name, total)
            .select_from(Transaction)
            .join(Category, Transaction.category_id == Category.id)
            .where(
                Transaction.is_expense.is_(True),
                Transaction.transacted_at >= lower,
                Transaction.transacted_at <= upper,
            )
            .group_by(Category.name)
            .order_by(total.desc(), Category.name)
        )
        return [
            schemas.CategorySpending(category=row.name, total_amount=float(row.total or 0.0))
            for row in result.all()
        ]

    async def monthly_summary(
        self, start: TimestampLike, end: TimestampLike
    ) -> List[schemas.CategoryTotal]:
        """
        Signed sum of base amounts per category with transacted_at in
        ``[start, end]``.

        Income counts positive and expenses negative, so a category mixing
        both nets out. Rows without a base amount are ignored. Ordered by
        category id.
        """
        lower = encode_timestamp(parse_input_timestamp(start, "start"))
        upper = encode_timestamp(range_end(end))
        total = func.sum(
            signed_amount_column(Transaction.base_amount, Transaction.is_expense)
        ).label("total")

        result = await self.session.execute(
            select(Transaction.category_id, total)
            .where(
                Transaction.base_amount.is_not(None),
                Transaction.transacted_at >= lower,
                Transaction.transacted_at <= upper,
            )
            .group_by(Transaction.category_id)
            .order_by(Transaction.category_id)
        )
        return [
            schemas.CategoryTotal(category_id=row.category_id, total_amount=float(row.total or 0.0))
            for row in result.all()
        ]

    async def net_savings(self) -> Money:
        """
        Signed sum of every transaction's base amount, all accounts, all time.

        Rows without a base amount count as zero. Rounded to cents.
        """
        result = await self.session.execute(
            select(
                func.coalesce(
                    func.sum(signed_amount_column(Transaction.base_amount, Transaction.is_expense)),
                    0.0,
                )
            )
        )
        net = float(result.scalar_one() or 0.0)
        return Money.parse(f"{net:.2f}")
