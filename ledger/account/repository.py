"""Repository for account operations."""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.account.models import Account
from ledger.account import schemas
from ledger.budget.models import Budget
from ledger.category.repository import CategoryRepository, INITIAL_BALANCE_CATEGORY
from ledger.category.schemas import CategoryType
from ledger.core.database import atomic
from ledger.core.errors import NotFoundError, ValidationError
from ledger.core.logging import get_logger
from ledger.core.money import Money
from ledger.core.storage import DecodedList, decode_rows, encode_money, encode_timestamp, utc_now
from ledger.currency.schemas import normalize_currency
from ledger.recurring.models import RecurringTransaction
from ledger.savings.models import SavingsGoal
from ledger.tag.models import TransactionTag
from ledger.transaction.balance import recompute_balance
from ledger.transaction.models import Transaction
from ledger.transaction.repository import TransactionRepository

logger = get_logger(__name__)


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Account name must not be empty")
    return cleaned


class AccountRepository:
    """Repository for account operations."""

    def __init__(self, session: AsyncSession, base_currency: Optional[str] = None):
        """Initialize repository with database session."""
        self.session = session
        self.base_currency = base_currency

    async def _get_row(self, account_id: int) -> Account:
        result = await self.session.execute(
            select(Account).where(Account.id == account_id).execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Account", account_id)
        return row

    async def create_account(
        self,
        name: str,
        account_type=schemas.AccountType.CASH,
        currency: str = "CAD",
        opening_balance="0",
    ) -> schemas.Account:
        """
        Create a new account.

        The account starts at zero. A non-zero opening balance is recorded as
        one transaction in the "Initial Balance" category, dated now, so the
        balance stays derivable from the ledger. A negative opening balance
        (e.g. a credit card) is recorded as an expense.
        """
        name = _clean_name(name)
        account_type = schemas.AccountType.parse(account_type)
        currency = normalize_currency(currency)
        opening = Money.of(opening_balance if opening_balance is not None else "0")

        async with atomic(self.session):
            created_at = utc_now()
            row = Account(
                name=name,
                account_type=account_type.value,
                currency=currency,
                balance=encode_money(Money.zero()),
                created_at=encode_timestamp(created_at),
            )
            self.session.add(row)
            await self.session.flush()

            if not opening.is_zero():
                category = await CategoryRepository(self.session).get_or_create_row(
                    INITIAL_BALANCE_CATEGORY, CategoryType.INCOME
                )
                await TransactionRepository(self.session, self.base_currency).add_row(
                    account_id=row.id,
                    category_id=category.id,
                    magnitude=opening.abs(),
                    is_expense=opening.is_negative(),
                    transacted_at=created_at,
                    memo=INITIAL_BALANCE_CATEGORY,
                    currency=currency,
                )
            await recompute_balance(self.session, row.id)

        logger.info(
            "account_created",
            account_id=row.id,
            name=name,
            currency=currency,
            opening_balance=str(opening),
        )
        return await self.get_account(row.id)

    async def get_account(self, account_id: int) -> schemas.Account:
        """Get account by ID."""
        return schemas.Account.from_row(await self._get_row(account_id))

    async def list_accounts(self) -> DecodedList:
        """Get all accounts ordered by ID."""
        result = await self.session.execute(
            select(Account).order_by(Account.id).execution_options(populate_existing=True)
        )
        return decode_rows(result.scalars().all(), schemas.Account.from_row)

    async def update_account(
        self,
        account_id: int,
        name: Optional[str] = None,
        account_type=None,
        currency: Optional[str] = None,
    ) -> schemas.Account:
        """Update account metadata; the balance is never touched here."""
        if name is not None:
            name = _clean_name(name)
        if account_type is not None:
            account_type = schemas.AccountType.parse(account_type)
        if currency is not None:
            currency = normalize_currency(currency)

        async with atomic(self.session):
            row = await self._get_row(account_id)
            if name is not None:
                row.name = name
            if account_type is not None:
                row.account_type = account_type.value
            if currency is not None:
                row.currency = currency
        logger.info("account_updated", account_id=account_id)
        return schemas.Account.from_row(row)

    async def delete_account(self, account_id: int) -> None:
        """
        Delete an account together with everything that belongs to it.

        Tag links, transactions, recurring items, budgets and savings goals
        go first, then the account row, all in one storage transaction.
        Irreversible.
        """
        async with atomic(self.session):
            row = await self._get_row(account_id)
            transaction_ids = select(Transaction.id).where(Transaction.account_id == account_id)
            await self.session.execute(
                delete(TransactionTag)
                .where(TransactionTag.transaction_id.in_(transaction_ids))
                .execution_options(synchronize_session=False)
            )
            deleted = await self.session.execute(
                delete(Transaction).where(Transaction.account_id == account_id)
            )
            for model in (RecurringTransaction, Budget, SavingsGoal):
                await self.session.execute(delete(model).where(model.account_id == account_id))
            await self.session.delete(row)
            await self.session.flush()
        logger.info(
            "account_deleted",
            account_id=account_id,
            transactions_deleted=deleted.rowcount,
        )
