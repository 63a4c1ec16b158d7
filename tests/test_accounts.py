"""Tests for account operations."""

import pytest

from ledger.account.schemas import AccountType
from ledger.budget.repository import BudgetRepository
from ledger.category.repository import INITIAL_BALANCE_CATEGORY
from ledger.core.errors import NotFoundError, ValidationError
from ledger.core.money import Money
from ledger.recurring.repository import RecurringRepository
from ledger.savings.repository import SavingsRepository
from ledger.tag.repository import TagRepository


class TestCreateAccount:
    """Test account creation."""

    async def test_zero_opening_balance(self, accounts, transactions):
        """An account opened at zero has no transactions."""
        account = await accounts.create_account("Wallet", "cash", "cad")

        assert account.balance == Money.zero()
        assert account.currency == "CAD"
        assert account.account_type is AccountType.CASH
        assert await transactions.list_transactions(account.id) == []

    async def test_opening_balance_is_recorded_as_transaction(self, accounts, transactions, categories):
        """A non-zero opening balance becomes exactly one Initial Balance entry."""
        account = await accounts.create_account("Chequing", "checking", "CAD", "500.00")

        assert account.balance == Money.parse("500.00")
        entries = await transactions.list_transactions(account.id)
        assert len(entries) == 1
        assert entries[0].amount == Money.parse("500.00")
        assert entries[0].is_expense is False
        category = await categories.get_category(entries[0].category_id)
        assert category.name == INITIAL_BALANCE_CATEGORY

        check = await transactions.verify_balance(account.id)
        assert check.consistent

    async def test_negative_opening_balance_is_an_expense(self, accounts, transactions):
        account = await accounts.create_account("Visa", "credit", "CAD", "-250.10")

        assert account.balance == Money.parse("-250.10")
        entries = await transactions.list_transactions(account.id)
        assert entries[0].is_expense is True
        assert entries[0].amount == Money.parse("250.10")

    async def test_initial_balance_category_is_reused(self, accounts, categories):
        await accounts.create_account("A", "cash", "CAD", "10")
        await accounts.create_account("B", "cash", "CAD", "20")

        names = [c.name for c in await categories.list_categories()]
        assert names.count(INITIAL_BALANCE_CATEGORY) == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": "  "},
            {"account_type": "brokerage"},
            {"currency": "dollars"},
            {"opening_balance": "lots"},
            {"opening_balance": 12.5},
        ],
    )
    async def test_invalid_input_creates_nothing(self, accounts, kwargs):
        params = {"name": "Bad", "account_type": "cash", "currency": "CAD", "opening_balance": "0"}
        params.update(kwargs)

        with pytest.raises(ValidationError):
            await accounts.create_account(**params)
        assert await accounts.list_accounts() == []


class TestAccountQueries:
    """Test reading and updating accounts."""

    async def test_get_missing_account(self, accounts):
        with pytest.raises(NotFoundError):
            await accounts.get_account(999)

    async def test_list_is_ordered_by_id(self, accounts):
        first = await accounts.create_account("Zeta", "cash", "CAD")
        second = await accounts.create_account("Alpha", "savings", "USD")

        listed = await accounts.list_accounts()
        assert [a.id for a in listed] == [first.id, second.id]
        assert listed.errors == []

    async def test_update_metadata_keeps_balance(self, accounts):
        account = await accounts.create_account("Old", "cash", "CAD", "75.25")

        updated = await accounts.update_account(account.id, name="New", account_type="savings")

        assert updated.name == "New"
        assert updated.account_type is AccountType.SAVINGS
        assert updated.balance == Money.parse("75.25")

    async def test_update_missing_account(self, accounts):
        with pytest.raises(NotFoundError):
            await accounts.update_account(404, name="Nobody")


class TestDeleteAccount:
    """Test cascading account deletion."""

    async def test_delete_removes_dependants(self, session, accounts, transactions, grocery):
        account = await accounts.create_account("Gone", "cash", "CAD", "100")
        entry = await transactions.create_transaction(account.id, grocery.id, "-20.00")
        tags = TagRepository(session)
        tag = await tags.create_tag("food")
        await tags.tag_transaction(entry.id, tag.id)
        await RecurringRepository(session).create_recurring(
            account.id, "-5", "CAD", "weekly", "2025-12-01", grocery.id
        )
        await BudgetRepository(session).create_budget(account.id, "300", "monthly", "CAD", "2025-12-01")
        await SavingsRepository(session).create_goal(account.id, "Trip", "1000")

        await accounts.delete_account(account.id)

        assert await accounts.list_accounts() == []
        with pytest.raises(NotFoundError):
            await transactions.get_transaction(entry.id)
        assert await RecurringRepository(session).list_recurring() == []
        assert await BudgetRepository(session).list_budgets(account.id) == []
        assert await SavingsRepository(session).list_goals() == []
        # the tag itself survives, only its link is gone
        assert [t.name for t in await tags.list_tags()] == ["food"]

    async def test_delete_leaves_other_accounts_alone(self, accounts, transactions, grocery):
        keep = await accounts.create_account("Keep", "cash", "CAD", "40")
        drop = await accounts.create_account("Drop", "cash", "CAD", "60")

        await accounts.delete_account(drop.id)

        assert [a.id for a in await accounts.list_accounts()] == [keep.id]
        assert (await accounts.get_account(keep.id)).balance == Money.parse("40.00")
        assert (await transactions.verify_balance(keep.id)).consistent

    async def test_delete_missing_account(self, accounts):
        with pytest.raises(NotFoundError):
            await accounts.delete_account(12345)
