"""Tests for category operations."""

import pytest

from ledger.category.models import Category as CategoryRow
from ledger.category.repository import FIXED_CATEGORIES
from ledger.category.schemas import CategoryType
from ledger.core.errors import NotFoundError, StorageError, ValidationError


async def test_seeding_is_idempotent(categories):
    """The fixture already seeded; a second run inserts nothing."""
    assert await categories.seed_fixed_categories() == 0

    listed = await categories.list_categories()
    assert len(listed) == len(FIXED_CATEGORIES)
    salary = await categories.get_category(1)
    assert salary.name == "Salary"
    assert salary.category_type is CategoryType.INCOME


async def test_create_and_find(categories):
    created = await categories.create_category("Pets", "expense", "P")

    assert created.category_type is CategoryType.EXPENSE
    assert await categories.exists(created.id)
    assert (await categories.find_by_name("Pets")).id == created.id
    assert await categories.find_by_name("Nope") is None


@pytest.mark.parametrize("name,category_type", [("", "Expense"), ("Gifts", "Transfer")])
async def test_create_rejects_bad_input(categories, name, category_type):
    with pytest.raises(ValidationError):
        await categories.create_category(name, category_type)


async def test_update_category(categories, grocery):
    updated = await categories.update_category(grocery.id, name="Groceries", icon="")

    assert updated.name == "Groceries"
    assert updated.icon == ""
    assert updated.category_type is CategoryType.EXPENSE


async def test_delete_unused_category(categories, grocery):
    await categories.delete_category(grocery.id)

    with pytest.raises(NotFoundError):
        await categories.get_category(grocery.id)


async def test_delete_category_in_use_is_refused(categories, transactions, cash_account, grocery):
    await transactions.create_transaction(cash_account.id, grocery.id, "-1.00")

    with pytest.raises(StorageError):
        await categories.delete_category(grocery.id)
    assert await categories.exists(grocery.id)


async def test_unknown_stored_type_is_reported(session, categories, grocery):
    row = await session.get(CategoryRow, grocery.id)
    row.category_type = "Transfer"
    await session.commit()

    listed = await categories.list_categories()

    assert grocery.id not in [c.id for c in listed]
    assert [err.row_id for err in listed.errors] == [grocery.id]
