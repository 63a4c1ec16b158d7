"""Tests for aggregate reports."""

import pytest

from ledger.core.money import Money
from ledger.currency.repository import CurrencyRepository
from ledger.report.repository import ReportRepository


@pytest.fixture
def reports(session):
    return ReportRepository(session)


async def test_category_spending(reports, transactions, cash_account, grocery):
    food = 4
    salary = 1
    await transactions.create_transaction(cash_account.id, grocery.id, "-45.45", transacted_at="2025-11-22")
    await transactions.create_transaction(cash_account.id, grocery.id, "-4.55", transacted_at="2025-11-30T18:00:00")
    await transactions.create_transaction(cash_account.id, food, "-10.00", transacted_at="2025-11-23")
    await transactions.create_transaction(cash_account.id, salary, "2000.00", transacted_at="2025-11-25")
    await transactions.create_transaction(cash_account.id, food, "-99.00", transacted_at="2025-12-01")

    spending = await reports.category_spending("2025-11-01", "2025-11-30")

    assert [row.category for row in spending] == ["Grocery", "Food"]
    assert spending[0].total_amount == pytest.approx(50.00)
    assert spending[1].total_amount == pytest.approx(10.00)


async def test_category_spending_empty_window(reports):
    assert await reports.category_spending("2020-01-01", "2020-01-31") == []


async def test_monthly_summary(session, reports, transactions, cash_account, grocery):
    """Per-category signed base totals inside the window, by category id."""
    await CurrencyRepository(session, "CAD").upsert_rate("USD", "1.50")
    await transactions.create_transaction(cash_account.id, 1, "2000.00", transacted_at="2025-11-01")
    await transactions.create_transaction(cash_account.id, grocery.id, "-20.00", transacted_at="2025-11-10", currency="USD")
    await transactions.create_transaction(cash_account.id, grocery.id, "5.00", transacted_at="2025-11-30T20:00:00")
    await transactions.create_transaction(cash_account.id, grocery.id, "-99.00", transacted_at="2025-12-01")

    summary = await reports.monthly_summary("2025-11-01", "2025-11-30")

    assert [row.category_id for row in summary] == [1, grocery.id]
    assert summary[0].total_amount == pytest.approx(2000.00)
    assert summary[1].total_amount == pytest.approx(-25.00)


async def test_monthly_summary_empty_window(reports):
    assert await reports.monthly_summary("2020-01-01", "2020-01-31") == []


async def test_net_savings_uses_base_amounts(session, reports, transactions, cash_account, grocery):
    await CurrencyRepository(session, "CAD").upsert_rate("USD", "1.50")
    await transactions.create_transaction(cash_account.id, 1, "1000.00")
    await transactions.create_transaction(cash_account.id, grocery.id, "-100.00", currency="USD")
    await transactions.create_transaction(cash_account.id, grocery.id, "-0.10")

    assert await reports.net_savings() == Money.parse("849.90")


async def test_net_savings_without_transactions(reports):
    assert await reports.net_savings() == Money.zero()
