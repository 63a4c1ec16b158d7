"""Tests for the recurring processing script."""

from datetime import datetime

import pytest

from ledger.core.errors import StorageError
from ledger.core.money import Money
from ledger.recurring.repository import RecurringRepository
from scripts.process_recurring import next_run, process_recurring


@pytest.mark.parametrize(
    "rule,expected",
    [
        ("daily", datetime(2025, 2, 1, 9, 0)),
        ("weekly", datetime(2025, 2, 7, 9, 0)),
        ("Monthly", datetime(2025, 2, 28, 9, 0)),
        ("yearly", datetime(2026, 1, 31, 9, 0)),
    ],
)
def test_next_run(rule, expected):
    assert next_run(datetime(2025, 1, 31, 9, 0), rule) == expected


def test_next_run_unknown_rule():
    with pytest.raises(ValueError):
        next_run(datetime(2025, 1, 1), "fortnightly-ish")


async def test_process_catches_up_missed_periods(db_manager, session, accounts, cash_account, grocery):
    recurring = RecurringRepository(session)
    recurring_id = await recurring.create_recurring(
        cash_account.id, "-50.00", "CAD", "monthly", "2025-01-31", grocery.id, "Gym"
    )
    await recurring.create_recurring(cash_account.id, "-1.00", "CAD", "someday", "2025-01-01", grocery.id)

    processed = await process_recurring(datetime(2025, 3, 15), manager=db_manager)

    assert processed == 2
    assert (await accounts.get_account(cash_account.id)).balance == Money.parse("-100.00")
    session.expire_all()
    item = await recurring.get_recurring(recurring_id)
    assert item.next_run_date == datetime(2025, 3, 28)


async def test_failed_advance_moves_on_to_next_item(
    db_manager, session, accounts, cash_account, grocery, monkeypatch
):
    """A storage failure while advancing one item does not stop the run."""
    recurring = RecurringRepository(session)
    stuck_id = await recurring.create_recurring(
        cash_account.id, "-10.00", "CAD", "monthly", "2025-03-01", grocery.id, "Stuck"
    )
    healthy_id = await recurring.create_recurring(
        cash_account.id, "-5.00", "CAD", "weekly", "2025-03-10", grocery.id, "Healthy"
    )
    original_advance = RecurringRepository.advance

    async def flaky_advance(self, recurring_id, new_next_run_date):
        if recurring_id == stuck_id:
            raise StorageError("database is locked")
        await original_advance(self, recurring_id, new_next_run_date)

    monkeypatch.setattr(RecurringRepository, "advance", flaky_advance)

    processed = await process_recurring(datetime(2025, 3, 15), manager=db_manager)

    assert processed == 1
    session.expire_all()
    assert (await recurring.get_recurring(stuck_id)).next_run_date == datetime(2025, 3, 1)
    assert (await recurring.get_recurring(healthy_id)).next_run_date == datetime(2025, 3, 17)
    assert (await accounts.get_account(cash_account.id)).balance == Money.parse("-15.00")
