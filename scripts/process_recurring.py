"""
Script to materialise due recurring transactions.

The ledger only stores the recurrence rule as a label, so the calendar step
lives here: for every due item, create the transaction through the normal
write path, then advance the item by one period of its rule.
"""

import argparse
import asyncio
from datetime import datetime

import pandas as pd

from ledger.core.config import get_settings
from ledger.core.errors import LedgerError
from ledger.core.database import DatabaseManager
from ledger.core.init_db import db_manager
from ledger.core.logging import configure_logging, get_logger
from ledger.recurring.repository import RecurringRepository
from ledger.transaction.repository import TransactionRepository

logger = get_logger(__name__)

RULE_OFFSETS = {
    "daily": pd.DateOffset(days=1),
    "weekly": pd.DateOffset(weeks=1),
    "biweekly": pd.DateOffset(weeks=2),
    "monthly": pd.DateOffset(months=1),
    "quarterly": pd.DateOffset(months=3),
    "yearly": pd.DateOffset(years=1),
}


def next_run(current: datetime, rule: str) -> datetime:
    """Next run date for a known rule label."""
    offset = RULE_OFFSETS.get(rule.strip().lower())
    if offset is None:
        raise ValueError(f"Unsupported recurrence rule: {rule!r}")
    return (pd.Timestamp(current) + offset).to_pydatetime()


async def process_recurring(as_of: datetime, manager: DatabaseManager = db_manager) -> int:
    """Materialise every item due at ``as_of``; returns the number processed."""
    processed = 0
    async with manager.get_db() as session:
        recurring = RecurringRepository(session)
        transactions = TransactionRepository(session)
        due = await recurring.list_due(as_of)
        for item in due:
            if item.category_id is None or item.recurrence_rule.strip().lower() not in RULE_OFFSETS:
                logger.warning("recurring_skipped", recurring_id=item.id, rule=item.recurrence_rule)
                continue
            run_at = item.next_run_date
            # catch up on every missed period
            while run_at <= as_of:
                try:
                    await transactions.create_transaction(
                        account_id=item.account_id,
                        category_id=item.category_id,
                        amount=item.amount,
                        memo=item.description,
                        currency=item.currency,
                        transacted_at=run_at,
                    )
                    run_at = next_run(run_at, item.recurrence_rule)
                    await recurring.advance(item.id, run_at)
                except LedgerError as exc:
                    logger.error("recurring_failed", recurring_id=item.id, error=str(exc))
                    break
                processed += 1
    return processed


async def main(as_of: datetime) -> None:
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    try:
        processed = await process_recurring(as_of)
        logger.info("recurring_processed", count=processed, as_of=as_of.isoformat())
    finally:
        await db_manager.dispose()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--as-of", type=datetime.fromisoformat, default=datetime.now())
    args = parser.parse_args()
    asyncio.run(main(args.as_of))
