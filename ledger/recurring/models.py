"""Recurring transaction model for the database."""

from sqlalchemy import Column, ForeignKey, Integer, String

from ledger.core.database import Base


class RecurringTransaction(Base):
    """Template for a transaction that repeats on an external schedule."""
    __tablename__ = "recurring_transactions"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(String(64), nullable=False)
    currency = Column(String(3), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    description = Column(String(255), nullable=True)
    recurrence_rule = Column(String(50), nullable=False)  # Opaque label, e.g. "monthly"
    next_run_date = Column(String(32), nullable=False, index=True)
