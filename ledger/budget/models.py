"""Budget model for the database."""

from sqlalchemy import Column, ForeignKey, Integer, String

from ledger.core.database import Base


class Budget(Base):
    """Spending limit for an account, optionally narrowed to a category."""
    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    period = Column(String(10), nullable=False)  # weekly / monthly
    amount = Column(String(64), nullable=False)
    currency = Column(String(3), nullable=False)
    start_date = Column(String(32), nullable=False)
