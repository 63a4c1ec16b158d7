"""Savings goal model for the database."""

from sqlalchemy import Column, ForeignKey, Integer, String

from ledger.core.database import Base


class SavingsGoal(Base):
    """Target amount tracked against a manually updated current amount."""
    __tablename__ = "savings_goals"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    name = Column(String(100), nullable=False)
    target_amount = Column(String(64), nullable=False)
    current_amount = Column(String(64), nullable=False)
    deadline = Column(String(32), nullable=True)
