"""Transaction model for the database."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Index

from ledger.core.database import Base


class Transaction(Base):
    """Single ledger entry; the transactions table is the ledger of truth."""
    __tablename__ = "transactions"
    __table_args__ = (
        Index("ix_transactions_account_date", "account_id", "transacted_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    amount = Column(String(64), nullable=False)  # Absolute value, sign from is_expense
    base_amount = Column(String(64), nullable=True)  # amount * rate at insert time
    is_expense = Column(Boolean, nullable=False)
    memo = Column(String(255), nullable=True)
    payee = Column(String(255), nullable=True)
    currency = Column(String(3), nullable=False)
    transacted_at = Column(String(32), nullable=False)  # Business date
    created_at = Column(String(32), nullable=False)
