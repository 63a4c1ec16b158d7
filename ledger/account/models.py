"""Account model for the database."""

from sqlalchemy import Column, Integer, String

from ledger.core.database import Base


class Account(Base):
    """Account holding a cached balance derived from its transactions."""
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    account_type = Column(String(20), nullable=False)
    currency = Column(String(3), nullable=False)
    balance = Column(String(64), nullable=False, default="0.00")  # Cache, see transaction.balance
    created_at = Column(String(32), nullable=False)
