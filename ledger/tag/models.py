"""Tag models for the database."""

from sqlalchemy import Column, ForeignKey, Integer, String

from ledger.core.database import Base


class Tag(Base):
    """Free-form label that can be attached to many transactions."""
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(50), unique=True, nullable=False)


class TransactionTag(Base):
    """Join table between transactions and tags."""
    __tablename__ = "transaction_tags"

    transaction_id = Column(Integer, ForeignKey("transactions.id"), primary_key=True)
    tag_id = Column(Integer, ForeignKey("tags.id"), primary_key=True)
