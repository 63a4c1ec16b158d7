"""Category model for the database."""

from sqlalchemy import Column, Integer, String

from ledger.core.database import Base


class Category(Base):
    """Income or expense category attached to transactions."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)  # Unique by convention only
    category_type = Column(String(10), nullable=False)
    icon = Column(String(16), nullable=False, default="")
