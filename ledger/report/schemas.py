"""Pydantic schemas for report data."""

from pydantic import BaseModel


class CategorySpending(BaseModel):
    """Schema for spending per category (approximate, float aggregate)."""
    category: str
    total_amount: float


class CategoryTotal(BaseModel):
    """Signed base-currency total for one category (approximate, float aggregate)."""
    category_id: int
    total_amount: float
