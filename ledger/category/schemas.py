"""Schemas and enums for categories."""

from enum import Enum

from ledger.core.errors import DecodeError, ValidationError
from ledger.core.schemas import LedgerModel


class CategoryType(str, Enum):
    INCOME = "Income"
    EXPENSE = "Expense"

    @classmethod
    def parse(cls, value) -> "CategoryType":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        raise ValidationError(f"Unknown category type: {value!r}")


class Category(LedgerModel):
    id: int
    name: str
    category_type: CategoryType
    icon: str = ""

    @classmethod
    def from_row(cls, row) -> "Category":
        try:
            category_type = CategoryType.parse(row.category_type)
        except ValidationError:
            raise DecodeError("categories", row.id, "category_type", row.category_type) from None
        return cls(
            id=row.id,
            name=row.name,
            category_type=category_type,
            icon=row.icon or "",
        )
