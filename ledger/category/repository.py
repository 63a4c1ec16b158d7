"""Repository for category operations."""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.category.models import Category
from ledger.category import schemas
from ledger.core.database import atomic
from ledger.core.errors import NotFoundError, ValidationError
from ledger.core.logging import get_logger
from ledger.core.storage import DecodedList, decode_rows

logger = get_logger(__name__)

INITIAL_BALANCE_CATEGORY = "Initial Balance"

FIXED_CATEGORIES = [
    (1, "Salary", schemas.CategoryType.INCOME),
    (2, "Bonus", schemas.CategoryType.INCOME),
    (3, "Investment", schemas.CategoryType.INCOME),
    (4, "Food", schemas.CategoryType.EXPENSE),
    (5, "Transport", schemas.CategoryType.EXPENSE),
    (6, "Rent", schemas.CategoryType.EXPENSE),
    (7, "Shopping", schemas.CategoryType.EXPENSE),
    (8, "Utilities", schemas.CategoryType.EXPENSE),
    (9, "Entertainment", schemas.CategoryType.EXPENSE),
    (10, "Health", schemas.CategoryType.EXPENSE),
    (11, "Education", schemas.CategoryType.EXPENSE),
    (12, "Travel", schemas.CategoryType.EXPENSE),
]


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Category name must not be empty")
    return cleaned


class CategoryRepository:
    """Repository for category operations."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def _get_row(self, category_id: int) -> Category:
        result = await self.session.execute(
            select(Category).where(Category.id == category_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Category", category_id)
        return row

    async def create_category(
        self,
        name: str,
        category_type,
        icon: str = "",
    ) -> schemas.Category:
        """Create a new category."""
        name = _clean_name(name)
        category_type = schemas.CategoryType.parse(category_type)

        async with atomic(self.session):
            row = Category(name=name, category_type=category_type.value, icon=icon or "")
            self.session.add(row)
            await self.session.flush()
        logger.info("category_created", category_id=row.id, name=name)
        return schemas.Category.from_row(row)

    async def get_category(self, category_id: int) -> schemas.Category:
        """Get category by ID."""
        return schemas.Category.from_row(await self._get_row(category_id))

    async def exists(self, category_id: int) -> bool:
        result = await self.session.execute(
            select(Category.id).where(Category.id == category_id)
        )
        return result.scalar_one_or_none() is not None

    async def list_categories(self) -> DecodedList:
        """Get all categories ordered by name."""
        result = await self.session.execute(
            select(Category).order_by(Category.name, Category.id)
        )
        return decode_rows(result.scalars().all(), schemas.Category.from_row)

    async def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        category_type=None,
        icon: Optional[str] = None,
    ) -> schemas.Category:
        """Update category metadata."""
        if name is not None:
            name = _clean_name(name)
        if category_type is not None:
            category_type = schemas.CategoryType.parse(category_type)

        async with atomic(self.session):
            row = await self._get_row(category_id)
            if name is not None:
                row.name = name
            if category_type is not None:
                row.category_type = category_type.value
            if icon is not None:
                row.icon = icon
        return schemas.Category.from_row(row)

    async def delete_category(self, category_id: int) -> None:
        """
        Delete a category.

        Categories still referenced by transactions are protected by the
        foreign key; the resulting StorageError leaves everything in place.
        """
        async with atomic(self.session):
            row = await self._get_row(category_id)
            await self.session.delete(row)
            await self.session.flush()
        logger.info("category_deleted", category_id=category_id)

    async def find_by_name(self, name: str) -> Optional[schemas.Category]:
        result = await self.session.execute(
            select(Category).where(Category.name == name).order_by(Category.id).limit(1)
        )
        row = result.scalar_one_or_none()
        return schemas.Category.from_row(row) if row is not None else None

    async def get_or_create_row(self, name: str, category_type) -> Category:
        """
        Find a category by name or add it to the session.

        Does not commit; used from inside another unit of work.
        """
        category_type = schemas.CategoryType.parse(category_type)
        result = await self.session.execute(
            select(Category).where(Category.name == name).order_by(Category.id).limit(1)
        )
        row = result.scalar_one_or_none()
        if row is None:
            row = Category(name=name, category_type=category_type.value, icon="")
            self.session.add(row)
            await self.session.flush()
            logger.info("category_created", category_id=row.id, name=name)
        return row

    async def seed_fixed_categories(self) -> int:
        """
        Insert the canonical categories that are not present yet.

        Matching is by id, so running this repeatedly is a no-op.
        Returns the number of categories inserted.
        """
        inserted = 0
        async with atomic(self.session):
            result = await self.session.execute(select(Category.id))
            existing = set(result.scalars().all())
            for category_id, name, category_type in FIXED_CATEGORIES:
                if category_id in existing:
                    continue
                self.session.add(
                    Category(id=category_id, name=name, category_type=category_type.value, icon="")
                )
                inserted += 1
        if inserted:
            logger.info("fixed_categories_seeded", inserted=inserted)
        return inserted
