"""Repository for tag operations."""

from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.database import atomic
from ledger.core.errors import NotFoundError, ValidationError
from ledger.core.logging import get_logger
from ledger.tag.models import Tag, TransactionTag
from ledger.tag import schemas
from ledger.transaction.models import Transaction

logger = get_logger(__name__)


class TagRepository:
    """Repository for tags and their links to transactions."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def _ensure_transaction(self, transaction_id: int) -> None:
        result = await self.session.execute(
            select(Transaction.id).where(Transaction.id == transaction_id)
        )
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Transaction", transaction_id)

    async def _ensure_tag(self, tag_id: int) -> None:
        result = await self.session.execute(select(Tag.id).where(Tag.id == tag_id))
        if result.scalar_one_or_none() is None:
            raise NotFoundError("Tag", tag_id)

    async def create_tag(self, name: str) -> schemas.Tag:
        """Create a tag, or return the existing one with the same name."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Tag name must not be empty")

        async with atomic(self.session):
            result = await self.session.execute(select(Tag).where(Tag.name == name))
            row = result.scalar_one_or_none()
            if row is None:
                row = Tag(name=name)
                self.session.add(row)
                await self.session.flush()
                logger.info("tag_created", tag_id=row.id, name=name)
        return schemas.Tag.from_row(row)

    async def list_tags(self) -> List[schemas.Tag]:
        result = await self.session.execute(select(Tag).order_by(Tag.name))
        return [schemas.Tag.from_row(row) for row in result.scalars().all()]

    async def tag_transaction(self, transaction_id: int, tag_id: int) -> None:
        """Attach a tag to a transaction; attaching twice is a no-op."""
        async with atomic(self.session):
            await self._ensure_transaction(transaction_id)
            await self._ensure_tag(tag_id)
            existing = await self.session.get(TransactionTag, (transaction_id, tag_id))
            if existing is None:
                self.session.add(TransactionTag(transaction_id=transaction_id, tag_id=tag_id))

    async def untag_transaction(self, transaction_id: int, tag_id: int) -> bool:
        """Detach a tag; returns False when the link did not exist."""
        async with atomic(self.session):
            result = await self.session.execute(
                delete(TransactionTag).where(
                    TransactionTag.transaction_id == transaction_id,
                    TransactionTag.tag_id == tag_id,
                )
            )
        return result.rowcount > 0

    async def tags_for_transaction(self, transaction_id: int) -> List[schemas.Tag]:
        await self._ensure_transaction(transaction_id)
        result = await self.session.execute(
            select(Tag)
            .join(TransactionTag, TransactionTag.tag_id == Tag.id)
            .where(TransactionTag.transaction_id == transaction_id)
            .order_by(Tag.name)
        )
        return [schemas.Tag.from_row(row) for row in result.scalars().all()]
