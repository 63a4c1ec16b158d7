"""Database initialization and dependency injection."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import fastapi
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.category.repository import CategoryRepository
from ledger.core.config import get_settings
from ledger.core.database import DatabaseManager
from ledger.core.logging import get_logger
# Import all models to ensure they're registered
import ledger.account.models
import ledger.category.models
import ledger.transaction.models
import ledger.tag.models
import ledger.currency.models
import ledger.recurring.models
import ledger.budget.models
import ledger.savings.models

logger = get_logger(__name__)

# Create a single instance of DatabaseManager
db_manager = DatabaseManager()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for getting database sessions."""
    async with db_manager.get_db() as session:
        yield session


async def bootstrap(manager: DatabaseManager = db_manager) -> None:
    """Create the schema and seed the fixed categories."""
    await manager.create_schema()
    async with manager.get_db() as session:
        inserted = await CategoryRepository(session).seed_fixed_categories()
    logger.info("database_bootstrapped", url=get_settings().async_db_url, seeded=inserted)


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Bootstrap storage on startup and release the pool on shutdown."""
    await bootstrap()
    yield
    await db_manager.dispose()
