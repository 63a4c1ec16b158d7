"""
Pytest Configuration and Shared Fixtures

Every test gets its own SQLite file database with the full schema and the
fixed categories seeded.
"""

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine

# Import all models so the schema is complete
import ledger.account.models
import ledger.category.models
import ledger.transaction.models
import ledger.tag.models
import ledger.currency.models
import ledger.recurring.models
import ledger.budget.models
import ledger.savings.models
from ledger.account.repository import AccountRepository
from ledger.category.repository import CategoryRepository
from ledger.core.database import DatabaseManager
from ledger.core.init_db import get_db
from ledger.core.logging import configure_logging
from ledger.transaction.repository import TransactionRepository
from restapi.router import create_app

configure_logging("WARNING")


@pytest.fixture
async def db_manager(tmp_path):
    """DatabaseManager bound to a throwaway SQLite file."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}")
    manager = DatabaseManager(engine)
    await manager.create_schema()
    async with manager.get_db() as session:
        await CategoryRepository(session).seed_fixed_categories()
    yield manager
    await manager.dispose()


@pytest.fixture
async def session(db_manager):
    async with db_manager.get_db() as session:
        yield session


@pytest.fixture
def accounts(session):
    return AccountRepository(session, base_currency="CAD")


@pytest.fixture
def transactions(session):
    return TransactionRepository(session, base_currency="CAD")


@pytest.fixture
def categories(session):
    return CategoryRepository(session)


@pytest.fixture
async def cash_account(accounts):
    """Empty CAD cash account."""
    return await accounts.create_account("Cash", "cash", "CAD", "0.00")


@pytest.fixture
async def grocery(categories):
    """Expense category used by most transaction tests."""
    return await categories.create_category("Grocery", "Expense", "G")


@pytest.fixture
async def client(db_manager):
    """HTTP client for the app, with sessions taken from the test database."""
    app = create_app(lifespan=None)

    async def override_get_db():
        async with db_manager.get_db() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
