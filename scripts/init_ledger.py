"""Script to create the ledger schema and seed the fixed categories."""

import asyncio

from ledger.core.config import get_settings
from ledger.core.init_db import bootstrap, db_manager
from ledger.core.logging import configure_logging


async def init_ledger():
    """Create all tables and insert the canonical categories if missing."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON)
    try:
        await bootstrap(db_manager)
    finally:
        await db_manager.dispose()

if __name__ == "__main__":
    asyncio.run(init_ledger())
