"""Repository for currency rate operations."""

from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.core.config import get_settings
from ledger.core.database import atomic
from ledger.core.logging import get_logger
from ledger.core.storage import DecodedList, decode_rate, decode_rows, encode_rate
from ledger.currency.models import CurrencyRate
from ledger.currency import schemas

logger = get_logger(__name__)

UNIT_RATE = Decimal("1")


class CurrencyRepository:
    """Repository for manually maintained currency rates."""

    def __init__(self, session: AsyncSession, base_currency: Optional[str] = None):
        """Initialize repository with database session."""
        self.session = session
        self.base_currency = schemas.normalize_currency(
            base_currency or get_settings().BASE_CURRENCY
        )

    async def upsert_rate(self, currency: str, rate) -> schemas.CurrencyRate:
        """Insert or replace the rate for ``currency``."""
        currency = schemas.normalize_currency(currency)
        rate = schemas.parse_rate(rate)

        async with atomic(self.session):
            row = await self.session.get(CurrencyRate, currency)
            if row is None:
                row = CurrencyRate(currency=currency, rate_to_base=encode_rate(rate))
                self.session.add(row)
            else:
                row.rate_to_base = encode_rate(rate)
        logger.info("currency_rate_upserted", currency=currency, rate=encode_rate(rate))
        return schemas.CurrencyRate.from_row(row)

    async def get_rate(self, currency: str) -> Optional[Decimal]:
        """Stored rate for ``currency`` or None."""
        currency = schemas.normalize_currency(currency)
        result = await self.session.execute(
            select(CurrencyRate).where(CurrencyRate.currency == currency)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return decode_rate(row.rate_to_base, "currency_rates", row.currency, "rate_to_base")

    async def list_rates(self) -> DecodedList:
        result = await self.session.execute(
            select(CurrencyRate).order_by(CurrencyRate.currency)
        )
        return decode_rows(result.scalars().all(), schemas.CurrencyRate.from_row)

    async def rate_to_base(self, currency: str) -> Decimal:
        """
        Multiplier from ``currency`` into the base currency.

        The base currency is always 1. A currency without a stored rate also
        converts at 1, with a warning, so that entry is never blocked by a
        missing rate.
        """
        currency = schemas.normalize_currency(currency)
        if currency == self.base_currency:
            return UNIT_RATE
        rate = await self.get_rate(currency)
        if rate is None:
            logger.warning(
                "currency_rate_missing",
                currency=currency,
                base_currency=self.base_currency,
                fallback_rate="1",
            )
            return UNIT_RATE
        return rate
