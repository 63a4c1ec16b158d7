"""Currency rate model for the database."""

from sqlalchemy import Column, String

from ledger.core.database import Base


class CurrencyRate(Base):
    """Manually maintained conversion rate into the base currency."""
    __tablename__ = "currency_rates"

    currency = Column(String(3), primary_key=True)
    rate_to_base = Column(String(64), nullable=False)
