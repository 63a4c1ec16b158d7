"""Schemas and helpers for currency codes and rates."""

import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from ledger.core.errors import ParseError, ValidationError
from ledger.core.schemas import LedgerModel
from ledger.core.storage import decode_rate

CURRENCY_CODE = re.compile(r"^[A-Z]{3}$")


def normalize_currency(code: Optional[str]) -> str:
    """Upper-case a three letter ISO 4217-like code, rejecting anything else."""
    cleaned = (code or "").strip().upper()
    if not CURRENCY_CODE.match(cleaned):
        raise ValidationError(f"Invalid currency code: {code!r}")
    return cleaned


def parse_rate(value) -> Decimal:
    """Parse a positive conversion rate without going through float."""
    if isinstance(value, (bool, float)):
        raise ParseError("rate", value)
    try:
        rate = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except InvalidOperation:
        raise ParseError("rate", value) from None
    if not rate.is_finite() or rate <= 0:
        raise ValidationError(f"Currency rate must be a positive number, got {value!r}")
    return rate


class CurrencyRate(LedgerModel):
    currency: str
    rate_to_base: Decimal

    @classmethod
    def from_row(cls, row) -> "CurrencyRate":
        return cls(
            currency=row.currency,
            rate_to_base=decode_rate(row.rate_to_base, "currency_rates", row.currency, "rate_to_base"),
        )
