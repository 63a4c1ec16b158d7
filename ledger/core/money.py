"""
Money primitive.

Immutable fixed-point wrapper around ``decimal.Decimal``. Every monetary value
in the ledger passes through this type; binary floats are never accepted as
input. The textual form produced by ``format()`` is what gets persisted, and
``Money.parse(m.format()) == m`` holds for every value.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Union

from ledger.core.errors import ParseError

CENT = Decimal("0.01")
MoneyLike = Union["Money", Decimal, int, str]


@dataclass(frozen=True, order=True)
class Money:
    """
    Exact decimal amount.

    Examples:
        >>> Money.parse("12.5").format()
        '12.50'
        >>> str(Money.parse("-45.45") + Money.parse("45.45"))
        '0.00'
        >>> Money.parse("0.125").round().format()
        '0.13'
    """

    value: Decimal

    def __post_init__(self):
        if not isinstance(self.value, Decimal):
            raise TypeError(f"Money requires a Decimal, got {type(self.value).__name__}")
        if not self.value.is_finite():
            raise ValueError(f"Money must be finite, got {self.value}")

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal("0"))

    @classmethod
    def parse(cls, text: str) -> "Money":
        """
        Parse a decimal literal such as ``"12.34"``, ``"-5"`` or ``"+1e2"``.

        Raises:
            ParseError: if the text is empty, not a number, or not finite.
        """
        if not isinstance(text, str):
            raise ParseError("amount", text)
        stripped = text.strip()
        if not stripped:
            raise ParseError("amount", text)
        try:
            value = Decimal(stripped)
        except InvalidOperation:
            raise ParseError("amount", text) from None
        if not value.is_finite():
            raise ParseError("amount", text)
        return cls(value)

    @classmethod
    def of(cls, value: MoneyLike) -> "Money":
        """Coerce a Money, Decimal, int or decimal string into Money."""
        if isinstance(value, Money):
            return value
        if isinstance(value, bool) or isinstance(value, float):
            raise ParseError("amount", value)
        if isinstance(value, int):
            return cls(Decimal(value))
        if isinstance(value, Decimal):
            if not value.is_finite():
                raise ParseError("amount", value)
            return cls(value)
        return cls.parse(value)

    def format(self) -> str:
        """Plain positional notation with at least two fractional digits."""
        value = self.value
        if value.as_tuple().exponent > -2:
            value = _quantize(value, CENT)
        if value.is_zero():
            value = abs(value)
        return format(value, "f")

    def __str__(self) -> str:
        return self.format()

    def negate(self) -> "Money":
        return Money(-self.value)

    def __neg__(self) -> "Money":
        return self.negate()

    def abs(self) -> "Money":
        return Money(abs(self.value))

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.value + other.value)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.value - other.value)

    def __mul__(self, factor: Union[Decimal, int]) -> "Money":
        """Scale by an exact factor, e.g. a currency rate."""
        if isinstance(factor, bool) or not isinstance(factor, (Decimal, int)):
            return NotImplemented
        return Money(self.value * factor)

    __rmul__ = __mul__

    def round(self, places: int = 2) -> "Money":
        """Round half away from zero to ``places`` fractional digits."""
        exponent = Decimal(1).scaleb(-places)
        return Money(_quantize(self.value, exponent))

    def is_negative(self) -> bool:
        return self.value < 0

    def is_zero(self) -> bool:
        return self.value.is_zero()

    def percent_of(self, total: "Money") -> float:
        """
        Ratio of this amount to ``total`` as a percentage.

        Float output is for display only (progress bars, "% used" labels);
        never feed it back into stored amounts.
        """
        if total.is_zero():
            return 0.0
        return float(self.value / total.value * 100)


def sum_money(amounts) -> Money:
    """Exact sum of an iterable of Money."""
    total = Money.zero()
    for amount in amounts:
        total = total + amount
    return total


def _quantize(value: Decimal, exponent: Decimal) -> Decimal:
    # widen precision so large magnitudes never raise InvalidOperation
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() - exponent.adjusted() + 2)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)
