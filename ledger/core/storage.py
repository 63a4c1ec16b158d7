"""
Persisted representation of money and time.

Money columns hold exact decimal text (``Money.format``). Timestamps hold
``YYYY-MM-DDTHH:MM:SS`` text so that lexical ordering in SQL matches
chronological ordering. Reads accept the legacy spellings listed in
``TIMESTAMP_FORMATS``; writes always use the canonical one.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Iterable, List, Optional, TypeVar, Union

from ledger.core.errors import DecodeError, ParseError
from ledger.core.logging import get_logger
from ledger.core.money import Money

logger = get_logger(__name__)

CANONICAL_FORMAT = "%Y-%m-%dT%H:%M:%S"
TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%d %H:%M:%S.%f",
    "%Y-%m-%d",
)

T = TypeVar("T")
TimestampLike = Union[str, date, datetime]


def encode_money(amount: Money) -> str:
    return amount.format()


def decode_money(text: Any, table: str, row_id: Any, column: str) -> Money:
    """Decode a money column, raising DecodeError on garbage."""
    try:
        return Money.parse(text)
    except ParseError:
        raise DecodeError(table, row_id, column, text) from None


def decode_optional_money(
    text: Any, table: str, row_id: Any, column: str
) -> Optional[Money]:
    if text is None:
        return None
    return decode_money(text, table, row_id, column)


def encode_rate(rate: Decimal) -> str:
    return format(rate, "f")


def decode_rate(text: Any, table: str, row_id: Any, column: str) -> Decimal:
    try:
        rate = Decimal(str(text).strip())
    except InvalidOperation:
        raise DecodeError(table, row_id, column, text) from None
    if not rate.is_finite():
        raise DecodeError(table, row_id, column, text)
    return rate


def _parse_timestamp(text: str) -> Optional[datetime]:
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def encode_timestamp(value: Union[date, datetime]) -> str:
    """Canonical text for a date or datetime (dates become midnight)."""
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0).strftime(CANONICAL_FORMAT)


def decode_timestamp(text: Any, table: str, row_id: Any, column: str) -> datetime:
    """Decode a persisted timestamp; unparseable text is fatal for the row."""
    parsed = _parse_timestamp(text.strip()) if isinstance(text, str) else None
    if parsed is None:
        raise DecodeError(table, row_id, column, text)
    return parsed


def decode_optional_timestamp(
    text: Any, table: str, row_id: Any, column: str
) -> Optional[datetime]:
    if text is None:
        return None
    return decode_timestamp(text, table, row_id, column)


def parse_input_timestamp(value: TimestampLike, field: str = "date") -> datetime:
    """
    Parse a user-supplied date or timestamp.

    Accepts ``date``/``datetime`` objects and the same literal formats that
    are accepted on read. Anything else is a ParseError, raised before the
    value can reach storage.
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        parsed = _parse_timestamp(value.strip())
        if parsed is not None:
            return parsed
    raise ParseError(field, value)


def range_end(value: TimestampLike, field: str = "end") -> datetime:
    """Inclusive upper bound; a bare date covers the whole day."""
    if isinstance(value, str) and len(value.strip()) == 10:
        value = parse_input_timestamp(value, field).date()
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max).replace(microsecond=0)
    return parse_input_timestamp(value, field)


class DecodedList(List[T]):
    """
    Rows that decoded cleanly, plus the DecodeErrors of those that did not.

    A bad row never aborts the whole query, and it is never dropped silently:
    callers inspect ``errors`` to surface it.
    """

    def __init__(self, items: Iterable[T] = (), errors: Iterable[DecodeError] = ()):
        super().__init__(items)
        self.errors: List[DecodeError] = list(errors)


def decode_rows(rows: Iterable[Any], converter: Callable[[Any], T]) -> DecodedList:
    """Convert ORM rows with ``converter``, collecting per-row DecodeErrors."""
    result: DecodedList = DecodedList()
    for row in rows:
        try:
            result.append(converter(row))
        except DecodeError as exc:
            logger.error(
                "row_decode_failed",
                table=exc.table,
                row_id=exc.row_id,
                column=exc.column,
                value=exc.value,
            )
            result.errors.append(exc)
    return result


def utc_now() -> datetime:
    """System clock for created-at columns (naive UTC, whole seconds)."""
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)
