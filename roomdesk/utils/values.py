"""
Coercion helpers for values read back from a record store.

Spreadsheet-backed stores hand back dates as strings in whatever format the
sheet displays and numbers as int, float or formatted text.
"""

import math
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y",
    "%d-%m-%Y",
)

DateLike = Union[date, datetime]


def coerce_date(value: Any) -> Optional[DateLike]:
    """Return a date/datetime for `value`, or None when it cannot be parsed."""
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value
    text = str(value).strip()
    if not text:
        return None
    # Tolerate timezone suffixes written by JavaScript clients
    if text.endswith("Z"):
        text = text[:-1]
    try:
        return datetime.fromisoformat(text) if "T" in text or " " in text else date.fromisoformat(text)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        return value.replace(tzinfo=None)
    return datetime(value.year, value.month, value.day)


def count_nights(check_in: DateLike, check_out: DateLike) -> int:
    """Ceiling of the day difference between the two dates."""
    delta = as_datetime(check_out) - as_datetime(check_in)
    return math.ceil(delta.total_seconds() / 86400)


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    """Parse a money-ish value ("75", 75.0, "$1,200.50") into a Decimal."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    text = str(value).strip().replace(",", "")
    for symbol in ("$", "€", "£"):
        text = text.replace(symbol, "")
    try:
        return Decimal(text)
    except InvalidOperation:
        return default


def money(value: Decimal) -> float:
    """Round to cents and hand back a float the stores can serialize."""
    return float(value.quantize(Decimal("0.01")))


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()
