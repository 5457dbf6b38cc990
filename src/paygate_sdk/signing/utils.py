"""
Utility functions for gateway signing

This module provides timestamp handling in the gateway's compact formats,
price formatting for signed amounts and a small performance timer.
"""

import re
import time
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from ..exceptions import ErrorCodes, ValidationError

# Request timestamp format used in "dttm" fields (YYYYMMDDHHMMSS)
DTTM_FORMAT = "%Y%m%d%H%M%S"

_DTTM_PATTERN = re.compile(r"^\d{14}$")
_SHORT_DATETIME_PATTERN = re.compile(r"^(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})(\d{2})$")
_COMPACT_DATE_PATTERN = re.compile(r"^(\d{4})(\d{2})(\d{2})$")
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def generate_dttm(moment: Optional[datetime] = None) -> str:
    """
    Generate a gateway timestamp.

    Args:
        moment: Point in time to format (local current time if None)

    Returns:
        str: Timestamp as YYYYMMDDHHMMSS
    """
    if moment is None:
        moment = datetime.now()
    return moment.strftime(DTTM_FORMAT)


def validate_dttm(dttm: str) -> bool:
    """
    Validate gateway timestamp format.

    Args:
        dttm: Timestamp string to validate

    Returns:
        bool: True if dttm is a valid YYYYMMDDHHMMSS timestamp
    """
    if not isinstance(dttm, str) or not _DTTM_PATTERN.match(dttm):
        return False
    try:
        datetime.strptime(dttm, DTTM_FORMAT)
    except ValueError:
        return False
    return True


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp as sent by the gateway.

    Accepts a trailing "Z", offsets without colon and fractional seconds of
    any precision. Returns None for empty or unparsable values.
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    # Offsets like +0200
    offset_match = re.search(r"([+-]\d{2})(\d{2})$", text)
    if offset_match and "T" in text and text[offset_match.start() - 1] != ":":
        text = text[:offset_match.start()] + f"{offset_match.group(1)}:{offset_match.group(2)}"

    # fromisoformat handles only 3 or 6 fractional digits on older interpreters
    fraction = _FRACTION_PATTERN.search(text)
    if fraction:
        digits = (fraction.group(1) + "000000")[:6]
        text = text[:fraction.start()] + "." + digits + text[fraction.end():]

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_short_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a YYMMDDHHMMSS timestamp.

    Returns None for empty or unparsable values.
    """
    if not value or not isinstance(value, str):
        return None
    match = _SHORT_DATETIME_PATTERN.match(value)
    if not match:
        return None
    year, month, day, hour, minute, second = (int(part) for part in match.groups())
    try:
        return datetime(2000 + year, month, day, hour, minute, second)
    except ValueError:
        return None


def parse_compact_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a YYYYMMDD date.

    Returns None for empty or unparsable values.
    """
    if not value or not isinstance(value, str):
        return None
    match = _COMPACT_DATE_PATTERN.match(value)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_iso_datetime(moment: datetime) -> str:
    """Format datetime as ISO 8601 with seconds precision"""
    return moment.isoformat(timespec="seconds")


def format_price_value(price: Union[int, float, str, Decimal]) -> str:
    """
    Format a monetary amount with exactly two decimal places.

    Args:
        price: Amount in main currency units

    Returns:
        str: Amount like "123.40"

    Raises:
        ValidationError: If price is not numeric
    """
    if isinstance(price, bool):
        raise ValidationError("Price cannot be boolean", ErrorCodes.UNSUPPORTED_VALUE_TYPE)
    try:
        amount = Decimal(str(price)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(
            f"Price is not a number: {price!r}",
            ErrorCodes.UNSUPPORTED_VALUE_TYPE,
            {"price": str(price)}
        ) from e
    if not amount.is_finite():
        raise ValidationError(f"Price is not finite: {price!r}", ErrorCodes.UNSUPPORTED_VALUE_TYPE)
    return str(amount)


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000
