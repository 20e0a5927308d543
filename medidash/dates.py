"""Date utilities for medidash.

Pure functions for month token validation, labels and the month list.
"""

import re
from datetime import date, datetime

from medidash.domain.models import Month
from medidash.errors import InvalidMonth

MONTH_PATTERN = re.compile(r"^\d{4}-\d{2}$")


def parse_month(value: str | None) -> Month:
    """Validate a month token.

    Args:
        value: Month in YYYY-MM format.

    Returns:
        The validated Month.

    Raises:
        InvalidMonth: If the token is missing, malformed, or the month is not 1-12.
    """
    if not value or not isinstance(value, str) or not MONTH_PATTERN.match(value):
        raise InvalidMonth("Valid selected month and year (YYYY-MM) are required.")
    month_number = int(value[5:7])
    if not 1 <= month_number <= 12:
        raise InvalidMonth(f"Invalid month '{value}': month must be between 01 and 12.")
    return Month(value)


def month_label(month: Month) -> str:
    """Human-readable month, e.g. "January 2025"."""
    return datetime.strptime(month, "%Y-%m").strftime("%B %Y")


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    """Move a (year, month) pair by offset months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def available_months(count: int = 12, today: date | None = None) -> list[tuple[Month, str]]:
    """List selectable months, newest first.

    Args:
        count: Number of months including the current one.
        today: Reference date. If None, uses today's date.

    Returns:
        List of (month, label) tuples.
    """
    if today is None:
        today = date.today()

    months = []
    for offset in range(count):
        year, month_number = shift_month(today.year, today.month, -offset)
        month = Month(f"{year:04d}-{month_number:02d}")
        months.append((month, month_label(month)))
    return months


def current_month(today: date | None = None) -> Month:
    """The month containing today."""
    return available_months(1, today)[0][0]
