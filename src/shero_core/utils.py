"""Shared date utilities.

Examples:
    >>> from datetime import date
    >>> parse_date("2024-01-15")
    datetime.date(2024, 1, 15)
    >>> [d.isoformat() for d in iter_days(date(2024, 1, 15), 3)]
    ['2024-01-13', '2024-01-14', '2024-01-15']
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Optional


def parse_date(s: str) -> date:
    """Parse a date string in YYYY-MM-DD format.

    Args:
        s: Date string in ISO format (YYYY-MM-DD).

    Returns:
        Parsed date object.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.
    """
    return datetime.strptime(s, "%Y-%m-%d").date()


def validate_date(s: str) -> str:
    """Return ``s`` unchanged if it is a valid YYYY-MM-DD date.

    Raises:
        ValueError: If the date string is not in YYYY-MM-DD format.
    """
    parse_date(s)
    return s


def today_iso(today: Optional[date] = None) -> str:
    """Today's date (or the given one) as YYYY-MM-DD."""
    return (today or date.today()).isoformat()


def iter_days(end: date, days: int) -> Iterable[date]:
    """Yield the ``days`` calendar days ending on ``end``, oldest first.

    Args:
        end: Last day of the window (inclusive).
        days: Window length.

    Yields:
        Consecutive dates.
    """
    for offset in range(days - 1, -1, -1):
        yield end - timedelta(days=offset)
