"""Display formatting for the fixed en-IN locale.

This module centralizes currency and date label formatting used by the
report views and the CLI.
"""

from __future__ import annotations

from datetime import date

from shero_core.constants import CURRENCY_SYMBOL

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]

MONTH_ABBREVIATIONS = [name[:3] for name in MONTH_NAMES]

DAY_ABBREVIATIONS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def group_indian(digits: str) -> str:
    """Group an integer digit string the Indian way (12,34,567).

    Examples:
        >>> group_indian("1234567")
        '12,34,567'
    """
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount: float) -> str:
    """Format an amount as rupees with two decimals.

    Examples:
        >>> format_currency(123456.5)
        '₹1,23,456.50'
        >>> format_currency(-80)
        '-₹80.00'
    """
    sign = "-" if amount < 0 else ""
    whole, _, fraction = f"{abs(amount):.2f}".partition(".")
    return f"{sign}{CURRENCY_SYMBOL}{group_indian(whole)}.{fraction}"


def format_percentage(value: float) -> str:
    """Format a ratio as a percentage with one decimal, e.g. ``'12.5%'``."""
    return f"{value * 100:.1f}%"


def format_month_label(d: date) -> str:
    """Format a month like 'January 2024'."""
    return f"{MONTH_NAMES[d.month - 1]} {d.year}"


def format_short_day(d: date) -> str:
    """Format a day like 'Jan 15'."""
    return f"{MONTH_ABBREVIATIONS[d.month - 1]} {d.day}"


def format_week_label(start: date, end: date) -> str:
    """Format a week range like 'Jan 15 - Jan 21'."""
    return f"{format_short_day(start)} - {format_short_day(end)}"


def format_weekday(d: date) -> str:
    """Short weekday name like 'Mon'."""
    return DAY_ABBREVIATIONS[d.weekday()]
