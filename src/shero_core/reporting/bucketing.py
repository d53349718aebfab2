"""Temporal bucketing of dated records.

One generic grouping routine backs every breakdown in the package: the
dashboard's last-7-days chart, the receivables breakdown and the expense
breakdown differ only in the key function and the fields they sum.

Bucket keys:

- daily: the raw records, newest first (no grouping),
- weekly: the ISO Monday of the record's week (Sunday belongs to the week
  that started the previous Monday),
- monthly: the ``YYYY-MM`` prefix of the date string.

Examples:
    >>> week_start(date(2024, 1, 21))  # a Sunday
    datetime.date(2024, 1, 15)
    >>> month_key("2024-01-31")
    '2024-01'
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

import pandas as pd

from shero_core.reporting.formatters import format_month_label, format_week_label
from shero_core.utils import parse_date

logger = logging.getLogger(__name__)

T = TypeVar("T")

Accessor = Callable[[Any], float]


class BucketMode(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass
class Bucket:
    """One aggregation group.

    Attributes:
        key: Sort key (ISO date of the week's Monday, ``YYYY-MM`` or the day).
        label: Human-readable label.
        count: Number of records in the bucket.
        totals: Sum of each requested field.
    """

    key: str
    label: str
    count: int = 0
    totals: dict[str, float] = field(default_factory=dict)


def week_start(d: date) -> date:
    """Return the Monday starting the week that contains ``d``."""
    # getDay() convention: Sunday=0 .. Saturday=6
    day = (d.weekday() + 1) % 7
    return d - timedelta(days=(day + 6) % 7)


def week_key(date_str: str) -> str:
    return week_start(parse_date(date_str)).isoformat()


def month_key(date_str: str) -> str:
    return date_str[:7]


def week_label(key: str) -> str:
    start = parse_date(key)
    return format_week_label(start, start + timedelta(days=6))


def month_label(key: str) -> str:
    return format_month_label(parse_date(f"{key}-01"))


def group_records(
    records: Iterable[T],
    key_fn: Callable[[T], str],
    fields: Mapping[str, Accessor],
    label_fn: Callable[[str], str] = str,
) -> list[Bucket]:
    """Group records by key, summing the requested fields.

    Args:
        records: Records to group.
        key_fn: Extracts the bucket key from a record.
        fields: Output field name -> accessor returning the value to sum.
        label_fn: Turns a bucket key into its display label.

    Returns:
        Buckets sorted by key, most recent first.
    """
    grouped: dict[str, Bucket] = {}
    for record in records:
        key = key_fn(record)
        bucket = grouped.get(key)
        if bucket is None:
            bucket = Bucket(key=key, label=label_fn(key), totals={name: 0.0 for name in fields})
            grouped[key] = bucket
        bucket.count += 1
        for name, accessor in fields.items():
            bucket.totals[name] += accessor(record)

    return sorted(grouped.values(), key=lambda b: b.key, reverse=True)


def sort_daily(records: Iterable[T]) -> list[T]:
    """Sort records by date, newest first, then by identifier descending."""
    return sorted(records, key=lambda r: (r.date, r.id), reverse=True)


def _has_valid_date(record: Any) -> bool:
    try:
        parse_date(record.date)
    except (TypeError, ValueError):
        return False
    return True


def _dated(records: Iterable[T]) -> list[T]:
    kept: list[T] = []
    skipped: list[str] = []
    for record in records:
        if _has_valid_date(record):
            kept.append(record)
        else:
            skipped.append(getattr(record, "id", "?"))
    if skipped:
        logger.warning("Skipping %d record(s) with an invalid date: %s", len(skipped), ", ".join(skipped))
    return kept


KEY_FUNCTIONS: dict[BucketMode, tuple[Callable[[Any], str], Callable[[str], str]]] = {
    BucketMode.WEEKLY: (lambda r: week_key(r.date), week_label),
    BucketMode.MONTHLY: (lambda r: month_key(r.date), month_label),
}


def bucket_records(
    records: Iterable[T],
    mode: BucketMode | str,
    fields: Mapping[str, Accessor],
) -> list[Bucket] | list[T]:
    """Apply a bucketing mode.

    Daily mode returns the records themselves in display order; weekly and
    monthly return buckets. Records whose date is not YYYY-MM-DD cannot be
    placed in a week or month and are left out with a warning.
    """
    mode = BucketMode(mode)
    if mode is BucketMode.DAILY:
        return sort_daily(records)
    key_fn, label_fn = KEY_FUNCTIONS[mode]
    return group_records(_dated(records), key_fn, fields, label_fn)


def buckets_to_frame(buckets: Sequence[Bucket], field_names: Sequence[str] | None = None) -> pd.DataFrame:
    """Render buckets as a DataFrame with label, count and one column per field."""
    if field_names is None:
        field_names = list(buckets[0].totals) if buckets else []
    rows = [
        {"key": b.key, "label": b.label, "count": b.count, **{name: b.totals.get(name, 0.0) for name in field_names}}
        for b in buckets
    ]
    return pd.DataFrame(rows, columns=["key", "label", "count", *field_names])
