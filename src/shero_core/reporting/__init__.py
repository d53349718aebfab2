"""Reporting: temporal bucketing, report views and display formatting.

Example:
    >>> from shero_core.reporting import BucketMode, receivables
    >>> report = receivables(ledger.sales.records, BucketMode.WEEKLY)
    >>> for bucket in report.rows:
    ...     print(bucket.label, bucket.count, bucket.totals["my_share"])
"""

from shero_core.reporting.bucketing import (
    Bucket,
    BucketMode,
    bucket_records,
    buckets_to_frame,
    group_records,
    month_key,
    sort_daily,
    week_start,
)
from shero_core.reporting.views import (
    Breakdown,
    breakdown_to_frame,
    business_summary,
    daily_chart,
    dashboard_metrics,
    day_totals,
    expense_breakdown,
    expenses_on,
    receivables,
    top_items,
)

__all__ = [
    "Breakdown",
    "Bucket",
    "BucketMode",
    "breakdown_to_frame",
    "bucket_records",
    "buckets_to_frame",
    "business_summary",
    "daily_chart",
    "dashboard_metrics",
    "day_totals",
    "expense_breakdown",
    "expenses_on",
    "group_records",
    "month_key",
    "receivables",
    "sort_daily",
    "top_items",
    "week_start",
]
