"""Report views over the sale and expense collections.

Every view here is computed from the in-memory collections on demand;
nothing is cached, so a view always reflects the latest mutation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Sequence

import pandas as pd

from shero_core.models import ExpenseEntry, SaleEntry
from shero_core.reporting.bucketing import BucketMode, bucket_records, buckets_to_frame, group_records
from shero_core.reporting.formatters import format_weekday
from shero_core.utils import iter_days

SALE_FIELDS = {
    "total": lambda s: s.total_amount,
    "my_share": lambda s: s.total_my_share,
    "shero_share": lambda s: s.total_shero_share,
}

EXPENSE_FIELDS = {
    "total": lambda e: e.amount,
}


@dataclass
class Breakdown:
    """A bucketed view plus grand totals.

    Attributes:
        mode: Bucketing mode used.
        rows: Buckets (weekly/monthly) or records newest first (daily).
        totals: Grand totals over all records.
    """

    mode: BucketMode
    rows: list[Any]
    totals: dict[str, float] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def _grand_totals(records: Sequence[Any], fields: dict) -> dict[str, float]:
    return {name: sum(accessor(r) for r in records) for name, accessor in fields.items()}


def receivables(sales: Sequence[SaleEntry], mode: BucketMode | str = BucketMode.MONTHLY) -> Breakdown:
    """Amounts owed between the two parties, per period.

    ``totals["my_share"]`` is what the partner owes the operator when the
    partner collected payment; ``totals["shero_share"]`` is the reverse.
    """
    mode = BucketMode(mode)
    return Breakdown(
        mode=mode,
        rows=bucket_records(sales, mode, SALE_FIELDS),
        totals=_grand_totals(sales, SALE_FIELDS),
    )


def expense_breakdown(expenses: Sequence[ExpenseEntry], mode: BucketMode | str = BucketMode.DAILY) -> Breakdown:
    """Expenses per period."""
    mode = BucketMode(mode)
    return Breakdown(
        mode=mode,
        rows=bucket_records(expenses, mode, EXPENSE_FIELDS),
        totals=_grand_totals(expenses, EXPENSE_FIELDS),
    )


def daily_chart(
    sales: Sequence[SaleEntry],
    expenses: Sequence[ExpenseEntry],
    today: date | None = None,
    days: int = 7,
) -> pd.DataFrame:
    """Per-day share and expense sums for the last ``days`` days.

    Returns:
        DataFrame with one row per day, oldest first, columns
        ``date``, ``label``, ``my_share``, ``shero_share``, ``expense``.
        Days without records are zero.
    """
    today = today or date.today()
    sale_days = {
        b.key: b
        for b in group_records(sales, lambda s: s.date, {k: SALE_FIELDS[k] for k in ("my_share", "shero_share")})
    }
    expense_days = {b.key: b for b in group_records(expenses, lambda e: e.date, EXPENSE_FIELDS)}

    rows = []
    for day in iter_days(today, days):
        key = day.isoformat()
        sale_bucket = sale_days.get(key)
        expense_bucket = expense_days.get(key)
        rows.append(
            {
                "date": key,
                "label": format_weekday(day),
                "my_share": sale_bucket.totals["my_share"] if sale_bucket else 0.0,
                "shero_share": sale_bucket.totals["shero_share"] if sale_bucket else 0.0,
                "expense": expense_bucket.totals["total"] if expense_bucket else 0.0,
            }
        )
    return pd.DataFrame(rows, columns=["date", "label", "my_share", "shero_share", "expense"])


@dataclass(frozen=True)
class DashboardMetrics:
    total_orders: int
    total_sales_value: float
    total_my_share: float
    total_shero_share: float
    total_expenses: float
    net_profit: float


def dashboard_metrics(sales: Sequence[SaleEntry], expenses: Sequence[ExpenseEntry]) -> DashboardMetrics:
    """Headline figures. Net profit is the operator's share minus expenses."""
    total_my_share = sum(s.total_my_share for s in sales)
    total_expenses = sum(e.amount for e in expenses)
    return DashboardMetrics(
        total_orders=sum(s.quantity for s in sales),
        total_sales_value=sum(s.total_amount for s in sales),
        total_my_share=total_my_share,
        total_shero_share=sum(s.total_shero_share for s in sales),
        total_expenses=total_expenses,
        net_profit=total_my_share - total_expenses,
    )


def top_items(sales: Sequence[SaleEntry], limit: int = 5) -> list[tuple[str, int]]:
    """Best sellers by portions sold, as (item name, quantity) pairs."""
    counts: dict[str, int] = {}
    for s in sales:
        counts[s.item_name] = counts.get(s.item_name, 0) + s.quantity
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:limit]


@dataclass
class DayTotals:
    date: str
    sales: list[SaleEntry]
    amount: float
    my_share: float
    shero_share: float


def day_totals(sales: Sequence[SaleEntry], day: str) -> DayTotals:
    """Sales recorded on one day (newest identifier first) and their sums."""
    day_sales = sorted((s for s in sales if s.date == day), key=lambda s: s.id, reverse=True)
    return DayTotals(
        date=day,
        sales=day_sales,
        amount=sum(s.total_amount for s in day_sales),
        my_share=sum(s.total_my_share for s in day_sales),
        shero_share=sum(s.total_shero_share for s in day_sales),
    )


def expenses_on(expenses: Sequence[ExpenseEntry], day: str) -> float:
    """Total spent on one day."""
    return sum(e.amount for e in expenses if e.date == day)


@dataclass
class TopEarner:
    name: str
    count: int
    earnings: float


@dataclass
class BusinessSummary:
    """All-time figures handed to an insights consultant."""

    period: str
    total_sales_value: float
    total_my_share: float
    total_shero_share: float
    total_expenses: float
    net_profit: float
    top_items: list[TopEarner]

    def to_dict(self) -> dict[str, Any]:
        return {
            "period": self.period,
            "totalSalesValue": self.total_sales_value,
            "totalMyShare": self.total_my_share,
            "totalSheroShare": self.total_shero_share,
            "totalExpenses": self.total_expenses,
            "netProfit": self.net_profit,
            "topItems": [{"name": t.name, "count": t.count, "earnings": t.earnings} for t in self.top_items],
        }


def business_summary(sales: Sequence[SaleEntry], expenses: Sequence[ExpenseEntry], limit: int = 5) -> BusinessSummary:
    """Build the all-time summary; top items are ranked by operator earnings."""
    metrics = dashboard_metrics(sales, expenses)

    earners: dict[str, TopEarner] = {}
    for s in sales:
        earner = earners.setdefault(s.item_name, TopEarner(name=s.item_name, count=0, earnings=0.0))
        earner.count += s.quantity
        earner.earnings += s.total_my_share
    ranked = sorted(earners.values(), key=lambda t: t.earnings, reverse=True)[:limit]

    return BusinessSummary(
        period="All Time",
        total_sales_value=metrics.total_sales_value,
        total_my_share=metrics.total_my_share,
        total_shero_share=metrics.total_shero_share,
        total_expenses=metrics.total_expenses,
        net_profit=metrics.net_profit,
        top_items=ranked,
    )


def breakdown_to_frame(breakdown: Breakdown) -> pd.DataFrame:
    """Render a breakdown as a DataFrame for display."""
    if breakdown.mode is BucketMode.DAILY:
        return pd.DataFrame([asdict(r) for r in breakdown.rows])
    return buckets_to_frame(breakdown.rows)
