"""Tests for temporal bucketing, report views and display formatting."""

from datetime import date

import pytest

from shero_core.models import ExpenseEntry, new_expense
from shero_core.reporting import (
    BucketMode,
    business_summary,
    daily_chart,
    dashboard_metrics,
    day_totals,
    expense_breakdown,
    expenses_on,
    receivables,
    top_items,
    week_start,
)
from shero_core.reporting.bucketing import bucket_records, buckets_to_frame, month_key, week_key
from shero_core.reporting.formatters import (
    format_currency,
    format_month_label,
    format_percentage,
    format_week_label,
    group_indian,
)
from shero_core.reporting.views import breakdown_to_frame
from shero_core.splits import build_menu_item, snapshot_sale

SAMBAR = build_menu_item("Sambar Rice", 200, 120, item_id="m1")
IDLI = build_menu_item("Idli", 60, 40, item_id="m2")


def _sales():
    return [
        snapshot_sale(SAMBAR, 3, "2024-01-15", sale_id="s1"),  # Monday
        snapshot_sale(IDLI, 2, "2024-01-21", sale_id="s2"),  # Sunday, same week
        snapshot_sale(IDLI, 1, "2024-01-22", sale_id="s3"),  # next Monday
        snapshot_sale(SAMBAR, 1, "2024-02-01", sale_id="s4"),
    ]


def _expenses():
    return [
        new_expense("2024-01-15", "Ingredients", 150.0, expense_id="e1"),
        new_expense("2024-01-15", "Packaging", 50.0, expense_id="e2"),
        new_expense("2024-02-03", "Gas/Fuel", 900.0, expense_id="e3"),
    ]


class TestWeekStart:
    def test_sunday_belongs_to_previous_monday(self) -> None:
        assert week_start(date(2024, 1, 21)) == date(2024, 1, 15)

    @pytest.mark.parametrize("day", range(15, 22))
    def test_every_day_of_the_week(self, day: int) -> None:
        assert week_start(date(2024, 1, day)) == date(2024, 1, 15)

    def test_monday_starts_a_new_week(self) -> None:
        assert week_start(date(2024, 1, 22)) == date(2024, 1, 22)

    def test_across_month_and_year(self) -> None:
        assert week_start(date(2024, 1, 3)) == date(2024, 1, 1)
        assert week_start(date(2023, 1, 1)) == date(2022, 12, 26)

    def test_keys(self) -> None:
        assert week_key("2024-01-21") == "2024-01-15"
        assert month_key("2024-01-21") == "2024-01"


class TestReceivables:
    def test_weekly(self) -> None:
        report = receivables(_sales(), BucketMode.WEEKLY)
        keys = [b.key for b in report.rows]
        assert keys == ["2024-01-29", "2024-01-22", "2024-01-15"]

        jan15 = report.rows[-1]
        assert jan15.label == "Jan 15 - Jan 21"
        assert jan15.count == 2
        assert jan15.totals["total"] == pytest.approx(600 + 120)
        assert jan15.totals["my_share"] == pytest.approx(360 + 80)
        assert jan15.totals["shero_share"] == pytest.approx(240 + 40)

    def test_monthly(self) -> None:
        report = receivables(_sales(), "monthly")
        assert [(b.key, b.label, b.count) for b in report.rows] == [
            ("2024-02", "February 2024", 1),
            ("2024-01", "January 2024", 3),
        ]
        assert report.totals["total"] == pytest.approx(600 + 120 + 60 + 200)

    def test_daily_is_newest_first(self) -> None:
        report = receivables(_sales(), BucketMode.DAILY)
        assert [s.id for s in report.rows] == ["s4", "s3", "s2", "s1"]

    def test_bucket_totals_match_grand_totals(self) -> None:
        sales = _sales()
        for mode in (BucketMode.WEEKLY, BucketMode.MONTHLY):
            report = receivables(sales, mode)
            assert sum(b.count for b in report.rows) == len(sales)
            for field in ("total", "my_share", "shero_share"):
                assert sum(b.totals[field] for b in report.rows) == pytest.approx(report.totals[field])

    def test_empty(self) -> None:
        report = receivables([], BucketMode.WEEKLY)
        assert report.is_empty
        assert report.totals == {"total": 0, "my_share": 0, "shero_share": 0}

    def test_frames(self) -> None:
        weekly = breakdown_to_frame(receivables(_sales(), BucketMode.WEEKLY))
        assert list(weekly.columns) == ["key", "label", "count", "total", "my_share", "shero_share"]
        daily = breakdown_to_frame(receivables(_sales(), BucketMode.DAILY))
        assert list(daily["id"]) == ["s4", "s3", "s2", "s1"]


def test_daily_ties_break_on_identifier() -> None:
    records = [
        ExpenseEntry(id="a", date="2024-01-15", category="Other", amount=1),
        ExpenseEntry(id="c", date="2024-01-15", category="Other", amount=1),
        ExpenseEntry(id="b", date="2024-01-16", category="Other", amount=1),
    ]
    assert [r.id for r in bucket_records(records, "daily", {})] == ["b", "c", "a"]


def test_expense_breakdown() -> None:
    report = expense_breakdown(_expenses(), BucketMode.MONTHLY)
    assert [(b.key, b.totals["total"]) for b in report.rows] == [("2024-02", 900.0), ("2024-01", 200.0)]
    assert report.totals["total"] == 1100.0
    assert expenses_on(_expenses(), "2024-01-15") == 200.0


@pytest.mark.parametrize("mode", [BucketMode.WEEKLY, BucketMode.MONTHLY])
def test_records_with_bad_dates_are_left_out_of_periods(mode: BucketMode) -> None:
    expenses = [
        *_expenses(),
        ExpenseEntry(id="x1", date="", category="Other", amount=10),
        ExpenseEntry(id="x2", date="15/01/2024", category="Other", amount=5),
    ]
    report = expense_breakdown(expenses, mode)
    assert sum(b.totals["total"] for b in report.rows) == 1100.0
    assert report.totals["total"] == 1115.0
    assert len(bucket_records(expenses, "daily", {})) == len(expenses)


def test_buckets_to_frame_empty() -> None:
    df = buckets_to_frame([])
    assert df.empty
    assert list(df.columns) == ["key", "label", "count"]


def test_daily_chart() -> None:
    df = daily_chart(_sales(), _expenses(), today=date(2024, 1, 21), days=7)
    assert list(df["date"]) == [f"2024-01-{d}" for d in range(15, 22)]
    assert df.loc[0, "label"] == "Mon"
    assert df.loc[0, "my_share"] == 360.0
    assert df.loc[0, "expense"] == 200.0
    assert df.loc[6, "shero_share"] == 40.0
    assert df.loc[3, "my_share"] == 0.0


def test_dashboard_metrics() -> None:
    m = dashboard_metrics(_sales(), _expenses())
    assert m.total_orders == 7
    assert m.total_sales_value == pytest.approx(980.0)
    assert m.total_my_share == pytest.approx(360 + 80 + 40 + 120)
    assert m.total_expenses == 1100.0
    assert m.net_profit == pytest.approx(600 - 1100)


def test_top_items_and_day_totals() -> None:
    assert top_items(_sales()) == [("Sambar Rice", 4), ("Idli", 3)]
    totals = day_totals(_sales(), "2024-01-15")
    assert [s.id for s in totals.sales] == ["s1"]
    assert totals.amount == 600.0


def test_business_summary() -> None:
    summary = business_summary(_sales(), _expenses())
    data = summary.to_dict()
    assert data["period"] == "All Time"
    assert data["netProfit"] == pytest.approx(-500.0)
    assert data["topItems"][0] == {"name": "Sambar Rice", "count": 4, "earnings": 480.0}


class TestFormatters:
    def test_currency(self) -> None:
        assert format_currency(123456.5) == "₹1,23,456.50"
        assert format_currency(0) == "₹0.00"
        assert format_currency(999) == "₹999.00"
        assert format_currency(-80) == "-₹80.00"

    def test_group_indian(self) -> None:
        assert group_indian("1234567") == "12,34,567"
        assert group_indian("12345678") == "1,23,45,678"

    def test_labels(self) -> None:
        assert format_month_label(date(2024, 1, 1)) == "January 2024"
        assert format_week_label(date(2024, 1, 29), date(2024, 2, 4)) == "Jan 29 - Feb 4"
        assert format_percentage(0.125) == "12.5%"
