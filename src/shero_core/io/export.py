"""CSV reports of sales and expenses.

Rows are written in collection order with standard CSV quoting, so notes
containing commas, quotes or newlines survive a round trip through a
spreadsheet. Text cells are neutralized against formula injection.

Example:
    >>> text = export_sales(ledger.sales.records)
    >>> text.splitlines()[0]
    'Date,Item Name,Category,Qty,Unit Price,My Share/Unit,Shero Share/Unit,Total Amount,Total My Share,Total Shero Share,Notes'
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from shero_core.io.cleaning import neutralize
from shero_core.models import ExpenseEntry, SaleEntry

logger = logging.getLogger(__name__)

SALES_COLUMNS = [
    "Date",
    "Item Name",
    "Category",
    "Qty",
    "Unit Price",
    "My Share/Unit",
    "Shero Share/Unit",
    "Total Amount",
    "Total My Share",
    "Total Shero Share",
    "Notes",
]
EXPENSE_COLUMNS = ["Date", "Category", "Amount", "Notes"]

SALES_FILENAME = "sales_report.csv"
EXPENSES_FILENAME = "expenses_report.csv"

_TEXT_COLUMNS = ("Date", "Item Name", "Category", "Notes")


def sales_frame(sales: Sequence[SaleEntry]) -> pd.DataFrame:
    """Sales as a report DataFrame, one row per sale."""
    rows = [
        [
            s.date,
            s.item_name,
            s.category,
            s.quantity,
            s.unit_price,
            s.unit_my_share,
            s.unit_shero_share,
            s.total_amount,
            s.total_my_share,
            s.total_shero_share,
            s.notes or "",
        ]
        for s in sales
    ]
    return pd.DataFrame(rows, columns=SALES_COLUMNS)


def expenses_frame(expenses: Sequence[ExpenseEntry]) -> pd.DataFrame:
    """Expenses as a report DataFrame, one row per expense."""
    rows = [[e.date, e.category, e.amount, e.notes or ""] for e in expenses]
    return pd.DataFrame(rows, columns=EXPENSE_COLUMNS)


def _neutralized(df: pd.DataFrame) -> pd.DataFrame:
    df = df.copy()
    for col in _TEXT_COLUMNS:
        if col in df.columns:
            df[col] = df[col].map(neutralize)
    return df


def write_csv(df: pd.DataFrame, path: Optional[Union[str, Path]] = None) -> Optional[str]:
    """Write a report frame as CSV.

    Args:
        df: Report frame.
        path: Destination file; when None the CSV text is returned instead.

    Returns:
        The CSV text when ``path`` is None, otherwise None.
    """
    df = _neutralized(df)
    if path is None:
        return df.to_csv(index=False, lineterminator="\n")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, lineterminator="\n", encoding="utf-8")
    logger.info("Wrote %d row(s) to %s", len(df), path)
    return None


def export_sales(sales: Sequence[SaleEntry], path: Optional[Union[str, Path]] = None) -> Optional[str]:
    """Export the sales report (see :func:`write_csv`)."""
    return write_csv(sales_frame(sales), path)


def export_expenses(expenses: Sequence[ExpenseEntry], path: Optional[Union[str, Path]] = None) -> Optional[str]:
    """Export the expense report (see :func:`write_csv`)."""
    return write_csv(expenses_frame(expenses), path)
