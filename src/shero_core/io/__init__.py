"""Tabular exchange: CSV reports out, menu spreadsheets in."""

from shero_core.io.export import export_expenses, export_sales, expenses_frame, sales_frame
from shero_core.io.menu_import import (
    menu_template,
    parse_pasted_rows,
    read_menu_source,
    rows_to_menu_items,
)

__all__ = [
    "export_expenses",
    "export_sales",
    "expenses_frame",
    "menu_template",
    "parse_pasted_rows",
    "read_menu_source",
    "rows_to_menu_items",
    "sales_frame",
]
