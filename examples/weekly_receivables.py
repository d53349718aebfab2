"""Example: record a day's sales and see who owes whom this week

This example records a few sales against the menu, adds the day's
expenses and prints the weekly receivables between you and Shero.

Prerequisites:
- Optional: set SUPABASE_URL and SUPABASE_KEY to use the remote store;
  without them everything is kept in data/*.json
"""

from pathlib import Path

from shero_core import DataPaths, Ledger
from shero_core.reporting import BucketMode, breakdown_to_frame, receivables
from shero_core.reporting.formatters import format_currency

day = "2024-01-15"  # MODIFY AS NEEDED

paths = DataPaths.from_root(Path("data"))

with Ledger.open(paths) as ledger:
    print(f"Store: {'remote' if ledger.is_remote else 'local'}")

    sambar = ledger.save_menu_item("Sambar Rice", 200, 120, category="Rice Special")
    ledger.record_sale(sambar.id, 3, day, notes="office order")
    ledger.record_sale(ledger.menu.records[0].id, 2, day)
    ledger.save_expense(day, "Ingredients", 450, notes="vegetables")

    report = receivables(ledger.sales.records, BucketMode.WEEKLY)
    print(breakdown_to_frame(report).to_string(index=False))

    print(f"\nShero owes you (Shero collected): {format_currency(report.totals['my_share'])}")
    print(f"You owe Shero (you collected):    {format_currency(report.totals['shero_share'])}")
