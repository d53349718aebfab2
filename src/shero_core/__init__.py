"""SheroKitchen Core - sales, revenue split and expense tracking for a home kitchen.

This package provides the bookkeeping engine behind a small food business
that sells dishes through a partner ("Shero") and splits each sale's
revenue between the operator and the partner:

- **Costing**: prorated cost of ingredients, packaging and utilities
- **Splits**: menu item pricing and per-sale snapshots of the split
- **Reporting**: daily/weekly/monthly receivables and expense breakdowns
- **Storage**: a remote Supabase project, or local JSON files as fallback

Module Structure:
    shero_core.costing: Unit conversion and the cost calculator
    shero_core.splits: Menu items and sale snapshots
    shero_core.reporting: Bucketing, report views and display formatting
    shero_core.storage: Persistence gateway and store selection
    shero_core.sync: In-memory collections kept in step with the store
    shero_core.io: CSV export and bulk menu import
    shero_core.config: DataPaths and Settings

Quick Start:
    >>> from shero_core import DataPaths, Ledger
    >>> from shero_core.reporting import receivables
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> with Ledger.open(paths) as ledger:
    ...     item = ledger.save_menu_item("Sambar Rice", 200, 120)
    ...     ledger.record_sale(item.id, 3, "2024-01-15")
    ...     report = receivables(ledger.sales.records, "weekly")
    >>> report.totals["shero_share"]
    240.0
"""

__version__ = "0.1.0"

from shero_core.config import DataPaths, Settings
from shero_core.exceptions import (
    ConfigError,
    InputError,
    PartialWriteError,
    RemoteStoreError,
    SheroCoreError,
    StoreError,
)
from shero_core.models import ExpenseEntry, MenuItem, SaleEntry
from shero_core.sync import Ledger

__all__ = [
    "ConfigError",
    "DataPaths",
    "ExpenseEntry",
    "InputError",
    "Ledger",
    "MenuItem",
    "PartialWriteError",
    "RemoteStoreError",
    "SaleEntry",
    "Settings",
    "SheroCoreError",
    "StoreError",
    "__version__",
]
