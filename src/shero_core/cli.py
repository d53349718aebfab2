"""Command-line interface for SheroKitchen Core.

Examples:
    $ shero menu add "Sambar Rice" 200 120
    $ shero sale add <menu-item-id> 3 --date 2024-01-15
    $ shero receivables --mode weekly
    $ shero calc ingredient 100 1 kg 2 tbsp
    $ shero --data-root /path/to/data export all
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Optional, Sequence

import pandas as pd

from shero_core import __version__
from shero_core.config import (
    DEFAULT_DATA_ROOT,
    DataPaths,
    RemoteConfig,
    Settings,
    clear_remote_config,
    has_deployment_config,
    save_remote_config,
)
from shero_core.constants import APP_NAME, DEFAULT_EXPENSE_CATEGORY
from shero_core.costing import PURCHASE_UNITS, UNIT_MULTIPLIERS, CostSheet
from shero_core.exceptions import PartialWriteError, SheroCoreError
from shero_core.io.export import EXPENSES_FILENAME, SALES_FILENAME, export_expenses, export_sales
from shero_core.io.menu_import import menu_template, parse_pasted_rows, read_menu_source
from shero_core.parsing import ParseMode
from shero_core.reporting.bucketing import BucketMode
from shero_core.reporting.formatters import format_currency
from shero_core.reporting.views import (
    Breakdown,
    business_summary,
    daily_chart,
    dashboard_metrics,
    day_totals,
    expense_breakdown,
    expenses_on,
    receivables,
    top_items,
)
from shero_core.storage.gateway import check_remote_config
from shero_core.storage.schema import schema_sql
from shero_core.sync import Ledger
from shero_core.utils import today_iso

logger = logging.getLogger(__name__)

Handler = Callable[[argparse.Namespace], int]


def _paths(args: argparse.Namespace) -> DataPaths:
    return DataPaths.from_root(args.data_root)


def _settings(args: argparse.Namespace, paths: DataPaths) -> Settings:
    settings = Settings.from_env(paths)
    if args.strict:
        settings.parse_mode = ParseMode.STRICT
    return settings


def _open(args: argparse.Namespace) -> Ledger:
    paths = _paths(args)
    return Ledger.open(paths, _settings(args, paths))


def _print_frame(df: pd.DataFrame, money_columns: Sequence[str] = ()) -> None:
    if df.empty:
        print("(no records)")
        return
    df = df.copy()
    for col in money_columns:
        if col in df.columns:
            df[col] = df[col].map(format_currency)
    print(df.to_string(index=False))


# --- settings ---
def cmd_status(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        print(APP_NAME)
        mode = "remote (cloud sync)" if ledger.is_remote else "local (this device only)"
        print(f"Store       : {mode}")
        if ledger.settings.remote is not None:
            print(f"Remote URL  : {ledger.settings.remote.url} (from {ledger.settings.remote.source})")
        print(f"Data root   : {Path(args.data_root).resolve()}")
        print(f"Menu items  : {len(ledger.menu.records)}")
        print(f"Sales       : {len(ledger.sales.records)}")
        print(f"Expenses    : {len(ledger.expenses.records)}")
    return 0


def cmd_test_connection(args: argparse.Namespace) -> int:
    paths = _paths(args)
    settings = Settings.from_env(paths)
    if args.url or args.key:
        remote: Optional[RemoteConfig] = RemoteConfig(url=args.url or "", key=args.key or "", source="arguments")
    else:
        remote = settings.remote
    if remote is None:
        print("No remote store configured.", file=sys.stderr)
        return 1
    check = check_remote_config(remote, timeout=settings.timeout, retries=settings.retries)
    print(check.message)
    return 0 if check.success else 1


def cmd_connect(args: argparse.Namespace) -> int:
    paths = _paths(args)
    if has_deployment_config():
        print("Remote store is configured by the deployment environment; nothing to change.")
        return 0
    if not args.no_test:
        settings = Settings.from_env(paths)
        check = check_remote_config(
            RemoteConfig(url=args.url, key=args.key, source="arguments"),
            timeout=settings.timeout,
            retries=settings.retries,
        )
        if not check.success:
            print(f"ERROR: {check.message}", file=sys.stderr)
            return 1
    save_remote_config(paths, args.url, args.key)
    print("Saved. The remote store is used from the next run.")
    return 0


def cmd_disconnect(args: argparse.Namespace) -> int:
    if clear_remote_config(_paths(args)):
        print("Disconnected. Data is saved only on this device from the next run.")
    else:
        print("No saved remote configuration.")
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    print(schema_sql())
    return 0


# --- menu ---
def cmd_menu_list(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        items = ledger.menu.records
        if args.search:
            needle = args.search.lower()
            items = [i for i in items if needle in i.name.lower()]
        df = pd.DataFrame(
            [[i.id, i.name, i.category, i.price, i.my_share, i.shero_share] for i in items],
            columns=["id", "name", "category", "price", "my_share", "shero_share"],
        )
        _print_frame(df, ("price", "my_share", "shero_share"))
    return 0


def cmd_menu_add(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        item = ledger.save_menu_item(
            args.name,
            args.price,
            args.my_share,
            shero_share=args.shero_share,
            category=args.category,
            item_id=args.id,
        )
        print(f"Saved {item.name} [{item.id}]: {format_currency(item.price)} "
              f"(mine {format_currency(item.my_share)}, Shero {format_currency(item.shero_share)})")
    return 0


def cmd_menu_delete(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        if not ledger.menu.delete(args.id):
            print(f"No menu item with id {args.id}")
    return 0


def cmd_menu_import(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        mode = ledger.settings.parse_mode
        if args.paste:
            text = sys.stdin.read() if args.source == "-" else Path(args.source).read_text(encoding="utf-8")
            items = parse_pasted_rows(text, start_column=args.start_column, mode=mode)
        else:
            items = read_menu_source(args.source, mode=mode)
        if not items:
            print("No valid items")
            return 0
        try:
            added = ledger.import_menu(items)
        except PartialWriteError as e:
            print(f"Added {len(e.written)} item(s); {len(e.failed)} not saved.", file=sys.stderr)
            raise
        print(f"Added {len(added)} item(s)")
    return 0


def cmd_menu_template(args: argparse.Namespace) -> int:
    path = menu_template(args.output)
    print(f"Template written to {path}")
    return 0


# --- sales ---
def cmd_sale_list(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        day = args.date or today_iso()
        totals = day_totals(ledger.sales.records, day)
        df = pd.DataFrame(
            [[s.id, s.item_name, s.quantity, s.total_amount, s.total_my_share, s.total_shero_share, s.notes or ""]
             for s in totals.sales],
            columns=["id", "item", "qty", "amount", "my_share", "shero_share", "notes"],
        )
        print(f"Sales on {day}")
        _print_frame(df, ("amount", "my_share", "shero_share"))
        print(f"Total {format_currency(totals.amount)}  mine {format_currency(totals.my_share)}  "
              f"Shero {format_currency(totals.shero_share)}")
    return 0


def cmd_sale_add(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        sale = ledger.record_sale(args.menu_item_id, args.quantity, args.date or today_iso(), notes=args.notes)
        print(f"Recorded {sale.quantity} x {sale.item_name} on {sale.date} [{sale.id}]: "
              f"{format_currency(sale.total_amount)}")
    return 0


def cmd_sale_edit(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        sale = ledger.edit_sale(args.sale_id, args.menu_item_id, args.quantity, args.date, notes=args.notes)
        print(f"Updated sale {sale.id}: {sale.quantity} x {sale.item_name}, {format_currency(sale.total_amount)}")
    return 0


def cmd_sale_delete(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        if not ledger.sales.delete(args.id):
            print(f"No sale with id {args.id}")
    return 0


# --- expenses ---
def cmd_expense_list(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        expenses = ledger.expenses.records
        if args.date:
            expenses = [e for e in expenses if e.date == args.date]
        df = pd.DataFrame(
            [[e.id, e.date, e.category, e.amount, e.notes or ""] for e in expenses],
            columns=["id", "date", "category", "amount", "notes"],
        )
        _print_frame(df, ("amount",))
        if args.date:
            print(f"Total {format_currency(expenses_on(expenses, args.date))}")
    return 0


def cmd_expense_add(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        expense = ledger.save_expense(
            args.date or today_iso(),
            args.category,
            args.amount,
            notes=args.notes,
            expense_id=args.id,
        )
        print(f"Saved {expense.category} expense [{expense.id}]: {format_currency(expense.amount)}")
    return 0


def cmd_expense_delete(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        if not ledger.expenses.delete(args.id):
            print(f"No expense with id {args.id}")
    return 0


# --- reports ---
def _print_breakdown(breakdown: Breakdown, money: Sequence[str]) -> None:
    if breakdown.is_empty:
        print("(no records)")
        return
    if breakdown.mode is BucketMode.DAILY:
        rows = breakdown.rows
        if hasattr(rows[0], "total_amount"):
            df = pd.DataFrame(
                [[r.date, r.item_name, r.quantity, r.total_amount, r.total_my_share, r.total_shero_share]
                 for r in rows],
                columns=["date", "item", "qty", "total", "my_share", "shero_share"],
            )
        else:
            df = pd.DataFrame(
                [[r.date, r.category, r.amount, r.notes or ""] for r in rows],
                columns=["date", "category", "total", "notes"],
            )
    else:
        df = pd.DataFrame(
            [[b.label, b.count, *b.totals.values()] for b in breakdown.rows],
            columns=["period", "count", *breakdown.rows[0].totals.keys()],
        )
    _print_frame(df, money)


def cmd_receivables(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        report = receivables(ledger.sales.records, args.mode)
        _print_breakdown(report, ("total", "my_share", "shero_share"))
        print()
        print(f"Shero owes you (Shero collected) : {format_currency(report.totals.get('my_share', 0.0))}")
        print(f"You owe Shero (you collected)    : {format_currency(report.totals.get('shero_share', 0.0))}")
    return 0


def cmd_expenses_report(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        report = expense_breakdown(ledger.expenses.records, args.mode)
        _print_breakdown(report, ("total",))
        print()
        print(f"Total expenses: {format_currency(report.totals.get('total', 0.0))}")
    return 0


def cmd_dashboard(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        sales, expenses = ledger.sales.records, ledger.expenses.records
        m = dashboard_metrics(sales, expenses)
        print(f"Total orders      : {m.total_orders}")
        print(f"Total sales value : {format_currency(m.total_sales_value)}")
        print(f"My earnings       : {format_currency(m.total_my_share)}")
        print(f"Shero earnings    : {format_currency(m.total_shero_share)}")
        print(f"Expenses          : {format_currency(m.total_expenses)}")
        print(f"Net profit        : {format_currency(m.net_profit)}")
        print()
        print(f"Last {args.days} days")
        _print_frame(daily_chart(sales, expenses, days=args.days), ("my_share", "shero_share", "expense"))
        print()
        print("Top items")
        for name, qty in top_items(sales):
            print(f"  {name}: {qty}")
    return 0


def cmd_summary(args: argparse.Namespace) -> int:
    with _open(args) as ledger:
        summary = business_summary(ledger.sales.records, ledger.expenses.records)
        print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    paths = _paths(args)
    out_dir = Path(args.output_dir) if args.output_dir else paths.exports_dir
    with _open(args) as ledger:
        if args.what in ("sales", "all"):
            export_sales(ledger.sales.records, out_dir / SALES_FILENAME)
            print(f"Sales report: {out_dir / SALES_FILENAME}")
        if args.what in ("expenses", "all"):
            export_expenses(ledger.expenses.records, out_dir / EXPENSES_FILENAME)
            print(f"Expense report: {out_dir / EXPENSES_FILENAME}")
    return 0


# --- calculator ---
def cmd_calc(args: argparse.Namespace) -> int:
    paths = _paths(args)
    sheet = CostSheet(mode=_settings(args, paths).parse_mode)
    if args.kind == "ingredient":
        line = sheet.add_ingredient(args.price, args.qty, args.unit, args.used_qty, args.used_unit, name=args.name)
    elif args.kind == "packaging":
        line = sheet.add_packaging(args.price, args.count, args.used, name=args.name)
    else:
        line = sheet.add_utility(args.price, args.days, args.used, name=args.name)
    if line is None:
        print("Cost is zero; check the inputs.")
        return 1
    print(f"{line.name}: {format_currency(line.cost)}  ({line.details})")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="shero", description=f"{APP_NAME}: sales, revenue split and expense tracking.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "--data-root",
        default=os.environ.get("SHERO_DATA_ROOT", DEFAULT_DATA_ROOT),
        help="Directory holding the local store, settings and exports "
        "(default: $SHERO_DATA_ROOT or 'data').",
    )
    p.add_argument("--strict", action="store_true", help="Reject numeric input that does not parse.")
    p.add_argument("--quiet", action="store_true", help="Less logging output.")
    p.add_argument(
        "--verbose", "--debug",
        action="store_true",
        dest="verbose",
        help="Verbose/debug logging output.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    def add(name: str, handler: Handler, help_text: str, parent=sub) -> argparse.ArgumentParser:
        sp = parent.add_parser(name, help=help_text)
        sp.set_defaults(func=handler)
        return sp

    add("status", cmd_status, "Show the active store and record counts.")
    sp = add("test-connection", cmd_test_connection, "Check that the remote store is reachable.")
    sp.add_argument("--url", default=None, help="Remote URL to test instead of the configured one.")
    sp.add_argument("--key", default=None, help="Remote key to test instead of the configured one.")
    sp = add("connect", cmd_connect, "Save remote store credentials.")
    sp.add_argument("url")
    sp.add_argument("key")
    sp.add_argument("--no-test", action="store_true", help="Save without testing the connection.")
    add("disconnect", cmd_disconnect, "Forget saved remote store credentials.")
    add("schema", cmd_schema, "Print the SQL for the remote tables.")

    menu = sub.add_parser("menu", help="Manage menu items.").add_subparsers(dest="menu_command", required=True)
    sp = add("list", cmd_menu_list, "List menu items.", menu)
    sp.add_argument("--search", default=None, help="Case-insensitive name filter.")
    sp = add("add", cmd_menu_add, "Add or update a menu item.", menu)
    sp.add_argument("name")
    sp.add_argument("price")
    sp.add_argument("my_share")
    sp.add_argument("--shero-share", default=None, help="Partner share (default: price - my share).")
    sp.add_argument("--category", default=None)
    sp.add_argument("--id", default=None, help="Identifier of the item to update.")
    sp = add("delete", cmd_menu_delete, "Delete a menu item.", menu)
    sp.add_argument("id")
    sp = add("import", cmd_menu_import, "Bulk-add menu items from a spreadsheet.", menu)
    sp.add_argument("source", help="A .xlsx or .csv file, or pasted text file ('-' for stdin) with --paste.")
    sp.add_argument("--paste", action="store_true", help="Source is tab-separated text without a header.")
    sp.add_argument(
        "--start-column",
        default="name",
        choices=["name", "category", "price", "my_share", "shero_share"],
        help="Field of the first pasted column.",
    )
    sp = add("template", cmd_menu_template, "Write an empty import template.", menu)
    sp.add_argument("output", help="Destination .xlsx or .csv path.")

    sale = sub.add_parser("sale", help="Record sales.").add_subparsers(dest="sale_command", required=True)
    sp = add("list", cmd_sale_list, "List one day's sales.", sale)
    sp.add_argument("--date", default=None, help="YYYY-MM-DD (default: today).")
    sp = add("add", cmd_sale_add, "Record a sale.", sale)
    sp.add_argument("menu_item_id")
    sp.add_argument("quantity")
    sp.add_argument("--date", default=None, help="YYYY-MM-DD (default: today).")
    sp.add_argument("--notes", default=None)
    sp = add("edit", cmd_sale_edit, "Re-record a sale from the current menu item.", sale)
    sp.add_argument("sale_id")
    sp.add_argument("menu_item_id")
    sp.add_argument("quantity")
    sp.add_argument("--date", required=True, help="YYYY-MM-DD.")
    sp.add_argument("--notes", default=None)
    sp = add("delete", cmd_sale_delete, "Delete a sale.", sale)
    sp.add_argument("id")

    expense = sub.add_parser("expense", help="Track expenses.").add_subparsers(dest="expense_command", required=True)
    sp = add("list", cmd_expense_list, "List expenses.", expense)
    sp.add_argument("--date", default=None, help="Only this day (YYYY-MM-DD).")
    sp = add("add", cmd_expense_add, "Add or update an expense.", expense)
    sp.add_argument("amount")
    sp.add_argument("--category", default=DEFAULT_EXPENSE_CATEGORY)
    sp.add_argument("--date", default=None, help="YYYY-MM-DD (default: today).")
    sp.add_argument("--notes", default=None)
    sp.add_argument("--id", default=None, help="Identifier of the expense to update.")
    sp = add("delete", cmd_expense_delete, "Delete an expense.", expense)
    sp.add_argument("id")

    modes = [m.value for m in BucketMode]
    sp = add("receivables", cmd_receivables, "Amounts owed between you and Shero.")
    sp.add_argument("--mode", choices=modes, default=BucketMode.MONTHLY.value)
    sp = add("expenses-report", cmd_expenses_report, "Expenses per period.")
    sp.add_argument("--mode", choices=modes, default=BucketMode.DAILY.value)
    sp = add("dashboard", cmd_dashboard, "Headline figures and the recent daily chart.")
    sp.add_argument("--days", type=int, default=7)
    add("summary", cmd_summary, "All-time business summary as JSON.")
    sp = add("export", cmd_export, "Write CSV reports.")
    sp.add_argument("what", choices=["sales", "expenses", "all"])
    sp.add_argument("--output-dir", default=None, help="Default: <data-root>/exports.")

    calc = sub.add_parser("calc", help="Cost calculator.").add_subparsers(dest="kind", required=True)
    sp = add("ingredient", cmd_calc, "Cost of the used part of an ingredient.", calc)
    sp.add_argument("price")
    sp.add_argument("qty")
    sp.add_argument("unit", choices=list(PURCHASE_UNITS))
    sp.add_argument("used_qty")
    sp.add_argument("used_unit", choices=list(UNIT_MULTIPLIERS))
    sp.add_argument("--name", default=None)
    sp = add("packaging", cmd_calc, "Cost of pieces used from a pack.", calc)
    sp.add_argument("price")
    sp.add_argument("count")
    sp.add_argument("used")
    sp.add_argument("--name", default=None)
    sp = add("utility", cmd_calc, "Cost of days used of a utility.", calc)
    sp.add_argument("price")
    sp.add_argument("days")
    sp.add_argument("used")
    sp.add_argument("--name", default=None)
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
    )

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    except (SheroCoreError, ValueError, OSError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
