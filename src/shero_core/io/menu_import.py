"""Bulk menu import from spreadsheets and pasted cells.

Two sources are accepted:

- a spreadsheet file (``.xlsx`` or ``.csv``) whose first sheet has
  a header row; recognized headers are listed in :data:`HEADER_ALIASES`,
- tab-separated text copied from a spreadsheet, without a header, with the
  columns in :data:`PASTE_COLUMNS` order.

Both produce new :class:`~shero_core.models.MenuItem` records with fresh
identifiers, ready for ``Ledger.import_menu``.

Examples:
    >>> items = parse_pasted_rows("Idli\\tSnacks\\t60\\t40\\n")
    >>> (items[0].name, items[0].price, items[0].shero_share)
    ('Idli', 60.0, 20.0)
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import pandas as pd

from shero_core.constants import DEFAULT_MENU_CATEGORY
from shero_core.exceptions import ImportFormatError
from shero_core.io.cleaning import is_blank, normalize_header, strip_invisibles
from shero_core.models import MenuItem
from shero_core.parsing import ParseMode, parse_number, try_parse_number
from shero_core.splits import build_menu_item

logger = logging.getLogger(__name__)

# Field -> accepted headers, first match wins
HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("Name", "Dish Name"),
    "category": ("Category",),
    "price": ("Price", "Amount"),
    "my_share": ("My Share",),
    "shero_share": ("Shero Share",),
}

TEMPLATE_COLUMNS = ["Name", "Category", "Price", "My Share", "Shero Share"]

PASTE_COLUMNS = ("name", "category", "price", "my_share", "shero_share")

SUPPORTED_SUFFIXES = (".xlsx", ".csv")

_LINE_RE = re.compile(r"\r\n|\n|\r")


def _pick(row: dict[str, Any], field: str) -> Any:
    for alias in HEADER_ALIASES[field]:
        value = row.get(normalize_header(alias))
        if not is_blank(value):
            return value
    return None


def _canonical_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Rows keyed by field name, resolving header aliases."""
    df = df.rename(columns=normalize_header)
    records = df.to_dict(orient="records")
    return [{field: _pick(row, field) for field in HEADER_ALIASES} for row in records]


def row_to_menu_item(row: dict[str, Any], mode: ParseMode = ParseMode.LENIENT) -> Optional[MenuItem]:
    """Build a menu item from one canonical row, or None when it is skipped.

    A row is skipped when it has no name or its price is not positive. A
    missing operator share defaults to the full price; a missing partner
    share to ``price - my_share``.
    """
    name = strip_invisibles(row.get("name"))
    if not name:
        return None
    price = try_parse_number(row.get("price"))
    if price is None or price <= 0:
        return None

    my_share = parse_number(row.get("my_share"), mode=mode) if not is_blank(row.get("my_share")) else 0.0
    if not my_share:
        my_share = price
    shero_share = row.get("shero_share")
    if is_blank(shero_share):
        shero_share = None

    return build_menu_item(
        name,
        price,
        my_share,
        shero_share=shero_share,
        category=strip_invisibles(row.get("category")) or DEFAULT_MENU_CATEGORY,
        mode=mode,
    )


def rows_to_menu_items(rows: Iterable[dict[str, Any]], mode: ParseMode = ParseMode.LENIENT) -> list[MenuItem]:
    """Convert canonical rows, dropping invalid ones."""
    items: list[MenuItem] = []
    skipped = 0
    for row in rows:
        item = row_to_menu_item(row, mode=mode)
        if item is None:
            skipped += 1
            continue
        items.append(item)
    if skipped:
        logger.info("Skipped %d row(s) without a name or a positive price", skipped)
    return items


def read_menu_frame(path: Union[str, Path]) -> pd.DataFrame:
    """Read the first sheet of a spreadsheet file.

    Raises:
        ImportFormatError: If the file type is unsupported or the file
            cannot be parsed.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ImportFormatError(
            f"Unsupported file type {suffix or '(none)'!r}; expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )
    try:
        if suffix == ".csv":
            return pd.read_csv(path, dtype=str, keep_default_na=False)
        return pd.read_excel(path, sheet_name=0, dtype=object, engine="openpyxl")
    except (OSError, ValueError) as e:
        raise ImportFormatError(f"Error reading {path}: {e}") from e


def read_menu_source(path: Union[str, Path], mode: ParseMode = ParseMode.LENIENT) -> list[MenuItem]:
    """Read menu items from a spreadsheet file.

    Raises:
        ImportFormatError: If the file cannot be read or has neither a name
            nor a price column.
    """
    df = read_menu_frame(path)
    headers = {normalize_header(c) for c in df.columns}
    for field in ("name", "price"):
        if not headers & {normalize_header(a) for a in HEADER_ALIASES[field]}:
            raise ImportFormatError(
                f"{path}: no {field} column (expected one of {', '.join(HEADER_ALIASES[field])})"
            )
    items = rows_to_menu_items(_canonical_rows(df), mode=mode)
    logger.info("Read %d menu item(s) from %s", len(items), path)
    return items


def parse_pasted_rows(
    text: str,
    start_column: str = "name",
    mode: ParseMode = ParseMode.LENIENT,
) -> list[MenuItem]:
    """Parse tab-separated rows copied from a spreadsheet.

    Args:
        text: Pasted text; blank lines are ignored.
        start_column: Field the first pasted column lands in.
        mode: Numeric parse policy.

    Returns:
        Menu items for the valid rows. When a row has both a price and an
        operator share, the partner share is recomputed from them.
    """
    if start_column not in PASTE_COLUMNS:
        raise ValueError(f"Invalid start column {start_column!r}. Must be one of {', '.join(PASTE_COLUMNS)}.")
    start = PASTE_COLUMNS.index(start_column)

    rows: list[dict[str, Any]] = []
    for line in _LINE_RE.split(text or ""):
        if not line.strip():
            continue
        row: dict[str, Any] = dict.fromkeys(PASTE_COLUMNS)
        for offset, cell in enumerate(line.split("\t")):
            if start + offset < len(PASTE_COLUMNS):
                row[PASTE_COLUMNS[start + offset]] = cell.strip()
        price = try_parse_number(row["price"])
        my_share = try_parse_number(row["my_share"])
        if price is not None and my_share is not None:
            row["shero_share"] = round(price - my_share, 2)
        rows.append(row)
    return rows_to_menu_items(rows, mode=mode)


def menu_template(path: Union[str, Path]) -> Path:
    """Write an empty import template with the recognized headers.

    The format follows the suffix: ``.csv`` or an ``.xlsx`` workbook.
    """
    path = Path(path)
    df = pd.DataFrame(columns=TEMPLATE_COLUMNS)
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() == ".csv":
        df.to_csv(path, index=False)
    elif path.suffix.lower() == ".xlsx":
        df.to_excel(path, index=False, sheet_name="Menu")
    else:
        raise ImportFormatError(f"Template must be .xlsx or .csv, got {path.name!r}")
    logger.info("Wrote menu template to %s", path)
    return path
