"""Tests for CSV export and bulk menu import."""

import csv
import io
from pathlib import Path

import pandas as pd
import pytest

from shero_core.exceptions import ImportFormatError
from shero_core.io import (
    export_expenses,
    export_sales,
    menu_template,
    parse_pasted_rows,
    read_menu_source,
)
from shero_core.io.cleaning import neutralize, strip_invisibles
from shero_core.io.export import EXPENSE_COLUMNS, SALES_COLUMNS
from shero_core.models import new_expense
from shero_core.splits import build_menu_item, snapshot_sale

ITEM = build_menu_item("Sambar Rice", 200, 120, item_id="m1")


def _rows(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


class TestCleaning:
    def test_strip_invisibles(self) -> None:
        assert strip_invisibles("  Paneer\u00a0Tikka\u200b ") == "Paneer Tikka"
        assert strip_invisibles(None) is None
        assert strip_invisibles(float("nan")) is None

    def test_neutralize(self) -> None:
        assert neutralize("=SUM(A1:A3)") == "'=SUM(A1:A3)"
        assert neutralize("@home") == "'@home"
        assert neutralize("Lunch") == "Lunch"
        assert neutralize(-80.0) == -80.0


class TestExport:
    def test_sales_report(self) -> None:
        sales = [
            snapshot_sale(ITEM, 3, "2024-01-15", notes='big order, "urgent"'),
            snapshot_sale(ITEM, 1, "2024-01-14"),
        ]
        rows = _rows(export_sales(sales))
        assert rows[0] == SALES_COLUMNS
        assert rows[1][:4] == ["2024-01-15", "Sambar Rice", "Main Course", "3"]
        assert float(rows[1][7]) == 600.0
        assert rows[1][10] == 'big order, "urgent"'
        assert rows[2][10] == ""
        assert len(rows) == 3

    def test_formula_text_is_neutralized(self) -> None:
        expenses = [new_expense("2024-01-15", "Other", -80.0, notes="=HYPERLINK(\"x\")")]
        rows = _rows(export_expenses(expenses))
        assert rows[0] == EXPENSE_COLUMNS
        assert rows[1][3] == "'=HYPERLINK(\"x\")"
        assert float(rows[1][2]) == -80.0

    def test_write_to_file(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "exports" / "expenses_report.csv"
        assert export_expenses([new_expense("2024-01-15", "Packaging", 50.0)], path) is None
        df = pd.read_csv(path)
        assert list(df.columns) == EXPENSE_COLUMNS
        assert df.loc[0, "Amount"] == 50.0

    def test_empty_report_has_header(self) -> None:
        assert _rows(export_sales([])) == [SALES_COLUMNS]


class TestSpreadsheetImport:
    def test_csv_with_aliases_and_defaults(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "menu.csv"
        path.write_text(
            "Dish Name,Category,Amount,My Share,Shero Share\n"
            "Idli,Snacks,60,40,\n"
            "Dosa,,100,,\n"
            "Vada,Snacks,50,30,25\n"
            ",Snacks,70,40,\n"
            "Pongal,Snacks,0,0,\n",
            encoding="utf-8",
        )
        items = read_menu_source(path)

        assert [i.name for i in items] == ["Idli", "Dosa", "Vada"]
        idli, dosa, vada = items
        assert (idli.category, idli.price, idli.my_share, idli.shero_share) == ("Snacks", 60.0, 40.0, 20.0)
        assert (dosa.category, dosa.my_share, dosa.shero_share) == ("Main Course", 100.0, 0.0)
        assert vada.shero_share == 25.0
        assert len({i.id for i in items}) == 3

    def test_xlsx(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "menu.xlsx"
        pd.DataFrame(
            {"Name": ["Curd Rice", None], "Price": [150, 90], "My Share": [100, 50]}
        ).to_excel(path, index=False)
        items = read_menu_source(path)
        assert len(items) == 1
        assert items[0].name == "Curd Rice"
        assert items[0].shero_share == 50.0

    def test_unsupported_file(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "menu.txt"
        path.write_text("Name,Price\n", encoding="utf-8")
        with pytest.raises(ImportFormatError):
            read_menu_source(path)

    def test_legacy_xls_is_rejected_up_front(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "menu.xls"
        path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64)
        with pytest.raises(ImportFormatError, match="Unsupported file type '.xls'"):
            read_menu_source(path)

    def test_missing_price_column(self, temp_data_dir: Path) -> None:
        path = temp_data_dir / "menu.csv"
        path.write_text("Name,Cost\nIdli,60\n", encoding="utf-8")
        with pytest.raises(ImportFormatError, match="price"):
            read_menu_source(path)

    def test_template(self, temp_data_dir: Path) -> None:
        xlsx = menu_template(temp_data_dir / "template.xlsx")
        assert list(pd.read_excel(xlsx).columns) == ["Name", "Category", "Price", "My Share", "Shero Share"]
        assert read_menu_source(xlsx) == []
        csv_path = menu_template(temp_data_dir / "template.csv")
        assert csv_path.read_text(encoding="utf-8").strip() == "Name,Category,Price,My Share,Shero Share"
        with pytest.raises(ImportFormatError):
            menu_template(temp_data_dir / "template.ods")


class TestPastedRows:
    def test_tab_separated_rows(self) -> None:
        text = "Idli\tSnacks\t60\t40\r\n\nDosa\t\t100\t70\t5\n"
        items = parse_pasted_rows(text)
        assert [(i.name, i.category, i.price, i.shero_share) for i in items] == [
            ("Idli", "Snacks", 60.0, 20.0),
            ("Dosa", "Main Course", 100.0, 30.0),
        ]

    def test_start_column(self) -> None:
        assert parse_pasted_rows("100\t70", start_column="price") == []
        with pytest.raises(ValueError):
            parse_pasted_rows("x", start_column="notes")

    def test_rows_without_price_are_skipped(self) -> None:
        assert parse_pasted_rows("Idli\tSnacks\n") == []
