"""Tests for numeric parsing, menu items and sale snapshots."""

import pytest

from shero_core.exceptions import InvalidNumberError, InvalidRecordError
from shero_core.models import generate_id
from shero_core.parsing import ParseMode, parse_number, parse_quantity, try_parse_number
from shero_core.splits import (
    build_menu_item,
    compute_totals,
    derive_partner_share,
    snapshot_sale,
    unit_values_from_totals,
)


class TestParsing:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("12.5", 12.5),
            (" 7 ", 7.0),
            ("1,250", 1250.0),
            ("12 pcs", 12.0),
            (3, 3.0),
            ("", 0.0),
            (None, 0.0),
            ("abc", 0.0),
            (True, 0.0),
        ],
    )
    def test_lenient(self, value, expected) -> None:
        assert parse_number(value) == expected

    def test_try_parse_number_rejects_nan(self) -> None:
        assert try_parse_number(float("nan")) is None
        assert try_parse_number("-3.5") == -3.5

    @pytest.mark.parametrize("value", ["abc", "", "12 pcs", None])
    def test_strict_raises(self, value) -> None:
        with pytest.raises(InvalidNumberError):
            parse_number(value, mode=ParseMode.STRICT)

    def test_strict_accepts_numbers(self) -> None:
        assert parse_number(" 4.25 ", mode=ParseMode.STRICT) == 4.25
        assert parse_number(10, mode=ParseMode.STRICT) == 10.0

    def test_quantity(self) -> None:
        assert parse_quantity("3") == 3
        assert parse_quantity("2.9") == 2
        assert parse_quantity("") == 1
        assert parse_quantity("x") == 1
        with pytest.raises(InvalidNumberError):
            parse_quantity("0", mode=ParseMode.STRICT)

    def test_parse_mode_from_value(self) -> None:
        assert ParseMode.from_value(None) is ParseMode.LENIENT
        assert ParseMode.from_value("STRICT") is ParseMode.STRICT
        with pytest.raises(ValueError):
            ParseMode.from_value("loose")


def test_generate_id_shape() -> None:
    ids = {generate_id() for _ in range(50)}
    assert len(ids) == 50
    for i in ids:
        assert len(i) == 7
        assert i.isalnum() and i == i.lower()


class TestMenuItem:
    def test_partner_share_is_derived(self) -> None:
        item = build_menu_item("Sambar Rice", "200", "120")
        assert item.price == 200.0
        assert item.my_share == 120.0
        assert item.shero_share == 80.0
        assert item.category == "Main Course"
        assert len(item.id) == 7

    def test_supplied_partner_share_is_kept(self) -> None:
        item = build_menu_item("Curd Rice", 150, 100, shero_share=45, category="Rice Special")
        assert item.shero_share == 45.0
        assert item.category == "Rice Special"

    def test_keeps_identifier_when_editing(self) -> None:
        item = build_menu_item("Curd Rice", 150, 100, item_id="abc1234")
        assert item.id == "abc1234"

    def test_name_required(self) -> None:
        with pytest.raises(InvalidRecordError):
            build_menu_item("  ", 100, 50)

    def test_derive_partner_share(self) -> None:
        assert derive_partner_share(200, 120) == 80.0
        assert derive_partner_share(200, 120, "") == 80.0
        assert derive_partner_share(200, 120, "70") == 70.0


class TestSaleSnapshot:
    def test_three_portions(self) -> None:
        item = build_menu_item("Sambar Rice", 200, 120)
        sale = snapshot_sale(item, 3, "2024-01-15", notes="office order")

        assert sale.menu_item_id == item.id
        assert sale.item_name == "Sambar Rice"
        assert sale.quantity == 3
        assert (sale.unit_price, sale.unit_my_share, sale.unit_shero_share) == (200.0, 120.0, 80.0)
        assert sale.total_amount == 600.0
        assert sale.total_my_share == 360.0
        assert sale.total_shero_share == 240.0
        assert sale.notes == "office order"

    @pytest.mark.parametrize("price, mine, qty", [(193, 68, 1), (202, 72, 4), (99.5, 40.25, 7)])
    def test_split_sums_to_total(self, price, mine, qty) -> None:
        item = build_menu_item("Dish", price, mine)
        sale = snapshot_sale(item, qty, "2024-02-01")
        assert sale.total_my_share + sale.total_shero_share == pytest.approx(sale.total_amount)

    def test_snapshot_ignores_later_menu_edits(self) -> None:
        item = build_menu_item("Idli", 60, 40)
        sale = snapshot_sale(item, 2, "2024-01-15")
        build_menu_item("Idli", 80, 50, item_id=item.id)
        assert sale.unit_price == 60.0
        assert sale.total_amount == 120.0

    def test_date_required(self) -> None:
        item = build_menu_item("Idli", 60, 40)
        with pytest.raises(InvalidRecordError):
            snapshot_sale(item, 1, "")

    def test_compute_totals_and_back(self) -> None:
        totals = compute_totals(200, 120, 80, 3)
        assert unit_values_from_totals(totals.total_amount, totals.total_my_share, totals.total_shero_share, 3) == (
            200.0,
            120.0,
            80.0,
        )
        assert unit_values_from_totals(50, 30, 20, 0) == (50, 30, 20)
