"""Revenue split between the operator ("my share") and the partner.

A sale snapshots the menu item's unit price and unit shares when it is
recorded, and stores the quantity-scaled totals next to them. Later edits
to the menu item never reach back into recorded sales, so reports always
show what was actually charged.

Examples:
    >>> item = build_menu_item("Sambar Rice", 200, 120)
    >>> item.shero_share
    80.0
    >>> sale = snapshot_sale(item, 3, "2024-01-15")
    >>> (sale.total_amount, sale.total_my_share, sale.total_shero_share)
    (600.0, 360.0, 240.0)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from shero_core.constants import DEFAULT_MENU_CATEGORY
from shero_core.exceptions import InvalidRecordError
from shero_core.models import MenuItem, SaleEntry, generate_id
from shero_core.parsing import ParseMode, parse_number, parse_quantity, try_parse_number


@dataclass(frozen=True)
class SplitTotals:
    """Quantity-scaled amounts of one sale."""

    total_amount: float
    total_my_share: float
    total_shero_share: float


def derive_partner_share(price: Any, my_share: Any, partner_share: Any = None) -> float:
    """Return the partner's unit share.

    A supplied share that parses as a number is used as-is; otherwise the
    share is derived as ``price - my_share``.
    """
    supplied = try_parse_number(partner_share)
    if supplied is not None:
        return supplied
    return parse_number(price) - parse_number(my_share)


def compute_totals(price: float, my_share: float, partner_share: float, quantity: int) -> SplitTotals:
    """Scale unit values by the quantity sold."""
    return SplitTotals(
        total_amount=price * quantity,
        total_my_share=my_share * quantity,
        total_shero_share=partner_share * quantity,
    )


def build_menu_item(
    name: str,
    price: Any,
    my_share: Any,
    shero_share: Any = None,
    category: Optional[str] = None,
    item_id: Optional[str] = None,
    mode: ParseMode = ParseMode.LENIENT,
    sub_category: Optional[str] = None,
) -> MenuItem:
    """Create or re-create a menu item, deriving the partner share at write time.

    Args:
        name: Dish name (required).
        price: Unit sale price.
        my_share: Unit revenue to the operator.
        shero_share: Unit revenue to the partner; derived when absent or not
            a number.
        category: Menu category; defaults to "Main Course".
        item_id: Existing identifier when editing an item.
        mode: Numeric parse policy.
        sub_category: Optional sub-group.

    Raises:
        InvalidRecordError: If the name is empty.
    """
    name = (name or "").strip()
    if not name:
        raise InvalidRecordError("Menu item name is required")

    unit_price = parse_number(price, mode=mode)
    unit_my_share = parse_number(my_share, mode=mode)
    if shero_share is not None and mode is ParseMode.STRICT and str(shero_share).strip():
        unit_shero_share = parse_number(shero_share, mode=mode)
    else:
        unit_shero_share = derive_partner_share(unit_price, unit_my_share, shero_share)

    return MenuItem(
        id=item_id or generate_id(),
        name=name,
        category=(category or "").strip() or DEFAULT_MENU_CATEGORY,
        price=unit_price,
        my_share=unit_my_share,
        shero_share=unit_shero_share,
        sub_category=sub_category,
    )


def snapshot_sale(
    menu_item: MenuItem,
    quantity: Any,
    date: str,
    notes: Optional[str] = None,
    sale_id: Optional[str] = None,
    mode: ParseMode = ParseMode.LENIENT,
) -> SaleEntry:
    """Record a sale of ``menu_item`` with a pricing snapshot.

    Editing an existing sale passes its ``sale_id`` together with the menu
    item currently selected; the snapshot is retaken from that item, which
    may carry different terms than when the sale was first recorded.

    Args:
        menu_item: Item sold, as it is now.
        quantity: Portions sold; lenient parsing falls back to 1.
        date: Sale day, ``YYYY-MM-DD``.
        notes: Free text.
        sale_id: Identifier of the sale being edited, if any.
        mode: Numeric parse policy.

    Returns:
        A new SaleEntry; nothing else is modified.
    """
    if not date:
        raise InvalidRecordError("Sale date is required")

    qty = parse_quantity(quantity, mode=mode)
    totals = compute_totals(menu_item.price, menu_item.my_share, menu_item.shero_share, qty)
    return SaleEntry(
        id=sale_id or generate_id(),
        date=date,
        menu_item_id=menu_item.id,
        item_name=menu_item.name,
        category=menu_item.category,
        quantity=qty,
        unit_price=menu_item.price,
        unit_my_share=menu_item.my_share,
        unit_shero_share=menu_item.shero_share,
        total_amount=totals.total_amount,
        total_my_share=totals.total_my_share,
        total_shero_share=totals.total_shero_share,
        notes=notes,
    )


def unit_values_from_totals(total_amount: float, total_my_share: float, total_shero_share: float, quantity: int) -> tuple[float, float, float]:
    """Recover unit values from stored totals (quantity 0 counts as 1)."""
    divisor = quantity or 1
    return (
        total_amount / divisor,
        total_my_share / divisor,
        total_shero_share / divisor,
    )
