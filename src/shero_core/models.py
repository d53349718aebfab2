"""Domain records: menu items, sales and expenses.

Records are plain dataclasses owned by their collection. Cross-entity
links are by identifier only: a sale keeps ``menu_item_id`` plus a
snapshot of the item's name, category and pricing, so deleting or editing
the menu item never changes sale history.
"""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

_ID_ALPHABET = string.digits + string.ascii_lowercase
ID_LENGTH = 7


def generate_id() -> str:
    """Return a short random base-36 identifier, e.g. ``'k3x9q0a'``."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(ID_LENGTH))


class Entity(str, Enum):
    """The three record collections; values double as remote table names."""

    MENU_ITEMS = "menu_items"
    SALES = "sales"
    EXPENSES = "expenses"


@dataclass
class MenuItem:
    """A sellable dish with its two-party revenue split.

    ``shero_share`` is derived as ``price - my_share`` when the item is
    written and is not re-derived on read.
    """

    id: str
    name: str
    category: str
    price: float
    my_share: float
    shero_share: float
    sub_category: Optional[str] = None


@dataclass
class SaleEntry:
    """One order line with the pricing snapshot taken when it was recorded.

    Attributes:
        id: Unique identifier.
        date: Calendar day, ``YYYY-MM-DD``.
        menu_item_id: Identifier of the menu item sold (may no longer exist).
        item_name: Snapshot of the item name.
        category: Snapshot of the item category.
        quantity: Portions sold.
        unit_price: Snapshot of the unit price.
        unit_my_share: Snapshot of the unit share for the operator.
        unit_shero_share: Snapshot of the unit share for the partner.
        total_amount: ``unit_price * quantity``.
        total_my_share: ``unit_my_share * quantity``.
        total_shero_share: ``unit_shero_share * quantity``.
        notes: Free text.
    """

    id: str
    date: str
    menu_item_id: str
    item_name: str
    category: str
    quantity: int
    unit_price: float
    unit_my_share: float
    unit_shero_share: float
    total_amount: float
    total_my_share: float
    total_shero_share: float
    notes: Optional[str] = None


@dataclass
class ExpenseEntry:
    """An operating cost. No derived fields."""

    id: str
    date: str
    category: str
    amount: float
    notes: Optional[str] = None
    vendor: Optional[str] = None
    payment_mode: Optional[str] = None


Record = Union[MenuItem, SaleEntry, ExpenseEntry]


RECORD_TYPES: dict[Entity, type] = {
    Entity.MENU_ITEMS: MenuItem,
    Entity.SALES: SaleEntry,
    Entity.EXPENSES: ExpenseEntry,
}


def entity_of(record: Record) -> Entity:
    """Return the collection a record belongs to."""
    for entity, record_type in RECORD_TYPES.items():
        if isinstance(record, record_type):
            return entity
    raise TypeError(f"Not a ledger record: {type(record).__name__}")


def new_expense(
    date: str,
    category: str,
    amount: float,
    notes: Optional[str] = None,
    expense_id: Optional[str] = None,
    **extra: Optional[str],
) -> ExpenseEntry:
    """Build an expense, generating an identifier unless one is given."""
    return ExpenseEntry(
        id=expense_id or generate_id(),
        date=date,
        category=category,
        amount=amount,
        notes=notes,
        **extra,
    )


__all__ = [
    "Entity",
    "ExpenseEntry",
    "MenuItem",
    "Record",
    "SaleEntry",
    "entity_of",
    "generate_id",
    "new_expense",
]
