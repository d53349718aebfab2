"""Field translation at the storage boundary.

Records use snake_case attribute names internally. Two storage naming
conventions exist:

- the local blobs use camelCase keys (``myShare``, ``totalAmount``), the
  layout the original browser storage used, so existing dumps load as-is;
- the remote tables use snake_case columns and store only a subset of the
  fields (sales keep totals, not unit values).

Nothing outside :mod:`shero_core.storage` sees storage-layer names.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

from shero_core.models import RECORD_TYPES, Entity, Record, entity_of
from shero_core.parsing import try_parse_number
from shero_core.splits import unit_values_from_totals


def _as_str(value: Any) -> str:
    return "" if value is None else str(value)


def _as_optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _as_float(value: Any) -> float:
    parsed = try_parse_number(value)
    return 0.0 if parsed is None else parsed


def _as_int(value: Any) -> int:
    return int(_as_float(value))


@dataclass(frozen=True)
class Column:
    """One record attribute and its storage names.

    Attributes:
        attr: Internal attribute name.
        local_key: Key in the local JSON blob.
        remote: Remote column name, or None when the remote table lacks it.
        coerce: Converts a stored value back to the attribute's type.
        optional: Omitted from local blobs when None.
    """

    attr: str
    local_key: str
    remote: Optional[str]
    coerce: Callable[[Any], Any]
    optional: bool = False


SCHEMAS: dict[Entity, tuple[Column, ...]] = {
    Entity.MENU_ITEMS: (
        Column("id", "id", "id", _as_str),
        Column("name", "name", "name", _as_str),
        Column("category", "category", "category", _as_str),
        Column("price", "price", "price", _as_float),
        Column("my_share", "myShare", "my_share", _as_float),
        Column("shero_share", "sheroShare", "shero_share", _as_float),
        Column("sub_category", "subCategory", None, _as_optional_str, optional=True),
    ),
    Entity.SALES: (
        Column("id", "id", "id", _as_str),
        Column("date", "date", "date", _as_str),
        Column("menu_item_id", "menuItemId", "menu_item_id", _as_str),
        Column("item_name", "itemName", "item_name", _as_str),
        Column("category", "category", "category", _as_str),
        Column("quantity", "quantity", "quantity", _as_int),
        Column("unit_price", "unitPrice", None, _as_float),
        Column("unit_my_share", "unitMyShare", None, _as_float),
        Column("unit_shero_share", "unitSheroShare", None, _as_float),
        Column("total_amount", "totalAmount", "total_amount", _as_float),
        Column("total_my_share", "totalMyShare", "total_my_share", _as_float),
        Column("total_shero_share", "totalSheroShare", "total_shero_share", _as_float),
        Column("notes", "notes", "notes", _as_optional_str, optional=True),
    ),
    Entity.EXPENSES: (
        Column("id", "id", "id", _as_str),
        Column("date", "date", "date", _as_str),
        Column("category", "category", "category", _as_str),
        Column("amount", "amount", "amount", _as_float),
        Column("vendor", "vendor", None, _as_optional_str, optional=True),
        Column("payment_mode", "paymentMode", None, _as_optional_str, optional=True),
        Column("notes", "notes", "notes", _as_optional_str, optional=True),
    ),
}


def remote_columns(entity: Entity) -> list[str]:
    """Columns of the remote table, in schema order."""
    return [c.remote for c in SCHEMAS[entity] if c.remote is not None]


def to_local(record: Record) -> dict[str, Any]:
    """Serialize a record for the local blob."""
    data: dict[str, Any] = {}
    for col in SCHEMAS[entity_of(record)]:
        value = getattr(record, col.attr)
        if col.optional and value is None:
            continue
        data[col.local_key] = value
    return data


def from_local(entity: Entity, data: dict[str, Any]) -> Record:
    """Deserialize a record from the local blob."""
    kwargs = {col.attr: col.coerce(data.get(col.local_key)) for col in SCHEMAS[entity]}
    return RECORD_TYPES[entity](**kwargs)


def to_remote(record: Record) -> dict[str, Any]:
    """Serialize a record as a remote row (remote columns only)."""
    return {
        col.remote: getattr(record, col.attr)
        for col in SCHEMAS[entity_of(record)]
        if col.remote is not None
    }


def from_remote(entity: Entity, row: dict[str, Any]) -> Record:
    """Deserialize a remote row.

    Sales rows carry only totals; unit values are recovered by dividing by
    the quantity.
    """
    kwargs: dict[str, Any] = {}
    for col in SCHEMAS[entity]:
        if col.remote is None:
            kwargs[col.attr] = None
        else:
            kwargs[col.attr] = col.coerce(row.get(col.remote))

    if entity is Entity.SALES:
        unit_price, unit_my, unit_shero = unit_values_from_totals(
            kwargs["total_amount"],
            kwargs["total_my_share"],
            kwargs["total_shero_share"],
            kwargs["quantity"],
        )
        kwargs.update(unit_price=unit_price, unit_my_share=unit_my, unit_shero_share=unit_shero)

    return RECORD_TYPES[entity](**kwargs)


SCHEMA_SQL = """create table menu_items (
  id text primary key,
  name text,
  category text,
  price numeric,
  my_share numeric,
  shero_share numeric
);

create table sales (
  id text primary key,
  date text,
  menu_item_id text,
  item_name text,
  category text,
  quantity integer,
  total_amount numeric,
  total_my_share numeric,
  total_shero_share numeric,
  notes text
);

create table expenses (
  id text primary key,
  date text,
  category text,
  amount numeric,
  notes text
);
"""


def schema_sql() -> str:
    """DDL for the three remote tables."""
    return SCHEMA_SQL
