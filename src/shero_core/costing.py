"""Unit conversion and prorated cost calculation.

Every cost mode reduces to "price per indivisible unit x units consumed":

- ingredient: mass/volume purchase converted to grams or millilitres,
- packaging: ``price / pieces_in_pack x pieces_used``,
- utility: ``price / days_it_lasts x days_used``.

The unit table holds kitchen approximations (a tablespoon is taken as
15 g/ml regardless of what is measured), not physical conversions.

Examples:
    >>> ingredient_cost(100, 1, "kg", 2, "tbsp")
    3.0
    >>> packaging_cost(250, 100, 5)
    12.5
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from shero_core.exceptions import UnknownUnitError
from shero_core.models import generate_id
from shero_core.parsing import ParseMode, parse_number

logger = logging.getLogger(__name__)

# Base unit is the gram for mass and the millilitre for volume; counts are 1.
UNIT_MULTIPLIERS: dict[str, float] = {
    "kg": 1000,
    "g": 1,
    "l": 1000,
    "ml": 1,
    "tbsp": 15,
    "tsp": 5,
    "cup": 240,
    "pcs": 1,
}

PURCHASE_UNITS = ("kg", "g", "l", "ml")

INGREDIENT = "ingredient"
PACKAGING = "packaging"
UTILITY = "utility"

DEFAULT_LINE_NAMES = {
    INGREDIENT: "Unknown Ingredient",
    PACKAGING: "Box/Bag",
    UTILITY: "Gas/Utility",
}


def unit_multiplier(unit: str) -> float:
    """Return the base-unit multiplier for a unit name (case-insensitive)."""
    try:
        return UNIT_MULTIPLIERS[unit.strip().lower()]
    except (KeyError, AttributeError):
        known = ", ".join(UNIT_MULTIPLIERS)
        raise UnknownUnitError(f"Unknown unit {unit!r}. Known units: {known}") from None


def to_base_units(
    quantity: Any,
    unit: str,
    mode: ParseMode = ParseMode.LENIENT,
) -> float:
    """Convert a quantity to base units (g, ml or pieces).

    Examples:
        >>> to_base_units(1, "kg") == to_base_units(1000, "g")
        True
    """
    return parse_number(quantity, mode=mode) * unit_multiplier(unit)


def cost_per_unit_used(purchase_price: float, purchased_units: float, used_units: float) -> float:
    """Prorate a purchase price over the units actually consumed.

    A zero purchased amount yields zero cost instead of a division error.
    """
    if purchased_units == 0:
        return 0.0
    return purchase_price / purchased_units * used_units


def ingredient_cost(
    price: Any,
    purchased_qty: Any,
    purchased_unit: str,
    used_qty: Any,
    used_unit: str,
    mode: ParseMode = ParseMode.LENIENT,
) -> float:
    """Cost of the consumed part of an ingredient purchase.

    Args:
        price: Price paid for the purchase.
        purchased_qty: Purchased amount, in ``purchased_unit``.
        purchased_unit: Unit of the purchase (e.g. ``"kg"``).
        used_qty: Amount consumed, in ``used_unit``.
        used_unit: Unit of consumption (e.g. ``"tbsp"``).
        mode: Numeric parse policy for the raw inputs.

    Returns:
        Prorated cost of the consumed amount.

    Examples:
        >>> ingredient_cost("100", "1", "kg", "2", "tbsp")
        3.0
    """
    return cost_per_unit_used(
        parse_number(price, mode=mode),
        to_base_units(purchased_qty, purchased_unit, mode=mode),
        to_base_units(used_qty, used_unit, mode=mode),
    )


def packaging_cost(price: Any, count: Any, used_count: Any, mode: ParseMode = ParseMode.LENIENT) -> float:
    """Cost of the pieces used from a pack of ``count`` pieces."""
    return cost_per_unit_used(
        parse_number(price, mode=mode),
        parse_number(count, mode=mode),
        parse_number(used_count, mode=mode),
    )


def utility_cost(
    price: Any,
    duration_days: Any,
    used_days: Any,
    mode: ParseMode = ParseMode.LENIENT,
) -> float:
    """Cost of ``used_days`` of a utility that lasts ``duration_days``."""
    return cost_per_unit_used(
        parse_number(price, mode=mode),
        parse_number(duration_days, mode=mode),
        parse_number(used_days, mode=mode),
    )


def _fmt(value: Any) -> str:
    number = parse_number(value)
    return f"{number:g}"


@dataclass
class CostLine:
    """One costed component of a dish."""

    id: str
    kind: str
    name: str
    cost: float
    details: str


@dataclass
class CostSheet:
    """Scratch list of costed components, e.g. everything in one recipe.

    Lines whose cost is not positive are refused, matching a calculator that
    ignores incomplete input.
    """

    mode: ParseMode = ParseMode.LENIENT
    lines: list[CostLine] = field(default_factory=list)

    def add_ingredient(
        self,
        price: Any,
        purchased_qty: Any,
        purchased_unit: str,
        used_qty: Any,
        used_unit: str,
        name: Optional[str] = None,
    ) -> Optional[CostLine]:
        cost = ingredient_cost(price, purchased_qty, purchased_unit, used_qty, used_unit, mode=self.mode)
        used_base = to_base_units(used_qty, used_unit, mode=self.mode)
        details = (
            f"{_fmt(used_qty)} {used_unit} (≈{used_base:g}g) "
            f"from {_fmt(purchased_qty)}{purchased_unit} pack"
        )
        return self._add(INGREDIENT, name, cost, details)

    def add_packaging(self, price: Any, count: Any, used_count: Any, name: Optional[str] = None) -> Optional[CostLine]:
        cost = packaging_cost(price, count, used_count, mode=self.mode)
        details = f"{_fmt(used_count)} used from pack of {_fmt(count)}"
        return self._add(PACKAGING, name, cost, details)

    def add_utility(self, price: Any, duration_days: Any, used_days: Any, name: Optional[str] = None) -> Optional[CostLine]:
        cost = utility_cost(price, duration_days, used_days, mode=self.mode)
        details = f"{_fmt(used_days)} days used (Total life: {_fmt(duration_days)} days)"
        return self._add(UTILITY, name, cost, details)

    def _add(self, kind: str, name: Optional[str], cost: float, details: str) -> Optional[CostLine]:
        if cost <= 0:
            logger.info("Skipping %s line with non-positive cost (%s)", kind, details)
            return None
        line = CostLine(
            id=generate_id(),
            kind=kind,
            name=name or DEFAULT_LINE_NAMES[kind],
            cost=cost,
            details=details,
        )
        self.lines.append(line)
        return line

    def remove(self, line_id: str) -> bool:
        before = len(self.lines)
        self.lines = [line for line in self.lines if line.id != line_id]
        return len(self.lines) != before

    @property
    def total_cost(self) -> float:
        return sum(line.cost for line in self.lines)

    def to_frame(self) -> pd.DataFrame:
        """Lines as a DataFrame with columns kind, name, details, cost."""
        return pd.DataFrame(
            [
                {"kind": line.kind, "name": line.name, "details": line.details, "cost": line.cost}
                for line in self.lines
            ],
            columns=["kind", "name", "details", "cost"],
        )
