"""Example: cost one batch of a recipe

Every line is prorated from what the pack cost to what the batch used.
"""

from shero_core.costing import CostSheet
from shero_core.reporting.formatters import format_currency

sheet = CostSheet()
sheet.add_ingredient(100, 1, "kg", 2, "tbsp", name="Toor dal")
sheet.add_ingredient(220, 1, "l", 3, "tbsp", name="Gingelly oil")
sheet.add_ingredient(60, 500, "g", 1, "cup", name="Rice")
sheet.add_packaging(250, 100, 4, name="Meal boxes")
sheet.add_utility(1100, 30, 0.5, name="Gas cylinder")

print(sheet.to_frame().to_string(index=False))
print(f"\nBatch cost: {format_currency(sheet.total_cost)}")
