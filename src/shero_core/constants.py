"""Reference constants shared across the package."""

APP_NAME = "SheroKitchen Manager"

# Amounts are Indian rupees.
CURRENCY_SYMBOL = "₹"

MENU_CATEGORIES = [
    "Main Course",
    "Side Dish",
    "Gravy/Curry",
    "Rice Special",
    "Snacks",
    "Beverage",
    "Combo",
]

EXPENSE_CATEGORIES = [
    "Ingredients",
    "Packaging",
    "Gas/Fuel",
    "Labor/Helper",
    "Transportation",
    "Marketing",
    "Utilities",
    "Other",
]

DEFAULT_MENU_CATEGORY = MENU_CATEGORIES[0]
DEFAULT_EXPENSE_CATEGORY = EXPENSE_CATEGORIES[0]

# Menu used the first time the local store is opened.
SEED_MENU = [
    {
        "id": "1",
        "name": "Vazhaikkai Podimas",
        "category": "Side Dish",
        "price": 193,
        "myShare": 68,
        "sheroShare": 125,
    },
    {
        "id": "2",
        "name": "Beans Poriyal",
        "category": "Side Dish",
        "price": 202,
        "myShare": 72,
        "sheroShare": 130,
    },
]
