"""Unit normalization for inventory quantities.

Every inventory row stores the unit the user (or receipt) gave us plus the
canonical family it belongs to and a multiplier into that family's base unit.
Only the units listed below have real factors; anything else maps 1:1 until a
finer classification exists. Stored conversion factors depend on this table,
so widening it changes the meaning of historical rows.
"""

from src.models.enums import StandardUnit

MASS_FACTORS: dict[str, float] = {
    "g": 1.0,
    "gram": 1.0,
    "grams": 1.0,
    "kg": 1000.0,
    "kilogram": 1000.0,
    "kilograms": 1000.0,
    "oz": 28.3495,
    "ounce": 28.3495,
    "ounces": 28.3495,
    "lb": 453.5924,
    "lbs": 453.5924,
    "pound": 453.5924,
    "pounds": 453.5924,
}

VOLUME_FACTORS: dict[str, float] = {
    "ml": 1.0,
    "milliliter": 1.0,
    "millilitre": 1.0,
    "milliliters": 1.0,
    "millilitres": 1.0,
    "l": 1000.0,
    "liter": 1000.0,
    "litre": 1000.0,
    "liters": 1000.0,
    "litres": 1000.0,
    "cup": 236.588,
    "cups": 236.588,
    "tbsp": 14.7868,
    "tablespoon": 14.7868,
    "tablespoons": 14.7868,
    "tsp": 4.92892,
    "teaspoon": 4.92892,
    "teaspoons": 4.92892,
    "fl oz": 29.5735,
    "floz": 29.5735,
}

DEFAULT_UNIT = "count"


def normalize_unit(user_unit: str | None) -> str:
    """Lowercase, trim and collapse inner whitespace ("Fl  Oz" -> "fl oz")."""
    if not user_unit:
        return ""
    return " ".join(user_unit.strip().lower().split())


def infer_conversion_factor(user_unit: str, standard_unit: StandardUnit | str) -> float:
    """Multiplier from ``user_unit`` to the base unit of ``standard_unit``.

    Mass units only resolve against ``g`` and volume units only against ``ml``.
    Count requests and unknown strings return 1.
    """
    unit = normalize_unit(user_unit)
    try:
        standard = StandardUnit(standard_unit)
    except ValueError:
        return 1.0

    if standard == StandardUnit.GRAM and unit in MASS_FACTORS:
        return MASS_FACTORS[unit]
    if standard == StandardUnit.MILLILITER and unit in VOLUME_FACTORS:
        return VOLUME_FACTORS[unit]

    # count and unknown units default to 1:1
    return 1.0


def classify_standard_unit(user_unit: str | None) -> StandardUnit:
    """Pick the canonical family for a free-form unit.

    Volume is checked first so "fl oz" is not mistaken for mass ounces.
    """
    unit = normalize_unit(user_unit)
    if unit in VOLUME_FACTORS:
        return StandardUnit.MILLILITER
    if unit in MASS_FACTORS:
        return StandardUnit.GRAM
    return StandardUnit.COUNT
