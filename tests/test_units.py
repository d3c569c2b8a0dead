"""Tests for unit classification and conversion factors."""

import pytest

from src.models.enums import StandardUnit
from src.services.units import classify_standard_unit, infer_conversion_factor, normalize_unit


def test_normalize_unit():
    assert normalize_unit("  Fl   Oz ") == "fl oz"
    assert normalize_unit(None) == ""
    assert normalize_unit("") == ""


@pytest.mark.parametrize(
    "unit,expected",
    [
        ("lb", StandardUnit.GRAM),
        ("KG", StandardUnit.GRAM),
        ("oz", StandardUnit.GRAM),
        ("fl oz", StandardUnit.MILLILITER),
        ("cups", StandardUnit.MILLILITER),
        ("L", StandardUnit.MILLILITER),
        ("dozen", StandardUnit.COUNT),
        ("count", StandardUnit.COUNT),
        (None, StandardUnit.COUNT),
    ],
)
def test_classify_standard_unit(unit, expected):
    assert classify_standard_unit(unit) == expected


def test_mass_units_convert_to_grams():
    assert infer_conversion_factor("lb", StandardUnit.GRAM) == 453.5924
    assert infer_conversion_factor("kg", "g") == 1000.0
    assert infer_conversion_factor("g", "g") == 1.0


def test_volume_units_convert_to_milliliters():
    assert infer_conversion_factor("l", "ml") == 1000.0
    assert infer_conversion_factor("Fl Oz", StandardUnit.MILLILITER) == 29.5735


def test_mismatched_family_defaults_to_one():
    """A mass unit asked for in ml (or vice versa) is not converted."""
    assert infer_conversion_factor("lb", "ml") == 1.0
    assert infer_conversion_factor("cup", "g") == 1.0


def test_count_and_unknown_units_default_to_one():
    assert infer_conversion_factor("bunch", "count") == 1.0
    assert infer_conversion_factor("lb", "count") == 1.0
    assert infer_conversion_factor("mystery", "g") == 1.0
    assert infer_conversion_factor("kg", "tonnes") == 1.0
