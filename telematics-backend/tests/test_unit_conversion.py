import math

from app.services.unit_conversion import build_converted_values, converted_type_for, to_fahrenheit


def test_celsius_units_convert_to_fahrenheit():
    assert to_fahrenheit("100", 2) == 212
    assert to_fahrenheit("0", 3) == 32
    assert math.isclose(to_fahrenheit("-40", 2), -40)


def test_fahrenheit_unit_passes_through():
    assert to_fahrenheit("32.5", 1) == 32.5


def test_unparseable_values_become_zero():
    assert to_fahrenheit("abc", 2) == 0
    assert to_fahrenheit("nan", 1) == 0
    assert to_fahrenheit(None, 2) == 0
    assert to_fahrenheit("inf", 2) == 0
    assert to_fahrenheit("-Infinity", 1) == 0
    assert to_fahrenheit(float("inf"), 2) == 0


def test_leading_numeric_prefix_is_used():
    assert to_fahrenheit("25C", 2) == 77
    assert to_fahrenheit(" 12.5 degrees", 1) == 12.5
    assert to_fahrenheit("1_000", 1) == 1
    assert to_fahrenheit(".5", 1) == 0.5
    assert to_fahrenheit("1e2", 2) == 212
    assert to_fahrenheit(40, 3) == 104


def test_converted_values_are_always_finite():
    assert build_converted_values([6], 2, "inf", "25C") == [0, 77.0]


def test_converted_values_only_for_temperature_rules():
    assert build_converted_values([6], 2, "0", "100") == [32.0, 212.0]
    assert build_converted_values([1, 2], 2, "0", "100") == []
    assert build_converted_values([6], None, "0", "100") == []


def test_converted_values_skip_missing_bounds():
    assert build_converted_values([6], 3, None, "10") == [50.0]
    assert build_converted_values(["6"], 1, "", "") == []


def test_converted_type():
    assert converted_type_for([6]) == "F"
    assert converted_type_for(["6", 2]) == "F"
    assert converted_type_for([1]) is None
    assert converted_type_for(None) is None
