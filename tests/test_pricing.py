import math

import pytest

from core.pricing import format_price, get_item_price, has_half_portion, line_total
from models.menu_item import MenuItem


def test_half_price_when_requested_and_present():
    item = MenuItem(name="Biryani", full_price=300, half_price=180)
    assert get_item_price(item, half=True) == 180
    assert get_item_price(item) == 300


def test_half_falls_back_to_full_price():
    item = MenuItem(name="Lassi", full_price=90)
    assert get_item_price(item, half=True) == 90


def test_full_falls_back_to_legacy_price():
    assert get_item_price({"price": 75}) == 75
    assert get_item_price({"price": "75.5"}, half=True) == 75.5


@pytest.mark.parametrize("raw", [
    {},
    {"fullPrice": None, "halfPrice": "n/a", "price": float("nan")},
    {"fullPrice": "abc"},
])
def test_zero_when_nothing_usable(raw):
    assert get_item_price(raw) == 0
    assert get_item_price(raw, half=True) == 0


def test_none_item_costs_nothing():
    assert get_item_price(None) == 0
    assert has_half_portion(None) is False


def test_non_numeric_wire_prices_become_none():
    item = MenuItem.model_validate({"name": "Tea", "fullPrice": "40", "halfPrice": "NaN"})
    assert item.full_price == 40.0
    assert item.half_price is None
    assert not has_half_portion(item)


def test_raw_mapping_with_camel_case_keys():
    raw = {"fullPrice": 250, "halfPrice": 140}
    assert get_item_price(raw, half=True) == 140
    assert has_half_portion(raw)


def test_format_price_uses_thousands_separator():
    assert format_price(1250) == "₹1,250.00"
    assert format_price(3.5, currency="$") == "$3.50"


@pytest.mark.parametrize("value", [None, math.nan, "not a number", float("inf")])
def test_format_price_never_raises(value):
    assert format_price(value) == "₹0.00"


def test_line_total():
    assert line_total(120, 3) == 360
    assert line_total(None, 3) == 0
