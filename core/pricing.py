# core/pricing.py
from collections.abc import Mapping

from core.config import CURRENCY_SYMBOL
from models.record import as_number


def _field(item, attr: str, wire: str):
    if isinstance(item, Mapping):
        return item.get(wire, item.get(attr))
    return getattr(item, attr, None)


def get_item_price(item, half: bool = False) -> float:
    """
    Resolve the unit price of a menu item.

    Half price when a half portion is requested and one exists, else the full
    price, else the legacy single `price` field, else 0. Works on MenuItem
    records and raw API mappings and never raises.
    """
    if item is None:
        return 0.0
    if half:
        half_price = as_number(_field(item, "half_price", "halfPrice"))
        if half_price is not None:
            return half_price
    full_price = as_number(_field(item, "full_price", "fullPrice"))
    if full_price is not None:
        return full_price
    legacy = as_number(_field(item, "price", "price"))
    if legacy is not None:
        return legacy
    return 0.0


def has_half_portion(item) -> bool:
    if item is None:
        return False
    return as_number(_field(item, "half_price", "halfPrice")) is not None


def line_total(price, quantity) -> float:
    return (as_number(price) or 0.0) * (quantity or 0)


def format_price(value, currency: str = CURRENCY_SYMBOL) -> str:
    """Format as currency with thousands separators, e.g. ₹1,250.00."""
    number = as_number(value)
    if number is None:
        return f"{currency}0.00"
    return f"{currency}{number:,.2f}"
