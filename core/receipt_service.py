# core/receipt_service.py
"""
Plain-text layouts for the thermal printer (receipts and kitchen tickets)
and the hand-off to the operating system's print command.
"""
import logging
import os
import subprocess
import sys
import tempfile
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from core.config import RESTAURANT_NAME
from core.pricing import format_price

logger = logging.getLogger(__name__)

RECEIPT_WIDTH = 42
NAME_WIDTH = 18
DATE_FORMAT = "%d/%m/%Y %H:%M:%S"


@dataclass
class ReceiptFigures:
    subtotal: float
    tax_amount: float
    tax_percentage: float
    total: float


def receipt_figures(order) -> ReceiptFigures:
    """
    Figures printed on a receipt. Subtotal comes from the lines; tax and its
    rate come from the stored payment details when present, otherwise from
    the gap between the server total and the subtotal.
    """
    subtotal = sum(line.price * line.quantity for line in order.order_items)
    total = order.total
    details = order.payment_details

    if details is not None and details.tax_amount:
        tax_amount = details.tax_amount
    elif total > subtotal:
        tax_amount = total - subtotal
    else:
        tax_amount = 0.0

    if details is not None and details.tax_percentage:
        tax_percentage = details.tax_percentage
    elif subtotal > 0 and tax_amount > 0:
        rate = Decimal(str(tax_amount)) / Decimal(str(subtotal)) * 100
        tax_percentage = float(rate.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
    else:
        tax_percentage = 0.0

    return ReceiptFigures(subtotal=subtotal, tax_amount=tax_amount, tax_percentage=tax_percentage, total=total)


def _line(label: str, value: str, width: int = RECEIPT_WIDTH) -> str:
    return f"{label}{value:>{width - len(label)}}"


def _stamp(order) -> str:
    moment = order.updated_at or order.created_at
    return moment.astimezone().strftime(DATE_FORMAT) if moment else ""


def _table(order) -> str:
    if order.table and order.table.table_number is not None:
        return str(order.table.table_number)
    return "Unknown"


def render_receipt(order, restaurant_name: str = RESTAURANT_NAME, width: int = RECEIPT_WIDTH) -> str:
    figures = receipt_figures(order)
    divider = "-" * width
    lines = [
        restaurant_name.center(width),
        "Receipt".center(width),
        _stamp(order).center(width),
        f"Order: #{order.id} | Table: {_table(order)}".center(width),
        divider,
        f"{'Item':<{NAME_WIDTH}}{'Qty':>4}{'Price':>9}{'Total':>11}",
    ]
    for line in order.order_items:
        name = line.name + (" (H)" if line.is_half_portion else "")
        lines.append(
            f"{name[:NAME_WIDTH]:<{NAME_WIDTH}}{line.quantity:>4}"
            f"{format_price(line.price):>9}{format_price(line.line_total):>11}"
        )
    lines.append(divider)
    lines.append(_line("Subtotal:", format_price(figures.subtotal), width))
    if figures.tax_amount > 0:
        lines.append(_line(f"Tax ({figures.tax_percentage:g}%):", format_price(figures.tax_amount), width))
    lines.append(_line("TOTAL:", format_price(figures.total), width))
    details = order.payment_details
    if details is not None:
        lines.append(_line("Paid by:", details.payment_method.value.upper(), width))
    lines.extend([
        divider,
        "Thank you for your visit!".center(width),
        "Please come again.".center(width),
        "* " * (width // 2),
    ])
    return "\n".join(line.rstrip() for line in lines) + "\n"


def render_kot(order, width: int = RECEIPT_WIDTH) -> str:
    """Kitchen order ticket: what to cook, no prices."""
    divider = "-" * width
    lines = [
        "KITCHEN ORDER TICKET".center(width),
        f"Order #{order.id}".center(width),
        f"Table: {_table(order)}".center(width),
        (order.created_at.astimezone().strftime(DATE_FORMAT) if order.created_at else "").center(width),
        divider,
    ]
    for line in order.order_items:
        portion = " (Half)" if line.is_half_portion else ""
        lines.append(f"{line.quantity:>3} x {line.name}{portion}")
    lines.append(divider)
    lines.append(f"Items: {order.item_count}")
    return "\n".join(line.rstrip() for line in lines) + "\n"


def print_text(text: str, title: str = "receipt") -> bool:
    """Send text to the default printer. Returns False (and logs) on failure."""
    try:
        with tempfile.NamedTemporaryFile(
            "w", suffix=".txt", prefix=f"{title}-", delete=False, encoding="utf-8"
        ) as fh:
            fh.write(text)
            path = fh.name
        if sys.platform.startswith("win"):
            os.startfile(path, "print")
        else:
            try:
                subprocess.run(["lp", "-t", title, path], check=True, capture_output=True, timeout=30)
            finally:
                # lp has spooled its own copy by now
                os.unlink(path)
    except (OSError, subprocess.SubprocessError) as ex:
        logger.error("Printing %s failed: %s", title, ex)
        return False
    logger.info("Sent %s to printer", title)
    return True


def print_kot(order, printer=print_text) -> bool:
    return printer(render_kot(order), f"kot-{order.id}")
