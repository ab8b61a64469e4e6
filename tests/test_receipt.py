import os
import subprocess
from unittest import mock

from conftest import order_payload
from core.receipt_service import RECEIPT_WIDTH, print_kot, print_text, receipt_figures, render_kot, render_receipt
from models.order import Order

LINES = [
    {"itemId": 1, "quantity": 2, "price": 120, "item": {"name": "Chilli Paneer Dry Extra Spicy"}},
    {"itemId": 2, "quantity": 1, "price": 90, "isHalfPortion": True, "item": {"name": "Fried Rice"}},
]


def completed(**extra):
    return Order.model_validate(order_payload(12, "COMPLETED", table_number=3, lines=LINES, **extra))


def test_figures_from_payment_details():
    order = completed(total=346.5, paymentDetails={"paymentMethod": "card", "amountPaid": 346.5,
                                                   "taxAmount": 16.5, "taxPercentage": 5})
    figures = receipt_figures(order)
    assert figures.subtotal == 330
    assert figures.tax_amount == 16.5
    assert figures.tax_percentage == 5


def test_figures_derived_from_total():
    figures = receipt_figures(completed(total=350))
    assert figures.tax_amount == 20
    # 20 / 330 = 6.06% -> 6.1
    assert figures.tax_percentage == 6.1


def test_no_tax_when_total_matches_subtotal():
    figures = receipt_figures(completed(total=330))
    assert figures.tax_amount == 0
    assert figures.tax_percentage == 0


def test_receipt_layout():
    order = completed(total=346.5, paymentDetails={"paymentMethod": "cash", "amountPaid": 346.5,
                                                   "taxAmount": 16.5, "taxPercentage": 5})
    text = render_receipt(order, restaurant_name="SkyBar Cafe & Lounge")
    lines = text.splitlines()
    assert lines[0].strip() == "SkyBar Cafe & Lounge"
    assert "Order: #12 | Table: 3" in text
    assert "Chilli Paneer Dry " in text
    assert "Fried Rice (H)" in text
    assert "Tax (5%):" in text
    assert "Paid by:" in text and "CASH" in text
    assert all(len(line) <= RECEIPT_WIDTH for line in lines)
    total_line = next(line for line in lines if line.startswith("TOTAL:"))
    assert total_line.endswith("₹346.50")


def test_receipt_without_tax_has_no_tax_line():
    assert "Tax (" not in render_receipt(completed(total=330))


def test_kot_lists_items_without_prices():
    text = render_kot(completed(total=330))
    assert "KITCHEN ORDER TICKET" in text
    assert "2 x Chilli Paneer Dry Extra Spicy" in text
    assert "1 x Fried Rice (Half)" in text
    assert "Items: 3" in text
    assert "₹" not in text


def test_print_text_reports_failure():
    with mock.patch("core.receipt_service.sys") as fake_sys, \
            mock.patch("core.receipt_service.subprocess.run", side_effect=FileNotFoundError("lp")):
        fake_sys.platform = "linux"
        assert print_text("hello", "receipt-1") is False


def test_print_text_calls_lp():
    with mock.patch("core.receipt_service.sys") as fake_sys, \
            mock.patch("core.receipt_service.subprocess.run") as run:
        fake_sys.platform = "linux"
        assert print_text("hello", "receipt-1") is True
    args = run.call_args[0][0]
    assert args[:3] == ["lp", "-t", "receipt-1"]
    assert not os.path.exists(args[3])


def test_print_kot_titles_the_job():
    jobs = []
    assert print_kot(completed(), printer=lambda text, title: jobs.append((title, text)) or True)
    title, text = jobs[0]
    assert title == "kot-12"
    assert "KITCHEN ORDER TICKET" in text


def test_print_text_removes_spool_file_when_lp_fails():
    with mock.patch("core.receipt_service.sys") as fake_sys, \
            mock.patch("core.receipt_service.subprocess.run",
                       side_effect=subprocess.CalledProcessError(1, "lp")) as run:
        fake_sys.platform = "linux"
        assert print_text("hello", "kot-4") is False
    assert not os.path.exists(run.call_args[0][0][3])
