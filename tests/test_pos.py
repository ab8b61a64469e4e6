import json

import pytest

from conftest import order_payload
from core.errors import ConflictError, ValidationError
from core.order_lifecycle import OrderView, OrderWorkingSet
from core.pos_service import PosCheckout, build_payment_details, calculate_payment, change_due
from core.realtime import PAYMENT_PROCESSING, STATUS_CHANGE
from models.order import Order, OrderStatus

LINES = [
    {"itemId": 1, "quantity": 2, "price": 60, "item": {"name": "Veg Momos"}},
    {"itemId": 2, "quantity": 1, "price": 80, "item": {"name": "Hakka Noodles"}, "isHalfPortion": True},
]


def delivered_99():
    return Order.model_validate(order_payload(99, "DELIVERED", table_number=7, lines=LINES, total=200))


def test_calculate_payment_rounds_half_up():
    summary = calculate_payment(delivered_99(), 5)
    assert (summary.subtotal, summary.tax_amount, summary.total) == (200.0, 10.0, 210.0)

    odd = Order.model_validate(order_payload(1, "DELIVERED", lines=[{"itemId": 1, "quantity": 1, "price": 10.1}]))
    # 10.10 * 2.5% = 0.2525 -> 0.25
    assert calculate_payment(odd, 2.5).tax_amount == 0.25
    # 10.10 * 15% = 1.515 -> 1.52
    assert calculate_payment(odd, 15).tax_amount == 1.52


@pytest.mark.parametrize("pct", [-1, 101, "abc", float("nan")])
def test_tax_percentage_must_be_between_0_and_100(pct):
    with pytest.raises(ValidationError):
        calculate_payment(delivered_99(), pct)


def test_build_payment_details_rejects_unknown_method():
    with pytest.raises(ValidationError):
        build_payment_details(delivered_99(), "upi")


def test_change_due():
    assert change_due(210, 500) == 290.0
    with pytest.raises(ValidationError):
        change_due(210, 100)
    with pytest.raises(ValidationError):
        change_due(210, "lots")


@pytest.mark.parametrize("tendered", ["nan", "inf", "-Infinity", float("nan")])
def test_change_due_rejects_non_finite_amounts(tendered):
    with pytest.raises(ValidationError) as info:
        change_due(210, tendered)
    assert info.value.field == "tendered"


@pytest.fixture
def printed():
    return []


@pytest.fixture
def checkout(api, channel, printed):
    channel.connect()
    ws = OrderWorkingSet(OrderView.POS, lambda: [delivered_99()], channel=channel)
    ws.mount()
    ws.select(99)

    def printer(text, title):
        printed.append((title, text))
        return True

    return PosCheckout(api, channel, ws, printer=printer)


def complete_route(backend, status="COMPLETED"):
    def handler(request):
        body = json.loads(request.content)
        order = order_payload(99, status, table_number=7, lines=LINES, total=body["amountPaid"],
                              paymentDetails={k: body[k] for k in body if k != "orderId"})
        return 200, {"message": "Order completed", "order": order}

    backend.on("POST", "/orders/pos/complete", handler=handler)


def test_pos_completes_order_99(checkout, backend, socket_client, printed, channel):
    complete_route(backend)
    waiter = OrderWorkingSet(OrderView.WAITER, lambda: [delivered_99()], channel=channel)
    waiter.mount()

    completed = checkout.complete(99, "cash", 5, "  table paid  ")

    body = backend.last_json()
    assert body["orderId"] == 99
    assert body["amountPaid"] == 210.0
    assert body["taxPercentage"] == 5.0
    assert body["paymentMethod"] == "cash"
    assert body["notes"] == "table paid"
    assert completed.status == OrderStatus.COMPLETED
    assert 99 not in checkout.working_set
    assert checkout.working_set.selected_id is None
    assert checkout.receipt_mode
    assert printed[0][0] == "receipt-99"

    assert socket_client.emitted[-2] == (PAYMENT_PROCESSING, {"orderId": 99, "tableId": 1, "tableNumber": 7})
    event, payload = socket_client.emitted[-1]
    assert event == STATUS_CHANGE and payload["status"] == "COMPLETED"

    # the broadcast reaching another client's waiter view
    socket_client.server_event(STATUS_CHANGE, payload)
    assert waiter.orders("delivered") == []
    assert waiter.get(99).status == OrderStatus.COMPLETED


def test_receipt_uses_server_order_but_broadcast_is_completed(checkout, backend, socket_client):
    complete_route(backend, status="DELIVERED")
    returned = checkout.complete(99, "card")
    assert checkout.receipt_order is returned
    assert returned.payment_details.amount_paid == 210.0
    assert socket_client.emitted[-1][1]["status"] == "COMPLETED"
    assert 99 not in checkout.working_set


def test_rejected_payment_keeps_screen(checkout, backend):
    backend.on("POST", "/orders/pos/complete", {"message": "Order already completed"}, status=409)
    with pytest.raises(ConflictError):
        checkout.complete(99, "cash")
    assert not checkout.receipt_mode
    assert 99 in checkout.working_set


def test_printer_failure_does_not_roll_back(api, backend):
    complete_route(backend)
    ws = OrderWorkingSet(OrderView.POS, lambda: [delivered_99()])
    ws.mount()

    def broken_printer(text, title):
        raise OSError("no printer")

    checkout = PosCheckout(api, None, ws, printer=broken_printer)
    completed = checkout.complete(99, "cash")
    assert completed.status == OrderStatus.COMPLETED
    assert checkout.receipt_mode
    assert checkout.print_receipt() is False


def test_new_transaction_leaves_receipt_mode(checkout, backend):
    complete_route(backend)
    checkout.complete(99, "cash")
    checkout.new_transaction()
    assert not checkout.receipt_mode



def test_reprint_history_receipt(checkout, printed):
    old = Order.model_validate(order_payload(55, "COMPLETED", table_number=2, lines=LINES, total=210))
    assert checkout.reprint(old)
    assert printed[-1][0] == "receipt-55"
    assert not checkout.receipt_mode
