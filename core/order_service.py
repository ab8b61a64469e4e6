# core/order_service.py
import logging

from pydantic import ValidationError as PayloadError

from core.errors import ResponseFormatError
from models.order import Order, OrderStatus, PaymentDetails

logger = logging.getLogger(__name__)


def _order(data) -> Order:
    try:
        return Order.model_validate(data)
    except PayloadError as ex:
        logger.error("Backend sent an order that could not be read: %s", ex)
        raise ResponseFormatError("Received an order in an unexpected format", payload=data) from ex


def _orders(data):
    return [_order(o) for o in data or []]


def list_orders(api):
    return _orders(api.get("/orders"))


def get_order(api, order_id: int) -> Order:
    return _order(api.get(f"/orders/{order_id}"))


def list_orders_by_status(api, status: OrderStatus):
    return _orders(api.get(f"/orders/status/{OrderStatus(status).value}"))


def update_order_status(api, order_id: int, status: OrderStatus) -> Order:
    status = OrderStatus(status)
    data = api.patch(f"/orders/{order_id}/status", json={"status": status.value})
    logger.info("Order #%s -> %s", order_id, status.value)
    return _order(data)


def get_waiter_dashboard(api):
    """Returns (active_orders, completed_orders)."""
    data = api.get("/waiter/dashboard/orders") or {}
    if not isinstance(data, dict):
        raise ResponseFormatError("Received the waiter dashboard in an unexpected format", payload=data)
    return _orders(data.get("activeOrders")), _orders(data.get("completedOrders"))


def list_delivered_orders(api):
    """Delivered orders awaiting payment at the POS."""
    return _orders(api.get("/orders/pos/delivered"))


def list_pos_history(api):
    """Delivered and completed orders, for the POS 'all orders' tab."""
    return list_delivered_orders(api) + list_orders_by_status(api, OrderStatus.COMPLETED)


def complete_order(api, order_id: int, payment: PaymentDetails) -> Order:
    """POST /orders/pos/complete. Returns the finalized (COMPLETED) order from the server."""
    body = {"orderId": order_id, **payment.to_payload()}
    data = api.post("/orders/pos/complete", json=body)
    order = _order(data["order"] if isinstance(data, dict) and "order" in data else data)
    logger.info("Order #%s completed (%s %.2f)", order_id, payment.payment_method.value, payment.amount_paid)
    return order
