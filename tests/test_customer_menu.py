from datetime import datetime, timezone

import pytest

from conftest import order_payload
from core.customer_menu import CustomerMenu
from core.errors import NotFoundError, ValidationError
from core.realtime import NEW_ORDER, STATUS_CHANGE

ITEMS = [
    {"id": 1, "name": "Paneer Tikka", "fullPrice": 240, "halfPrice": 140, "categoryId": 10, "isAvailable": True},
    {"id": 2, "name": "Dal Makhani", "fullPrice": 180, "categoryId": 11, "isAvailable": True},
    {"id": 3, "name": "Mutton Rogan Josh", "fullPrice": 420, "categoryId": 11, "isAvailable": False},
]


def serve_table(backend, accepting=True, orders=()):
    backend.on("GET", "/tables", [{"id": 70, "tableNumber": 7, "menuId": 5}, {"id": 80, "tableNumber": 8}])
    backend.on("GET", "/menus/5", {"id": 5, "name": "All Day", "isAcceptingOrders": accepting, "items": ITEMS})
    backend.on("GET", "/categories", [{"id": 10, "name": "Starters"}, {"id": 11, "name": "Mains"},
                                      {"id": 12, "name": "Desserts"}])
    backend.on("GET", "/tables/70/cart", {"items": [], "total": 0})
    backend.on("GET", "/orders", list(orders))


@pytest.fixture
def clock():
    return lambda: datetime(2023, 11, 14, 23, 0, tzinfo=timezone.utc)


def test_menu_not_accepting_orders_is_read_only(api, backend, clock):
    serve_table(backend, accepting=False)
    menu = CustomerMenu(api, 7, clock=clock).load()

    assert [i.name for i in menu.items] == ["Paneer Tikka", "Dal Makhani"]
    assert not menu.show_order_controls
    assert not menu.show_cart
    assert menu.cart is None
    assert backend.calls("GET", "/tables/70/cart") == []
    with pytest.raises(ValidationError):
        menu.place_order()
    menu.close()


def test_accepting_menu_has_cart(api, backend, clock):
    serve_table(backend)
    menu = CustomerMenu(api, 7, clock=clock).load()
    assert menu.show_order_controls and menu.show_cart
    assert menu.cart is not None and menu.cart.is_empty
    menu.close()


def test_categories_limited_to_menu(api, backend, clock):
    serve_table(backend)
    menu = CustomerMenu(api, 7, clock=clock).load()
    assert [c.name for c in menu.categories] == ["Starters", "Mains"]
    assert [i.name for i in menu.visible_items(category_id="11")] == ["Dal Makhani"]
    assert [i.name for i in menu.visible_items(search="paneer")] == ["Paneer Tikka"]
    menu.close()


def test_unknown_table(api, backend):
    serve_table(backend)
    with pytest.raises(NotFoundError):
        CustomerMenu(api, 99).load()


def test_table_without_menu(api, backend):
    serve_table(backend)
    with pytest.raises(NotFoundError):
        CustomerMenu(api, 8).load()


def test_active_orders_follow_realtime(api, backend, clock, channel, socket_client):
    serve_table(backend, orders=[
        order_payload(1, "PREPARING", table_id=70, created_at="2023-11-14T22:30:00Z"),
        order_payload(2, "PENDING", table_id=80, created_at="2023-11-14T22:30:00Z"),
        order_payload(3, "DELIVERED", table_id=70, created_at="2023-11-14T12:00:00Z"),
    ])
    menu = CustomerMenu(api, 7, channel=channel, clock=clock).load()
    assert [o.id for o in menu.active_orders()] == [1]

    socket_client.server_event(NEW_ORDER, order_payload(4, table_id=70, created_at="2023-11-14T22:55:00Z"))
    socket_client.server_event(STATUS_CHANGE, order_payload(1, "COMPLETED", table_id=70))
    assert [o.id for o in menu.active_orders()] == [4]

    menu.close()
    assert channel.listener_count(NEW_ORDER) == 0
