import json

import pytest

from core.cart_service import TableCart
from core.errors import ValidationError
from models.menu_item import MenuItem
from models.order import OrderStatus

PANEER = MenuItem(id=1, name="Paneer Tikka", full_price=240.0, half_price=140.0)
DAL = MenuItem(id=2, name="Dal Makhani", full_price=180.0, half_price=100.0)
SODA = MenuItem(id=3, name="Lime Soda", full_price=60.0)


class CartServer:
    """Tiny in-memory cart backend for one table."""

    def __init__(self, backend, table_id=7):
        self.rows = {}
        self.next_id = 100
        self.orders = []
        backend.on("GET", f"/tables/{table_id}/cart", handler=self.get)
        backend.on("POST", f"/tables/{table_id}/cart", handler=self.add)
        backend.on("DELETE", f"/tables/{table_id}/cart", handler=self.clear)
        backend.on("POST", f"/tables/{table_id}/place-order", handler=self.place)
        self.table_id = table_id
        self.backend = backend

    def get(self, request):
        return 200, {"items": list(self.rows.values()), "total": 0}

    def add(self, request):
        body = json.loads(request.content)
        self.next_id += 1
        row = {"id": self.next_id, "tableId": self.table_id, "itemId": body["itemId"],
               "quantity": body["quantity"], "isHalfPortion": body["isHalfPortion"]}
        self.rows[row["id"]] = row
        self.backend.on("PUT", f"/cart/{row['id']}", handler=self.update)
        self.backend.on("DELETE", f"/cart/{row['id']}", handler=self.delete)
        return 201, row

    def update(self, request):
        row_id = int(request.url.path.rsplit("/", 1)[1])
        self.rows[row_id]["quantity"] = json.loads(request.content)["quantity"]
        return 200, self.rows[row_id]

    def delete(self, request):
        self.rows.pop(int(request.url.path.rsplit("/", 1)[1]), None)
        return 200, {"message": "removed"}

    def clear(self, request):
        self.rows.clear()
        return 200, {"message": "cleared"}

    def place(self, request):
        lines = [{"itemId": r["itemId"], "quantity": r["quantity"], "isHalfPortion": r["isHalfPortion"],
                  "price": 0} for r in self.rows.values()]
        order = {"id": 500 + len(self.orders), "tableId": self.table_id, "status": "PENDING", "orderItems": lines}
        self.orders.append(order)
        self.rows.clear()
        return 201, order


@pytest.fixture
def server(backend):
    return CartServer(backend)


@pytest.fixture
def cart(api, server):
    return TableCart(api, 7)


def test_same_item_and_portion_merges_into_one_row(cart, server, backend):
    cart.add(PANEER, 2)
    cart.add(PANEER, 3)
    assert len(cart.rows) == 1
    assert cart.rows[0].quantity == 5
    assert len(server.rows) == 1
    assert len(backend.calls("POST", "/tables/7/cart")) == 1


def test_half_and_full_are_separate_rows(cart):
    cart.add(PANEER, 1)
    cart.add(PANEER, 1, half=True)
    assert {row.key for row in cart.rows} == {(1, False), (1, True)}


def test_update_keeps_nested_item(cart):
    cart.add(PANEER, 1)
    cart.add(PANEER, 1)
    assert cart.rows[0].item.name == "Paneer Tikka"


def test_half_portion_must_exist(cart, backend):
    with pytest.raises(ValidationError):
        cart.add(SODA, 1, half=True)
    assert backend.requests == []


def test_quantity_must_be_positive(cart):
    with pytest.raises(ValidationError):
        cart.add(PANEER, 0)


def test_set_quantity_zero_removes_row(cart, server):
    row = cart.add(DAL, 2)
    cart.set_quantity(row, 0)
    assert cart.is_empty
    assert server.rows == {}


def test_clear(cart, server):
    cart.add(DAL, 1)
    cart.add(SODA, 2)
    cart.clear()
    assert cart.is_empty
    assert server.rows == {}


def test_table_seven_order_scenario(cart):
    cart.add(PANEER, 2)
    cart.add(DAL, 1, half=True)

    assert cart.total == 2 * PANEER.full_price + 1 * DAL.half_price
    assert cart.count == 3

    order = cart.place_order()
    assert order.status == OrderStatus.PENDING
    assert len(order.order_items) == 2
    assert cart.is_empty


def test_empty_cart_cannot_be_ordered(cart, backend):
    with pytest.raises(ValidationError):
        cart.place_order()
    assert backend.calls("POST", "/tables/7/place-order") == []


def test_refresh_loads_server_rows(cart, server):
    server.rows[1] = {"id": 1, "tableId": 7, "itemId": 2, "quantity": 4, "isHalfPortion": False,
                      "item": {"id": 2, "name": "Dal Makhani", "fullPrice": 180}}
    cart.refresh()
    assert cart.total == 720
