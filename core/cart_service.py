# core/cart_service.py
import logging
import threading

from core.errors import ValidationError
from core.pricing import get_item_price
from models.cart import Cart, CartItem
from models.order import Order

logger = logging.getLogger(__name__)


def get_table_cart(api, table_id: int) -> Cart:
    """Get all cart rows for a table"""
    return Cart.model_validate(api.get(f"/tables/{table_id}/cart") or {})


def add_to_cart(api, table_id: int, item_id: int, quantity: int = 1, is_half_portion: bool = False) -> CartItem:
    data = api.post(
        f"/tables/{table_id}/cart",
        json={"itemId": item_id, "quantity": quantity, "isHalfPortion": bool(is_half_portion)},
    )
    return CartItem.model_validate(data)


def update_cart_item(api, cart_item_id: int, quantity: int, is_half_portion: bool = None) -> CartItem:
    payload = {"quantity": quantity}
    if is_half_portion is not None:
        payload["isHalfPortion"] = bool(is_half_portion)
    return CartItem.model_validate(api.put(f"/cart/{cart_item_id}", json=payload))


def remove_from_cart(api, cart_item_id: int):
    return api.delete(f"/cart/{cart_item_id}")


def clear_cart(api, table_id: int):
    return api.delete(f"/tables/{table_id}/cart")


def place_order(api, table_id: int) -> Order:
    return Order.model_validate(api.post(f"/tables/{table_id}/place-order"))


class TableCart:
    """
    Local working copy of one table's cart.

    A row is identified by (item, portion) within the table; adding a pair
    that is already present bumps its quantity on the server instead of
    creating a second row.
    """

    def __init__(self, api, table_id: int):
        self.api = api
        self.table_id = table_id
        self._rows = []
        self._lock = threading.RLock()

    # ===================== STATE =====================

    @property
    def rows(self):
        with self._lock:
            return list(self._rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    @property
    def count(self) -> int:
        return sum(row.quantity for row in self.rows)

    @property
    def total(self) -> float:
        return sum(get_item_price(row.item, row.is_half_portion) * row.quantity for row in self.rows)

    def find(self, item_id: int, half: bool = False):
        with self._lock:
            for row in self._rows:
                if row.key == (item_id, bool(half)):
                    return row
        return None

    def _replace(self, updated: CartItem, previous: CartItem = None):
        # PUT responses may omit the nested item; keep the one we already have
        if updated.item is None and previous is not None:
            updated = updated.model_copy(update={"item": previous.item})
        with self._lock:
            for index, row in enumerate(self._rows):
                if row.id == updated.id:
                    self._rows[index] = updated
                    return updated
            self._rows.append(updated)
        return updated

    # ===================== ACTIONS =====================

    def refresh(self):
        cart = get_table_cart(self.api, self.table_id)
        with self._lock:
            self._rows = list(cart.items)
        return self.rows

    def add(self, item, quantity: int = 1, half: bool = False) -> CartItem:
        if quantity <= 0:
            raise ValidationError("Quantity must be at least 1", field="quantity")
        if half and getattr(item, "half_price", None) is None:
            raise ValidationError(f"{item.name} is not available as a half portion", field="is_half_portion")
        existing = self.find(item.id, half)
        if existing is not None:
            updated = update_cart_item(self.api, existing.id, existing.quantity + quantity)
            return self._replace(updated, existing)
        created = add_to_cart(self.api, self.table_id, item.id, quantity, half)
        if created.item is None:
            created = created.model_copy(update={"item": item})
        return self._replace(created)

    def set_quantity(self, row: CartItem, quantity: int):
        if quantity <= 0:
            self.remove(row)
            return None
        updated = update_cart_item(self.api, row.id, quantity)
        return self._replace(updated, row)

    def remove(self, row: CartItem):
        remove_from_cart(self.api, row.id)
        with self._lock:
            self._rows = [r for r in self._rows if r.id != row.id]

    def clear(self):
        clear_cart(self.api, self.table_id)
        with self._lock:
            self._rows = []

    def place_order(self) -> Order:
        if self.is_empty:
            raise ValidationError("Your cart is empty")
        order = place_order(self.api, self.table_id)
        with self._lock:
            self._rows = []
        logger.info("Table %s placed order #%s (%s)", self.table_id, order.id, order.status.value)
        return order
