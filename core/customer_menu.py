# core/customer_menu.py
import logging

from core.cart_service import TableCart
from core.category_service import list_categories
from core.config import CUSTOMER_ORDER_HOURS
from core.errors import NotFoundError, ValidationError
from core.item_service import filter_items
from core.menu_service import get_menu
from core.order_lifecycle import OrderView, OrderWorkingSet
from core.order_service import list_orders
from core.table_service import find_table_by_number

logger = logging.getLogger(__name__)


class CustomerMenu:
    """
    Everything the QR-code menu screen for one table shows.

    Ordering controls (portion buttons, quantities, the cart) exist only
    while the table's menu is accepting orders; otherwise the items are
    listed read-only.
    """

    def __init__(self, api, table_number, channel=None, clock=None):
        self.api = api
        self.table_number = table_number
        self.channel = channel
        self.clock = clock
        self.table = None
        self.menu = None
        self.categories = []
        self.cart = None
        self.orders = None

    @property
    def accepting_orders(self) -> bool:
        return bool(self.menu and self.menu.is_accepting_orders)

    @property
    def show_order_controls(self) -> bool:
        return self.accepting_orders

    @property
    def show_cart(self) -> bool:
        return self.accepting_orders

    @property
    def items(self):
        if self.menu is None:
            return []
        return [item for item in self.menu.items if item.is_available]

    def load(self):
        self.table = find_table_by_number(self.api, self.table_number)
        if self.table is None:
            raise NotFoundError(404, f"Table {self.table_number} not found")
        if self.table.menu_id is None:
            raise NotFoundError(404, f"No menu is assigned to table {self.table_number}")
        self.menu = get_menu(self.api, self.table.menu_id)

        used = {item.category_id for item in self.menu.items}
        self.categories = [c for c in list_categories(self.api) if c.id in used]

        if self.accepting_orders:
            self.cart = TableCart(self.api, self.table.id)
            self.cart.refresh()
        else:
            self.cart = None

        table_id = self.table.id
        self.orders = OrderWorkingSet(
            OrderView.CUSTOMER,
            lambda: [o for o in list_orders(self.api) if o.table_id == table_id],
            channel=self.channel,
            table_id=table_id,
            clock=self.clock,
        )
        self.orders.mount()
        logger.info("Loaded menu %s for table %s", self.menu.name, self.table_number)
        return self

    def visible_items(self, search: str = "", category_id=None):
        return filter_items(self.items, search=search, category_id=category_id)

    def active_orders(self):
        """This table's orders still in progress from the last few hours."""
        if self.orders is None:
            return []
        return self.orders.recent(CUSTOMER_ORDER_HOURS)

    def place_order(self):
        if self.cart is None:
            raise ValidationError("This menu is not accepting orders right now")
        order = self.cart.place_order()
        self.orders.apply(order)
        return order

    def close(self):
        if self.orders is not None:
            self.orders.unmount()
