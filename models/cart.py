from datetime import datetime
from typing import List, Optional
from models.record import ApiRecord
from models.menu_item import MenuItem


class CartItem(ApiRecord):
    id: int
    table_id: Optional[int] = None
    item_id: int
    quantity: int = 1
    is_half_portion: bool = False
    item: Optional[MenuItem] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple:
        """Row identity inside one table's cart: (item, portion)."""
        return (self.item_id, self.is_half_portion)


class Cart(ApiRecord):
    items: List[CartItem] = []
    total: float = 0.0
