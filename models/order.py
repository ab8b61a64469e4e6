from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from pydantic import field_validator, model_validator
from models.record import ApiRecord, as_number


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"


class TableRef(ApiRecord):
    id: Optional[int] = None
    table_number: Optional[int] = None
    name: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _number_alias(cls, data):
        # Some events carry {number: 7} instead of {tableNumber: 7}
        if isinstance(data, dict) and data.get("tableNumber") is None and data.get("number") is not None:
            data = {**data, "tableNumber": data["number"]}
        return data


class ItemRef(ApiRecord):
    id: Optional[int] = None
    name: str = ""
    description: Optional[str] = None
    image_url: Optional[str] = None


class OrderItem(ApiRecord):
    id: Optional[int] = None
    order_id: Optional[int] = None
    item_id: Optional[int] = None
    quantity: int = 1
    price: float = 0.0
    is_half_portion: bool = False
    item: Optional[ItemRef] = None

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value):
        number = as_number(value)
        return 0.0 if number is None else number

    @property
    def name(self) -> str:
        if self.item and self.item.name:
            return self.item.name
        return f"Item #{self.item_id}"

    @property
    def line_total(self) -> float:
        return self.price * self.quantity


class PaymentDetails(ApiRecord):
    payment_method: PaymentMethod
    amount_paid: float
    tax_percentage: Optional[float] = None
    tax_amount: Optional[float] = None
    subtotal: Optional[float] = None
    notes: Optional[str] = None


class Order(ApiRecord):
    id: int
    table_id: Optional[int] = None
    table: Optional[TableRef] = None
    status: OrderStatus
    # Server-computed; never recomputed client-side once persisted
    total: float = 0.0
    order_items: List[OrderItem] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    payment_details: Optional[PaymentDetails] = None

    @field_validator("status", mode="before")
    @classmethod
    def _upper_status(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("total", mode="before")
    @classmethod
    def _total(cls, value):
        number = as_number(value)
        return 0.0 if number is None else number

    @field_validator("created_at", "updated_at")
    @classmethod
    def _aware(cls, value):
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def table_label(self) -> str:
        if self.table and self.table.table_number is not None:
            return f"Table {self.table.table_number}"
        return f"Table ID: {self.table_id}"

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.order_items)

    def with_status(self, status: OrderStatus) -> "Order":
        return self.model_copy(update={"status": status})
