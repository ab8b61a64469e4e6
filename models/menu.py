from datetime import datetime
from typing import List, Optional
from models.record import ApiRecord
from models.menu_item import MenuItem
from models.table import Table


class Menu(ApiRecord):
    id: int
    name: str
    description: Optional[str] = None
    is_accepting_orders: bool = False
    total_items: int = 0
    total_tables: int = 0
    items: List[MenuItem] = []
    tables: List[Table] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
