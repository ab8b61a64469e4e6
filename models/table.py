from datetime import datetime
from typing import Optional
from models.record import ApiRecord


class MenuRef(ApiRecord):
    id: int
    name: Optional[str] = None


class Table(ApiRecord):
    id: int
    table_number: int
    qr_code_url: Optional[str] = None
    location: Optional[str] = None
    menu_id: Optional[int] = None
    menu_name: Optional[str] = None
    menu: Optional[MenuRef] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def label(self) -> str:
        return f"Table {self.table_number}"
