from datetime import datetime
from typing import List, Optional
from pydantic import field_validator
from models.record import ApiRecord, as_number


class CategoryRef(ApiRecord):
    id: int
    name: Optional[str] = None


class MenuItem(ApiRecord):
    id: Optional[int] = None
    name: str = ""
    description: Optional[str] = None
    full_price: Optional[float] = None
    half_price: Optional[float] = None
    # Legacy single-price records
    price: Optional[float] = None
    preparation_time: Optional[int] = None
    is_available: bool = True
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    subcategory: Optional[str] = None
    tags: List[str] = []
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("full_price", "half_price", "price", mode="before")
    @classmethod
    def _numeric_or_none(cls, value):
        return as_number(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _unique_tags(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        seen = []
        for tag in value:
            tag = str(tag).strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @property
    def category_name(self) -> str:
        return self.category.name if self.category and self.category.name else ""
