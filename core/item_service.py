# core/item_service.py
import logging

from core.errors import ValidationError
from models.category import ImportResult
from models.menu_item import MenuItem

logger = logging.getLogger(__name__)

ITEM_FIELDS = (
    "name", "description", "full_price", "half_price", "preparation_time",
    "is_available", "category_id", "subcategory", "tags",
)
WIRE_NAMES = {
    "full_price": "fullPrice",
    "half_price": "halfPrice",
    "preparation_time": "preparationTime",
    "is_available": "isAvailable",
    "category_id": "categoryId",
}


def validate_item(fields: dict, partial: bool = False):
    """Form checks for create/update; raises ValidationError before any request."""
    if not partial or "name" in fields:
        if not (fields.get("name") or "").strip():
            raise ValidationError("Item name is required", field="name")
    if not partial or "full_price" in fields:
        price = fields.get("full_price")
        if price is None or float(price) <= 0:
            raise ValidationError("Full price must be greater than 0", field="full_price")
    half = fields.get("half_price")
    if half is not None:
        if float(half) <= 0:
            raise ValidationError("Half price must be greater than 0", field="half_price")
        full = fields.get("full_price")
        if full is not None and float(half) >= float(full):
            raise ValidationError("Half price must be lower than the full price", field="half_price")
    if not partial or "category_id" in fields:
        if fields.get("category_id") is None:
            raise ValidationError("Please select a category", field="category_id")
    prep = fields.get("preparation_time")
    if prep is not None and int(prep) < 0:
        raise ValidationError("Preparation time cannot be negative", field="preparation_time")


# Optional fields an edit may clear; sent as null rather than left out
CLEARABLE_FIELDS = ("half_price",)


def _payload(fields: dict, clearable=()) -> dict:
    payload = {}
    for key in ITEM_FIELDS:
        if key not in fields:
            continue
        if fields[key] is not None or key in clearable:
            payload[WIRE_NAMES.get(key, key)] = fields[key]
    return payload


def list_items(api):
    return [MenuItem.model_validate(i) for i in api.get("/items") or []]


def get_item(api, item_id: int) -> MenuItem:
    return MenuItem.model_validate(api.get(f"/items/{item_id}"))


def list_items_by_category(api, category_id: int):
    return [MenuItem.model_validate(i) for i in api.get(f"/items/category/{category_id}") or []]


def create_item(api, image_path: str = None, **fields) -> MenuItem:
    validate_item(fields)
    data = api.send_with_image("POST", "/items", _payload(fields), image_path)
    item = MenuItem.model_validate(data)
    logger.info("Created item #%s %s", item.id, item.name)
    return item


def update_item(api, item_id: int, image_path: str = None, **fields) -> MenuItem:
    validate_item(fields, partial=True)
    payload = _payload(fields, clearable=CLEARABLE_FIELDS)
    if image_path and any(value is None for value in payload.values()):
        # Multipart has no null; an empty field clears the value
        payload = {key: "" if value is None else value for key, value in payload.items()}
    data = api.send_with_image("PUT", f"/items/{item_id}", payload, image_path)
    return MenuItem.model_validate(data)


def set_item_availability(api, item_id: int, is_available: bool) -> MenuItem:
    data = api.patch(f"/items/{item_id}/availability", json={"isAvailable": bool(is_available)})
    return MenuItem.model_validate(data)


def delete_item(api, item_id: int):
    api.delete(f"/items/{item_id}")
    logger.info("Deleted item #%s", item_id)


def import_items_from_excel(api, file_path: str) -> ImportResult:
    if not file_path.lower().endswith((".xlsx", ".xls")):
        raise ValidationError("Please choose an Excel file (.xlsx or .xls)", field="file")
    return ImportResult.from_response(api.upload("/items/import-excel", file_path) or {})


def download_items_template(api, dest: str) -> str:
    return api.download("/items/excel-template/download", dest)


def filter_items(items, search: str = "", category_id=None, availability: str = "all"):
    """Search/category/availability filters used by the chef and admin item lists."""
    needle = (search or "").strip().lower()
    result = []
    for item in items:
        if needle and needle not in item.name.lower() and needle not in (item.description or "").lower():
            continue
        if category_id not in (None, "all") and str(item.category_id) != str(category_id):
            continue
        if availability == "available" and not item.is_available:
            continue
        if availability == "unavailable" and item.is_available:
            continue
        result.append(item)
    return result
