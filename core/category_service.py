# core/category_service.py
import logging

from core.errors import CategoryInUseError, ValidationError
from core.item_service import list_items_by_category
from models.category import Category, ImportResult

logger = logging.getLogger(__name__)


def _payload(name=None, description=None) -> dict:
    payload = {}
    if name is not None:
        payload["name"] = name.strip()
    if description is not None:
        payload["description"] = description
    return payload


def list_categories(api):
    return [Category.model_validate(c) for c in api.get("/categories") or []]


def get_category(api, category_id: int) -> Category:
    return Category.model_validate(api.get(f"/categories/{category_id}"))


def create_category(api, name: str, description: str = None, image_path: str = None) -> Category:
    if not (name or "").strip():
        raise ValidationError("Category name is required", field="name")
    data = api.send_with_image("POST", "/categories", _payload(name, description), image_path)
    return Category.model_validate(data)


def update_category(api, category_id: int, name: str = None, description: str = None, image_path: str = None) -> Category:
    if name is not None and not name.strip():
        raise ValidationError("Category name is required", field="name")
    data = api.send_with_image("PUT", f"/categories/{category_id}", _payload(name, description), image_path)
    return Category.model_validate(data)


def delete_category(api, category: Category):
    """Delete a category; refused while any item still references it."""
    items = list_items_by_category(api, category.id)
    if items:
        raise CategoryInUseError(category.name, len(items))
    api.delete(f"/categories/{category.id}")
    logger.info("Deleted category #%s %s", category.id, category.name)


def import_categories_from_excel(api, file_path: str) -> ImportResult:
    if not file_path.lower().endswith((".xlsx", ".xls")):
        raise ValidationError("Please choose an Excel file (.xlsx or .xls)", field="file")
    return ImportResult.from_response(api.upload("/categories/import-excel", file_path) or {})


def download_categories_template(api, dest: str) -> str:
    return api.download("/categories/excel-template/download", dest)
