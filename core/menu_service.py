# core/menu_service.py
import logging

from core.errors import ValidationError
from models.menu import Menu

logger = logging.getLogger(__name__)


def _payload(name, description, is_accepting_orders) -> dict:
    payload = {}
    if name is not None:
        if not name.strip():
            raise ValidationError("Menu name is required", field="name")
        payload["name"] = name.strip()
    if description is not None:
        payload["description"] = description
    if is_accepting_orders is not None:
        payload["isAcceptingOrders"] = bool(is_accepting_orders)
    return payload


def list_menus(api):
    return [Menu.model_validate(m) for m in api.get("/menus") or []]


def get_menu(api, menu_id: int) -> Menu:
    return Menu.model_validate(api.get(f"/menus/{menu_id}"))


def create_menu(api, name: str, description: str = None, is_accepting_orders: bool = True) -> Menu:
    if name is None:
        raise ValidationError("Menu name is required", field="name")
    return Menu.model_validate(api.post("/menus", json=_payload(name, description, is_accepting_orders)))


def update_menu(api, menu_id: int, name: str = None, description: str = None, is_accepting_orders: bool = None) -> Menu:
    return Menu.model_validate(api.put(f"/menus/{menu_id}", json=_payload(name, description, is_accepting_orders)))


def delete_menu(api, menu_id: int):
    api.delete(f"/menus/{menu_id}")
    logger.info("Deleted menu #%s", menu_id)


def add_menu_item(api, menu_id: int, item_id: int) -> Menu:
    return Menu.model_validate(api.post(f"/menus/{menu_id}/items", json={"itemId": item_id}))


def remove_menu_item(api, menu_id: int, item_id: int) -> Menu:
    return Menu.model_validate(api.delete(f"/menus/{menu_id}/items/{item_id}"))


def toggle_order_acceptance(api, menu_id: int, is_accepting_orders: bool) -> Menu:
    data = api.post(f"/menus/{menu_id}/toggle-orders", json={"isAcceptingOrders": bool(is_accepting_orders)})
    logger.info("Menu #%s accepting orders: %s", menu_id, is_accepting_orders)
    return Menu.model_validate(data)
