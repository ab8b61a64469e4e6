import pytest

from conftest import order_payload
from core.category_service import create_category, delete_category, get_category, import_categories_from_excel
from core.dashboard_service import get_dashboard_counts
from core.errors import CategoryInUseError, ResponseFormatError, ValidationError
from core.item_service import create_item, filter_items, get_item, set_item_availability, update_item, validate_item
from core.menu_service import add_menu_item, create_menu, toggle_order_acceptance
from core.order_service import get_order, list_pos_history
from core.table_service import (
    create_table,
    download_table_qr,
    find_table_by_number,
    get_table,
    list_tables_by_menu,
    qr_file_name,
    table_qr_url,
)
from core.user_service import get_me, list_users, login, signup, update_user_role
from models.category import Category
from models.menu_item import MenuItem
from models.table import Table
from models.user import Role


# ===================== USERS =====================

def test_login_returns_token_and_role(api, backend):
    backend.on("POST", "/users/login", {"token": "t0k", "user": {"id": 4, "email": "chef@skybar.in", "role": "chef"}})
    result = login(api, " chef@skybar.in ", "secret")
    assert result.token == "t0k"
    assert result.role == Role.CHEF
    assert backend.last_json() == {"email": "chef@skybar.in", "password": "secret"}


def test_login_rejects_bad_email_before_request(api, backend):
    with pytest.raises(ValidationError) as info:
        login(api, "not-an-email", "secret")
    assert info.value.field == "email"
    assert backend.requests == []


def test_signup_needs_long_enough_password(api, backend):
    with pytest.raises(ValidationError):
        signup(api, "Ravi", "ravi@skybar.in", "123")
    backend.on("POST", "/users/signup", {"token": "new"})
    assert signup(api, "Ravi", "ravi@skybar.in", "123456") == "new"


def test_list_users_accepts_wrapped_response(api, backend):
    backend.on("GET", "/users", {"users": [{"id": 1, "name": "A", "role": 3}, {"id": 2, "name": "B"}]})
    users = list_users(api)
    assert [u.role for u in users] == [Role.POS_ADMIN, None]


def test_update_user_role_sends_wire_name(api, backend):
    backend.on("PUT", "/users/role", {"user": {"id": 2, "role": "waiter"}})
    user = update_user_role(api, 2, Role.WAITER)
    assert backend.last_json() == {"userId": 2, "role": "waiter"}
    assert user.role == Role.WAITER


# ===================== ITEMS =====================

ITEM_FIELDS = dict(name="Masala Dosa", full_price=120.0, half_price=70.0, category_id=2, tags=["veg", "veg", "south"])


def test_create_item_posts_camel_case(api, backend):
    backend.on("POST", "/items", {"id": 11, "name": "Masala Dosa", "fullPrice": 120, "halfPrice": 70, "tags": ["veg", "south"]})
    item = create_item(api, **ITEM_FIELDS)
    body = backend.last_json()
    assert body["fullPrice"] == 120.0
    assert body["halfPrice"] == 70.0
    assert body["categoryId"] == 2
    assert item.tags == ["veg", "south"]


@pytest.mark.parametrize("override, field", [
    ({"name": " "}, "name"),
    ({"full_price": 0}, "full_price"),
    ({"half_price": 150.0}, "half_price"),
    ({"category_id": None}, "category_id"),
    ({"preparation_time": -5}, "preparation_time"),
])
def test_validate_item_rejects(override, field):
    with pytest.raises(ValidationError) as info:
        validate_item({**ITEM_FIELDS, **override})
    assert info.value.field == field


def test_partial_update_only_checks_given_fields(api, backend):
    backend.on("PUT", "/items/11", {"id": 11, "name": "Dosa", "isAvailable": False})
    update_item(api, 11, is_available=False)
    assert backend.last_json() == {"isAvailable": False}


def test_clearing_half_price_sends_null(api, backend):
    backend.on("PUT", "/items/11", {"id": 11, "name": "Dosa", "fullPrice": 90})
    item = update_item(api, 11, name="Dosa", full_price=90, half_price=None)
    assert backend.last_json() == {"name": "Dosa", "fullPrice": 90, "halfPrice": None}
    assert item.half_price is None


def test_clearing_half_price_with_new_image_sends_empty_field(api, backend, tmp_path):
    image = tmp_path / "dosa.jpg"
    image.write_bytes(b"fake jpeg")
    backend.on("PUT", "/items/11", {"id": 11, "name": "Dosa", "fullPrice": 90})
    update_item(api, 11, str(image), name="Dosa", full_price=90, half_price=None)
    content = backend.requests[-1].content
    assert b'name="halfPrice"\r\n\r\n\r\n' in content
    assert b'name="fullPrice"\r\n\r\n90\r\n' in content


def test_create_item_leaves_out_empty_half_price(api, backend):
    backend.on("POST", "/items", {"id": 12, "name": "Idli", "fullPrice": 60})
    create_item(api, name="Idli", full_price=60, half_price=None, category_id=1)
    assert "halfPrice" not in backend.last_json()


def test_set_item_availability(api, backend):
    backend.on("PATCH", "/items/11/availability", {"id": 11, "name": "Dosa", "isAvailable": True})
    assert set_item_availability(api, 11, True).is_available
    assert backend.last_json() == {"isAvailable": True}


def test_filter_items():
    items = [
        MenuItem(id=1, name="Paneer Tikka", category_id=1, is_available=True),
        MenuItem(id=2, name="Chicken Tikka", category_id=2, is_available=False),
        MenuItem(id=3, name="Lime Soda", description="fresh tikka-free", category_id=3, is_available=True),
    ]
    assert [i.id for i in filter_items(items, search="tikka")] == [1, 2, 3]
    assert [i.id for i in filter_items(items, category_id="2")] == [2]
    assert [i.id for i in filter_items(items, availability="available")] == [1, 3]
    assert [i.id for i in filter_items(items, search="tikka", availability="unavailable")] == [2]


# ===================== CATEGORIES =====================

def test_delete_category_blocked_while_items_reference_it(api, backend):
    backend.on("GET", "/items/category/5", [{"id": 1, "name": "Soup"}, {"id": 2, "name": "Salad"}])
    with pytest.raises(CategoryInUseError) as info:
        delete_category(api, Category(id=5, name="Starters"))
    assert info.value.item_count == 2
    assert backend.calls("DELETE", "/categories/5") == []


def test_delete_empty_category(api, backend):
    backend.on("GET", "/items/category/5", [])
    backend.on("DELETE", "/categories/5", {"message": "deleted"})
    delete_category(api, Category(id=5, name="Starters"))
    assert len(backend.calls("DELETE", "/categories/5")) == 1


def test_create_category_requires_name(api):
    with pytest.raises(ValidationError):
        create_category(api, "  ")


def test_import_reports_results(api, backend, tmp_path):
    sheet = tmp_path / "categories.xlsx"
    sheet.write_bytes(b"PK")
    backend.on("POST", "/categories/import-excel", {
        "message": "Import completed",
        "results": {"success": 3, "failed": 1, "duplicates": 2, "errors": ["Row 4: name missing"]},
    })
    result = import_categories_from_excel(api, str(sheet))
    assert (result.success, result.failed, result.duplicates) == (3, 1, 2)
    assert result.errors == ["Row 4: name missing"]


def test_import_rejects_non_excel(api, tmp_path):
    with pytest.raises(ValidationError):
        import_categories_from_excel(api, str(tmp_path / "categories.csv"))


# ===================== MENUS & TABLES =====================

def test_create_menu_and_toggle_orders(api, backend):
    backend.on("POST", "/menus", {"id": 1, "name": "Dinner", "isAcceptingOrders": True})
    backend.on("POST", "/menus/1/toggle-orders", {"id": 1, "name": "Dinner", "isAcceptingOrders": False})
    assert create_menu(api, "Dinner").is_accepting_orders
    assert not toggle_order_acceptance(api, 1, False).is_accepting_orders
    assert backend.last_json() == {"isAcceptingOrders": False}


def test_add_menu_item(api, backend):
    backend.on("POST", "/menus/1/items", {"id": 1, "name": "Dinner", "items": [{"id": 7, "name": "Dal"}]})
    menu = add_menu_item(api, 1, 7)
    assert backend.last_json() == {"itemId": 7}
    assert [i.id for i in menu.items] == [7]


def test_create_table_requires_menu(api, backend):
    with pytest.raises(ValidationError) as info:
        create_table(api, 7, None)
    assert info.value.field == "menu_id"
    assert backend.requests == []


def test_create_table_rejects_non_numeric_number(api):
    with pytest.raises(ValidationError):
        create_table(api, "seven", 1)


def test_find_table_by_number(api, backend):
    backend.on("GET", "/tables", [{"id": 1, "tableNumber": 6}, {"id": 2, "tableNumber": 7, "menuId": 3}])
    assert find_table_by_number(api, "7").id == 2
    assert find_table_by_number(api, 8) is None


def test_table_qr_url():
    table = Table(id=2, table_number=7)
    assert table_qr_url(table, "https://menu.skybar.in") == "https://menu.skybar.in/table/7"
    assert table_qr_url(table, "https://skybar.in/app/") == "https://skybar.in/app/table/7"


# ===================== ORDERS =====================

def test_pos_history_combines_delivered_and_completed(api, backend):
    backend.on("GET", "/orders/pos/delivered", [order_payload(1, "DELIVERED")])
    backend.on("GET", "/orders/status/COMPLETED", [order_payload(2, "COMPLETED")])
    assert [o.id for o in list_pos_history(api)] == [1, 2]


def test_malformed_order_raises_typed_error(api, backend):
    backend.on("GET", "/orders/5", {"id": 5, "status": "LOST"})
    with pytest.raises(ResponseFormatError):
        get_order(api, 5)


# ===================== DASHBOARD =====================

def test_dashboard_counts(api, backend):
    backend.on("GET", "/users", [{"id": 1, "name": "A", "role": 1}, {"id": 2, "name": "B"}])
    backend.on("GET", "/items", [{"id": 1, "name": "Momos", "fullPrice": 120},
                                 {"id": 2, "name": "Noodles", "fullPrice": 150, "isAvailable": False}])
    backend.on("GET", "/tables", [{"id": 1, "tableNumber": 1}])
    backend.on("GET", "/categories", [])
    assert get_dashboard_counts(api) == {
        "users": 2,
        "unassigned_users": 1,
        "items": 2,
        "available_items": 1,
        "tables": 1,
        "categories": 0,
    }


# ===================== SINGLE-RECORD READS =====================

def test_single_record_reads(api, backend):
    backend.on("GET", "/users/me", {"id": 3, "name": "Asha", "role": "waiter"})
    backend.on("GET", "/items/4", {"id": 4, "name": "Momos", "fullPrice": 120})
    backend.on("GET", "/categories/2", {"id": 2, "name": "Starters"})
    backend.on("GET", "/tables/9", {"id": 9, "tableNumber": 7, "menuId": 1})
    backend.on("GET", "/tables/menu/1", [{"id": 9, "tableNumber": 7, "menuId": 1}])

    assert get_me(api).role == Role.WAITER
    assert get_item(api, 4).full_price == 120
    assert get_category(api, 2).name == "Starters"
    assert get_table(api, 9).label == "Table 7"
    assert [t.id for t in list_tables_by_menu(api, 1)] == [9]


def test_download_table_qr(api, backend, tmp_path):
    backend.on("GET", "/uploads/qr/table-7.png", b"\x89PNG qr")
    table = Table(id=2, table_number=7, qr_code_url="http://backend.test/api/uploads/qr/table-7.png")
    dest = tmp_path / qr_file_name(table)
    assert download_table_qr(api, table, str(dest)) == str(dest)
    assert dest.name == "table-7-qrcode.png"
    assert dest.read_bytes() == b"\x89PNG qr"


def test_download_table_qr_needs_a_qr_code(api, backend, tmp_path):
    with pytest.raises(ValidationError):
        download_table_qr(api, Table(id=2, table_number=7), str(tmp_path / "qr.png"))
    assert backend.requests == []
