# core/dashboard_service.py
from core.category_service import list_categories
from core.item_service import list_items
from core.table_service import list_tables
from core.user_service import list_users


def get_dashboard_counts(api):
    """
    Totals shown on the admin overview.
    Returns: dict with users, items, available_items, tables and categories
    """
    users = list_users(api)
    items = list_items(api)
    tables = list_tables(api)
    categories = list_categories(api)
    return {
        "users": len(users),
        "unassigned_users": sum(1 for u in users if u.role is None),
        "items": len(items),
        "available_items": sum(1 for i in items if i.is_available),
        "tables": len(tables),
        "categories": len(categories),
    }
