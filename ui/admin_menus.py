"""
Menus Management Tab for Admin Panel
"""
import flet as ft

from core.errors import RestaurantClientError, ValidationError, describe_error
from core.item_service import list_items
from core.menu_service import (
    add_menu_item,
    create_menu,
    delete_menu,
    get_menu,
    list_menus,
    remove_menu_item,
    toggle_order_acceptance,
    update_menu,
)
from core.pricing import format_price
from ui.admin_utils import confirm_dialog
from ui.toast import close_dialog, report_failure, retry_panel, show_toast
from ui.ui_constants import DESKTOP_COLUMNS, GRID_RUN_SPACING, GRID_SPACING


def build_menus_tab(page: ft.Page, app, is_desktop: bool):
    """
    Build the Menus management tab

    A menu groups items and is attached to tables; its accepting-orders
    switch decides whether customers at those tables can order.
    """

    # ===================== CARD BUILDER =====================

    def build_menu_card(menu):
        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(menu.name, weight="bold", size=16, color="black", expand=True),
                        ft.PopupMenuButton(
                            icon=ft.Icons.MORE_VERT,
                            icon_color="black",
                            items=[
                                ft.PopupMenuItem(text="Edit", icon=ft.Icons.EDIT,
                                                 on_click=lambda e, m=menu: show_menu_dialog(m)),
                                ft.PopupMenuItem(text="Items", icon=ft.Icons.LIST,
                                                 on_click=lambda e, m=menu: show_items_dialog(m)),
                                ft.PopupMenuItem(text="Delete", icon=ft.Icons.DELETE,
                                                 on_click=lambda e, m=menu: ask_delete(m)),
                            ],
                        ),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(menu.description or "", size=12, color="grey700", max_lines=2),
                    ft.Text(f"{menu.total_items} items - {menu.total_tables} tables", size=12, color="grey700"),
                    ft.Switch(
                        label="Accepting orders",
                        value=menu.is_accepting_orders,
                        on_change=lambda e, m=menu: toggle(m, e.control.value),
                    ),
                ], spacing=4),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    menus_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=450,
        child_aspect_ratio=2.2,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True,
    )
    menus_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    container = menus_grid if is_desktop else menus_list

    # ===================== LOAD DATA =====================

    def load_menus():
        try:
            menus = list_menus(app.api)
        except RestaurantClientError as ex:
            container.controls[:] = [retry_panel(describe_error(ex, "load menus"), load_menus)]
            page.update()
            return
        container.controls[:] = [build_menu_card(m) for m in menus]
        page.update()

    def toggle(menu, value):
        try:
            toggle_order_acceptance(app.api, menu.id, value)
        except RestaurantClientError as ex:
            report_failure(page, ex, "update menu")
        else:
            show_toast(page, f"{menu.name} is {'now' if value else 'no longer'} accepting orders")
        load_menus()

    # ===================== CREATE / EDIT =====================

    def show_menu_dialog(menu=None):
        name_field = ft.TextField(label="Menu Name", value=menu.name if menu else "", width=300)
        description_field = ft.TextField(label="Description", value=(menu.description or "") if menu else "",
                                         width=300, multiline=True)
        accepting_switch = ft.Switch(label="Accepting orders", value=menu.is_accepting_orders if menu else True)
        message = ft.Text("", color="red")

        def save(e):
            try:
                if menu is None:
                    saved = create_menu(app.api, name_field.value, description_field.value, accepting_switch.value)
                else:
                    saved = update_menu(app.api, menu.id, name_field.value, description_field.value,
                                        accepting_switch.value)
            except ValidationError as ex:
                message.value = ex.message
                page.update()
                return
            except RestaurantClientError as ex:
                report_failure(page, ex, "save menu")
                return
            close_dialog(page, dialog)
            load_menus()
            show_toast(page, f"{saved.name} saved!")

        dialog = ft.AlertDialog(
            title=ft.Text("Edit Menu" if menu else "Add New Menu", size=16, weight="bold"),
            content=ft.Column([name_field, description_field, accepting_switch, message], tight=True),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Save", on_click=save),
            ],
        )
        page.open(dialog)

    # ===================== MENU ITEMS =====================

    def show_items_dialog(menu):
        items_column = ft.Column(spacing=4, scroll=ft.ScrollMode.AUTO, height=400, width=360)

        def render(current):
            in_menu = {i.id for i in current.items}
            items_column.controls.clear()
            for item in all_items:
                items_column.controls.append(ft.Checkbox(
                    label=f"{item.name} ({format_price(item.full_price)})",
                    value=item.id in in_menu,
                    on_change=lambda e, i=item: set_member(i, e.control.value),
                ))
            page.update()

        def set_member(item, member):
            try:
                current = add_menu_item(app.api, menu.id, item.id) if member else remove_menu_item(app.api, menu.id, item.id)
            except RestaurantClientError as ex:
                report_failure(page, ex, "update menu items")
                current = get_menu(app.api, menu.id)
            render(current)

        try:
            all_items = list_items(app.api)
            current = get_menu(app.api, menu.id)
        except RestaurantClientError as ex:
            report_failure(page, ex, "load menu items")
            return

        def done(e):
            close_dialog(page, dialog)
            load_menus()

        dialog = ft.AlertDialog(
            title=ft.Text(f"Items in {menu.name}", size=16, weight="bold"),
            content=items_column,
            actions=[ft.ElevatedButton("Done", on_click=done)],
        )
        page.open(dialog)
        render(current)

    def ask_delete(menu):
        def do_delete():
            try:
                delete_menu(app.api, menu.id)
            except RestaurantClientError as ex:
                report_failure(page, ex, "delete menu")
                return
            load_menus()
            show_toast(page, f"{menu.name} deleted")

        confirm_dialog(page, "Delete Menu", f"Delete {menu.name}?", do_delete)

    load_menus()

    return ft.Tab(
        text="Menus",
        icon=ft.Icons.MENU_BOOK,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text("Manage Menus", size=20, weight="bold", color="black"),
                    ft.IconButton(icon=ft.Icons.ADD, tooltip="Add menu", on_click=lambda e: show_menu_dialog()),
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=10,
            ),
            ft.Container(content=container, expand=True, padding=10),
        ], expand=True, spacing=0),
    )
