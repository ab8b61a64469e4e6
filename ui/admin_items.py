"""
Menu Items Management Tab for Admin Panel
"""
import flet as ft

from core.category_service import list_categories
from core.errors import RestaurantClientError, ValidationError, describe_error
from core.item_service import (
    create_item,
    delete_item,
    download_items_template,
    filter_items,
    import_items_from_excel,
    list_items,
    set_item_availability,
    update_item,
)
from core.pricing import format_price, has_half_portion
from ui.admin_utils import confirm_dialog, image_box, image_picker_field, import_summary, pick_file, save_file
from ui.toast import close_dialog, report_failure, retry_panel, show_toast
from ui.ui_constants import DESKTOP_COLUMNS, GRID_RUN_SPACING, GRID_SPACING


def _number(value, cast=float):
    value = (value or "").strip()
    if not value:
        return None
    try:
        return cast(value)
    except ValueError:
        raise ValidationError(f"'{value}' is not a valid number")


def build_items_tab(page: ft.Page, app, is_desktop: bool):
    state = {"items": [], "categories": []}

    items_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=500,
        child_aspect_ratio=3.2,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True,
    )
    items_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    container = items_grid if is_desktop else items_list

    search_field = ft.TextField(label="Search", prefix_icon=ft.Icons.SEARCH, width=220, on_change=lambda e: render())
    category_filter = ft.Dropdown(label="Category", width=180, value="all",
                                  options=[ft.dropdown.Option("all", "All")], on_change=lambda e: render())

    # ===================== CARD BUILDER =====================

    def build_item_card(item):
        price = format_price(item.full_price)
        if has_half_portion(item):
            price += f" / Half {format_price(item.half_price)}"
        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    image_box(item.image_url),
                    ft.Column([
                        ft.Row([
                            ft.Text(item.name, weight="bold", size=16, color="black", expand=True),
                            ft.PopupMenuButton(
                                icon=ft.Icons.MORE_VERT,
                                icon_color="black",
                                items=[
                                    ft.PopupMenuItem(text="Edit", icon=ft.Icons.EDIT,
                                                     on_click=lambda e, i=item: show_item_dialog(i)),
                                    ft.PopupMenuItem(text="Delete", icon=ft.Icons.DELETE,
                                                     on_click=lambda e, i=item: ask_delete(i)),
                                ],
                            ),
                        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                        ft.Text(f"Category: {item.category_name}", size=12, color="grey700"),
                        ft.Row([
                            ft.Text(price, color="green", weight="bold", expand=True),
                            ft.Switch(value=item.is_available, tooltip="Available",
                                      on_change=lambda e, i=item: toggle(i, e.control.value)),
                        ]),
                    ], spacing=4, expand=True),
                ], spacing=10),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    # ===================== LOAD DATA =====================

    def render():
        visible = filter_items(state["items"], search=search_field.value, category_id=category_filter.value)
        container.controls[:] = [build_item_card(i) for i in visible]
        page.update()

    def load_items():
        try:
            state["items"] = list_items(app.api)
            state["categories"] = list_categories(app.api)
        except RestaurantClientError as ex:
            container.controls[:] = [retry_panel(describe_error(ex, "load items"), load_items)]
            page.update()
            return
        category_filter.options = [ft.dropdown.Option("all", "All")] + [
            ft.dropdown.Option(str(c.id), c.name) for c in state["categories"]
        ]
        render()

    def toggle(item, value):
        try:
            set_item_availability(app.api, item.id, value)
        except RestaurantClientError as ex:
            report_failure(page, ex, "update item availability")
        load_items()

    # ===================== CREATE / EDIT =====================

    def show_item_dialog(item=None):
        name_field = ft.TextField(label="Item Name", value=item.name if item else "", width=300)
        description_field = ft.TextField(label="Description", value=(item.description or "") if item else "",
                                         width=300, multiline=True)
        full_price_field = ft.TextField(label="Full Price", width=300, keyboard_type=ft.KeyboardType.NUMBER,
                                        value=f"{item.full_price:g}" if item and item.full_price is not None else "")
        half_price_field = ft.TextField(label="Half Price (optional)", width=300,
                                        keyboard_type=ft.KeyboardType.NUMBER,
                                        value=f"{item.half_price:g}" if item and item.half_price is not None else "")
        prep_field = ft.TextField(label="Preparation time (minutes)", width=300,
                                  keyboard_type=ft.KeyboardType.NUMBER,
                                  value=str(item.preparation_time) if item and item.preparation_time is not None else "")
        category_dropdown = ft.Dropdown(
            label="Category",
            width=300,
            value=str(item.category_id) if item and item.category_id is not None else None,
            options=[ft.dropdown.Option(str(c.id), c.name) for c in state["categories"]],
        )
        subcategory_field = ft.TextField(label="Subcategory", value=(item.subcategory or "") if item else "", width=300)
        tags_field = ft.TextField(label="Tags (comma separated)", value=", ".join(item.tags) if item else "", width=300)
        available_switch = ft.Switch(label="Available", value=item.is_available if item else True)
        image_controls, image_state = image_picker_field(page, item.image_url if item else None)
        message = ft.Text("", color="red")

        def save(e):
            try:
                fields = dict(
                    name=name_field.value,
                    description=description_field.value,
                    full_price=_number(full_price_field.value),
                    half_price=_number(half_price_field.value),
                    preparation_time=_number(prep_field.value, int),
                    category_id=int(category_dropdown.value) if category_dropdown.value else None,
                    subcategory=(subcategory_field.value or "").strip() or None,
                    tags=[t.strip() for t in (tags_field.value or "").split(",") if t.strip()],
                    is_available=available_switch.value,
                )
                if item is None:
                    saved = create_item(app.api, image_state["path"], **fields)
                else:
                    saved = update_item(app.api, item.id, image_state["path"], **fields)
            except ValidationError as ex:
                message.value = ex.message
                page.update()
                return
            except RestaurantClientError as ex:
                report_failure(page, ex, "save item")
                return
            close_dialog(page, dialog)
            load_items()
            show_toast(page, f"{saved.name} saved!")

        dialog = ft.AlertDialog(
            title=ft.Text("Edit Item" if item else "Add New Item", size=16, weight="bold"),
            content=ft.Container(
                content=ft.Column([
                    name_field, description_field, full_price_field, half_price_field, prep_field,
                    category_dropdown, subcategory_field, tags_field, available_switch,
                    ft.Divider(), *image_controls, message,
                ], tight=True, scroll=ft.ScrollMode.AUTO),
                width=320,
                height=520,
            ),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Save", on_click=save),
            ],
        )
        page.open(dialog)

    def ask_delete(item):
        def do_delete():
            try:
                delete_item(app.api, item.id)
            except RestaurantClientError as ex:
                report_failure(page, ex, "delete item")
                return
            load_items()
            show_toast(page, f"{item.name} deleted")

        confirm_dialog(page, "Delete Item", f"Delete {item.name}?", do_delete)

    # ===================== EXCEL =====================

    def import_excel(path):
        try:
            result = import_items_from_excel(app.api, path)
        except RestaurantClientError as ex:
            report_failure(page, ex, "import items")
            return
        load_items()
        page.open(ft.AlertDialog(title=ft.Text("Import Results"), content=ft.Text(import_summary(result))))

    def download_template(path):
        try:
            download_items_template(app.api, path)
        except RestaurantClientError as ex:
            report_failure(page, ex, "download template")
            return
        show_toast(page, f"Template saved to {path}")

    load_items()

    return ft.Tab(
        text="Items",
        icon=ft.Icons.FASTFOOD,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text("Manage Items", size=20, weight="bold", color="black"),
                    ft.Row([
                        ft.IconButton(icon=ft.Icons.DOWNLOAD, tooltip="Excel template",
                                      on_click=lambda e: save_file(page, download_template, "items-template.xlsx")),
                        ft.IconButton(icon=ft.Icons.UPLOAD_FILE, tooltip="Import from Excel",
                                      on_click=lambda e: pick_file(page, import_excel, ["xlsx", "xls"])),
                        ft.IconButton(icon=ft.Icons.ADD, tooltip="Add item", on_click=lambda e: show_item_dialog()),
                    ]),
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=10,
            ),
            ft.Container(content=ft.Row([search_field, category_filter], wrap=True), padding=ft.padding.symmetric(horizontal=10)),
            ft.Container(content=container, expand=True, padding=10),
        ], expand=True, spacing=0),
    )
