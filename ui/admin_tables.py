"""
Tables Management Tab for Admin Panel
"""
import flet as ft

from core.errors import RestaurantClientError, ValidationError, describe_error
from core.menu_service import list_menus
from core.table_service import (
    create_table,
    delete_table,
    download_table_qr,
    list_tables,
    qr_file_name,
    table_qr_url,
    update_table,
)
from ui.admin_utils import confirm_dialog, image_picker_field, save_file
from ui.toast import close_dialog, report_failure, retry_panel, show_toast
from ui.ui_constants import DESKTOP_COLUMNS, GRID_RUN_SPACING, GRID_SPACING


def build_tables_tab(page: ft.Page, app, is_desktop: bool):
    state = {"menus": []}

    # ===================== CARD BUILDER =====================

    def build_table_card(table):
        menu_name = table.menu_name or (table.menu.name if table.menu else None) or "No menu"
        url = table_qr_url(table)
        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(table.label, weight="bold", size=16, color="black", expand=True),
                        ft.PopupMenuButton(
                            icon=ft.Icons.MORE_VERT,
                            icon_color="black",
                            items=[
                                ft.PopupMenuItem(text="Edit", icon=ft.Icons.EDIT,
                                                 on_click=lambda e, t=table: show_table_dialog(t)),
                                ft.PopupMenuItem(text="QR Code", icon=ft.Icons.QR_CODE,
                                                 on_click=lambda e, t=table: show_qr_dialog(t)),
                                ft.PopupMenuItem(text="Delete", icon=ft.Icons.DELETE,
                                                 on_click=lambda e, t=table: ask_delete(t)),
                            ],
                        ),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(f"Menu: {menu_name}", size=12, color="grey700"),
                    ft.Text(table.location or "", size=12, color="grey700"),
                    ft.Row([
                        ft.Icon(ft.Icons.QR_CODE, size=16, color="black"),
                        ft.Text(url, size=12, color="blue", selectable=True, expand=True),
                        ft.IconButton(icon=ft.Icons.COPY, icon_size=16, tooltip="Copy link",
                                      on_click=lambda e, u=url: copy_link(u)),
                    ], spacing=4),
                ], spacing=4),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    tables_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=450,
        child_aspect_ratio=2.4,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True,
    )
    tables_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    container = tables_grid if is_desktop else tables_list

    def copy_link(url):
        page.set_clipboard(url)
        show_toast(page, "Menu link copied")

    # ===================== LOAD DATA =====================

    def load_tables():
        try:
            tables = list_tables(app.api)
            state["menus"] = list_menus(app.api)
        except RestaurantClientError as ex:
            container.controls[:] = [retry_panel(describe_error(ex, "load tables"), load_tables)]
            page.update()
            return
        container.controls[:] = [build_table_card(t) for t in sorted(tables, key=lambda t: t.table_number)]
        page.update()

    # ===================== CREATE / EDIT =====================

    def show_table_dialog(table=None):
        number_field = ft.TextField(label="Table Number", value=str(table.table_number) if table else "",
                                    width=300, keyboard_type=ft.KeyboardType.NUMBER)
        location_field = ft.TextField(label="Location", value=(table.location or "") if table else "", width=300)
        menu_dropdown = ft.Dropdown(
            label="Menu",
            width=300,
            value=str(table.menu_id) if table and table.menu_id is not None else None,
            options=[ft.dropdown.Option(str(m.id), m.name) for m in state["menus"]],
        )
        image_controls, image_state = image_picker_field(page, table.qr_code_url if table else None)
        message = ft.Text("", color="red")

        def save(e):
            menu_id = int(menu_dropdown.value) if menu_dropdown.value else None
            try:
                if table is None:
                    saved = create_table(app.api, number_field.value, menu_id, location_field.value,
                                         image_state["path"])
                else:
                    saved = update_table(app.api, table.id, number_field.value, location_field.value, menu_id,
                                         image_state["path"])
            except ValidationError as ex:
                message.value = ex.message
                page.update()
                return
            except RestaurantClientError as ex:
                report_failure(page, ex, "save table")
                return
            close_dialog(page, dialog)
            load_tables()
            show_toast(page, f"{saved.label} saved!")

        dialog = ft.AlertDialog(
            title=ft.Text("Edit Table" if table else "Add New Table", size=16, weight="bold"),
            content=ft.Container(
                content=ft.Column([number_field, location_field, menu_dropdown, ft.Divider(), *image_controls,
                                   message], tight=True, scroll=ft.ScrollMode.AUTO),
                width=320,
            ),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Save", on_click=save),
            ],
        )
        page.open(dialog)

    # ===================== QR CODE =====================

    def show_qr_dialog(table):
        if table.qr_code_url:
            preview = ft.Image(src=table.qr_code_url, width=200, height=200, fit=ft.ImageFit.CONTAIN)
        else:
            preview = ft.Container(
                content=ft.Text("No QR code uploaded yet", color="grey700"),
                width=200,
                height=200,
                alignment=ft.alignment.center,
            )

        def save_to(path):
            try:
                download_table_qr(app.api, table, path)
            except RestaurantClientError as ex:
                report_failure(page, ex, "download QR code")
                return
            show_toast(page, f"QR code saved to {path}")

        dialog = ft.AlertDialog(
            title=ft.Text("QR Code", size=16, weight="bold"),
            content=ft.Column([
                preview,
                ft.Text(f"Table : {table.table_number}", size=16, weight="bold", color="black"),
            ], tight=True, horizontal_alignment=ft.CrossAxisAlignment.CENTER),
            actions=[
                ft.TextButton("Close", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton(
                    "Download",
                    icon=ft.Icons.DOWNLOAD,
                    disabled=not table.qr_code_url,
                    on_click=lambda e: save_file(page, save_to, qr_file_name(table), ("png",)),
                ),
            ],
        )
        page.open(dialog)

    def ask_delete(table):
        def do_delete():
            try:
                delete_table(app.api, table.id)
            except RestaurantClientError as ex:
                report_failure(page, ex, "delete table")
                return
            load_tables()
            show_toast(page, f"{table.label} deleted")

        confirm_dialog(page, "Delete Table", f"Delete {table.label}?", do_delete)

    load_tables()

    return ft.Tab(
        text="Tables",
        icon=ft.Icons.TABLE_RESTAURANT,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text("Manage Tables", size=20, weight="bold", color="black"),
                    ft.IconButton(icon=ft.Icons.ADD, tooltip="Add table", on_click=lambda e: show_table_dialog()),
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=10,
            ),
            ft.Container(content=container, expand=True, padding=10),
        ], expand=True, spacing=0),
    )
