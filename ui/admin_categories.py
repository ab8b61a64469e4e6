"""
Categories Management Tab for Admin Panel
"""
import flet as ft

from core.category_service import (
    create_category,
    delete_category,
    download_categories_template,
    import_categories_from_excel,
    list_categories,
    update_category,
)
from core.errors import RestaurantClientError, ValidationError, describe_error
from ui.admin_utils import confirm_dialog, image_box, image_picker_field, import_summary, pick_file, save_file
from ui.toast import close_dialog, report_failure, retry_panel, show_toast
from ui.ui_constants import DESKTOP_COLUMNS, GRID_RUN_SPACING, GRID_SPACING


def build_categories_tab(page: ft.Page, app, is_desktop: bool):
    """
    Build the Categories management tab

    Args:
        page: Flet page object
        app: AppContext with the API client
        is_desktop: True if desktop layout, False if mobile

    Returns:
        ft.Tab: categories tab with create/edit/delete and Excel import
    """

    # ===================== CARD BUILDER =====================

    def build_category_card(category):
        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    image_box(category.image_url, 64),
                    ft.Column([
                        ft.Row([
                            ft.Text(category.name, weight="bold", size=16, color="black", expand=True),
                            ft.PopupMenuButton(
                                icon=ft.Icons.MORE_VERT,
                                icon_color="black",
                                items=[
                                    ft.PopupMenuItem(text="Edit", icon=ft.Icons.EDIT,
                                                     on_click=lambda e, c=category: show_category_dialog(c)),
                                    ft.PopupMenuItem(text="Delete", icon=ft.Icons.DELETE,
                                                     on_click=lambda e, c=category: ask_delete(c)),
                                ],
                            ),
                        ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                        ft.Text(category.description or "", size=12, color="grey700", max_lines=2),
                    ], spacing=4, expand=True),
                ], spacing=10),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    categories_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=500,
        child_aspect_ratio=4.0,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True,
    )
    categories_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    container = categories_grid if is_desktop else categories_list

    # ===================== LOAD DATA =====================

    def load_categories():
        try:
            categories = list_categories(app.api)
        except RestaurantClientError as ex:
            container.controls[:] = [retry_panel(describe_error(ex, "load categories"), load_categories)]
            page.update()
            return
        container.controls[:] = [build_category_card(c) for c in categories]
        page.update()

    # ===================== CREATE / EDIT =====================

    def show_category_dialog(category=None):
        name_field = ft.TextField(label="Category Name", value=category.name if category else "", width=300)
        description_field = ft.TextField(label="Description", value=(category.description or "") if category else "",
                                         width=300, multiline=True)
        image_controls, image_state = image_picker_field(page, category.image_url if category else None)
        message = ft.Text("", color="red")

        def save(e):
            try:
                if category is None:
                    saved = create_category(app.api, name_field.value, description_field.value, image_state["path"])
                else:
                    saved = update_category(app.api, category.id, name_field.value, description_field.value,
                                            image_state["path"])
            except ValidationError as ex:
                message.value = ex.message
                page.update()
                return
            except RestaurantClientError as ex:
                report_failure(page, ex, "save category")
                return
            close_dialog(page, dialog)
            load_categories()
            show_toast(page, f"{saved.name} saved!")

        dialog = ft.AlertDialog(
            title=ft.Text("Edit Category" if category else "Add New Category", size=16, weight="bold"),
            content=ft.Container(
                content=ft.Column([name_field, description_field, ft.Divider(), *image_controls, message],
                                  tight=True, scroll=ft.ScrollMode.AUTO),
                width=320,
            ),
            actions=[
                ft.TextButton("Cancel", on_click=lambda e: close_dialog(page, dialog)),
                ft.ElevatedButton("Save", on_click=save),
            ],
        )
        page.open(dialog)

    # ===================== DELETE =====================

    def ask_delete(category):
        def do_delete():
            try:
                delete_category(app.api, category)
            except ValidationError as ex:
                show_toast(page, ex.message, "error")
                return
            except RestaurantClientError as ex:
                report_failure(page, ex, "delete category")
                return
            load_categories()
            show_toast(page, f"{category.name} deleted")

        confirm_dialog(page, "Delete Category", f"Delete {category.name}? This cannot be undone.", do_delete)

    # ===================== EXCEL =====================

    def import_excel(path):
        try:
            result = import_categories_from_excel(app.api, path)
        except RestaurantClientError as ex:
            report_failure(page, ex, "import categories")
            return
        load_categories()
        page.open(ft.AlertDialog(title=ft.Text("Import Results"), content=ft.Text(import_summary(result))))

    def download_template(path):
        try:
            download_categories_template(app.api, path)
        except RestaurantClientError as ex:
            report_failure(page, ex, "download template")
            return
        show_toast(page, f"Template saved to {path}")

    load_categories()

    return ft.Tab(
        text="Categories",
        icon=ft.Icons.CATEGORY,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text("Manage Categories", size=20, weight="bold", color="black"),
                    ft.Row([
                        ft.IconButton(icon=ft.Icons.DOWNLOAD, tooltip="Excel template",
                                      on_click=lambda e: save_file(page, download_template, "categories-template.xlsx")),
                        ft.IconButton(icon=ft.Icons.UPLOAD_FILE, tooltip="Import from Excel",
                                      on_click=lambda e: pick_file(page, import_excel, ["xlsx", "xls"])),
                        ft.IconButton(icon=ft.Icons.ADD, tooltip="Add category",
                                      on_click=lambda e: show_category_dialog()),
                    ]),
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=10,
            ),
            ft.Container(content=container, expand=True, padding=10),
        ], expand=True, spacing=0),
    )
