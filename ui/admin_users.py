"""
Users Management Tab for Admin Panel
"""
import flet as ft

from core.errors import RestaurantClientError, describe_error
from core.user_service import list_users, update_user_role
from models.user import ROLE_DISPLAY_NAMES, Role, role_name
from ui.toast import report_failure, retry_panel, show_toast
from ui.ui_constants import DESKTOP_COLUMNS, GRID_RUN_SPACING, GRID_SPACING

ROLE_COLORS = {
    Role.ADMIN: "blue",
    Role.CHEF: "orange",
    Role.WAITER: "teal",
    Role.POS_ADMIN: "purple",
    Role.CUSTOMER: "green",
}


def build_users_tab(page: ft.Page, app, is_desktop: bool):
    """
    Build the Users management tab

    Staff sign up without a role; an admin assigns one here.
    """

    # ===================== CARD BUILDER =====================

    def build_user_card(user):
        role_dropdown = ft.Dropdown(
            label="Role",
            width=160,
            value=str(int(user.role)) if user.role is not None else None,
            options=[ft.dropdown.Option(str(int(r)), name) for r, name in ROLE_DISPLAY_NAMES.items()],
            on_change=lambda e, u=user: assign_role(u, e.control.value),
        )
        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    ft.Column([
                        ft.Text(user.name or user.email, weight="bold", size=16, color="black"),
                        ft.Text(user.email or "", size=12, color="grey700"),
                        ft.Container(
                            content=ft.Text(role_name(user.role).upper() if user.role is not None else "NO ROLE",
                                            color="white", size=10, weight="bold"),
                            bgcolor=ROLE_COLORS.get(user.role, "grey"),
                            padding=5,
                            border_radius=5,
                        ),
                    ], spacing=7, expand=True),
                    role_dropdown,
                ], spacing=10, vertical_alignment=ft.CrossAxisAlignment.CENTER),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    users_grid = ft.GridView(
        runs_count=DESKTOP_COLUMNS,
        max_extent=450,
        child_aspect_ratio=2.5,
        spacing=GRID_SPACING,
        run_spacing=GRID_RUN_SPACING,
        expand=True,
    )
    users_list = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    container = users_grid if is_desktop else users_list

    # ===================== LOAD DATA =====================

    def load_users():
        try:
            users = list_users(app.api)
        except RestaurantClientError as ex:
            container.controls[:] = [retry_panel(describe_error(ex, "load users"), load_users)]
            page.update()
            return
        container.controls[:] = [build_user_card(u) for u in users]
        page.update()

    def assign_role(user, value):
        role = Role.parse(value)
        if role is None:
            return
        try:
            update_user_role(app.api, user.id, role)
        except RestaurantClientError as ex:
            report_failure(page, ex, "update user role")
        else:
            show_toast(page, f"{user.name or user.email} is now {role_name(role)}")
        load_users()

    load_users()

    return ft.Tab(
        text="Users",
        icon=ft.Icons.PEOPLE,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text("Manage Users", size=20, weight="bold", color="black"),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Refresh", on_click=lambda e: load_users()),
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=10,
            ),
            ft.Container(content=container, expand=True, padding=10),
        ], expand=True, spacing=0),
    )
