"""
Dashboard Tab for Admin Panel: totals and shortcuts to the staff screens
"""
import flet as ft

from core.dashboard_service import get_dashboard_counts
from core.errors import RestaurantClientError, describe_error
from ui.toast import retry_panel
from ui.ui_constants import BUTTON_COLOR

STAFF_SCREENS = [
    ("Point of Sale", ft.Icons.POINT_OF_SALE, "/pos"),
    ("Kitchen", ft.Icons.RESTAURANT, "/chef"),
    ("Waiter", ft.Icons.ROOM_SERVICE, "/waiter"),
]


def stat_card(title, value, icon, color, subtitle=None):
    return ft.Card(
        content=ft.Container(
            content=ft.Row([
                ft.Icon(icon, size=36, color=color),
                ft.Column([
                    ft.Text(title, size=13, color="grey700"),
                    ft.Text(str(value), size=26, weight="bold", color="black"),
                    ft.Text(subtitle or "", size=11, color="grey600"),
                ], spacing=2),
            ], spacing=15),
            padding=15,
            bgcolor="white",
            border_radius=12,
            width=230,
        )
    )


def build_dashboard_tab(page: ft.Page, app, is_desktop: bool):
    """Build the admin overview tab"""

    stats_row = ft.Row(wrap=True, spacing=10, run_spacing=10)

    def load_counts():
        try:
            counts = get_dashboard_counts(app.api)
        except RestaurantClientError as ex:
            stats_row.controls[:] = [retry_panel(describe_error(ex, "load dashboard"), load_counts)]
            page.update()
            return
        stats_row.controls[:] = [
            stat_card("Users", counts["users"], ft.Icons.PEOPLE, "blue",
                      f"{counts['unassigned_users']} awaiting a role"),
            stat_card("Menu Items", counts["items"], ft.Icons.FASTFOOD, "orange",
                      f"{counts['available_items']} available"),
            stat_card("Tables", counts["tables"], ft.Icons.TABLE_RESTAURANT, "teal"),
            stat_card("Categories", counts["categories"], ft.Icons.CATEGORY, "purple"),
        ]
        page.update()

    shortcuts = ft.Row([
        ft.ElevatedButton(
            label,
            icon=icon,
            on_click=lambda e, r=route: page.go(r),
            style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black"),
        )
        for label, icon, route in STAFF_SCREENS
    ], wrap=True, spacing=10)

    load_counts()

    return ft.Tab(
        text="Dashboard",
        icon=ft.Icons.DASHBOARD,
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text("Overview", size=20, weight="bold", color="black"),
                    ft.IconButton(icon=ft.Icons.REFRESH, tooltip="Refresh", on_click=lambda e: load_counts()),
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=10,
            ),
            ft.Container(content=stats_row, padding=10),
            ft.Container(
                content=ft.Column([
                    ft.Text("Staff Screens", size=16, weight="bold", color="black"),
                    shortcuts,
                ], spacing=10),
                padding=10,
            ),
        ], expand=True, spacing=0, scroll=ft.ScrollMode.AUTO),
    )
