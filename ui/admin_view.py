"""
Admin Panel - Main Orchestrator
Imports and coordinates all admin tabs
"""
import flet as ft

from ui.admin_categories import build_categories_tab
from ui.admin_dashboard import build_dashboard_tab
from ui.admin_items import build_items_tab
from ui.admin_menus import build_menus_tab
from ui.admin_tables import build_tables_tab
from ui.admin_users import build_users_tab
from ui.toast import header_bar
from ui.ui_constants import ACCENT, BACKGROUND_GRADIENT, BREAKPOINT


def admin_view(page: ft.Page, app):
    """
    Main admin panel view - orchestrates all tabs
    """
    page.title = "Admin Panel"
    is_desktop = (page.window.width or 0) > BREAKPOINT

    # ===================== BUILD TABS =====================

    tabs = ft.Tabs(
        selected_index=0,
        animation_duration=300,
        tabs=[
            build_dashboard_tab(page, app, is_desktop),
            build_items_tab(page, app, is_desktop),
            build_categories_tab(page, app, is_desktop),
            build_menus_tab(page, app, is_desktop),
            build_tables_tab(page, app, is_desktop),
            build_users_tab(page, app, is_desktop),
        ],
        expand=True,
        label_color=ACCENT,
        unselected_label_color="black",
        indicator_color=ACCENT,
        indicator_border_radius=0,
        divider_color="grey300",
        scrollable=not is_desktop,
    )

    # ===================== BUILD UI =====================

    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                header_bar(page, "Admin Panel", on_logout=lambda e: app.session.logout()),
                ft.Container(
                    content=tabs,
                    expand=True,
                    gradient=ft.LinearGradient(
                        begin=ft.alignment.top_center,
                        end=ft.alignment.bottom_center,
                        colors=BACKGROUND_GRADIENT,
                    ),
                ),
            ], expand=True, spacing=0),
            expand=True,
            padding=0,
        )
    )
    page.update()
