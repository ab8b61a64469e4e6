"""
Chef screen: orders being prepared and item availability
"""
import logging

import flet as ft

from core.category_service import list_categories
from core.errors import RestaurantClientError, describe_error
from core.item_service import filter_items, list_items, set_item_availability
from core.order_lifecycle import OrderView, OrderWorkingSet, advance_order
from core.order_service import list_orders_by_status
from core.pricing import format_price
from models.order import OrderStatus
from ui.toast import header_bar, report_failure, retry_panel, show_toast, status_chip
from ui.ui_constants import BACKGROUND_GRADIENT, BUTTON_COLOR

logger = logging.getLogger(__name__)


def order_lines(order):
    rows = []
    for line in order.order_items:
        portion = " (Half)" if line.is_half_portion else ""
        rows.append(ft.Text(f"{line.quantity} x {line.name}{portion}", size=13, color="black"))
    return rows


def chef_view(page: ft.Page, app):
    page.title = "Kitchen"
    role = app.session.role

    working_set = OrderWorkingSet(
        OrderView.CHEF,
        lambda: list_orders_by_status(app.api, OrderStatus.PREPARING),
        channel=app.channel,
    )
    orders_column = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)

    # ===================== ORDERS =====================

    def mark_ready(order):
        try:
            advance_order(app.api, app.channel, working_set, order.id, OrderStatus.READY, role)
            show_toast(page, f"Order #{order.id} is ready")
        except RestaurantClientError as ex:
            report_failure(page, ex, "update order status")

    def build_order_card(order):
        created = order.created_at.astimezone().strftime("%H:%M") if order.created_at else ""
        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(f"Order #{order.id}", weight="bold", size=14, color="black"),
                        status_chip(order.status.value),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(f"{order.table_label} - {created}", size=12, color="grey700"),
                    *order_lines(order),
                    ft.Row([
                        ft.ElevatedButton(
                            "Mark Ready",
                            icon=ft.Icons.CHECK,
                            on_click=lambda e, o=order: mark_ready(o),
                            style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black"),
                        ),
                    ], alignment=ft.MainAxisAlignment.END),
                ], spacing=4),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    def render_orders(ws=None):
        orders_column.controls.clear()
        if working_set.error is not None:
            orders_column.controls.append(
                retry_panel(describe_error(working_set.error, "load orders"), working_set.retry)
            )
        elif working_set.loading:
            orders_column.controls.append(ft.ProgressRing())
        elif not len(working_set):
            orders_column.controls.append(ft.Text("No orders in preparation", color="grey700"))
        else:
            for order in working_set.orders():
                orders_column.controls.append(build_order_card(order))
        page.update()

    # ===================== ITEMS =====================

    items_state = {"items": [], "categories": []}
    items_column = ft.Column(spacing=8, scroll=ft.ScrollMode.AUTO, expand=True)
    search_field = ft.TextField(label="Search items", prefix_icon=ft.Icons.SEARCH, width=250,
                                on_change=lambda e: render_items())
    category_filter = ft.Dropdown(label="Category", width=180, value="all",
                                  options=[ft.dropdown.Option("all", "All")],
                                  on_change=lambda e: render_items())
    availability_filter = ft.Dropdown(
        label="Availability", width=160, value="all",
        options=[
            ft.dropdown.Option("all", "All"),
            ft.dropdown.Option("available", "Available"),
            ft.dropdown.Option("unavailable", "Unavailable"),
        ],
        on_change=lambda e: render_items(),
    )

    def toggle_availability(item, value):
        try:
            updated = set_item_availability(app.api, item.id, value)
        except RestaurantClientError as ex:
            report_failure(page, ex, "update item availability")
            render_items()
            return
        items_state["items"] = [updated if i.id == updated.id else i for i in items_state["items"]]
        show_toast(page, f"{updated.name} is now {'available' if updated.is_available else 'unavailable'}")
        render_items()

    def render_items():
        items_column.controls.clear()
        visible = filter_items(
            items_state["items"],
            search=search_field.value,
            category_id=category_filter.value,
            availability=availability_filter.value,
        )
        for item in visible:
            items_column.controls.append(
                ft.Container(
                    content=ft.Row([
                        ft.Column([
                            ft.Text(item.name, weight="bold", size=14, color="black"),
                            ft.Text(f"{item.category_name} - {format_price(item.full_price)}", size=12, color="grey700"),
                        ], spacing=2, expand=True),
                        ft.Switch(
                            value=item.is_available,
                            on_change=lambda e, i=item: toggle_availability(i, e.control.value),
                        ),
                    ]),
                    bgcolor="white",
                    border_radius=10,
                    padding=10,
                )
            )
        if not visible:
            items_column.controls.append(ft.Text("No items match the filters", color="grey700"))
        page.update()

    def load_items():
        try:
            items_state["items"] = list_items(app.api)
            items_state["categories"] = list_categories(app.api)
        except RestaurantClientError as ex:
            items_column.controls[:] = [retry_panel(describe_error(ex, "load items"), load_items)]
            page.update()
            return
        category_filter.options = [ft.dropdown.Option("all", "All")] + [
            ft.dropdown.Option(str(c.id), c.name) for c in items_state["categories"]
        ]
        render_items()

    # ===================== BUILD UI =====================

    def logout_user(e):
        app.session.logout()

    tabs = ft.Tabs(
        selected_index=0,
        animation_duration=300,
        tabs=[
            ft.Tab(text="Preparing", icon=ft.Icons.SOUP_KITCHEN,
                   content=ft.Container(content=orders_column, padding=10, expand=True)),
            ft.Tab(text="Menu Items", icon=ft.Icons.RESTAURANT_MENU,
                   content=ft.Container(
                       content=ft.Column([
                           ft.Row([search_field, category_filter, availability_filter], wrap=True),
                           items_column,
                       ], expand=True),
                       padding=10,
                       expand=True,
                   )),
        ],
        expand=True,
        label_color="#E9190A",
        unselected_label_color="black",
        indicator_color="#E9190A",
    )

    page.clean()
    page.add(
        ft.Column([
            header_bar(page, "Kitchen", on_logout=logout_user),
            ft.Container(
                content=tabs,
                expand=True,
                gradient=ft.LinearGradient(
                    begin=ft.alignment.top_center,
                    end=ft.alignment.bottom_center,
                    colors=BACKGROUND_GRADIENT,
                ),
            ),
        ], expand=True, spacing=0)
    )

    subscription = working_set.on_change(render_orders)
    working_set.mount()
    load_items()

    def dispose():
        subscription.dispose()
        working_set.unmount()

    return dispose
