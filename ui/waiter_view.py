"""
Waiter screen: order buckets from pending to completed
"""
import flet as ft

from core.errors import RestaurantClientError, describe_error
from core.order_lifecycle import OrderView, OrderWorkingSet, advance_order
from core.order_service import get_waiter_dashboard
from core.pricing import format_price
from core.receipt_service import print_kot
from models.order import OrderStatus
from ui.chef_view import order_lines
from ui.toast import header_bar, report_failure, retry_panel, show_toast, status_chip
from ui.ui_constants import BACKGROUND_GRADIENT, BUCKET_LABELS, BUTTON_COLOR

# Action offered on each bucket: (button label, next status)
BUCKET_ACTIONS = {
    "pending": ("Confirm", OrderStatus.PREPARING),
    "ready": ("Mark Delivered", OrderStatus.DELIVERED),
}


def waiter_view(page: ft.Page, app):
    page.title = "Waiter"
    role = app.session.role

    def fetch():
        active, completed = get_waiter_dashboard(app.api)
        return active + completed

    working_set = OrderWorkingSet(OrderView.WAITER, fetch, channel=app.channel)
    buckets = working_set.buckets
    columns = {bucket: ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True) for bucket in buckets}

    def advance(order, status):
        try:
            advance_order(app.api, app.channel, working_set, order.id, status, role)
            show_toast(page, f"Order #{order.id} -> {status.value}")
        except RestaurantClientError as ex:
            report_failure(page, ex, "update order status")

    def print_ticket(order):
        if not print_kot(order):
            show_toast(page, "Could not print the kitchen ticket", "error")

    def build_order_card(order, bucket):
        buttons = []
        if bucket in BUCKET_ACTIONS:
            label, status = BUCKET_ACTIONS[bucket]
            buttons.append(ft.ElevatedButton(
                label,
                on_click=lambda e, o=order, s=status: advance(o, s),
                style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black"),
            ))
        if bucket in ("pending", "preparing"):
            buttons.append(ft.IconButton(
                icon=ft.Icons.PRINT, tooltip="Print KOT", on_click=lambda e, o=order: print_ticket(o),
            ))
        return ft.Card(
            content=ft.Container(
                content=ft.Column([
                    ft.Row([
                        ft.Text(f"Order #{order.id}", weight="bold", size=14, color="black"),
                        status_chip(order.status.value),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                    ft.Text(order.table_label, size=12, color="grey700"),
                    *order_lines(order),
                    ft.Row([
                        ft.Text(f"Total: {format_price(order.total)}", size=14, weight="bold", color="green"),
                        ft.Row(buttons, spacing=5),
                    ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                ], spacing=3),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    tabs = ft.Tabs(
        selected_index=0,
        animation_duration=300,
        tabs=[
            ft.Tab(text=BUCKET_LABELS[bucket], content=ft.Container(content=columns[bucket], padding=10, expand=True))
            for bucket in buckets
        ],
        expand=True,
        label_color="#E9190A",
        unselected_label_color="black",
        indicator_color="#E9190A",
    )

    def on_tab_change(e):
        working_set.mark_seen(buckets[tabs.selected_index])

    tabs.on_change = on_tab_change

    def render(ws=None):
        counts = working_set.counts()
        for index, bucket in enumerate(buckets):
            unread = working_set.unread.get(bucket, 0)
            badge = f" *{unread}" if unread and index != tabs.selected_index else ""
            tabs.tabs[index].text = f"{BUCKET_LABELS[bucket]} ({counts[bucket]}){badge}"
            column = columns[bucket]
            column.controls.clear()
            if working_set.error is not None:
                column.controls.append(retry_panel(describe_error(working_set.error, "load orders"), working_set.retry))
            elif working_set.loading:
                column.controls.append(ft.ProgressRing())
            else:
                orders = working_set.orders(bucket)
                if bucket == "completed":
                    orders = working_set.recent(bucket=bucket)
                for order in orders:
                    column.controls.append(build_order_card(order, bucket))
                if not orders:
                    column.controls.append(ft.Text(f"No {BUCKET_LABELS[bucket].lower()} orders", color="grey700"))
        page.update()

    page.clean()
    page.add(
        ft.Column([
            header_bar(page, "Waiter", on_logout=lambda e: app.session.logout()),
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

    subscription = working_set.on_change(render)
    working_set.mount()
    working_set.mark_seen(buckets[0])

    def dispose():
        subscription.dispose()
        working_set.unmount()

    return dispose
