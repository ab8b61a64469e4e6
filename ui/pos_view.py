"""
Point of sale: settle delivered orders and print receipts
"""
import logging
from datetime import datetime

import flet as ft

from core.config import DEFAULT_TAX_PERCENTAGE, RECENT_ORDER_HOURS
from core.errors import RestaurantClientError, ValidationError, describe_error
from core.order_lifecycle import OrderView, OrderWorkingSet
from core.order_service import list_delivered_orders, list_pos_history
from core.pos_service import PosCheckout, calculate_payment, change_due
from core.pricing import format_price
from core.receipt_service import render_receipt
from models.order import OrderStatus
from ui.toast import header_bar, report_failure, retry_panel, show_toast, status_chip
from ui.ui_constants import BUTTON_COLOR, DARK_GRAY

logger = logging.getLogger(__name__)

AWAITING_TAB = 0
HISTORY_TAB = 1


def receipt_panel(order, actions):
    return [
        ft.Text(f"Receipt - Order #{order.id}", size=18, weight="bold", color="black"),
        ft.Container(
            content=ft.Text(render_receipt(order), font_family="Courier New", size=12,
                            color="black", selectable=True),
            bgcolor="white",
            border=ft.border.all(1, "grey300"),
            padding=12,
        ),
        ft.Row(actions),
    ]


def pos_view(page: ft.Page, app):
    page.title = "Point of Sale"

    working_set = OrderWorkingSet(OrderView.POS, lambda: list_delivered_orders(app.api), channel=app.channel)
    history = OrderWorkingSet(OrderView.POS_HISTORY, lambda: list_pos_history(app.api), channel=app.channel)
    checkout = PosCheckout(app.api, app.channel, working_set)
    state = {"tab": AWAITING_TAB, "day": datetime.now().date()}

    orders_column = ft.Column(spacing=8, scroll=ft.ScrollMode.AUTO, expand=True)
    detail_column = ft.Column(spacing=8, scroll=ft.ScrollMode.AUTO, expand=True)

    range_filter = ft.Dropdown(
        label="Show",
        width=180,
        value="recent",
        options=[
            ft.dropdown.Option("recent", f"Last {RECENT_ORDER_HOURS} hours"),
            ft.dropdown.Option("today", "Today"),
            ft.dropdown.Option("all", "All"),
        ],
        on_change=lambda e: render(),
    )
    tax_field = ft.TextField(label="Tax %", value=f"{DEFAULT_TAX_PERCENTAGE:g}", width=100,
                             keyboard_type=ft.KeyboardType.NUMBER, on_change=lambda e: render_detail())
    method_group = ft.RadioGroup(
        value="cash",
        content=ft.Row([ft.Radio(value="cash", label="Cash"), ft.Radio(value="card", label="Card")]),
    )
    tendered_field = ft.TextField(label="Amount received", width=160,
                                  keyboard_type=ft.KeyboardType.NUMBER, on_change=lambda e: render_detail())
    notes_field = ft.TextField(label="Notes", multiline=True, width=340)

    # ===================== HISTORY DAY PICKER =====================

    day_label = ft.Text(color="black")

    def pick_day(e):
        if date_picker.value is None:
            return
        state["day"] = date_picker.value.date()
        history.selected_id = None
        render()

    date_picker = ft.DatePicker(
        first_date=datetime(2023, 1, 1),
        last_date=datetime.now(),
        on_change=pick_day,
    )
    day_row = ft.Row([
        ft.IconButton(icon=ft.Icons.CALENDAR_MONTH, tooltip="Choose day", on_click=lambda e: page.open(date_picker)),
        day_label,
    ])

    def active_set():
        return history if state["tab"] == HISTORY_TAB else working_set

    def visible_orders():
        if state["tab"] == HISTORY_TAB:
            return history.on_day(state["day"])
        if range_filter.value == "recent":
            return working_set.recent(RECENT_ORDER_HOURS)
        if range_filter.value == "today":
            return working_set.on_day(datetime.now().date())
        return working_set.orders()

    # ===================== ORDER LIST =====================

    def render_list():
        orders_column.controls.clear()
        current = active_set()
        if current.error is not None:
            orders_column.controls.append(retry_panel(describe_error(current.error, "load orders"), current.retry))
            return
        if current.loading:
            orders_column.controls.append(ft.ProgressRing())
            return
        orders = visible_orders()
        if not orders:
            empty = "No orders on this day" if state["tab"] == HISTORY_TAB else "No orders awaiting payment"
            orders_column.controls.append(ft.Text(empty, color="grey700"))
        for order in orders:
            selected = order.id == current.selected_id
            orders_column.controls.append(
                ft.Container(
                    content=ft.Row([
                        ft.Column([
                            ft.Text(f"Order #{order.id}", weight="bold", color="black"),
                            ft.Text(f"{order.table_label} - {order.item_count} items", size=12, color="grey700"),
                        ], spacing=2, expand=True),
                        ft.Column([
                            ft.Text(format_price(order.total), weight="bold", color="green"),
                            status_chip(order.status.value) if state["tab"] == HISTORY_TAB else ft.Container(),
                        ], spacing=2, horizontal_alignment=ft.CrossAxisAlignment.END),
                    ]),
                    bgcolor="#FFF1D6" if selected else "white",
                    border=ft.border.all(2 if selected else 1, BUTTON_COLOR if selected else "grey300"),
                    border_radius=10,
                    padding=10,
                    ink=True,
                    on_click=lambda e, o=order: select(o),
                )
            )

    def select(order):
        if state["tab"] == HISTORY_TAB:
            history.select(order.id)
        else:
            checkout.new_transaction()
            working_set.select(order.id)

    # ===================== DETAIL / RECEIPT =====================

    def complete_payment(e):
        order = working_set.selected
        if order is None:
            return
        try:
            checkout.complete(order.id, method_group.value, tax_field.value, notes_field.value)
        except ValidationError as ex:
            show_toast(page, ex.message, "error")
            return
        except RestaurantClientError as ex:
            report_failure(page, ex, "complete payment")
            return
        notes_field.value = ""
        tendered_field.value = ""
        show_toast(page, f"Payment completed for order #{order.id}")
        render()

    def print_receipt(e):
        if not checkout.print_receipt():
            show_toast(page, "Could not print the receipt", "error")

    def reprint(order):
        if not checkout.reprint(order):
            show_toast(page, "Could not print the receipt", "error")

    def new_transaction(e=None):
        checkout.new_transaction()
        render()

    def render_history_detail():
        order = history.selected
        if order is None:
            detail_column.controls = [ft.Text("Select an order to see its receipt", color=DARK_GRAY)]
        elif order.status == OrderStatus.COMPLETED:
            detail_column.controls = receipt_panel(order, [
                ft.ElevatedButton("Reprint", icon=ft.Icons.PRINT, on_click=lambda e, o=order: reprint(o),
                                  style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black")),
            ])
        else:
            detail_column.controls = [
                ft.Text(f"Order #{order.id} - {order.table_label}", size=18, weight="bold", color="black"),
                ft.Text("This order is still awaiting payment.", color=DARK_GRAY),
                ft.ElevatedButton("Take Payment", icon=ft.Icons.PAYMENTS, on_click=lambda e, o=order: take_payment(o),
                                  style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black")),
            ]
        page.update()

    def take_payment(order):
        tabs.selected_index = AWAITING_TAB
        state["tab"] = AWAITING_TAB
        range_filter.value = "all"
        checkout.new_transaction()
        working_set.select(order.id)
        render()

    def render_detail():
        if state["tab"] == HISTORY_TAB:
            render_history_detail()
            return
        if checkout.receipt_mode:
            detail_column.controls = receipt_panel(checkout.receipt_order, [
                ft.ElevatedButton("Print", icon=ft.Icons.PRINT, on_click=print_receipt,
                                  style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black")),
                ft.OutlinedButton("New Transaction", icon=ft.Icons.REPLAY, on_click=new_transaction),
            ])
            page.update()
            return
        order = working_set.selected
        if order is None:
            detail_column.controls = [ft.Text("Select an order to take payment", color=DARK_GRAY)]
            page.update()
            return
        try:
            summary = calculate_payment(order, tax_field.value)
            tax_error = None
        except ValidationError as ex:
            summary = calculate_payment(order, 0)
            tax_error = ex.message
        tax_field.error_text = tax_error

        change_text = ""
        if method_group.value == "cash" and tendered_field.value:
            try:
                change_text = f"Change: {format_price(change_due(summary.total, tendered_field.value))}"
            except ValidationError as ex:
                change_text = ex.message

        lines = [
            ft.Row([
                ft.Text(f"{line.quantity} x {line.name}{' (Half)' if line.is_half_portion else ''}", expand=True),
                ft.Text(format_price(line.line_total)),
            ])
            for line in order.order_items
        ]
        detail_column.controls = [
            ft.Text(f"Order #{order.id} - {order.table_label}", size=18, weight="bold", color="black"),
            *lines,
            ft.Divider(),
            ft.Row([ft.Text("Subtotal", expand=True), ft.Text(format_price(summary.subtotal))]),
            ft.Row([ft.Text(f"Tax ({summary.tax_percentage:g}%)", expand=True), tax_field,
                    ft.Text(format_price(summary.tax_amount))]),
            ft.Row([ft.Text("Total", weight="bold", expand=True),
                    ft.Text(format_price(summary.total), weight="bold", color="green")]),
            ft.Divider(),
            method_group,
            ft.Row([tendered_field, ft.Text(change_text)]) if method_group.value == "cash" else ft.Container(),
            notes_field,
            ft.ElevatedButton(
                "Complete Payment",
                icon=ft.Icons.PAYMENTS,
                on_click=complete_payment,
                disabled=tax_error is not None,
                style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black"),
                width=340,
            ),
        ]
        page.update()

    method_group.on_change = lambda e: render_detail()

    def render(ws=None):
        current = active_set()
        if current.selected_id is None and not (current is working_set and checkout.receipt_mode):
            orders = visible_orders()
            if orders:
                current.selected_id = orders[0].id
        range_filter.visible = state["tab"] == AWAITING_TAB
        day_row.visible = state["tab"] == HISTORY_TAB
        day_label.value = state["day"].strftime("%d %b %Y")
        render_list()
        render_detail()

    def change_tab(e):
        state["tab"] = tabs.selected_index
        if state["tab"] == HISTORY_TAB and not history.mounted:
            history.mount()
        render()

    tabs = ft.Tabs(
        selected_index=AWAITING_TAB,
        tabs=[ft.Tab(text="Awaiting Payment"), ft.Tab(text="All Orders")],
        on_change=change_tab,
    )

    def refresh(e):
        active_set().retry()

    page.clean()
    page.add(
        ft.Column([
            header_bar(page, "Point of Sale", on_logout=lambda e: app.session.logout(), actions=[
                ft.IconButton(icon=ft.Icons.REFRESH, icon_color="black", tooltip="Refresh", on_click=refresh),
            ]),
            ft.Row([
                ft.Container(
                    content=ft.Column([tabs, range_filter, day_row, orders_column], expand=True),
                    width=340,
                    padding=10,
                ),
                ft.VerticalDivider(width=1),
                ft.Container(content=detail_column, expand=True, padding=10),
            ], expand=True),
        ], expand=True, spacing=0)
    )

    subscriptions = [working_set.on_change(render), history.on_change(render)]
    working_set.mount()

    def dispose():
        for subscription in subscriptions:
            subscription.dispose()
        working_set.unmount()
        history.unmount()

    return dispose
