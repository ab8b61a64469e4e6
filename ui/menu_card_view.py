"""
Customer QR-code menu for one table
"""
import logging

import flet as ft

from core.config import RESTAURANT_NAME
from core.customer_menu import CustomerMenu
from core.errors import RestaurantClientError, ValidationError, describe_error
from core.pricing import format_price, get_item_price, has_half_portion
from ui.toast import report_failure, retry_panel, show_toast, status_chip
from ui.ui_constants import BUTTON_COLOR, DARK_GRAY, WHITE

logger = logging.getLogger(__name__)

CUSTOMER_STATUS_TEXT = {
    "PENDING": "Order received",
    "PREPARING": "Being prepared",
    "READY": "Ready to serve",
    "DELIVERED": "Served",
}


def menu_card_view(page: ft.Page, app, table_number):
    page.title = f"{RESTAURANT_NAME} - Table {table_number}"
    menu = CustomerMenu(app.api, table_number, channel=app.channel)
    state = {"search": "", "category": "all", "subscription": None}

    body = ft.Column(spacing=10, scroll=ft.ScrollMode.AUTO, expand=True)
    cart_badge = ft.Text("0", size=12, color="white")
    orders_strip = ft.Column(spacing=6)

    # ===================== CART =====================

    def add_item(item, half=False):
        try:
            menu.cart.add(item, 1, half)
        except ValidationError as ex:
            show_toast(page, ex.message, "error")
            return
        except RestaurantClientError as ex:
            report_failure(page, ex, "add item to cart")
            return
        show_toast(page, f"{item.name} added to cart")
        render()

    def change_quantity(row, delta):
        try:
            menu.cart.set_quantity(row, row.quantity + delta)
        except RestaurantClientError as ex:
            report_failure(page, ex, "update cart")
        show_cart_sheet()
        render()

    def place_order(e):
        try:
            order = menu.place_order()
        except ValidationError as ex:
            show_toast(page, ex.message, "error")
            return
        except RestaurantClientError as ex:
            report_failure(page, ex, "place order")
            return
        page.close(cart_sheet)
        show_toast(page, f"Order #{order.id} placed!")
        render()

    def clear_cart(e):
        try:
            menu.cart.clear()
        except RestaurantClientError as ex:
            report_failure(page, ex, "clear cart")
        page.close(cart_sheet)
        render()

    cart_sheet = ft.BottomSheet(content=ft.Container(), show_drag_handle=True)

    def show_cart_sheet(e=None):
        rows = []
        for row in menu.cart.rows:
            unit = get_item_price(row.item, row.is_half_portion)
            name = row.item.name if row.item else f"Item #{row.item_id}"
            rows.append(ft.Row([
                ft.Column([
                    ft.Text(name + (" (Half)" if row.is_half_portion else ""), weight="bold", color="black"),
                    ft.Text(format_price(unit), size=12, color=DARK_GRAY),
                ], spacing=2, expand=True),
                ft.IconButton(icon=ft.Icons.REMOVE, on_click=lambda e, r=row: change_quantity(r, -1)),
                ft.Text(str(row.quantity)),
                ft.IconButton(icon=ft.Icons.ADD, on_click=lambda e, r=row: change_quantity(r, 1)),
            ]))
        if not rows:
            rows.append(ft.Text("Your cart is empty", color=DARK_GRAY))
        cart_sheet.content = ft.Container(
            content=ft.Column([
                ft.Text("Your Cart", size=18, weight="bold", color="black"),
                *rows,
                ft.Divider(),
                ft.Row([ft.Text("Total", weight="bold", expand=True),
                        ft.Text(format_price(menu.cart.total), weight="bold", color="green")]),
                ft.Row([
                    ft.TextButton("Clear", on_click=clear_cart, disabled=menu.cart.is_empty),
                    ft.ElevatedButton("Place Order", on_click=place_order, disabled=menu.cart.is_empty,
                                      style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black")),
                ], alignment=ft.MainAxisAlignment.END),
            ], tight=True, scroll=ft.ScrollMode.AUTO),
            padding=20,
        )
        if not cart_sheet.open:
            page.open(cart_sheet)
        page.update()

    # ===================== ITEMS =====================

    def build_item_card(item):
        price_text = format_price(item.full_price if item.full_price is not None else get_item_price(item))
        if has_half_portion(item):
            price_text = f"Full {price_text} | Half {format_price(item.half_price)}"
        controls = [
            ft.Text(item.name, weight="bold", size=16, color="black"),
            ft.Text(item.description or "", size=12, color=DARK_GRAY),
            ft.Text(price_text, color="green", weight="bold"),
        ]
        if menu.show_order_controls:
            buttons = [ft.ElevatedButton("Add", icon=ft.Icons.ADD, on_click=lambda e, i=item: add_item(i),
                                         style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black"))]
            if has_half_portion(item):
                buttons.append(ft.OutlinedButton("Add Half", on_click=lambda e, i=item: add_item(i, True)))
            controls.append(ft.Row(buttons, spacing=5))
        return ft.Card(
            content=ft.Container(
                content=ft.Row([
                    ft.Image(src=item.image_url, width=80, height=80, fit=ft.ImageFit.COVER, border_radius=8)
                    if item.image_url else
                    ft.Container(width=80, height=80, bgcolor="grey300", border_radius=8,
                                 alignment=ft.alignment.center,
                                 content=ft.Icon(ft.Icons.RESTAURANT, size=30, color="grey600")),
                    ft.Column(controls, spacing=4, expand=True),
                ], spacing=10),
                padding=10,
                bgcolor="white",
                border_radius=12,
            )
        )

    def render_orders():
        orders_strip.controls.clear()
        for order in menu.active_orders():
            orders_strip.controls.append(ft.Container(
                content=ft.Row([
                    ft.Text(f"Order #{order.id}", weight="bold", color="black", expand=True),
                    ft.Text(CUSTOMER_STATUS_TEXT.get(order.status.value, order.status.value), size=12),
                    status_chip(order.status.value),
                ]),
                bgcolor="white",
                border_radius=10,
                padding=8,
            ))

    def render(ws=None):
        body.controls.clear()
        render_orders()
        if orders_strip.controls:
            body.controls.append(ft.Text("Your orders", size=16, weight="bold", color="black"))
            body.controls.append(orders_strip)
        if not menu.accepting_orders:
            body.controls.append(ft.Container(
                content=ft.Text("This menu is not taking orders right now.", color="black"),
                bgcolor="#FFF1D6", padding=10, border_radius=8,
            ))
        chips = [ft.Chip(label=ft.Text("All"), selected=state["category"] == "all",
                         on_select=lambda e: select_category("all"))]
        chips += [
            ft.Chip(label=ft.Text(c.name), selected=state["category"] == str(c.id),
                    on_select=lambda e, cid=str(c.id): select_category(cid))
            for c in menu.categories
        ]
        body.controls.append(ft.Row(chips, scroll=ft.ScrollMode.AUTO))
        items = menu.visible_items(state["search"], state["category"])
        body.controls.extend(build_item_card(item) for item in items)
        if not items:
            body.controls.append(ft.Text("No items found", color=DARK_GRAY))
        if menu.show_cart:
            cart_badge.value = str(menu.cart.count)
        page.update()

    def select_category(category_id):
        state["category"] = category_id
        render()

    def on_search(e):
        state["search"] = e.control.value
        render()

    # ===================== LOAD =====================

    def load():
        try:
            menu.load()
        except RestaurantClientError as ex:
            body.controls[:] = [retry_panel(describe_error(ex, "load the menu"), load)]
            page.update()
            return
        if menu.show_cart:
            header_actions.controls = [
                ft.Stack([
                    ft.IconButton(icon=ft.Icons.SHOPPING_CART, icon_color="black", on_click=show_cart_sheet),
                    ft.Container(content=cart_badge, bgcolor="red", border_radius=10,
                                 padding=ft.padding.symmetric(horizontal=5), right=0, top=0),
                ]),
            ]
        state["subscription"] = menu.orders.on_change(render)
        render()

    header_actions = ft.Row([])
    page.clean()
    page.add(
        ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Column([
                        ft.Text(RESTAURANT_NAME, size=20, weight="bold", color="black"),
                        ft.Text(f"Table {table_number}", size=12, color=DARK_GRAY),
                    ], spacing=0),
                    header_actions,
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=15,
                bgcolor=WHITE,
            ),
            ft.Container(
                content=ft.TextField(label="Search menu", prefix_icon=ft.Icons.SEARCH, on_change=on_search),
                padding=ft.padding.symmetric(horizontal=15),
            ),
            ft.Container(content=body, expand=True, padding=15),
        ], expand=True, spacing=0)
    )
    load()

    def dispose():
        if state["subscription"] is not None:
            state["subscription"].dispose()
        menu.close()

    return dispose


def scan_prompt_view(page: ft.Page, app):
    """Landing page for /menu: customers reach a table menu through its QR code."""
    page.title = RESTAURANT_NAME
    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                ft.Icon(ft.Icons.QR_CODE_SCANNER, size=72, color=BUTTON_COLOR),
                ft.Text(RESTAURANT_NAME, size=22, weight="bold", color="black", text_align=ft.TextAlign.CENTER),
                ft.Text("Scan the QR code on your table to see the menu and order.",
                        size=14, color=DARK_GRAY, text_align=ft.TextAlign.CENTER),
                ft.TextButton("Staff login", on_click=lambda e: page.go("/login")),
            ], horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=12),
            alignment=ft.alignment.center,
            padding=30,
            expand=True,
        )
    )
    page.update()
