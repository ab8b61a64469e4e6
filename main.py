import logging

import flet as ft

from core.app_context import build_context
from core.config import RESTAURANT_NAME
from core.route_guard import LOGIN_ROUTE, LOGOUT_ROUTE, ONBOARDING_ROUTE, PUBLIC_MENU_ROUTE, resolve_route
from ui.admin_view import admin_view
from ui.chef_view import chef_view
from ui.login_view import login_view
from ui.menu_card_view import menu_card_view, scan_prompt_view
from ui.new_user_view import new_user_view
from ui.pos_view import pos_view
from ui.signup_view import signup_view
from ui.toast import attach_notifier, show_toast
from ui.waiter_view import waiter_view

logger = logging.getLogger(__name__)

VIEWS = {
    LOGIN_ROUTE: login_view,
    "/signup": signup_view,
    ONBOARDING_ROUTE: new_user_view,
    PUBLIC_MENU_ROUTE: scan_prompt_view,
    "/chef": chef_view,
    "/waiter": waiter_view,
    "/pos": pos_view,
}


def view_for(path: str):
    """Match a route path to its view function; None when nothing renders it."""
    if path in VIEWS:
        return VIEWS[path]
    if path == "/admin" or path.startswith("/admin/"):
        return admin_view
    if path.startswith("/table/"):
        number = path[len("/table/"):]
        if number.isdigit():
            return lambda page, app: menu_card_view(page, app, int(number))
    return None


def main(page: ft.Page):
    page.padding = 0
    page.spacing = 0
    page.title = RESTAURANT_NAME
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.vertical_alignment = ft.MainAxisAlignment.START

    app = build_context()
    attach_notifier(page, app.notifier, on_reconnect=app.channel.reconnect)
    current = {"dispose": None}

    def on_logout():
        if page.route != LOGIN_ROUTE and not page.route.startswith(LOGIN_ROUTE + "?"):
            page.go(LOGIN_ROUTE)

    app.session.on_logout(on_logout)

    def dispose_current():
        dispose, current["dispose"] = current["dispose"], None
        if dispose is not None:
            try:
                dispose()
            except Exception:
                logger.exception("Failed to dispose view")

    def route_change(e):
        decision = resolve_route(page.route, app.session)
        if decision.redirect:
            logger.debug("Redirecting %s -> %s", page.route, decision.route)
            page.go(decision.route)
            return

        dispose_current()
        path = page.route.split("?", 1)[0].rstrip("/") or "/"

        if path == LOGOUT_ROUTE:
            # the logout listener navigates to /login
            app.session.logout()
            show_toast(page, "You have been logged out.")
            return

        view = view_for(path)
        if view is None:
            page.go(LOGIN_ROUTE)
            return

        if app.session.is_valid():
            app.session.start_monitor()
        page.clean()
        current["dispose"] = view(page, app)
        page.update()

    def on_close(e=None):
        dispose_current()
        app.close()

    page.on_route_change = route_change
    page.on_close = on_close
    page.on_disconnect = on_close

    app.channel.connect()
    page.go(page.route or "/")


if __name__ == "__main__":
    ft.app(target=main)
