"""
Snack bar notifications and small shared widgets
"""
import logging

import flet as ft

from core.errors import describe_error
from core.notifications import ERROR, LOADING, SUCCESS
from core.realtime import RECONNECTION_ERROR_KEY
from ui.ui_constants import BUTTON_COLOR, STATUS_COLORS

logger = logging.getLogger(__name__)

LEVEL_COLORS = {
    SUCCESS: ft.Colors.GREEN,
    ERROR: ft.Colors.RED,
    LOADING: ft.Colors.BLUE_GREY,
}


def show_toast(page: ft.Page, message: str, level: str = SUCCESS, duration: float = 3.0, action: str = None, on_action=None):
    snack = ft.SnackBar(
        ft.Text(message, color="white"),
        bgcolor=LEVEL_COLORS.get(level, ft.Colors.BLACK87),
        duration=int((duration or 10) * 1000),
        action=action,
        action_color="white",
        on_action=on_action,
    )
    page.open(snack)
    page.update()


def attach_notifier(page: ft.Page, notifier, on_reconnect=None):
    """Render Notifier notifications as snack bars. Returns the Subscription."""

    def render(note):
        if note.key == RECONNECTION_ERROR_KEY and on_reconnect is not None:
            show_toast(page, note.message, note.level, None, action="Reconnect", on_action=lambda e: on_reconnect())
        else:
            show_toast(page, note.message, note.level, note.duration)

    return notifier.attach(render)


def report_failure(page: ft.Page, exc: Exception, action: str):
    """Toast for a failed write, naming what was attempted."""
    message = describe_error(exc, action)
    logger.warning(message)
    show_toast(page, message, ERROR)


def close_dialog(page, dialog):
    """Close a dialog and update the page"""
    page.close(dialog)
    page.update()


def retry_panel(message: str, on_retry):
    """Inline error for a failed page load, with a retry button."""
    return ft.Container(
        content=ft.Column([
            ft.Icon(ft.Icons.CLOUD_OFF, size=48, color="grey600"),
            ft.Text(message, size=14, color="black", text_align=ft.TextAlign.CENTER),
            ft.ElevatedButton(
                "Retry",
                icon=ft.Icons.REFRESH,
                on_click=lambda e: on_retry(),
                style=ft.ButtonStyle(bgcolor=BUTTON_COLOR, color="black"),
            ),
        ], horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=12),
        alignment=ft.alignment.center,
        padding=30,
        expand=True,
    )


def status_chip(status: str):
    return ft.Container(
        content=ft.Text(status, color="white", size=12),
        bgcolor=STATUS_COLORS.get(status, "grey"),
        padding=5,
        border_radius=5,
    )


def header_bar(page: ft.Page, title: str, on_logout=None, actions=None):
    controls = list(actions or [])
    if on_logout is not None:
        controls.append(ft.IconButton(icon=ft.Icons.LOGOUT, icon_color="black", tooltip="Logout", on_click=on_logout))
    return ft.Container(
        content=ft.Column([
            ft.Container(
                content=ft.Row([
                    ft.Text(title, size=20, weight="bold", color="black"),
                    ft.Row(controls, spacing=5),
                ], alignment=ft.MainAxisAlignment.SPACE_BETWEEN),
                padding=ft.padding.only(top=15, left=15, right=15, bottom=8),
            ),
            ft.Divider(height=1, color="grey300", thickness=1),
        ], spacing=0),
        bgcolor="white",
        padding=0,
    )
