import flet as ft

from core.config import RESTAURANT_NAME
from ui.ui_constants import BUTTON_COLOR, DARK_GRAY, MOBILE_WIDTH, WHITE


def new_user_view(page: ft.Page, app):
    """Shown to accounts that are still waiting for a role."""
    page.title = f"Welcome - {RESTAURANT_NAME}"

    def back_to_login(e):
        app.session.logout()
        page.go("/login")

    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                ft.Icon(ft.Icons.CHECK_CIRCLE_OUTLINE, size=64, color=BUTTON_COLOR),
                ft.Text(f"Welcome to {RESTAURANT_NAME}!", size=22, weight="bold", color="black",
                        text_align=ft.TextAlign.CENTER),
                ft.Text(
                    "Your account has been created successfully. "
                    "Please wait while our administrator assigns you a role.",
                    size=14, color=DARK_GRAY, text_align=ft.TextAlign.CENTER,
                ),
                ft.Container(
                    content=ft.Text(
                        "Once your role is assigned, you'll be able to access the system with your credentials.",
                        size=12, color=DARK_GRAY, text_align=ft.TextAlign.CENTER,
                    ),
                    bgcolor="grey100",
                    border_radius=10,
                    padding=15,
                    width=MOBILE_WIDTH,
                ),
                ft.ElevatedButton(
                    "Go to Login",
                    icon=ft.Icons.LOGIN,
                    width=MOBILE_WIDTH,
                    bgcolor=BUTTON_COLOR,
                    color="black",
                    on_click=back_to_login,
                ),
            ], horizontal_alignment=ft.CrossAxisAlignment.CENTER, spacing=16),
            width=400,
            expand=True,
            padding=25,
            bgcolor=WHITE,
            alignment=ft.alignment.center,
        )
    )
    page.update()
