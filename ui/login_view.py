import logging

import flet as ft

from core.config import RESTAURANT_NAME
from core.errors import NetworkError, RoleNotAssignedError, ValidationError
from core.route_guard import ONBOARDING_ROUTE, next_from, post_login_target
from core.user_service import login
from ui.toast import show_toast
from ui.ui_constants import ACCENT, BUTTON_COLOR, DARK_GRAY, LIGHT_GRAY, MOBILE_WIDTH, WHITE

logger = logging.getLogger(__name__)


def auth_field(label: str, hint: str, icon, password: bool = False):
    return ft.TextField(
        label=label,
        label_style=ft.TextStyle(color="#000000"),
        hint_text=hint,
        hint_style=ft.TextStyle(color="#000000"),
        color="#000000",
        password=password,
        can_reveal_password=password,
        width=MOBILE_WIDTH,
        border_radius=12,
        filled=True,
        bgcolor=LIGHT_GRAY,
        border_color="transparent",
        focused_border_color=ACCENT,
        prefix_icon=icon,
        text_size=14,
        height=55,
    )


def login_view(page: ft.Page, app):
    page.title = f"Login - {RESTAURANT_NAME}"
    next_path = next_from(page.route)

    email = auth_field("Email Address", "Enter your Email", ft.Icons.EMAIL_OUTLINED)
    password = auth_field("Password", "Enter your Password", ft.Icons.LOCK_OUTLINE, password=True)
    message = ft.Text(value="", color="red", size=12, text_align=ft.TextAlign.CENTER)

    def handle_login(e):
        message.value = "Signing in..."
        message.color = "blue"
        login_btn.disabled = True
        page.update()
        try:
            result = login(app.api, email.value or "", password.value or "")
        except ValidationError as ex:
            message.value = ex.message
            message.color = "red"
        except RoleNotAssignedError:
            show_toast(page, "Your account is pending role assignment. Please contact an administrator.", "error")
            page.go(ONBOARDING_ROUTE)
            return
        except NetworkError:
            message.value = "Cannot reach the server. Please try again."
            message.color = "red"
        except Exception as ex:
            logger.warning("Login failed: %s", ex)
            message.value = "Login failed. Please check your credentials."
            message.color = "red"
        else:
            app.session.login(result.token, result.role)
            app.session.start_monitor()
            show_toast(page, "Welcome back!")
            page.go(post_login_target(app.session, next_path))
            return
        finally:
            login_btn.disabled = False
        page.update()

    password.on_submit = handle_login

    login_btn = ft.ElevatedButton(
        content=ft.Text("Sign In", size=18, weight="bold", color=WHITE),
        width=MOBILE_WIDTH,
        height=50,
        bgcolor=BUTTON_COLOR,
        style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=12)),
        on_click=handle_login,
    )
    signup_row = ft.Row([
        ft.Text("Don't have an account?", size=13, color=DARK_GRAY),
        ft.Container(
            content=ft.Text("Sign Up", size=13, color=ACCENT, weight="bold"),
            on_click=lambda e: page.go("/signup"),
            ink=True,
        ),
    ], spacing=5, alignment=ft.MainAxisAlignment.CENTER)

    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                ft.Container(height=8),
                ft.Text("Welcome back!!!", size=22, weight="bold", color="#000000"),
                ft.Text(f"Sign in to {RESTAURANT_NAME}", size=12, color=DARK_GRAY),
                ft.Container(height=25),
                email,
                ft.Container(height=8),
                password,
                ft.Container(height=20),
                login_btn,
                ft.Container(height=4),
                message,
                ft.Container(height=10),
                signup_row,
            ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                scroll=ft.ScrollMode.AUTO,
                spacing=0,
            ),
            width=400,
            expand=True,
            padding=ft.padding.symmetric(horizontal=25),
            bgcolor=WHITE,
            alignment=ft.alignment.center,
        )
    )
    page.update()
