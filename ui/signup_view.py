import logging

import flet as ft

from core.config import RESTAURANT_NAME
from core.errors import ConflictError, NetworkError, ValidationError
from core.route_guard import ONBOARDING_ROUTE
from core.user_service import signup
from ui.login_view import auth_field
from ui.toast import show_toast
from ui.ui_constants import ACCENT, BUTTON_COLOR, DARK_GRAY, MOBILE_WIDTH, WHITE

logger = logging.getLogger(__name__)


def signup_view(page: ft.Page, app):
    page.title = f"Sign Up - {RESTAURANT_NAME}"

    full_name = auth_field("Full Name", "Enter your Full Name", ft.Icons.PERSON_OUTLINE)
    email = auth_field("Email Address", "Enter your Email", ft.Icons.EMAIL_OUTLINED)
    password = auth_field("Password", "Create a Password", ft.Icons.LOCK_OUTLINE, password=True)
    confirm = auth_field("Confirm Password", "Repeat your Password", ft.Icons.LOCK_OUTLINE, password=True)
    message = ft.Text(value="", color="red", size=12, text_align=ft.TextAlign.CENTER)

    def handle_signup(e):
        if (password.value or "") != (confirm.value or ""):
            message.value = "Passwords do not match"
            page.update()
            return
        try:
            token = signup(app.api, full_name.value or "", email.value or "", password.value or "")
        except ValidationError as ex:
            message.value = ex.message
        except ConflictError:
            message.value = "An account with this email already exists"
        except NetworkError:
            message.value = "Cannot reach the server. Please try again."
        except Exception as ex:
            logger.warning("Signup failed: %s", ex)
            message.value = "Signup failed. Please try again."
        else:
            # New accounts have no role until an admin assigns one
            app.session.login(token)
            show_toast(page, "Account created successfully!")
            page.go(ONBOARDING_ROUTE)
            return
        page.update()

    signup_btn = ft.ElevatedButton(
        content=ft.Text("Create Account", size=18, weight="bold", color=WHITE),
        width=MOBILE_WIDTH,
        height=50,
        bgcolor=BUTTON_COLOR,
        style=ft.ButtonStyle(shape=ft.RoundedRectangleBorder(radius=12)),
        on_click=handle_signup,
    )

    page.clean()
    page.add(
        ft.Container(
            content=ft.Column([
                ft.Text("Create Account", size=22, weight="bold", color="#000000"),
                ft.Text("Join the team", size=12, color=DARK_GRAY),
                ft.Container(height=20),
                full_name,
                ft.Container(height=8),
                email,
                ft.Container(height=8),
                password,
                ft.Container(height=8),
                confirm,
                ft.Container(height=20),
                signup_btn,
                ft.Container(height=4),
                message,
                ft.Row([
                    ft.Text("Already have an account?", size=13, color=DARK_GRAY),
                    ft.Container(
                        content=ft.Text("Sign In", size=13, color=ACCENT, weight="bold"),
                        on_click=lambda e: page.go("/login"),
                        ink=True,
                    ),
                ], spacing=5, alignment=ft.MainAxisAlignment.CENTER),
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
