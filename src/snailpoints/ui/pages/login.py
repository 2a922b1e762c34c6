"""Login and sign-up forms."""

from __future__ import annotations

from typing import Awaitable, Callable

from nicegui import ui

from snailpoints.core.account import AccountService, check_login_form
from snailpoints.ui.theme import COLORS


def login_page(account: AccountService, on_success: Callable[[], Awaitable[None]]) -> None:
    """Login card with a toggle to the sign-up form and a forgot-password link.

    Args:
        account: Account operations for this browser session.
        on_success: Run after a successful login or sign-up.
    """
    state = {"sign_up": False}

    @ui.refreshable
    def form() -> None:
        sign_up = state["sign_up"]
        with ui.card().classes("w-80").style(f"background: {COLORS.bg_secondary}"):
            ui.label("Sign Up" if sign_up else "Login").classes("text-h5")
            email = ui.input("Email").classes("w-full") if sign_up else None
            username = ui.input("Username").classes("w-full")
            password = ui.input("Password", password=True).classes("w-full")
            confirm = ui.input("Confirm Password", password=True).classes("w-full") if sign_up else None
            message = ui.label("").style(f"color: {COLORS.red}")

            def check():
                return check_login_form(
                    username.value or "",
                    password.value or "",
                    (confirm.value or "") if confirm is not None else None,
                )

            def validate() -> None:
                result = check()
                message.set_text(result.error or "")
                submit_btn.set_enabled(result.submittable)

            async def submit() -> None:
                if not check().submittable:
                    return
                if sign_up:
                    result = await account.create_account(
                        (email.value or "").strip() if email is not None else "",
                        username.value,
                        password.value,
                    )
                else:
                    result = await account.login(username.value, password.value)
                if not result.success:
                    message.set_text(result.error or "")
                    return
                await on_success()

            submit_btn = ui.button("Sign Up" if sign_up else "Login", on_click=submit).classes("w-full")
            submit_btn.set_enabled(False)
            for field in (email, username, password, confirm):
                if field is not None:
                    field.on_value_change(validate)
            password.on("keydown.enter", submit)

            with ui.row().classes("w-full justify-between"):
                ui.button(
                    "Have an account? Login" if sign_up else "Create an account",
                    on_click=toggle,
                ).props("flat dense")
                if not sign_up:
                    ui.button("Forgot password?", on_click=forgot_dialog.open).props("flat dense")

    def toggle() -> None:
        state["sign_up"] = not state["sign_up"]
        form.refresh()

    with ui.dialog() as forgot_dialog, ui.card():
        ui.label("Reset Password").classes("text-h6")
        forgot_email = ui.input("Email")
        forgot_msg = ui.label("")

        async def send_reset() -> None:
            result = await account.forgot_password((forgot_email.value or "").strip())
            forgot_msg.set_text(
                "Check your email for a reset link." if result.success else (result.error or "Request failed")
            )

        with ui.row():
            ui.button("Send", on_click=send_reset)
            ui.button("Close", on_click=forgot_dialog.close).props("flat")

    form()
