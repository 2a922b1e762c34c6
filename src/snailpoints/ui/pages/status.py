"""Simple status pages: loading, unavailable, not found, verify account."""

from __future__ import annotations

from nicegui import ui

from snailpoints.core.account import AccountService
from snailpoints.ui.theme import COLORS


def loading_page() -> None:
    ui.label("Loading...").classes("text-h5")


def unavailable_page() -> None:
    ui.label("Service unavailable").classes("text-h4")
    ui.label("The server is not responding properly. Please try again later.").style(
        f"color: {COLORS.text_secondary}"
    )


def not_found_page() -> None:
    ui.label("404").classes("text-h3")
    ui.label("This page does not exist.").style(f"color: {COLORS.text_secondary}")


def verify_account_page(account: AccountService) -> None:
    """Ask for the emailed code, with a resend button."""
    ui.label("You have to verify your account. Check your email.").classes("text-h5")

    code = ui.input("Verification code").props("dense")
    message = ui.label("").style(f"color: {COLORS.text_secondary}")

    async def submit() -> None:
        result = await account.verify_email((code.value or "").strip())
        if result.success:
            ui.navigate.to("/")
            return
        message.set_text(result.error or "Invalid or expired code")

    async def resend() -> None:
        result = await account.resend_code()
        message.set_text("A new code was sent." if result.success else (result.error or "Request failed"))

    with ui.row().classes("gap-2"):
        ui.button("Verify", on_click=submit)
        ui.button("Resend code", on_click=resend).props("outline")
