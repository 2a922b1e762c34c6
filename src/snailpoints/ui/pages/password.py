"""Password forms: reset, change, admin set and demo user creation."""

from __future__ import annotations

from nicegui import ui

from snailpoints.core.account import AccountService, PasswordForm, check_password_form
from snailpoints.ui.theme import COLORS


def password_page(account: AccountService, form: PasswordForm, code: str | None = None) -> None:
    """Render *form*; on success return to the board after a second.

    ``code`` is the reset code from the emailed link (``/reset?code=...``).
    """
    with ui.card().classes("w-80").style(f"background: {COLORS.bg_secondary}"):
        ui.label(form.heading).classes("text-h5")
        user = ui.input("Username").classes("w-full") if form.has_username else None
        current = (
            ui.input("Current Password", password=True).classes("w-full")
            if form.has_current_password
            else None
        )
        new = ui.input("New Password", password=True).classes("w-full")
        confirm = (
            ui.input("Confirm Password", password=True).classes("w-full")
            if form.has_confirm_password
            else None
        )
        message = ui.label("")

        def check():
            return check_password_form(
                form,
                new.value or "",
                confirm=(confirm.value or "") if confirm is not None else "",
                current=(current.value or "") if current is not None else "",
                user=(user.value or "") if user is not None else "",
            )

        def validate() -> None:
            result = check()
            message.style(f"color: {COLORS.red}")
            message.set_text(result.error or "")
            submit_btn.set_enabled(result.submittable)

        async def submit() -> None:
            if not check().submittable:
                return
            result = await account.submit_password(
                form,
                new.value,
                current=current.value if current is not None else None,
                user=user.value if user is not None else None,
                code=code,
            )
            if not result.success:
                message.style(f"color: {COLORS.red}")
                message.set_text(result.error or "Submit failed")
                return
            message.style(f"color: {COLORS.green}")
            message.set_text("Success!")
            submit_btn.set_enabled(False)
            ui.timer(1.0, lambda: ui.navigate.to("/"), once=True)

        submit_btn = ui.button("Submit", on_click=submit).classes("w-full")
        submit_btn.set_enabled(False)
        for field in (user, current, new, confirm):
            if field is not None:
                field.on_value_change(validate)
