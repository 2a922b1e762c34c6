"""Shared page layout: header with title and the signed-in menu."""

from __future__ import annotations

from typing import Awaitable, Callable

from nicegui import ui

from snailpoints.core.shell import AppShell
from snailpoints.ui.components.settings_list import SettingsList
from snailpoints.ui.theme import COLORS, GLOBAL_CSS


def page_layout(
    content_fn: Callable[[], None],
    shell: AppShell,
    on_logout: Callable[[], Awaitable[None]],
) -> None:
    """Create the standard page layout.

    Args:
        content_fn: Callable that builds the page content.
        shell: Application shell for the current browser session.
        on_logout: Coroutine run by the menu's logout entry.
    """
    ui.add_css(GLOBAL_CSS)
    ui.dark_mode(True)
    ui.colors(primary=COLORS.green, secondary=COLORS.purple, accent=COLORS.gold)

    with ui.header(elevated=True).classes("q-pa-sm"):
        with ui.row().classes("w-full items-center no-wrap"):
            ui.label("Snail Points").classes("text-h5 text-bold cursor-pointer").style(
                f"color: {COLORS.gold};"
            ).on("click", lambda: ui.navigate.to("/"))
            ui.space()
            if shell.session.is_authenticated:
                _menu(shell, on_logout)

    with ui.column().classes("w-full items-center q-pa-md"):
        content_fn()


def _menu(shell: AppShell, on_logout: Callable[[], Awaitable[None]]) -> None:
    with ui.button(icon="menu").props("flat round"):
        with ui.menu().props("auto-close=false"):
            with ui.column().classes("q-pa-md gap-2"):
                if shell.settings is not None:
                    SettingsList(shell.settings)
                ui.separator()
                ui.button("Change Password", on_click=lambda: ui.navigate.to("/changepassword")).props("flat")
                if shell.session.is_admin:
                    ui.button("Set Password", on_click=lambda: ui.navigate.to("/setpassword")).props(
                        "flat color=warning"
                    )
                    ui.button(
                        "Create Demo User", on_click=lambda: ui.navigate.to("/createdemouser")
                    ).props("flat color=warning")
                ui.button("Logout", on_click=on_logout).props("flat")
