"""NiceGUI web UI setup and page registration."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, Request
from nicegui import app, ui

from snailpoints.api.client import PointsApiClient
from snailpoints.config import ClientConfig
from snailpoints.core.account import PasswordForm
from snailpoints.core.shell import AppShell, View
from snailpoints.ui.components.audio import AudioFeedback
from snailpoints.ui.layout import page_layout
from snailpoints.utils.logging import get_logger

logger = get_logger(__name__)

_STATIC_DIR = Path(__file__).parent / "static"

# Per-browser storage key holding the backend session cookie.
TOKEN_KEY = "session_token"

_FORM_VIEWS: dict[View, PasswordForm] = {
    View.RESET_PASSWORD: PasswordForm.RESET,
    View.CHANGE_PASSWORD: PasswordForm.CHANGE,
    View.SET_PASSWORD: PasswordForm.SET,
    View.CREATE_DEMO_USER: PasswordForm.DEMO_USER,
}


def setup_ui(fastapi_app: FastAPI, config: ClientConfig) -> None:
    """Register NiceGUI pages with the FastAPI application."""

    app.add_static_files("/static", str(_STATIC_DIR))

    async def render(request: Request) -> None:
        token = app.storage.user.get(TOKEN_KEY)
        client = PointsApiClient(config.model_copy(update={"session_token": token}))
        shell = AppShell(client, feedback=AudioFeedback())

        async def teardown() -> None:
            await shell.aclose()
            await client.close()

        ui.context.client.on_disconnect(teardown)

        async def on_login() -> None:
            app.storage.user[TOKEN_KEY] = client.session_token
            await shell.accept_login()
            ui.navigate.to("/")

        async def on_logout() -> None:
            result = await shell.account.logout()
            if not result.success:
                ui.notify(result.error or "Logout failed", type="negative")
                return
            app.storage.user.pop(TOKEN_KEY, None)
            ui.navigate.to("/")

        await shell.start()
        view = shell.route(request.url.path)
        logger.debug("ui_route", path=request.url.path, view=view.value, mode=shell.session.mode.value)

        def content() -> None:
            from snailpoints.ui.pages import status

            if view is View.UNAVAILABLE:
                status.unavailable_page()
            elif view is View.LOADING:
                status.loading_page()
            elif view is View.VERIFY_ACCOUNT:
                status.verify_account_page(shell.account)
            elif view is View.POINTS:
                from snailpoints.ui.pages.points import points_page
                points_page(shell.counters)
            elif view is View.LOGIN:
                from snailpoints.ui.pages.login import login_page
                login_page(shell.account, on_login)
            elif view in _FORM_VIEWS:
                from snailpoints.ui.pages.password import password_page
                password_page(shell.account, _FORM_VIEWS[view], code=request.query_params.get("code"))
            else:
                status.not_found_page()

        page_layout(content, shell, on_logout)

    @ui.page("/")
    async def index(request: Request):
        await render(request)

    @ui.page("/reset")
    async def reset(request: Request):
        await render(request)

    @ui.page("/changepassword")
    async def change_password(request: Request):
        await render(request)

    @ui.page("/setpassword")
    async def set_password(request: Request):
        await render(request)

    @ui.page("/createdemouser")
    async def create_demo_user(request: Request):
        await render(request)

    @ui.page("/{path:path}")
    async def not_found(request: Request, path: str):
        await render(request)

    ui.run_with(
        fastapi_app,
        title="Snail Points",
        storage_secret=config.storage_secret,
    )
