"""Application shell: session mode, view routing and the signed-in workspace."""

from __future__ import annotations

from enum import StrEnum

from snailpoints.api.client import PointsApiClient
from snailpoints.core.account import AccountService
from snailpoints.core.counters import CounterSynchronizer
from snailpoints.core.feedback import FeedbackSink
from snailpoints.core.session import SessionResolver
from snailpoints.core.settings import SettingsSynchronizer
from snailpoints.models.session import SessionMode, SessionState
from snailpoints.utils.logging import get_logger

logger = get_logger(__name__)


class View(StrEnum):
    UNAVAILABLE = "unavailable"
    LOADING = "loading"
    VERIFY_ACCOUNT = "verify_account"
    POINTS = "points"
    LOGIN = "login"
    RESET_PASSWORD = "reset_password"
    CHANGE_PASSWORD = "change_password"
    SET_PASSWORD = "set_password"
    CREATE_DEMO_USER = "create_demo_user"
    NOT_FOUND = "not_found"


# Routes available in every resolved session mode, besides "/".
PATH_VIEWS: dict[str, View] = {
    "/reset": View.RESET_PASSWORD,
    "/changepassword": View.CHANGE_PASSWORD,
    "/setpassword": View.SET_PASSWORD,
    "/createdemouser": View.CREATE_DEMO_USER,
}


class AppShell:
    """Top of the client: owns the resolver and, once signed in, the synchronizers.

    Usage:
        shell = AppShell(client)
        await shell.start()
        view = shell.route("/")
        ...
        await shell.aclose()
    """

    def __init__(self, client: PointsApiClient, feedback: FeedbackSink | None = None) -> None:
        self._client = client
        self._resolver = SessionResolver(client)
        self._feedback = feedback
        self._settings: SettingsSynchronizer | None = None
        self._counters: CounterSynchronizer | None = None
        self.account = AccountService(client)

    @property
    def client(self) -> PointsApiClient:
        return self._client

    @property
    def session(self) -> SessionState:
        return self._resolver.state

    @property
    def settings(self) -> SettingsSynchronizer | None:
        return self._settings

    @property
    def counters(self) -> CounterSynchronizer | None:
        return self._counters

    async def start(self) -> SessionState:
        state = await self._resolver.resolve()
        if state.is_authenticated:
            await self._open_workspace()
        return state

    async def accept_login(self) -> SessionState:
        """Handle the login/sign-up success signal from the credential forms."""
        state = self._resolver.accept_login()
        await self._open_workspace()
        return state

    def route(self, path: str) -> View:
        """Pick the view for *path* under the current session mode."""
        mode = self.session.mode
        if mode is SessionMode.UNAVAILABLE:
            return View.UNAVAILABLE
        if mode is SessionMode.LOADING:
            return View.LOADING
        if mode is SessionMode.PENDING_VERIFICATION:
            return View.VERIFY_ACCOUNT

        normalized = path.split("?", 1)[0].rstrip("/").lower() or "/"
        if normalized == "/":
            return View.POINTS if self.session.is_authenticated else View.LOGIN
        return PATH_VIEWS.get(normalized, View.NOT_FOUND)

    async def aclose(self) -> None:
        """Tear down the signed-in workspace; in-flight writes keep running."""
        if self._settings is not None:
            await self._settings.__aexit__(None, None, None)
        self._settings = None
        self._counters = None

    async def _open_workspace(self) -> None:
        if self._settings is not None:
            return
        settings = SettingsSynchronizer(self._client)
        self._settings = settings
        self._counters = CounterSynchronizer(self._client, policy=settings, feedback=self._feedback)
        await settings.__aenter__()
        logger.info("workspace_opened", settings_loaded=not settings.loading)
