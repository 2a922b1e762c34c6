"""Session resolution: classify the identity response into one session mode."""

from __future__ import annotations

from snailpoints.api.client import ApiResponse, PointsApiClient
from snailpoints.models.session import (
    VERIFICATION_REQUIRED_MESSAGE,
    SessionMode,
    SessionState,
)
from snailpoints.utils.logging import get_logger

logger = get_logger(__name__)


def classify_session(resp: ApiResponse) -> SessionState:
    """Map an identity response onto a session state.

    Precedence: server error, other HTTP failure, verification pending,
    then authenticated/anonymous by the presence of ``success``.

    Any failure that is not a server error leaves the state at
    ``LOADING``. Such a page load never resolves; a reload is the only
    way out.
    """
    if resp.is_server_error:
        return SessionState(SessionMode.UNAVAILABLE)

    if resp.transport_error is not None:
        logger.error("session_resolve_failed", reason="transport", error=resp.transport_error)
        return SessionState()

    if not resp.ok:
        logger.error("session_resolve_failed", reason="http_status", status=resp.status_code)
        return SessionState()

    if resp.malformed or not isinstance(resp.body, dict):
        logger.error("session_resolve_failed", reason="malformed_body", status=resp.status_code)
        return SessionState()

    body = resp.body
    if body.get("error") == VERIFICATION_REQUIRED_MESSAGE:
        return SessionState(SessionMode.PENDING_VERIFICATION)

    admin = body.get("admin") is True
    if "success" in body:
        return SessionState(SessionMode.AUTHENTICATED, admin=admin)
    return SessionState(SessionMode.ANONYMOUS, admin=admin)


class SessionResolver:
    """Resolves the session mode once per application load."""

    def __init__(self, client: PointsApiClient) -> None:
        self._client = client
        self._state = SessionState()
        self._attempted = False

    @property
    def state(self) -> SessionState:
        return self._state

    async def resolve(self) -> SessionState:
        """Send the identity request and store the classified state.

        Only the first call talks to the backend; later calls return the
        stored state, resolved or not.
        """
        if self._attempted:
            return self._state
        self._attempted = True

        resp = await self._client.get_session()
        self._state = classify_session(resp)
        logger.info("session_resolved", mode=str(self._state.mode), admin=self._state.is_admin)
        return self._state

    def accept_login(self) -> SessionState:
        """Record a login or sign-up success signal without a round trip."""
        self._attempted = True
        self._state = SessionState(SessionMode.AUTHENTICATED)
        logger.info("session_login_accepted")
        return self._state
