"""Async HTTP client for the Snail Points backend.

Every call returns an :class:`ApiResponse`; HTTP and transport failures are
reported through it instead of being raised, so callers decide at the call
site how each failure kind is handled.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

import httpx

from snailpoints.config import ClientConfig
from snailpoints.utils.logging import get_logger

logger = get_logger(__name__)

# Cookie the backend issues on login and clears on logout.
SESSION_COOKIE = "session"


@dataclass(frozen=True)
class ApiResponse:
    """Outcome of one backend request.

    Exactly one failure channel is populated on failure:
    ``transport_error`` when no HTTP response arrived, otherwise
    ``status_code`` and the decoded ``body``.
    """
    status_code: int | None
    body: Any = None
    transport_error: str | None = None
    malformed: bool = False

    @property
    def ok(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and self.status_code >= 500

    @property
    def data(self) -> dict[str, Any]:
        """Decoded JSON object body, or an empty dict."""
        return self.body if isinstance(self.body, dict) else {}

    @property
    def error(self) -> str | None:
        """Application-level ``error`` text carried in the body."""
        err = self.data.get("error")
        if err is None:
            return None
        return str(err)

    @property
    def succeeded(self) -> bool:
        """2xx with a decodable body and no application error."""
        return self.ok and not self.malformed and self.error is None

    def describe(self) -> str:
        """Short failure description for logs and user-facing text."""
        if self.transport_error is not None:
            return self.transport_error
        if self.error:
            return self.error
        if self.malformed:
            return f"HTTP {self.status_code}: malformed response body"
        return f"HTTP {self.status_code}"


class PointsApiClient:
    """Async client for the Snail Points JSON API.

    One instance is shared by every synchronizer for the lifetime of an
    application session; it holds the session cookie.

    Usage:
        async with PointsApiClient(ClientConfig()) as client:
            resp = await client.list_points()
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._http = httpx.AsyncClient(
            base_url=self._config.api_base,
            timeout=httpx.Timeout(self._config.timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )
        if self._config.session_token:
            self._http.cookies.set(SESSION_COOKIE, self._config.session_token)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.api_base

    @property
    def session_token(self) -> str | None:
        """Current session cookie value, if the backend issued one."""
        return self._http.cookies.get(SESSION_COOKIE)

    async def close(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> PointsApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> ApiResponse:
        """Send one request and wrap the outcome."""
        try:
            resp = await self._http.request(method, path, params=params, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("api_transport_error", method=method, path=path, error=str(exc))
            return ApiResponse(status_code=None, transport_error=str(exc) or type(exc).__name__)

        body: Any = None
        malformed = False
        if resp.content:
            try:
                body = resp.json()
            except (json.JSONDecodeError, UnicodeDecodeError):
                malformed = True
        logger.debug("api_response", method=method, path=path, status=resp.status_code)
        return ApiResponse(status_code=resp.status_code, body=body, malformed=malformed)

    # --- Session and account ---

    async def get_session(self) -> ApiResponse:
        """Identity request; also carries the settings mapping when signed in."""
        return await self.request("GET", "/")

    async def login(self, username: str, password: str) -> ApiResponse:
        return await self.request(
            "POST", "/login", payload={"username": username, "password": password}
        )

    async def create_account(self, email: str, username: str, password: str) -> ApiResponse:
        return await self.request(
            "POST",
            "/createaccount",
            payload={"email": email, "username": username, "password": password},
        )

    async def logout(self) -> ApiResponse:
        return await self.request("POST", "/logout")

    async def submit_password(self, path: str, payload: dict[str, Any]) -> ApiResponse:
        return await self.request("POST", path, payload=payload)

    async def forgot_password(self, email: str) -> ApiResponse:
        return await self.request("POST", "/forgotpassword", params={"email": email})

    async def verify_email(self, code: str) -> ApiResponse:
        return await self.request("POST", "/emailcode", params={"code": code})

    async def resend_code(self) -> ApiResponse:
        return await self.request("POST", "/newcode")

    # --- Counters ---

    async def list_points(self) -> ApiResponse:
        return await self.request("GET", "/points/list")

    async def new_point(self) -> ApiResponse:
        return await self.request("POST", "/points/new")

    async def set_points(self, counter_id: int, points: int) -> ApiResponse:
        return await self.request(
            "POST", "/points/set/points", params={"id": counter_id, "points": points}
        )

    async def set_name(self, counter_id: int, name: str) -> ApiResponse:
        return await self.request(
            "POST", "/points/set/name", params={"id": counter_id, "name": name}
        )

    async def delete_point(self, counter_id: int) -> ApiResponse:
        return await self.request("POST", "/points/delete", params={"id": counter_id})

    async def set_priority(self, counter_id: int, up: bool) -> ApiResponse:
        return await self.request(
            "POST",
            "/points/set/priority",
            params={"id": counter_id, "up": "true" if up else "false"},
        )

    # --- Settings ---

    async def set_setting(self, key: str, value: Any) -> ApiResponse:
        return await self.request("POST", "/settings/set", payload={"key": key, "value": value})
