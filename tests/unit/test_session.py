"""Unit tests for session classification and the resolver."""

from __future__ import annotations

from snailpoints.api.client import ApiResponse
from snailpoints.core.session import SessionResolver, classify_session
from snailpoints.models.session import (
    VERIFICATION_REQUIRED_MESSAGE,
    SessionMode,
    SessionState,
)


class TestClassifySession:
    """Test mapping identity responses onto session modes."""

    def test_server_error_is_unavailable(self):
        for status in (500, 502, 503):
            state = classify_session(ApiResponse(status_code=status, body={"success": True}))
            assert state.mode is SessionMode.UNAVAILABLE

    def test_client_error_stays_loading(self):
        state = classify_session(ApiResponse(status_code=404, body={"error": "nope"}))
        assert state.mode is SessionMode.LOADING
        assert not state.is_resolved

    def test_transport_error_stays_loading(self):
        state = classify_session(ApiResponse(status_code=None, transport_error="refused"))
        assert state.mode is SessionMode.LOADING

    def test_malformed_body_stays_loading(self):
        state = classify_session(ApiResponse(status_code=200, malformed=True))
        assert state.mode is SessionMode.LOADING

    def test_verification_overrides_success_and_admin(self):
        body = {"error": VERIFICATION_REQUIRED_MESSAGE, "success": True, "admin": True}
        state = classify_session(ApiResponse(status_code=200, body=body))
        assert state.mode is SessionMode.PENDING_VERIFICATION
        assert not state.is_admin

    def test_other_error_text_does_not_mean_verification(self):
        state = classify_session(ApiResponse(status_code=200, body={"error": "Not logged in"}))
        assert state.mode is SessionMode.ANONYMOUS

    def test_success_key_means_authenticated(self):
        state = classify_session(ApiResponse(status_code=200, body={"success": True}))
        assert state == SessionState(SessionMode.AUTHENTICATED, admin=False)

    def test_success_key_presence_is_enough(self):
        state = classify_session(ApiResponse(status_code=200, body={"success": False}))
        assert state.is_authenticated

    def test_admin_requires_literal_true(self):
        yes = classify_session(ApiResponse(status_code=200, body={"success": 1, "admin": True}))
        truthy = classify_session(ApiResponse(status_code=200, body={"success": 1, "admin": "yes"}))
        assert yes.is_admin
        assert not truthy.is_admin

    def test_anonymous_is_never_admin(self):
        state = classify_session(ApiResponse(status_code=200, body={"admin": True}))
        assert state.mode is SessionMode.ANONYMOUS
        assert not state.is_admin


class TestSessionResolver:
    """Test the once-per-load resolver against a fake backend."""

    async def test_resolve_authenticated(self, backend, client):
        backend.on("GET", "/", json={"success": True, "admin": True, "settings": {}})
        resolver = SessionResolver(client)

        state = await resolver.resolve()

        assert state.mode is SessionMode.AUTHENTICATED
        assert state.is_admin
        assert resolver.state == state

    async def test_resolve_only_requests_once(self, backend, client):
        backend.on("GET", "/", status=500, json={})
        resolver = SessionResolver(client)

        first = await resolver.resolve()
        second = await resolver.resolve()

        assert first.mode is SessionMode.UNAVAILABLE
        assert second == first
        assert len(backend.calls("GET", "/")) == 1

    async def test_failed_resolve_is_not_retried(self, backend, client):
        backend.on("GET", "/", status=401, json={"error": "Unauthorized"})
        resolver = SessionResolver(client)

        await resolver.resolve()
        backend.on("GET", "/", json={"success": True})
        state = await resolver.resolve()

        assert state.mode is SessionMode.LOADING
        assert len(backend.requests) == 1

    async def test_accept_login_skips_request(self, backend, client):
        resolver = SessionResolver(client)

        state = resolver.accept_login()

        assert state.mode is SessionMode.AUTHENTICATED
        assert not state.is_admin
        assert backend.requests == []
        assert (await resolver.resolve()) == state
