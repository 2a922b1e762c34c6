"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

import httpx
import pytest

from snailpoints.api.client import PointsApiClient
from snailpoints.config import ClientConfig

API_BASE = "http://backend.test/api"

Reply = tuple[int, Any]


class FakeBackend:
    """Scripted backend behind an ``httpx.MockTransport``.

    Routes map ``(method, path)`` to a fixed reply or to a callable taking
    the request. A route can be held with :meth:`hold` so tests can look
    at state while the request is in flight.
    """

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Reply | Callable[[httpx.Request], Reply]] = {}
        self.requests: list[httpx.Request] = []
        self._gates: dict[tuple[str, str], asyncio.Event] = {}

    def on(self, method: str, path: str, status: int = 200, json: Any = None, handler=None) -> None:
        self.routes[(method, path)] = handler if handler is not None else (status, json)

    def hold(self, method: str, path: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[(method, path)] = gate
        return gate

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and self.path_of(r) == path]

    @staticmethod
    def path_of(request: httpx.Request) -> str:
        path = request.url.path
        if path.startswith("/api"):
            path = path[len("/api"):]
        return path or "/"

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, self.path_of(request))
        gate = self._gates.get(key)
        if gate is not None:
            await gate.wait()
        route = self.routes.get(key)
        if route is None:
            return httpx.Response(404, json={"error": "Not found"})
        if callable(route):
            route = route(request)
            if inspect.isawaitable(route):
                route = await route
        status, body = route
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def config():
    return ClientConfig(api_base=API_BASE, timeout=2.0, storage_secret="test-secret")


@pytest.fixture
async def client(backend, config):
    api = PointsApiClient(config, transport=httpx.MockTransport(backend))
    yield api
    await api.close()
