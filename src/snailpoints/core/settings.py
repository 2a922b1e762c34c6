"""Configuration synchronizer for the flat set of server-held settings.

Edits are staged in a pending overlay while the write is in flight. The
confirmed value only ever changes to what the backend echoes back (or to
what a fetch returned), so a failed write leaves nothing to roll back: the
overlay entry is dropped and a per-key error message is kept instead.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from snailpoints.api.client import ApiResponse, PointsApiClient
from snailpoints.exceptions import UnknownSettingError
from snailpoints.models.settings import (
    ALLOW_NEGATIVE,
    DEFAULT_REDEEM_COST,
    REDEEM_COST,
    ConfigurationEntry,
    SettingKind,
    SettingValue,
    coerce_value,
)
from snailpoints.utils.logging import get_logger

logger = get_logger(__name__)

FAILED_UPDATE_MESSAGE = "Failed to update setting."

_MISSING = object()


def edit_value(entry: ConfigurationEntry, raw: Any) -> SettingValue:
    """Turn raw input from an editor into a typed value for *entry*.

    Booleans toggle (an explicit bool is taken as-is), integers keep only
    digit characters with empty input meaning zero, text passes through.
    """
    if entry.kind is SettingKind.BOOL:
        if isinstance(raw, bool):
            return raw
        return not bool(entry.value)
    if entry.kind is SettingKind.INT:
        return coerce_value(SettingKind.INT, "" if raw is None else raw)
    return "" if raw is None else str(raw)


def digits_only(text: str) -> str:
    return "".join(ch for ch in text if ch.isdigit())


def _echoed_value(resp: ApiResponse) -> Any:
    setting = resp.data.get("setting")
    if isinstance(setting, dict) and setting.get("value") is not None:
        return setting["value"]
    return _MISSING


class SettingsSynchronizer:
    """State holder for configuration entries, their overlay and errors.

    Constructed once per signed-in application session and used as an
    async context manager: entering fetches the entries, leaving detaches
    every listener. Outstanding writes are not cancelled on exit.
    """

    def __init__(self, client: PointsApiClient) -> None:
        self._client = client
        self._entries: dict[str, ConfigurationEntry] = {}
        self._pending: dict[str, SettingValue] = {}
        self._generation: dict[str, int] = {}
        self._errors: dict[str, str] = {}
        self._loading = True
        self._fetch_started = False
        self._closed = False
        self._listeners: list[Callable[[], None]] = []
        self._tasks: set[asyncio.Task] = set()

    async def __aenter__(self) -> SettingsSynchronizer:
        await self.fetch_all()
        return self

    async def __aexit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        self._closed = True
        self._listeners.clear()

    # --- Read access ---

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def entries(self) -> dict[str, ConfigurationEntry]:
        return dict(self._entries)

    @property
    def pending(self) -> dict[str, SettingValue]:
        return dict(self._pending)

    @property
    def errors(self) -> dict[str, str]:
        return dict(self._errors)

    def get(self, key: str) -> ConfigurationEntry:
        try:
            return self._entries[key]
        except KeyError:
            raise UnknownSettingError(key) from None

    def error_for(self, key: str) -> str | None:
        return self._errors.get(key)

    def display_value(self, key: str) -> SettingValue:
        """Value an editor should show: the staged edit, else the confirmed value."""
        if key in self._pending:
            return self._pending[key]
        return self.get(key).value

    # --- PointsPolicy ---

    @property
    def allow_negative(self) -> bool:
        entry = self._entries.get(ALLOW_NEGATIVE)
        return bool(entry.value) if entry is not None else False

    @property
    def redeem_cost(self) -> int:
        entry = self._entries.get(REDEEM_COST)
        if entry is None or not entry.value:
            return DEFAULT_REDEEM_COST
        return int(entry.value)

    # --- Listeners ---

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("settings_listener_failed")

    # --- Backend operations ---

    async def fetch_all(self) -> dict[str, ConfigurationEntry]:
        """Load every entry with a single request.

        ``loading`` turns false once the response arrives. If the request
        fails it stays true; there is no retry.
        """
        if self._fetch_started:
            return self.entries
        self._fetch_started = True

        resp = await self._client.get_session()
        if not resp.ok or resp.malformed:
            logger.warning("settings_fetch_failed", reason=resp.describe())
            return self.entries

        body = resp.data
        if body.get("success"):
            raw = body.get("settings")
            if isinstance(raw, dict):
                self._entries = {
                    key: ConfigurationEntry.from_wire(key, payload)
                    for key, payload in raw.items()
                    if isinstance(payload, dict)
                }
        self._loading = False
        logger.debug("settings_fetched", keys=sorted(self._entries))
        self._notify()
        return self.entries

    def update(self, key: str, value: SettingValue) -> asyncio.Task:
        """Stage *value* for *key* and fire the backend write.

        The overlay entry is in place when this returns; the returned task
        settles the write.
        """
        if key not in self._entries:
            raise UnknownSettingError(key)
        generation = self._generation.get(key, 0) + 1
        self._generation[key] = generation
        self._pending[key] = value
        self._notify()
        return self._spawn(self._write(key, value, generation))

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # --- Internals ---

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._write_done)
        return task

    def _write_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("settings_write_crashed", error=repr(task.exception()))

    async def _write(self, key: str, value: SettingValue, generation: int) -> None:
        try:
            resp = await self._client.set_setting(key, value)
            self._settle(key, value, resp)
        finally:
            # A newer edit of the same key keeps its own overlay entry.
            if self._generation.get(key) == generation:
                self._pending.pop(key, None)
            self._notify()

    def _settle(self, key: str, value: SettingValue, resp: ApiResponse) -> None:
        echoed = _echoed_value(resp)
        if echoed is not _MISSING:
            self._entries[key] = self._entries[key].with_value(echoed)

        if resp.succeeded and echoed is not _MISSING:
            self._errors.pop(key, None)
            logger.info("setting_updated", key=key, value=self._entries[key].value)
            return

        self._errors[key] = resp.error or FAILED_UPDATE_MESSAGE
        logger.warning("setting_update_failed", key=key, value=value, reason=resp.describe())
