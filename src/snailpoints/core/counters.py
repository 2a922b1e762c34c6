"""Collection synchronizer for the ordered list of counters.

Scalar edits (points, name) patch the local cache first and then fire the
backend write without waiting for it. A failed write is logged and the
cache is left as it is; the next full refresh is authoritative. Operations
that can change membership or order (create, delete, move) conclude by
replacing the cache from the backend.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from pydantic import ValidationError

from snailpoints.api.client import PointsApiClient
from snailpoints.core.feedback import Cue, FeedbackSink, NullFeedback, level_up_cue
from snailpoints.exceptions import UnknownCounterError
from snailpoints.models.counter import Counter, CounterList
from snailpoints.models.settings import DEFAULT_REDEEM_COST
from snailpoints.utils.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[], None]


class PointsPolicy(Protocol):
    """Read-only view of the settings that gate point changes."""

    @property
    def allow_negative(self) -> bool: ...

    @property
    def redeem_cost(self) -> int: ...


@dataclass(frozen=True)
class StaticPolicy:
    """Fixed policy used when no settings holder is attached."""
    allow_negative: bool = False
    redeem_cost: int = DEFAULT_REDEEM_COST


class CounterSynchronizer:
    """Owns the cached counter sequence and its backend writes."""

    def __init__(
        self,
        client: PointsApiClient,
        policy: PointsPolicy | None = None,
        feedback: FeedbackSink | None = None,
    ) -> None:
        self._client = client
        self._policy: PointsPolicy = policy if policy is not None else StaticPolicy()
        self._feedback: FeedbackSink = feedback if feedback is not None else NullFeedback()
        self._counters: list[Counter] = []
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task] = set()

    # --- Cache access ---

    @property
    def counters(self) -> tuple[Counter, ...]:
        return tuple(self._counters)

    @property
    def policy(self) -> PointsPolicy:
        return self._policy

    @property
    def pending_writes(self) -> int:
        return len(self._tasks)

    def get(self, counter_id: int) -> Counter | None:
        for counter in self._counters:
            if counter.id == counter_id:
                return counter
        return None

    def index_of(self, counter_id: int) -> int:
        for idx, counter in enumerate(self._counters):
            if counter.id == counter_id:
                return idx
        raise UnknownCounterError(counter_id)

    def can_move(self, counter_id: int, up: bool) -> bool:
        """Whether a move is allowed; the ends of the sequence are fixed."""
        idx = self.index_of(counter_id)
        if up:
            return idx > 0
        return idx < len(self._counters) - 1

    def can_decrement(self, counter_id: int) -> bool:
        counter = self._require(counter_id)
        return counter.points > 0 or self._policy.allow_negative

    def can_redeem(self, counter_id: int) -> bool:
        counter = self._require(counter_id)
        return counter.points >= self._policy.redeem_cost

    # --- Listeners ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every cache change; returns an unsubscribe."""
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
                logger.exception("counter_listener_failed")

    # --- Backend operations ---

    async def refresh(self) -> tuple[Counter, ...]:
        """Replace the whole cache from the backend."""
        resp = await self._client.list_points()
        if not resp.ok or resp.malformed:
            logger.warning("points_list_failed", reason=resp.describe())
            return self.counters
        try:
            listing = CounterList.model_validate(resp.data)
        except ValidationError as exc:
            logger.warning("points_list_invalid", error=str(exc))
            return self.counters
        self._counters = list(listing.points)
        logger.debug("points_list_refreshed", count=len(self._counters))
        self._notify()
        return self.counters

    async def create(self) -> Counter | None:
        """Create a counter on the backend and append it once confirmed."""
        resp = await self._client.new_point()
        if not resp.ok or resp.malformed:
            logger.warning("points_create_failed", reason=resp.describe())
            return None
        try:
            counter = Counter.model_validate(resp.data)
        except ValidationError as exc:
            logger.warning("points_create_invalid", error=str(exc))
            return None
        self._counters.append(counter)
        logger.info("points_created", counter_id=counter.id)
        self._notify()
        return counter

    def set_points(self, counter_id: int, points: int) -> asyncio.Task | None:
        """Patch points locally and fire the backend write.

        Returns the write task, or ``None`` when the change was refused
        because it would go negative while negatives are disallowed.
        """
        if points < 0 and not self._policy.allow_negative:
            logger.info("points_negative_refused", counter_id=counter_id, points=points)
            return None
        self._patch(counter_id, points=points)
        return self._spawn(self._write_points(counter_id, points))

    def set_name(self, counter_id: int, name: str) -> asyncio.Task | None:
        """Patch the name locally and fire the backend write.

        Empty names and unchanged names are ignored.
        """
        current = self.get(counter_id)
        if len(name) == 0 or (current is not None and current.name == name):
            return None
        self._patch(counter_id, name=name)
        return self._spawn(self._write_name(counter_id, name))

    async def delete(self, counter_id: int) -> tuple[Counter, ...]:
        """Delete on the backend, then re-fetch the list whatever it answered."""
        resp = await self._client.delete_point(counter_id)
        if resp.transport_error is not None:
            logger.warning("points_delete_failed", counter_id=counter_id, reason=resp.describe())
            return self.counters
        if not resp.ok:
            logger.warning("points_delete_rejected", counter_id=counter_id, reason=resp.describe())
        return await self.refresh()

    async def move(self, counter_id: int, up: bool) -> tuple[Counter, ...]:
        """Swap a counter with its neighbour on the backend, then re-fetch.

        A move past either end of the sequence is a no-op without a request.
        """
        if not self.can_move(counter_id, up):
            logger.info("points_move_refused", counter_id=counter_id, up=up)
            return self.counters
        resp = await self._client.set_priority(counter_id, up)
        if resp.transport_error is not None:
            logger.warning("points_move_failed", counter_id=counter_id, reason=resp.describe())
            return self.counters
        if not resp.ok:
            logger.warning("points_move_rejected", counter_id=counter_id, reason=resp.describe())
        return await self.refresh()

    # --- Point arithmetic ---

    def increment(self, counter_id: int) -> asyncio.Task | None:
        new_points = self._require(counter_id).points + 1
        task = self.set_points(counter_id, new_points)
        if task is not None:
            self._feedback.play(level_up_cue(new_points))
        return task

    def decrement(self, counter_id: int) -> asyncio.Task | None:
        if not self.can_decrement(counter_id):
            return None
        new_points = self._require(counter_id).points - 1
        task = self.set_points(counter_id, new_points)
        if task is not None:
            self._feedback.play(Cue.LEVEL_DOWN)
        return task

    def redeem(self, counter_id: int) -> asyncio.Task | None:
        if not self.can_redeem(counter_id):
            return None
        cost = self._policy.redeem_cost
        self._feedback.play(Cue.REDEEM)
        return self.set_points(counter_id, self._require(counter_id).points - cost)

    async def wait_idle(self) -> None:
        """Wait for every in-flight write to settle."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # --- Internals ---

    def _require(self, counter_id: int) -> Counter:
        counter = self.get(counter_id)
        if counter is None:
            raise UnknownCounterError(counter_id)
        return counter

    def _patch(self, counter_id: int, **fields: object) -> None:
        for idx, counter in enumerate(self._counters):
            if counter.id == counter_id:
                self._counters[idx] = counter.model_copy(update=fields)
                self._notify()
                return
        logger.debug("points_patch_unknown_id", counter_id=counter_id)

    def _spawn(self, coro: Awaitable[None]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._write_done)
        return task

    def _write_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("points_write_crashed", error=repr(task.exception()))

    async def _write_points(self, counter_id: int, points: int) -> None:
        resp = await self._client.set_points(counter_id, points)
        if not resp.ok:
            # No rollback: the cache keeps the optimistic value until the next refresh.
            logger.warning(
                "points_update_failed",
                counter_id=counter_id,
                points=points,
                reason=resp.describe(),
            )

    async def _write_name(self, counter_id: int, name: str) -> None:
        resp = await self._client.set_name(counter_id, name)
        if not resp.ok:
            logger.warning(
                "name_update_failed",
                counter_id=counter_id,
                name=name,
                reason=resp.describe(),
            )
