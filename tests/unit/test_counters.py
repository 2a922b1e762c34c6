"""Unit tests for the counter collection synchronizer."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from snailpoints.core.counters import CounterSynchronizer, StaticPolicy
from snailpoints.core.feedback import Cue, RecordingFeedback
from snailpoints.exceptions import UnknownCounterError


class StatefulPoints:
    """In-memory counter store answering the counter endpoints."""

    def __init__(self, backend, counters=None, next_id=1):
        self.rows = [dict(c) for c in (counters or [])]
        self.next_id = next_id
        backend.on("GET", "/points/list", handler=self.list)
        backend.on("POST", "/points/new", handler=self.new)
        backend.on("POST", "/points/set/points", handler=self.set_points)
        backend.on("POST", "/points/set/name", handler=self.set_name)
        backend.on("POST", "/points/delete", handler=self.delete)
        backend.on("POST", "/points/set/priority", handler=self.priority)

    def _row(self, request: httpx.Request) -> dict | None:
        counter_id = int(request.url.params["id"])
        return next((r for r in self.rows if r["id"] == counter_id), None)

    def list(self, request):
        return 200, {"points": [dict(r) for r in self.rows]}

    def new(self, request):
        row = {"id": self.next_id, "name": "", "points": 0}
        self.next_id += 1
        self.rows.append(row)
        return 200, dict(row)

    def set_points(self, request):
        row = self._row(request)
        if row is None:
            return 400, {"error": "No such point"}
        row["points"] = int(request.url.params["points"])
        return 200, {"success": True}

    def set_name(self, request):
        self._row(request)["name"] = request.url.params["name"]
        return 200, {"success": True}

    def delete(self, request):
        self.rows.remove(self._row(request))
        return 200, {"success": True}

    def priority(self, request):
        row = self._row(request)
        idx = self.rows.index(row)
        other = idx - 1 if request.url.params["up"] == "true" else idx + 1
        if 0 <= other < len(self.rows):
            self.rows[idx], self.rows[other] = self.rows[other], self.rows[idx]
        return 200, {"success": True}


ROWS = [
    {"id": 1, "name": "Alex", "points": 3},
    {"id": 2, "name": "Sam", "points": 25},
    {"id": 3, "name": "", "points": 0},
]


@pytest.fixture
def store(backend):
    return StatefulPoints(backend, ROWS, next_id=4)


@pytest.fixture
def feedback():
    return RecordingFeedback()


@pytest.fixture
async def counters(client, store, feedback):
    sync = CounterSynchronizer(client, policy=StaticPolicy(), feedback=feedback)
    await sync.refresh()
    return sync


class TestRefresh:
    """Test replacing the cache from the backend."""

    async def test_refresh_loads_in_order(self, counters):
        assert [c.id for c in counters.counters] == [1, 2, 3]
        assert counters.get(3).is_unnamed

    async def test_failed_refresh_keeps_cache(self, backend, counters):
        backend.on("GET", "/points/list", status=500, json={})

        result = await counters.refresh()

        assert [c.id for c in result] == [1, 2, 3]

    async def test_refresh_notifies(self, counters):
        calls = []
        counters.subscribe(lambda: calls.append(1))

        await counters.refresh()

        assert calls == [1]

    async def test_unsubscribe(self, counters):
        calls = []
        unsubscribe = counters.subscribe(lambda: calls.append(1))
        unsubscribe()

        await counters.refresh()

        assert calls == []


class TestScalarEdits:
    """Test optimistic points and name writes."""

    async def test_set_points_patches_before_write(self, backend, counters, store):
        gate = backend.hold("POST", "/points/set/points")

        task = counters.set_points(1, 9)

        assert counters.get(1).points == 9
        assert store.rows[0]["points"] == 3
        gate.set()
        await task
        assert store.rows[0]["points"] == 9

    async def test_negative_refused_without_request(self, backend, counters):
        task = counters.set_points(3, -1)

        assert task is None
        assert counters.get(3).points == 0
        assert backend.calls("POST", "/points/set/points") == []

    async def test_negative_allowed_by_policy(self, client, store):
        sync = CounterSynchronizer(client, policy=StaticPolicy(allow_negative=True))
        await sync.refresh()

        task = sync.set_points(3, -4)

        assert task is not None
        await sync.wait_idle()
        assert sync.get(3).points == -4
        assert store.rows[2]["points"] == -4

    async def test_climb_back_from_negative_refused(self, backend, client):
        StatefulPoints(backend, [{"id": 9, "name": "Kim", "points": -5}])
        sync = CounterSynchronizer(client)
        await sync.refresh()

        assert sync.increment(9) is None
        assert sync.get(9).points == -5
        assert backend.calls("POST", "/points/set/points") == []

    async def test_failed_write_keeps_optimistic_value(self, backend, counters):
        backend.on("POST", "/points/set/points", status=500, json={"error": "boom"})

        counters.set_points(1, 8)
        await counters.wait_idle()

        assert counters.get(1).points == 8
        assert counters.pending_writes == 0

    async def test_set_name(self, counters, store):
        counters.set_name(3, "Robin")

        assert counters.get(3).name == "Robin"
        await counters.wait_idle()
        assert store.rows[2]["name"] == "Robin"

    async def test_empty_name_ignored(self, backend, counters):
        assert counters.set_name(1, "") is None
        assert counters.get(1).name == "Alex"
        assert backend.calls("POST", "/points/set/name") == []

    async def test_unchanged_name_ignored(self, backend, counters):
        assert counters.set_name(1, "Alex") is None
        assert backend.calls("POST", "/points/set/name") == []

    async def test_patch_notifies_synchronously(self, counters):
        calls = []
        counters.subscribe(lambda: calls.append(counters.get(1).points))

        counters.set_points(1, 4)

        assert calls == [4]
        await counters.wait_idle()


class TestPointArithmetic:
    """Test increment, decrement and redeem with their cues."""

    async def test_increment_plays_level_up(self, counters, feedback):
        counters.increment(1)

        assert counters.get(1).points == 4
        assert feedback.cues == [Cue.LEVEL_UP]
        await counters.wait_idle()

    async def test_increment_to_multiple_of_ten_plays_milestone(self, counters, feedback):
        counters.set_points(1, 9)
        counters.increment(1)

        assert feedback.cues == [Cue.LEVEL_UP_MILESTONE]
        await counters.wait_idle()

    async def test_decrement(self, counters, feedback):
        counters.decrement(1)

        assert counters.get(1).points == 2
        assert feedback.cues == [Cue.LEVEL_DOWN]
        await counters.wait_idle()

    async def test_decrement_at_zero_refused(self, backend, counters, feedback):
        assert not counters.can_decrement(3)
        assert counters.decrement(3) is None
        assert feedback.cues == []
        assert backend.calls("POST", "/points/set/points") == []

    async def test_redeem_subtracts_cost(self, counters, feedback, store):
        assert counters.can_redeem(2)

        counters.redeem(2)

        assert counters.get(2).points == 5
        assert feedback.cues == [Cue.REDEEM]
        await counters.wait_idle()
        assert store.rows[1]["points"] == 5

    async def test_redeem_below_cost_refused(self, backend, counters, feedback):
        assert not counters.can_redeem(1)
        assert counters.redeem(1) is None
        assert feedback.cues == []
        assert backend.calls("POST", "/points/set/points") == []

    async def test_redeem_uses_policy_cost(self, client, store):
        sync = CounterSynchronizer(client, policy=StaticPolicy(redeem_cost=3))
        await sync.refresh()

        sync.redeem(1)

        assert sync.get(1).points == 0
        await sync.wait_idle()

    async def test_unknown_counter(self, counters):
        with pytest.raises(UnknownCounterError):
            counters.increment(99)


async def _until_requests(backend, method, path, count):
    """Yield to the loop until *count* requests to *path* have arrived."""
    for _ in range(100):
        if len(backend.calls(method, path)) >= count:
            return
        await asyncio.sleep(0)
    raise AssertionError(f"expected {count} {method} {path} requests")


class TestConcurrentWrites:
    """Test unqueued writes racing each other and membership changes."""

    async def test_overlapping_writes_are_not_queued(self, backend, counters, store):
        gate = backend.hold("POST", "/points/set/points")

        counters.set_points(1, 5)
        counters.set_points(1, 6)
        await _until_requests(backend, "POST", "/points/set/points", 2)

        sent = [r.url.params["points"] for r in backend.calls("POST", "/points/set/points")]
        assert sent == ["5", "6"]
        assert counters.get(1).points == 6
        assert counters.pending_writes == 2
        gate.set()
        await counters.wait_idle()
        assert counters.get(1).points == 6

    async def test_stale_write_after_delete_patches_nothing(self, backend, counters, store):
        gate = backend.hold("POST", "/points/set/points")
        task = counters.set_points(2, 30)
        await _until_requests(backend, "POST", "/points/set/points", 1)

        await counters.delete(2)
        assert [c.id for c in counters.counters] == [1, 3]

        gate.set()
        await task
        assert counters.get(2) is None
        assert [c.id for c in counters.counters] == [1, 3]
        assert [c.id for c in await counters.refresh()] == [1, 3]

    async def test_patch_of_unknown_id_is_ignored(self, counters):
        calls = []
        counters.subscribe(lambda: calls.append(1))

        counters.set_points(99, 4)

        assert counters.get(99) is None
        assert calls == []
        await counters.wait_idle()


class TestMembership:
    """Test create, delete and move, which re-sync from the backend."""

    async def test_create_appends(self, counters, store):
        created = await counters.create()

        assert created.id == 4
        assert created.is_unnamed
        assert [c.id for c in counters.counters] == [1, 2, 3, 4]

    async def test_failed_create_changes_nothing(self, backend, counters):
        backend.on("POST", "/points/new", status=500, json={})

        assert await counters.create() is None
        assert len(counters.counters) == 3

    async def test_delete_refreshes(self, counters):
        await counters.delete(2)

        assert [c.id for c in counters.counters] == [1, 3]

    async def test_rejected_delete_still_refreshes(self, backend, counters, store):
        backend.on("POST", "/points/delete", status=400, json={"error": "nope"})
        store.rows[0]["points"] = 50

        await counters.delete(2)

        assert len(backend.calls("GET", "/points/list")) == 2
        assert counters.get(1).points == 50

    async def test_delete_transport_error_skips_refresh(self, backend, counters):
        def fail(request):
            raise httpx.ConnectError("down", request=request)

        backend.on("POST", "/points/delete", handler=fail)

        await counters.delete(2)

        assert len(backend.calls("GET", "/points/list")) == 1
        assert len(counters.counters) == 3

    async def test_move_up_then_list(self, counters):
        await counters.move(2, up=True)

        assert [c.id for c in counters.counters] == [2, 1, 3]

    async def test_move_down(self, counters):
        await counters.move(2, up=False)

        assert [c.id for c in counters.counters] == [1, 3, 2]

    async def test_move_first_up_is_noop(self, backend, counters):
        result = await counters.move(1, up=True)

        assert [c.id for c in result] == [1, 2, 3]
        assert backend.calls("POST", "/points/set/priority") == []
        assert len(backend.calls("GET", "/points/list")) == 1

    async def test_move_last_down_is_noop(self, backend, counters):
        await counters.move(3, up=False)

        assert backend.calls("POST", "/points/set/priority") == []

    async def test_can_move_at_ends(self, counters):
        assert not counters.can_move(1, up=True)
        assert counters.can_move(1, up=False)
        assert counters.can_move(3, up=True)
        assert not counters.can_move(3, up=False)


class TestRoundTrip:
    """Create, name and count up a fresh counter."""

    async def test_create_name_and_increment(self, backend, client, feedback):
        store = StatefulPoints(backend, [], next_id=7)
        sync = CounterSynchronizer(client, feedback=feedback)
        await sync.refresh()

        created = await sync.create()
        assert created.id == 7
        listed = await sync.refresh()
        assert [c.model_dump() for c in listed] == [{"id": 7, "name": "", "points": 0}]

        sync.set_name(7, "Alex")
        assert sync.get(7).name == "Alex"

        for _ in range(5):
            sync.increment(7)
        assert feedback.cues[-1] is Cue.LEVEL_UP
        for _ in range(5):
            sync.increment(7)
        assert feedback.cues[-1] is Cue.LEVEL_UP_MILESTONE
        assert feedback.cues.count(Cue.LEVEL_UP_MILESTONE) == 1

        await sync.wait_idle()
        await asyncio.sleep(0)
        assert store.rows == [{"id": 7, "name": "Alex", "points": 10}]
        assert sync.get(7).points == 10
