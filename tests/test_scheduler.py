from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from conftest import lifter_doc, row

from livemeet.exceptions import SourceError
from livemeet.federations import FederationRegistry
from livemeet.hub import BroadcastHub
from livemeet.scheduler import MeetTarget, PollingScheduler
from livemeet.state.store import SnapshotStore


class FakeSource:
    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows or []
        self.error: SourceError | None = None
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None

    async def fetch_rows(self, meet_id: str) -> list[dict[str, Any]]:
        self.calls.append(meet_id)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.rows


class RecordingChannel:
    def __init__(self) -> None:
        self.raw: list[str] = []

    async def send_str(self, data: str) -> None:
        self.raw.append(data)

    @property
    def messages(self) -> list[dict[str, Any]]:
        return [json.loads(item) for item in self.raw]


def _clock() -> Iterator[datetime]:
    current = datetime(2026, 4, 11, 9, 0, tzinfo=UTC)
    while True:
        yield current
        current += timedelta(seconds=15)


def _scheduler(
    source: FakeSource,
    federations: FederationRegistry,
    *,
    store: SnapshotStore | None = None,
    target: MeetTarget | None = None,
    interval: float = 15.0,
    max_backoff: float = 120.0,
    send_timeout: float = 5.0,
) -> tuple[PollingScheduler, SnapshotStore, BroadcastHub]:
    store = store or SnapshotStore()
    hub = BroadcastHub(store, federations.codes, send_timeout=send_timeout)
    ticks = _clock()
    scheduler = PollingScheduler(
        source=source,
        store=store,
        hub=hub,
        federations=federations,
        interval=interval,
        max_backoff=max_backoff,
        target=target,
        clock=lambda: next(ticks),
    )
    return scheduler, store, hub


@pytest.mark.asyncio
async def test_refresh_without_target_is_noop(federations: FederationRegistry) -> None:
    source = FakeSource()
    scheduler, store, _hub = _scheduler(source, federations)

    assert await scheduler.refresh() is False
    assert source.calls == []
    assert store.generation == 0


@pytest.mark.asyncio
async def test_successful_cycle_installs_and_publishes(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1", name="Alice"))])
    scheduler, store, hub = _scheduler(source, federations, target=MeetTarget("m1", "IPF"))
    channel = RecordingChannel()
    await hub.join(channel)

    assert await scheduler.refresh() is True

    assert source.calls == ["m1"]
    assert store.current.lifters["l-1"].name == "Alice"
    assert store.current.last_update == datetime(2026, 4, 11, 9, 0, tzinfo=UTC)
    assert [message["type"] for message in channel.messages] == ["initial", "update"]
    assert channel.messages[1]["data"]["federation"] == "IPF"


@pytest.mark.asyncio
async def test_failed_fetch_keeps_previous_snapshot_byte_identical(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, store, hub = _scheduler(source, federations, target=MeetTarget("m1", "IPF"))
    watcher = RecordingChannel()
    await hub.join(watcher)
    await scheduler.refresh()
    broadcast = json.loads(watcher.raw[-1])["data"]

    source.error = SourceError("HTTP 500", status_code=500)
    assert await scheduler.refresh() is False
    assert scheduler.consecutive_failures == 1
    assert len(watcher.raw) == 2

    newcomer = RecordingChannel()
    await hub.join(newcomer)
    initial = newcomer.messages[0]["data"]
    initial.pop("federations")
    assert json.dumps(initial, sort_keys=True) == json.dumps(broadcast, sort_keys=True)


@pytest.mark.asyncio
async def test_derivation_failure_keeps_previous_snapshot(
    federations: FederationRegistry,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, store, _hub = _scheduler(source, federations, target=MeetTarget("m1", "IPF"))
    await scheduler.refresh()
    before = store.current

    def explode(*_args: Any, **_kwargs: Any) -> None:
        raise RuntimeError("boom")

    monkeypatch.setattr("livemeet.scheduler.build_snapshot", explode)

    assert await scheduler.refresh() is False
    assert store.current is before


@pytest.mark.asyncio
async def test_configure_triggers_immediate_refresh(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, store, _hub = _scheduler(source, federations)

    task = scheduler.configure("m-new", "USAPL")

    assert scheduler.target == MeetTarget("m-new", "USAPL")
    assert await task is True
    assert source.calls == ["m-new"]
    assert store.current.federation == "USAPL"


@pytest.mark.asyncio
async def test_configure_without_federation_uses_default(federations: FederationRegistry) -> None:
    scheduler, _store, _hub = _scheduler(FakeSource(), federations)

    await scheduler.configure("m1")

    assert scheduler.target == MeetTarget("m1", "IPF")


@pytest.mark.asyncio
async def test_viewer_joins_while_fetch_in_flight(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, _store, hub = _scheduler(source, federations, target=MeetTarget("m1", "IPF"))
    source.gate = asyncio.Event()

    cycle = asyncio.create_task(scheduler.refresh())
    await asyncio.sleep(0)
    viewer = RecordingChannel()
    await hub.join(viewer)

    assert [message["type"] for message in viewer.messages] == ["initial"]
    assert viewer.messages[0]["data"]["lifters"] == {}

    source.gate.set()
    assert await cycle is True
    assert [message["type"] for message in viewer.messages] == ["initial", "update"]


@pytest.mark.asyncio
async def test_cycles_do_not_overlap(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, store, _hub = _scheduler(source, federations, target=MeetTarget("m1", "IPF"))
    source.gate = asyncio.Event()

    first = asyncio.create_task(scheduler.refresh())
    second = asyncio.create_task(scheduler.refresh())
    await asyncio.sleep(0)
    assert source.calls == ["m1"]

    source.gate.set()
    assert await asyncio.gather(first, second) == [True, True]
    assert store.generation == 2


@pytest.mark.asyncio
async def test_backoff_grows_and_is_capped(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, _store, _hub = _scheduler(
        source, federations, target=MeetTarget("m1", "IPF"), interval=15.0, max_backoff=100.0
    )
    assert scheduler.next_delay() == 15.0

    source.error = SourceError("unreachable")
    await scheduler.refresh()
    assert scheduler.next_delay() == 30.0
    for _ in range(4):
        await scheduler.refresh()
    assert scheduler.consecutive_failures == 5
    assert scheduler.next_delay() == 100.0

    source.error = None
    await scheduler.refresh()
    assert scheduler.consecutive_failures == 0
    assert scheduler.next_delay() == 15.0


@pytest.mark.asyncio
async def test_backoff_disabled_keeps_fixed_interval(federations: FederationRegistry) -> None:
    source = FakeSource()
    source.error = SourceError("unreachable")
    scheduler, _store, _hub = _scheduler(
        source, federations, target=MeetTarget("m1", "IPF"), interval=15.0, max_backoff=0.0
    )
    for _ in range(3):
        await scheduler.refresh()

    assert scheduler.next_delay() == 15.0


@pytest.mark.asyncio
async def test_run_loop_polls_on_interval_and_stops(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, store, _hub = _scheduler(source, federations, target=MeetTarget("m1", "IPF"), interval=0.01)

    scheduler.start()
    for _ in range(100):
        if store.generation >= 3:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert store.generation >= 3
    assert not scheduler.is_running


class CrashingSource(FakeSource):
    """Raises a non-source error for the first ``crashes`` fetches."""

    def __init__(self, rows: list[dict[str, Any]], crashes: int) -> None:
        super().__init__(rows)
        self.crashes = crashes

    async def fetch_rows(self, meet_id: str) -> list[dict[str, Any]]:
        self.calls.append(meet_id)
        if len(self.calls) <= self.crashes:
            raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        return self.rows


class StuckChannel(RecordingChannel):
    """Accepts the initial message, then never finishes another send."""

    async def send_str(self, data: str) -> None:
        if self.raw:
            await asyncio.Event().wait()
        self.raw.append(data)


@pytest.mark.asyncio
async def test_unexpected_fetch_error_keeps_previous_snapshot(federations: FederationRegistry) -> None:
    source = CrashingSource([row(lifter_doc("l-1"))], crashes=1)
    scheduler, store, _hub = _scheduler(source, federations, target=MeetTarget("m1", "IPF"))

    assert await scheduler.refresh() is False
    assert scheduler.consecutive_failures == 1
    assert store.generation == 0

    assert await scheduler.refresh() is True
    assert scheduler.consecutive_failures == 0


@pytest.mark.asyncio
async def test_run_loop_survives_failing_cycles(federations: FederationRegistry) -> None:
    source = CrashingSource([row(lifter_doc("l-1"))], crashes=2)
    scheduler, store, _hub = _scheduler(
        source, federations, target=MeetTarget("m1", "IPF"), interval=0.01, max_backoff=0.0
    )

    scheduler.start()
    for _ in range(100):
        if store.generation >= 1:
            break
        await asyncio.sleep(0.01)
    running = scheduler.is_running
    await scheduler.stop()

    assert running
    assert len(source.calls) >= 3
    assert store.generation >= 1


@pytest.mark.asyncio
async def test_run_loop_keeps_going_when_refresh_raises(
    federations: FederationRegistry,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    scheduler, _store, _hub = _scheduler(
        FakeSource(), federations, target=MeetTarget("m1", "IPF"), interval=0.01, max_backoff=0.0
    )
    attempts: list[int] = []

    async def broken_refresh() -> bool:
        attempts.append(1)
        raise RuntimeError("boom")

    monkeypatch.setattr(scheduler, "refresh", broken_refresh)

    scheduler.start()
    for _ in range(100):
        if len(attempts) >= 3:
            break
        await asyncio.sleep(0.01)
    running = scheduler.is_running
    await scheduler.stop()

    assert running
    assert len(attempts) >= 3
    assert scheduler.consecutive_failures >= 3


@pytest.mark.asyncio
async def test_stuck_viewer_does_not_stall_polling(federations: FederationRegistry) -> None:
    source = FakeSource([row(lifter_doc("l-1"))])
    scheduler, store, hub = _scheduler(
        source, federations, target=MeetTarget("m1", "IPF"), interval=0.01, send_timeout=0.05
    )
    stuck = StuckChannel()
    healthy = RecordingChannel()
    await hub.join(stuck)
    await hub.join(healthy)

    scheduler.start()
    for _ in range(200):
        if store.generation >= 3:
            break
        await asyncio.sleep(0.01)
    await scheduler.stop()

    assert store.generation >= 3
    assert len(healthy.messages) >= 4
    assert stuck in hub
