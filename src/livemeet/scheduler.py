"""Poll cycle driver.

Each cycle fetches the configured meet's documents, derives a snapshot,
installs it in the store and publishes it to viewers. A failed cycle keeps
the previous snapshot.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from livemeet._constants import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_MAX_BACKOFF
from livemeet._transport import DocumentSource
from livemeet.exceptions import SourceError
from livemeet.federations import FederationRegistry
from livemeet.hub import BroadcastHub
from livemeet.ingestion.pipeline import build_snapshot
from livemeet.state.store import SnapshotStore

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class MeetTarget:
    """The meet being followed and the federation used to score it."""

    meet_id: str
    federation: str


class PollingScheduler:
    """Runs the fetch → derive → install → publish cycle on a fixed interval.

    Cycles never overlap: a refresh requested while another is in flight
    waits for it. Consecutive failures stretch the wait up to
    ``max_backoff`` seconds (``0`` keeps the fixed interval).
    """

    def __init__(
        self,
        *,
        source: DocumentSource,
        store: SnapshotStore,
        hub: BroadcastHub,
        federations: FederationRegistry,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_backoff: float = DEFAULT_POLL_MAX_BACKOFF,
        target: MeetTarget | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._source = source
        self._store = store
        self._hub = hub
        self._federations = federations
        self._interval = interval
        self._max_backoff = max_backoff
        self._target = target
        self._clock = clock
        self._cycle_lock = asyncio.Lock()
        self._failures = 0
        self._loop_task: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def target(self) -> MeetTarget | None:
        return self._target

    @property
    def consecutive_failures(self) -> int:
        return self._failures

    @property
    def is_running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    def next_delay(self) -> float:
        """Seconds to wait before the next scheduled cycle."""
        if self._failures == 0 or self._max_backoff <= 0:
            return self._interval
        ceiling = max(self._max_backoff, self._interval)
        return min(self._interval * 2**self._failures, ceiling)

    def configure(self, meet_id: str, federation: str | None = None) -> asyncio.Task[bool]:
        """Follow a new meet and refresh immediately, outside the regular cadence.

        Returns the task running the refresh.
        """
        code = federation or self._federations.default_code
        self._target = MeetTarget(meet_id=meet_id, federation=code)
        self._failures = 0
        _logger.info("Configured: meet=%s federation=%s", meet_id, code)

        task = asyncio.create_task(self.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def refresh(self) -> bool:
        """Run one cycle. Returns ``True`` when a new snapshot was installed."""
        async with self._cycle_lock:
            target = self._target
            if target is None:
                _logger.debug("No meet configured")
                return False

            try:
                rows = await self._source.fetch_rows(target.meet_id)
            except SourceError as exc:
                self._failures += 1
                _logger.warning("Fetching meet %s failed, keeping previous snapshot: %s", target.meet_id, exc)
                return False
            except Exception:
                self._failures += 1
                _logger.warning(
                    "Unexpected error fetching meet %s, keeping previous snapshot",
                    target.meet_id,
                    exc_info=True,
                )
                return False

            try:
                snapshot = build_snapshot(
                    rows,
                    federation_code=target.federation,
                    federation=self._federations.get(target.federation),
                    updated_at=self._clock(),
                )
            except Exception:
                self._failures += 1
                _logger.warning(
                    "Deriving snapshot for meet %s failed, keeping previous snapshot",
                    target.meet_id,
                    exc_info=True,
                )
                return False

            self._failures = 0
            self._store.replace(snapshot)
            _logger.info("Updated data for %d lifters", len(snapshot.lifters))
            await self._hub.publish(snapshot)
            return True

    async def run(self) -> None:
        """Poll until cancelled; refreshes first when a meet is already configured."""
        if self._target is not None:
            await self._scheduled_refresh()
        while True:
            await asyncio.sleep(self.next_delay())
            if self._target is None:
                continue
            await self._scheduled_refresh()

    async def _scheduled_refresh(self) -> None:
        # One bad cycle must not end the loop.
        try:
            await self.refresh()
        except Exception:
            self._failures += 1
            _logger.exception("Poll cycle failed")

    def start(self) -> asyncio.Task[None]:
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = asyncio.create_task(self.run())
        return self._loop_task

    async def stop(self) -> None:
        tasks: list[asyncio.Task[Any]] = [*self._pending]
        if self._loop_task is not None:
            tasks.append(self._loop_task)
        self._loop_task = None
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
