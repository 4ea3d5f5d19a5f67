"""Viewer registry and snapshot fan-out."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Protocol

from livemeet._constants import DEFAULT_SEND_TIMEOUT
from livemeet.models.snapshot import Snapshot
from livemeet.state.store import SnapshotStore

_logger = logging.getLogger(__name__)

INITIAL = "initial"
UPDATE = "update"


class ViewerChannel(Protocol):
    """A push connection to one viewer (e.g. an aiohttp ``WebSocketResponse``)."""

    async def send_str(self, data: str) -> None:
        ...


@dataclass(eq=False)
class _Viewer:
    channel: ViewerChannel
    # Serializes sends so one viewer's stream stays in order.
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


def encode_message(kind: str, data: dict[str, Any]) -> str:
    return json.dumps({"type": kind, "data": data}, separators=(",", ":"))


class BroadcastHub:
    """Tracks connected viewers and pushes snapshots to them.

    Parameters
    ----------
    store
        Source of the snapshot handed to newly joined viewers.
    federation_codes
        Callable returning the federation codes advertised in ``initial``
        messages.
    send_timeout
        Seconds one delivery to one viewer may take, waiting for that
        viewer's earlier sends included. A delivery that runs over is
        abandoned and counted as failed.
    """

    def __init__(
        self,
        store: SnapshotStore,
        federation_codes: Callable[[], list[str]],
        *,
        send_timeout: float = DEFAULT_SEND_TIMEOUT,
    ) -> None:
        self._store = store
        self._federation_codes = federation_codes
        self._send_timeout = send_timeout
        self._viewers: dict[ViewerChannel, _Viewer] = {}

    @property
    def viewer_count(self) -> int:
        return len(self._viewers)

    def __contains__(self, channel: object) -> bool:
        return channel in self._viewers

    def initial_message(self, snapshot: Snapshot) -> str:
        data = snapshot.to_wire()
        data["federations"] = self._federation_codes()
        return encode_message(INITIAL, data)

    async def join(self, channel: ViewerChannel) -> bool:
        """Register *channel* and send it the current snapshot right away.

        Returns whether the initial message was delivered.
        """
        viewer = _Viewer(channel)
        self._viewers[channel] = viewer
        _logger.info("Viewer connected (%d total)", len(self._viewers))
        try:
            async with asyncio.timeout(self._send_timeout), viewer.lock:
                # Read the snapshot under the viewer lock so a concurrent publish
                # can only be delivered after this one.
                message = self.initial_message(self._store.current)
                return await self._send(viewer, message, INITIAL)
        except TimeoutError:
            self._log_timeout(INITIAL)
            return False

    def leave(self, channel: ViewerChannel) -> None:
        """Forget *channel*; calling it twice is harmless."""
        if self._viewers.pop(channel, None) is not None:
            _logger.info("Viewer disconnected (%d remaining)", len(self._viewers))

    async def publish(self, snapshot: Snapshot) -> int:
        """Send *snapshot* to every connected viewer.

        A failed or timed-out send is logged and skipped; the viewer stays
        registered. Returns the number of successful deliveries.
        """
        viewers = list(self._viewers.values())
        if not viewers:
            return 0
        message = encode_message(UPDATE, snapshot.to_wire())
        results = await asyncio.gather(*(self._deliver(viewer, message) for viewer in viewers))
        delivered = sum(1 for ok in results if ok)
        _logger.debug("Published snapshot to %d/%d viewer(s)", delivered, len(viewers))
        return delivered

    async def _deliver(self, viewer: _Viewer, message: str) -> bool:
        try:
            async with asyncio.timeout(self._send_timeout), viewer.lock:
                return await self._send(viewer, message, UPDATE)
        except TimeoutError:
            self._log_timeout(UPDATE)
            return False

    def _log_timeout(self, kind: str) -> None:
        _logger.warning("Sending %s message to viewer timed out after %.1fs", kind, self._send_timeout)

    @staticmethod
    async def _send(viewer: _Viewer, message: str, kind: str) -> bool:
        try:
            await viewer.channel.send_str(message)
        except Exception as exc:
            _logger.warning("Failed to send %s message to viewer: %r", kind, exc)
            return False
        return True
