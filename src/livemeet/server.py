"""aiohttp application serving the viewer channel.

- ``GET {ws_path}``: WebSocket viewer channel. Joining sends an ``initial``
  message; every successful poll cycle broadcasts an ``update``. The only
  inbound command is ``{"type": "configure", "meetId": ..., "federation": ...}``.
- ``GET /healthz``: current target, last update and viewer count.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import aiohttp
from aiohttp import web

from livemeet._transport import DocumentSource, HttpDocumentSource
from livemeet.config import LiveMeetConfig
from livemeet.federations import FederationRegistry, load_federations
from livemeet.hub import BroadcastHub
from livemeet.scheduler import MeetTarget, PollingScheduler
from livemeet.state.store import SnapshotStore

_logger = logging.getLogger(__name__)

CONFIG_KEY = web.AppKey("livemeet_config", LiveMeetConfig)
STORE_KEY = web.AppKey("livemeet_store", SnapshotStore)
HUB_KEY = web.AppKey("livemeet_hub", BroadcastHub)
FEDERATIONS_KEY = web.AppKey("livemeet_federations", FederationRegistry)
SCHEDULER_KEY = web.AppKey("livemeet_scheduler", PollingScheduler)

CONFIGURE = "configure"


def handle_viewer_message(scheduler: PollingScheduler, text: str) -> bool:
    """Apply one inbound viewer message. Returns whether it was understood."""
    try:
        message: Any = json.loads(text)
    except json.JSONDecodeError:
        _logger.warning("Ignoring non-JSON viewer message: %.100s", text)
        return False
    if not isinstance(message, dict):
        _logger.warning("Ignoring viewer message that is not an object")
        return False

    if message.get("type") != CONFIGURE:
        _logger.debug("Ignoring viewer message of type %r", message.get("type"))
        return False

    meet_id = message.get("meetId")
    if not isinstance(meet_id, str) or not meet_id.strip():
        _logger.warning("Ignoring configure message without a meet id")
        return False
    federation = message.get("federation")
    if not isinstance(federation, str) or not federation.strip():
        federation = None

    scheduler.configure(meet_id.strip(), federation.strip() if federation else None)
    return True


async def viewer_channel(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse(heartbeat=30.0)
    await ws.prepare(request)

    hub = request.app[HUB_KEY]
    scheduler = request.app[SCHEDULER_KEY]

    await hub.join(ws)
    try:
        async for msg in ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                handle_viewer_message(scheduler, msg.data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                _logger.warning("Viewer channel closed with error: %r", ws.exception())
    finally:
        hub.leave(ws)
    return ws


async def healthz(request: web.Request) -> web.Response:
    store = request.app[STORE_KEY]
    scheduler = request.app[SCHEDULER_KEY]
    target = scheduler.target
    last_update = store.current.last_update
    return web.json_response(
        {
            "meetId": target.meet_id if target else None,
            "federation": target.federation if target else None,
            "lastUpdate": last_update.isoformat() if last_update else None,
            "viewers": request.app[HUB_KEY].viewer_count,
            "consecutiveFailures": scheduler.consecutive_failures,
        }
    )


def _initial_target(config: LiveMeetConfig) -> MeetTarget | None:
    if not config.meet_id:
        return None
    return MeetTarget(meet_id=config.meet_id, federation=config.federation or config.default_federation)


def create_app(
    config: LiveMeetConfig | None = None,
    *,
    source: DocumentSource | None = None,
    federations: FederationRegistry | None = None,
) -> web.Application:
    """Build the viewer application.

    When *source* is omitted an :class:`HttpDocumentSource` is created on
    startup with its own ``aiohttp.ClientSession``, closed on cleanup.
    """
    config = config or LiveMeetConfig()
    if federations is None:
        federations = load_federations(config.federations_path, default=config.default_federation)

    store = SnapshotStore()
    hub = BroadcastHub(store, federations.codes, send_timeout=config.send_timeout)

    app = web.Application()
    app[CONFIG_KEY] = config
    app[STORE_KEY] = store
    app[HUB_KEY] = hub
    app[FEDERATIONS_KEY] = federations

    async def _lifecycle(app: web.Application) -> AsyncIterator[None]:
        http_session: aiohttp.ClientSession | None = None
        doc_source = source
        if doc_source is None:
            http_session = aiohttp.ClientSession()
            doc_source = HttpDocumentSource(config, http_session)

        scheduler = PollingScheduler(
            source=doc_source,
            store=store,
            hub=hub,
            federations=federations,
            interval=config.poll_interval,
            max_backoff=config.poll_max_backoff,
            target=_initial_target(config),
        )
        app[SCHEDULER_KEY] = scheduler
        scheduler.start()
        _logger.info("Polling every %.1fs", config.poll_interval)
        try:
            yield
        finally:
            await scheduler.stop()
            if http_session is not None:
                await http_session.close()

    app.cleanup_ctx.append(_lifecycle)
    app.router.add_get(config.ws_path, viewer_channel)
    app.router.add_get("/healthz", healthz)
    return app
