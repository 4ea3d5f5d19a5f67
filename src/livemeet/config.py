"""Service configuration for livemeet."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from livemeet._constants import (
    DEFAULT_FEDERATION,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_POLL_MAX_BACKOFF,
    DEFAULT_PORT,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SEND_TIMEOUT,
    SOURCE_BASE_URL,
    SOURCE_ORIGIN,
)
from livemeet.exceptions import LiveMeetConfigError


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    value = env.get(key)
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError as exc:
        raise LiveMeetConfigError(f"{key} must be a number, got {value!r}") from exc


@dataclasses.dataclass(frozen=True)
class LiveMeetConfig:
    """Service configuration.

    Parameters
    ----------
    source_base_url : str
        Base URL of the document store hosting the meet feed.
    source_origin : str
        Value sent as ``Origin``/``Referer`` with every source request.
    request_timeout : float
        Total timeout in seconds for a single bulk fetch.
    send_timeout : float
        Seconds a single message to one viewer may take before that
        delivery is given up.
    poll_interval : float
        Seconds between two poll cycles.
    poll_max_backoff : float
        Upper bound in seconds for the wait after consecutive failed cycles.
        ``0`` disables backoff and keeps a fixed cadence.
    host : str
        Interface the viewer server binds to.
    port : int
        Port the viewer server listens on.
    ws_path : str
        Route of the viewer WebSocket channel.
    default_federation : str
        Federation used when a viewer configures a meet without one, and the
        fallback for unknown federation codes.
    meet_id : str or None
        Meet to start polling on startup, before any viewer configures one.
    federation : str or None
        Federation for ``meet_id``.
    federations_path : str or None
        Optional JSON file replacing the bundled federation table.
    """

    source_base_url: str = SOURCE_BASE_URL
    source_origin: str = SOURCE_ORIGIN
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    send_timeout: float = DEFAULT_SEND_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    poll_max_backoff: float = DEFAULT_POLL_MAX_BACKOFF
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    ws_path: str = "/ws"
    default_federation: str = DEFAULT_FEDERATION
    meet_id: str | None = None
    federation: str | None = None
    federations_path: str | None = None

    def __post_init__(self) -> None:
        if self.poll_interval <= 0:
            raise LiveMeetConfigError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.poll_max_backoff < 0:
            raise LiveMeetConfigError(f"poll_max_backoff must not be negative, got {self.poll_max_backoff}")
        if self.request_timeout <= 0:
            raise LiveMeetConfigError(f"request_timeout must be positive, got {self.request_timeout}")
        if self.send_timeout <= 0:
            raise LiveMeetConfigError(f"send_timeout must be positive, got {self.send_timeout}")
        if not self.ws_path.startswith("/"):
            raise LiveMeetConfigError(f"ws_path must start with '/', got {self.ws_path!r}")

    @classmethod
    def from_env(cls, **overrides: Any) -> LiveMeetConfig:
        """Create configuration from ``LIVEMEET_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "LIVEMEET_SOURCE_BASE_URL": "source_base_url",
            "LIVEMEET_SOURCE_ORIGIN": "source_origin",
            "LIVEMEET_HOST": "host",
            "LIVEMEET_WS_PATH": "ws_path",
            "LIVEMEET_DEFAULT_FEDERATION": "default_federation",
            "LIVEMEET_MEET_ID": "meet_id",
            "LIVEMEET_FEDERATION": "federation",
            "LIVEMEET_FEDERATIONS_PATH": "federations_path",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        _ENV_FLOAT_MAP = {
            "LIVEMEET_POLL_INTERVAL": "poll_interval",
            "LIVEMEET_POLL_MAX_BACKOFF": "poll_max_backoff",
            "LIVEMEET_REQUEST_TIMEOUT": "request_timeout",
            "LIVEMEET_SEND_TIMEOUT": "send_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            parsed = _env_float(env, env_key)
            if parsed is not None:
                config_kwargs[field_name] = parsed

        port = _env_float(env, "LIVEMEET_PORT")
        if port is not None:
            config_kwargs["port"] = int(port)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
