"""Custom exception hierarchy for livemeet."""

from __future__ import annotations


class LiveMeetError(Exception):
    """Base exception for all livemeet errors."""


class LiveMeetConfigError(LiveMeetError):
    """Invalid or missing configuration."""


class SourceError(LiveMeetError):
    """Document source failure (network, non-2xx, invalid JSON, bad payload shape)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)
