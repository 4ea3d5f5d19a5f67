"""Platform and referee models."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator

from livemeet._constants import DEFAULT_TIMER_SECONDS
from livemeet.ingestion.normalize import safe_float, safe_str
from livemeet.models._base import DocumentId, MeetBaseModel


class Platform(MeetBaseModel):
    """A lifting platform with its clock and referee lights.

    ``clock_state`` is the raw clock document value; it is required to be
    present (it may be ``null``) and is not part of the snapshot output.
    """

    id: DocumentId
    name: str
    clock_state: Any = Field(exclude=True)
    clock_timer_length: float | None = None
    """Configured timer length in milliseconds."""
    bar_and_collars_weight: float | None = None
    current_attempt_id: str | None = None
    timer_remaining: float = DEFAULT_TIMER_SECONDS
    """Seconds left on the clock."""
    lights: list[bool] = Field(default_factory=list)

    @field_validator("clock_timer_length", "bar_and_collars_weight", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> float | None:
        return safe_float(value)

    @field_validator("current_attempt_id", mode="before")
    @classmethod
    def _coerce_attempt_id(cls, value: Any) -> str | None:
        return safe_str(value)


class Referee(MeetBaseModel):
    """A referee seat on a platform.

    ``decision`` is kept as recorded; anything other than ``"good"`` is a
    red light.
    """

    id: DocumentId
    platform_id: str
    position: str
    decision: Any = None
    cards: Any = None

    @property
    def approved(self) -> bool:
        return self.decision == "good"
