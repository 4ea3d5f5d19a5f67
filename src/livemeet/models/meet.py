"""Meet-level models: meet information and divisions."""

from __future__ import annotations

from typing import Any

from pydantic import ConfigDict, Field, field_validator

from livemeet._constants import DEFAULT_UNITS
from livemeet.ingestion.normalize import safe_str
from livemeet.models._base import DocumentId, MeetBaseModel


class MeetInfo(MeetBaseModel):
    """Meet name, date, federation, units and display configuration.

    ``extra_stuff`` holds auxiliary documents (id prefix ``e``) verbatim.
    """

    name: str | None = None
    date: str | None = None
    federation: str | None = None
    units: str = DEFAULT_UNITS
    plates: Any = None
    date_format: str | None = None
    type: str | None = None
    extra_stuff: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator("name", "date", "federation", "date_format", "type", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("units", mode="before")
    @classmethod
    def _default_units(cls, value: Any) -> str:
        return safe_str(value) or DEFAULT_UNITS


class Division(MeetBaseModel):
    """A competition division.

    Unknown keys (equipment level, lift keys, ...) are kept as-is so the
    snapshot carries the whole division document.
    """

    model_config = ConfigDict(extra="allow")

    id: DocumentId
    name: str
