"""Lifter model and per-discipline results."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from livemeet._constants import ATTEMPT_SLOTS
from livemeet.models._base import DocumentId, MeetBaseModel


class Sex(StrEnum):
    MALE = "MALE"
    FEMALE = "FEMALE"

    @classmethod
    def parse(cls, value: Any) -> Sex | str:
        """Known sexes as members; any other label is kept upper-cased."""
        label = str(value).strip().upper()
        try:
            return cls(label)
        except ValueError:
            return label


class LiftResult(BaseModel):
    """Signed attempt slots for one discipline plus the derived best lift.

    Slot values: positive for a good lift, negative magnitude for a failed
    lift, ``0`` for not yet attempted or pending.
    """

    model_config = ConfigDict(frozen=True)

    attempts: tuple[float, float, float] = (0.0, 0.0, 0.0)
    best: float = 0.0

    @field_validator("attempts", mode="before")
    @classmethod
    def _accept_slot_mapping(cls, value: Any) -> Any:
        # Accept the wire form {"1": .., "2": .., "3": ..} as well as a sequence.
        if isinstance(value, dict):
            return tuple(value.get(str(slot), value.get(slot, 0.0)) for slot in ATTEMPT_SLOTS)
        return value

    @model_serializer
    def _serialize(self) -> dict[str, float]:
        wire = {str(slot): weight for slot, weight in zip(ATTEMPT_SLOTS, self.attempts, strict=True)}
        wire["best"] = self.best
        return wire

    def slot(self, number: int) -> float:
        return self.attempts[number - 1]


class Lifter(MeetBaseModel):
    """A lifter as shown in a snapshot."""

    id: DocumentId
    name: str
    sex: Sex | str
    weight_class: str = "0"
    bodyweight: float = 0.0
    """Kilograms; ``0`` until weighed in."""
    division: str = ""
    division_id: str | None = None
    squat: LiftResult = Field(default_factory=LiftResult)
    bench: LiftResult = Field(default_factory=LiftResult)
    deadlift: LiftResult = Field(default_factory=LiftResult)
    total: float = 0.0
    place: int | None = None
    records: dict[str, Any] = Field(default_factory=dict)
    squat_rack_height: str = ""
    bench_rack_height: str = ""
    team: str = ""
    lot: int | str | None = None
    platform_id: str | None = None
    session: int | str | None = None
    flight: str = ""

    @field_validator("sex", mode="before")
    @classmethod
    def _coerce_sex(cls, value: Any) -> Sex | str:
        return Sex.parse(value)

    def result_for(self, discipline: str) -> LiftResult:
        result: LiftResult = getattr(self, str(discipline))
        return result

    @property
    def group_key(self) -> tuple[str | None, str, str]:
        """Placement cohort: division, sex, weight class."""
        return (self.division_id, self.sex, self.weight_class)
