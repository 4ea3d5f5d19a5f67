"""Attempt model, disciplines and attempt outcomes."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import field_serializer, field_validator

from livemeet.ingestion.normalize import normalize_discipline, safe_float, safe_int
from livemeet.models._base import DocumentId, MeetBaseModel


class Discipline(StrEnum):
    SQUAT = "squat"
    BENCH = "bench"
    DEADLIFT = "deadlift"


class Outcome(StrEnum):
    GOOD = "good"
    BAD = "bad"
    PENDING = "pending"

    @classmethod
    def parse(cls, value: Any) -> Outcome:
        """Map a raw ``result`` value.

        ``None`` is pending, ``"good"`` (any case) is good, and any other
        recorded result is treated as a failed lift.
        """
        if value is None:
            return cls.PENDING
        if isinstance(value, Outcome):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.GOOD:
            return cls.GOOD
        if isinstance(value, str) and value.strip().lower() == cls.PENDING:
            return cls.PENDING
        return cls.BAD


class Attempt(MeetBaseModel):
    """A single declared attempt.

    ``result`` carries the explicit outcome; :attr:`signed_weight` is the
    positive/negative/zero encoding used in lifter slot arrays.
    """

    id: DocumentId
    lifter_id: str
    lift_name: str
    attempt_number: int
    weight: float = 0.0
    result: Outcome = Outcome.PENDING
    decisions: Any = None
    create_date: Any = None

    @field_validator("attempt_number", mode="before")
    @classmethod
    def _coerce_attempt_number(cls, value: Any) -> int:
        parsed = safe_int(value)
        if not parsed:
            raise ValueError("attemptNumber must be a non-zero number")
        return parsed

    @field_validator("weight", mode="before")
    @classmethod
    def _coerce_weight(cls, value: Any) -> float:
        return safe_float(value) or 0.0

    @field_validator("result", mode="before")
    @classmethod
    def _parse_result(cls, value: Any) -> Outcome:
        return Outcome.parse(value)

    @field_serializer("result")
    def _serialize_result(self, value: Outcome) -> str | None:
        return None if value == Outcome.PENDING else value.value

    @property
    def discipline(self) -> Discipline | None:
        name = normalize_discipline(self.lift_name)
        return Discipline(name) if name is not None else None

    @property
    def signed_weight(self) -> float:
        """Slot encoding: weight if good, ``-abs(weight)`` if bad, ``0`` while pending."""
        if self.result == Outcome.GOOD:
            return self.weight
        if self.result == Outcome.BAD:
            return -abs(self.weight) or 0.0
        return 0.0
