"""Entity projection: classify raw documents and materialize typed entities.

Each row of the source listing carries a ``doc`` whose ``_id`` prefix names
its kind. A document is decoded against the shape for that kind; a document
missing a required field is skipped on its own, and documents of unknown
kind are dropped without complaint.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from livemeet._constants import (
    ATTEMPT_PREFIX,
    DIVISION_PREFIX,
    EXTRA_PREFIX,
    LIFTER_PREFIX,
    MEET_PREFIX,
    PLATFORM_PREFIX,
    REFEREE_PREFIX,
)
from livemeet.ingestion.normalize import safe_float, safe_str
from livemeet.ingestion.weight_classes import WeightClassResolver
from livemeet.models._base import DocumentId, MeetBaseModel
from livemeet.models.attempt import Attempt
from livemeet.models.lifter import Lifter, Sex
from livemeet.models.meet import Division, MeetInfo
from livemeet.models.platform import Platform, Referee

_logger = logging.getLogger(__name__)


class DocumentKind(StrEnum):
    MEET = "meet"
    EXTRA = "extra"
    DIVISION = "division"
    LIFTER = "lifter"
    ATTEMPT = "attempt"
    PLATFORM = "platform"
    REFEREE = "referee"
    UNKNOWN = "unknown"


class LifterDocument(MeetBaseModel):
    """Shape of a raw lifter document (before class and division resolution)."""

    id: DocumentId
    name: str
    birth_date: str
    gender: str
    body_weight: float = 0.0
    divisions: list[Any] = Field(default_factory=list)
    team: str = ""
    lot: int | str | None = None
    platform_id: str | None = None
    session: int | str | None = None
    flight: str = ""
    squat_rack_height: str = ""
    bench_rack_height: str = ""

    @field_validator("birth_date", "platform_id", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> str | None:
        return safe_str(value)

    @field_validator("team", "flight", "squat_rack_height", "bench_rack_height", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return safe_str(value) or ""

    @field_validator("lot", "session", mode="before")
    @classmethod
    def _coerce_label(cls, value: Any) -> int | str | None:
        if value is None or (isinstance(value, (int, str)) and not isinstance(value, bool)):
            return value
        parsed = safe_float(value)
        if parsed is not None and parsed.is_integer():
            return int(parsed)
        return safe_str(value)

    @field_validator("body_weight", mode="before")
    @classmethod
    def _coerce_bodyweight(cls, value: Any) -> float:
        parsed = safe_float(value)
        return parsed if parsed is not None and parsed > 0 else 0.0

    @field_validator("divisions", mode="before")
    @classmethod
    def _coerce_divisions(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []

    @property
    def division_id(self) -> str | None:
        if not self.divisions:
            return None
        first = self.divisions[0]
        if not isinstance(first, Mapping):
            return None
        return safe_str(first.get("divisionId"))


@dataclass(frozen=True)
class DecodedDocument:
    """Tagged decode result; ``entity`` is ``None`` for skipped or unknown documents."""

    kind: DocumentKind
    entity: Any = None

    @property
    def skipped(self) -> bool:
        return self.kind != DocumentKind.UNKNOWN and self.entity is None


# Fixed priority order: the first matching prefix decides the kind.
_DECODERS: tuple[tuple[str, DocumentKind, type[BaseModel] | None], ...] = (
    (MEET_PREFIX, DocumentKind.MEET, MeetInfo),
    (EXTRA_PREFIX, DocumentKind.EXTRA, None),
    (DIVISION_PREFIX, DocumentKind.DIVISION, Division),
    (LIFTER_PREFIX, DocumentKind.LIFTER, LifterDocument),
    (ATTEMPT_PREFIX, DocumentKind.ATTEMPT, Attempt),
    (PLATFORM_PREFIX, DocumentKind.PLATFORM, Platform),
    (REFEREE_PREFIX, DocumentKind.REFEREE, Referee),
)


def classify(doc: Any) -> DocumentKind:
    """Kind of a raw document, from its ``_id`` prefix."""
    if not isinstance(doc, Mapping):
        return DocumentKind.UNKNOWN
    doc_id = doc.get("_id")
    if not isinstance(doc_id, str):
        return DocumentKind.UNKNOWN
    for prefix, kind, _model in _DECODERS:
        if doc_id.startswith(prefix):
            return kind
    return DocumentKind.UNKNOWN


def decode_document(doc: Any) -> DecodedDocument:
    """Decode one raw document into its typed entity."""
    kind = classify(doc)
    if kind == DocumentKind.UNKNOWN:
        return DecodedDocument(kind)

    model = next(model for _prefix, decoder_kind, model in _DECODERS if decoder_kind == kind)
    if model is None:
        return DecodedDocument(kind, {"id": doc["_id"], **doc})

    try:
        return DecodedDocument(kind, model.model_validate(doc))
    except ValidationError as exc:
        _logger.debug("Skipping malformed %s document %s: %d error(s)", kind, doc.get("_id"), exc.error_count())
        return DecodedDocument(kind)


@dataclass
class ProjectedMeet:
    """Entities projected from one document listing, keyed by id."""

    meet_info: MeetInfo | None = None
    divisions: dict[str, Division] = field(default_factory=dict)
    lifters: dict[str, Lifter] = field(default_factory=dict)
    attempts: dict[str, Attempt] = field(default_factory=dict)
    platforms: dict[str, Platform] = field(default_factory=dict)
    referees: dict[str, Referee] = field(default_factory=dict)
    skipped: int = 0
    unknown: int = 0


def project_lifter(
    doc: LifterDocument,
    resolver: WeightClassResolver,
    divisions: Mapping[str, Division],
) -> Lifter:
    """Resolve weight class and division name for a decoded lifter document."""
    division_id = doc.division_id
    division = divisions.get(division_id) if division_id is not None else None
    sex = Sex.parse(doc.gender)
    return Lifter(
        id=doc.id,
        name=doc.name,
        sex=sex,
        weight_class=resolver.resolve(sex, doc.body_weight),
        bodyweight=doc.body_weight,
        division=division.name if division is not None else "",
        division_id=division_id,
        squat_rack_height=doc.squat_rack_height,
        bench_rack_height=doc.bench_rack_height,
        team=doc.team,
        lot=doc.lot or None,
        platform_id=doc.platform_id,
        session=doc.session or None,
        flight=doc.flight,
    )


def project_documents(rows: Iterable[Mapping[str, Any]], resolver: WeightClassResolver) -> ProjectedMeet:
    """Project every row of a document listing into typed entities.

    Divisions, platforms, referees and attempts do not depend on each other;
    lifters are resolved last, against the complete division set.
    """
    projected = ProjectedMeet()
    meet_doc: MeetInfo | None = None
    extras: list[dict[str, Any]] = []
    lifter_docs: list[LifterDocument] = []

    for row in rows:
        decoded = decode_document(row.get("doc"))
        if decoded.kind == DocumentKind.UNKNOWN:
            projected.unknown += 1
            continue
        if decoded.skipped:
            projected.skipped += 1
            continue

        entity = decoded.entity
        if decoded.kind == DocumentKind.MEET:
            if meet_doc is None:
                meet_doc = entity
        elif decoded.kind == DocumentKind.EXTRA:
            extras.append(entity)
        elif decoded.kind == DocumentKind.DIVISION:
            projected.divisions[entity.id] = entity
        elif decoded.kind == DocumentKind.LIFTER:
            lifter_docs.append(entity)
        elif decoded.kind == DocumentKind.ATTEMPT:
            projected.attempts[entity.id] = entity
        elif decoded.kind == DocumentKind.PLATFORM:
            projected.platforms[entity.id] = entity
        elif decoded.kind == DocumentKind.REFEREE:
            projected.referees[entity.id] = entity

    if meet_doc is not None or extras:
        base = meet_doc if meet_doc is not None else MeetInfo()
        projected.meet_info = base.model_copy(update={"extra_stuff": extras}) if extras else base

    for lifter_doc in lifter_docs:
        projected.lifters[lifter_doc.id] = project_lifter(lifter_doc, resolver, projected.divisions)

    _logger.debug(
        "Projected %d lifters, %d attempts, %d divisions, %d platforms, %d referees (%d skipped, %d unknown)",
        len(projected.lifters),
        len(projected.attempts),
        len(projected.divisions),
        len(projected.platforms),
        len(projected.referees),
        projected.skipped,
        projected.unknown,
    )
    return projected
