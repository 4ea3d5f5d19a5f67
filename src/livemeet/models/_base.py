"""Base model for meet documents and snapshot entities.

Every document-backed model inherits from :class:`MeetBaseModel` which
provides:

* ``alias_generator=to_camel`` so camelCase document keys map
  automatically to snake_case fields, and snapshots serialize back to
  camelCase.
* A ``model_validator(mode="before")`` that drops blank strings, NaN and
  store bookkeeping keys (``_rev``, ``_conflicts``) so that a blank
  required field counts as missing.
* An ``id`` field read from the store's ``_id`` key.
"""

from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

DocumentId = Annotated[str, Field(min_length=1, validation_alias=AliasChoices("_id", "id"))]
"""Identifier read from ``_id`` (raw documents) or ``id`` (keyword construction)."""


def clean_document(values: dict[str, Any]) -> dict[str, Any]:
    """Strip blank/NaN values and underscore-prefixed bookkeeping keys (except ``_id``)."""
    cleaned: dict[str, Any] = {}
    for key, value in values.items():
        if key.startswith("_") and key != "_id":
            continue
        if isinstance(value, str) and not value.strip():
            continue
        if isinstance(value, float) and math.isnan(value):
            continue
        cleaned[key] = value
    return cleaned


class MeetBaseModel(BaseModel):
    """Base for meet document and snapshot models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @model_validator(mode="before")
    @classmethod
    def _clean_document_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return clean_document(values)

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)
