"""Federation configuration registry.

Each federation entry carries a display name, equipment levels, a
drug-testing flag, a weight-class table per sex and a division label table.
The bundled table lives in ``livemeet/data/federations.json``.
"""

from __future__ import annotations

import importlib.resources
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError
from pydantic.alias_generators import to_camel

from livemeet._constants import DEFAULT_FEDERATION
from livemeet.exceptions import LiveMeetConfigError

_logger = logging.getLogger(__name__)


class FederationConfig(BaseModel):
    """One federation's configuration."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    name: str = ""
    equipment_levels: list[str] = Field(default_factory=list)
    drug_tested: bool = False
    weight_classes: dict[str, dict[str, str]] = Field(default_factory=dict)
    """Per-sex table; values are upper-bound labels, ``"+"`` marks the open class."""
    divisions: dict[str, str] = Field(default_factory=dict)


_TABLE_ADAPTER = TypeAdapter(dict[str, FederationConfig])


class FederationRegistry:
    """Lookup of federation configurations by code.

    Unknown codes resolve to the default federation.
    """

    def __init__(self, federations: dict[str, FederationConfig], *, default: str = DEFAULT_FEDERATION) -> None:
        if not federations:
            raise LiveMeetConfigError("Federation table is empty")
        if default not in federations:
            raise LiveMeetConfigError(f"Default federation {default!r} is not configured")
        self._federations = dict(federations)
        self._default = default

    @property
    def default_code(self) -> str:
        return self._default

    def codes(self) -> list[str]:
        """Known federation codes, in configuration order."""
        return list(self._federations)

    def get(self, code: str | None) -> FederationConfig:
        if code is not None:
            found = self._federations.get(code)
            if found is not None:
                return found
            _logger.debug("Unknown federation %r, falling back to %s", code, self._default)
        return self._federations[self._default]

    def __contains__(self, code: object) -> bool:
        return code in self._federations

    @classmethod
    def from_mapping(cls, raw: Any, *, default: str = DEFAULT_FEDERATION) -> FederationRegistry:
        try:
            federations = _TABLE_ADAPTER.validate_python(raw)
        except ValidationError as exc:
            raise LiveMeetConfigError(f"Invalid federation table: {exc}") from exc
        return cls(federations, default=default)


def load_federations(path: Path | str | None = None, *, default: str = DEFAULT_FEDERATION) -> FederationRegistry:
    """Load the federation table from *path*, or from package data when omitted."""
    if path is not None:
        path = Path(path)
        _logger.debug("Loading federations from %s", path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise LiveMeetConfigError(f"Federation file not found: {path}") from exc
    else:
        _logger.debug("Loading federations from package data")
        text = importlib.resources.files("livemeet").joinpath("data/federations.json").read_text(encoding="utf-8")

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise LiveMeetConfigError(f"Federation file is not valid JSON: {exc}") from exc
    return FederationRegistry.from_mapping(raw, default=default)
