"""Weight-class resolution from a federation's class table."""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from livemeet.federations import FederationConfig
from livemeet.models.lifter import Sex

_LEADING_NUMBER = re.compile(r"\s*(\d+(?:\.\d+)?)")


def _parse_boundary(label: Any) -> float | None:
    """Numeric upper bound of a class label, ignoring any ``+`` suffix."""
    if isinstance(label, bool):
        return None
    if isinstance(label, (int, float)):
        return float(label)
    if not isinstance(label, str):
        return None
    match = _LEADING_NUMBER.match(label.replace("+", ""))
    return float(match.group(1)) if match else None


def format_boundary(value: float) -> str:
    """Render a boundary the way class labels are written (``59``, ``67.5``)."""
    if value.is_integer():
        return str(int(value))
    return repr(value)


def parse_boundaries(classes: Mapping[str, Any]) -> tuple[float, ...]:
    """Ascending, de-duplicated numeric boundaries of one sex's class table."""
    parsed = {_parse_boundary(label) for label in classes.values()}
    return tuple(sorted(value for value in parsed if value is not None))


class WeightClassResolver:
    """Maps a sex and bodyweight to a weight-class label.

    Built once per federation; ``resolve`` is a pure lookup.
    """

    def __init__(self, table: Mapping[str, Mapping[str, Any]]) -> None:
        self._boundaries: dict[str, tuple[float, ...]] = {
            sex.value: parse_boundaries(table.get(sex.value) or {}) for sex in Sex
        }

    @classmethod
    def for_federation(cls, federation: FederationConfig) -> WeightClassResolver:
        return cls(federation.weight_classes)

    def boundaries(self, sex: str) -> tuple[float, ...]:
        """Boundaries used for *sex*; unknown or unconfigured sexes use the male table."""
        found = self._boundaries.get(sex.upper())
        if found:
            return found
        return self._boundaries[Sex.MALE.value]

    def resolve(self, sex: str | None, bodyweight: float | None) -> str:
        """Return the class label for a lifter.

        ``"0"`` when sex or bodyweight is missing; the smallest boundary that
        is at least the bodyweight otherwise; the top boundary with a ``+``
        suffix above every boundary.
        """
        if not bodyweight or not sex:
            return "0"
        upper = self.boundaries(sex)
        if not upper:
            return "0"

        for boundary in upper:
            if bodyweight <= boundary:
                return format_boundary(boundary)

        return f"{format_boundary(upper[-1])}+"
