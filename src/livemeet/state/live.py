"""Live platform state: referee light vectors and clock time."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from livemeet._constants import DEFAULT_TIMER_SECONDS
from livemeet.ingestion.normalize import safe_float
from livemeet.models.platform import Platform, Referee


def resolve_timer(clock_state: Any, clock_timer_length: float | None) -> float:
    """Seconds on the clock.

    A live countdown (``clock_state["remaining"]``, milliseconds) wins, then
    the configured timer length (milliseconds), then a 60 second default.
    """
    if isinstance(clock_state, Mapping):
        remaining = safe_float(clock_state.get("remaining"))
        if remaining:
            return remaining / 1000
    if clock_timer_length:
        return clock_timer_length / 1000
    return DEFAULT_TIMER_SECONDS


def light_vector(referees: list[Referee]) -> list[bool]:
    """One light per referee, ordered by seating position; ``True`` only for a good decision."""
    ordered = sorted(referees, key=lambda referee: (referee.position, referee.id))
    return [referee.approved for referee in ordered]


def aggregate_platforms(platforms: Mapping[str, Platform], referees: Mapping[str, Referee]) -> dict[str, Platform]:
    """Return platforms with ``lights`` and ``timer_remaining`` derived."""
    by_platform: dict[str, list[Referee]] = defaultdict(list)
    for referee in referees.values():
        by_platform[referee.platform_id].append(referee)

    return {
        platform_id: platform.model_copy(
            update={
                "lights": light_vector(by_platform.get(platform_id, [])),
                "timer_remaining": resolve_timer(platform.clock_state, platform.clock_timer_length),
            }
        )
        for platform_id, platform in platforms.items()
    }
