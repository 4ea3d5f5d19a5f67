"""Attach attempts to their lifters' discipline slot arrays."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from livemeet._constants import ATTEMPT_SLOTS
from livemeet.models.attempt import Attempt, Discipline
from livemeet.models.lifter import Lifter, LiftResult

_logger = logging.getLogger(__name__)

SlotTable = dict[Discipline, list[Attempt | None]]


def _empty_slots() -> SlotTable:
    return {discipline: [None] * len(ATTEMPT_SLOTS) for discipline in Discipline}


def collect_slots(lifters: Mapping[str, Lifter], attempts: Mapping[str, Attempt]) -> dict[str, SlotTable]:
    """Place each attempt in its lifter's discipline/slot position.

    Attempts for unknown lifters, with an unrecognized lift name, or with an
    attempt number outside ``1..3`` are left out. When two attempts claim the
    same slot the later one wins.
    """
    tables: dict[str, SlotTable] = {lifter_id: _empty_slots() for lifter_id in lifters}
    unlinked = 0

    for attempt in attempts.values():
        table = tables.get(attempt.lifter_id)
        discipline = attempt.discipline
        if table is None or discipline is None or attempt.attempt_number not in ATTEMPT_SLOTS:
            unlinked += 1
            continue
        table[discipline][attempt.attempt_number - 1] = attempt

    if unlinked:
        _logger.debug("%d attempt(s) not linked to a lifter slot", unlinked)
    return tables


def _encode(slots: list[Attempt | None]) -> LiftResult:
    weights = tuple(attempt.signed_weight if attempt is not None else 0.0 for attempt in slots)
    return LiftResult(attempts=weights)


def link_attempts(lifters: Mapping[str, Lifter], attempts: Mapping[str, Attempt]) -> dict[str, Lifter]:
    """Return lifters with their squat/bench/deadlift slots filled from *attempts*.

    Slots are rebuilt from scratch; any slot values already on the input
    lifters are discarded.
    """
    tables = collect_slots(lifters, attempts)
    linked: dict[str, Lifter] = {}
    for lifter_id, lifter in lifters.items():
        table = tables[lifter_id]
        linked[lifter_id] = lifter.model_copy(
            update={discipline.value: _encode(table[discipline]) for discipline in Discipline}
        )
    return linked
