"""Scoring: best lift per discipline, total, and placing within each group.

Both passes are pure functions of their input and can be re-run from
scratch every cycle.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping

from livemeet.models.attempt import Discipline
from livemeet.models.lifter import Lifter, LiftResult

GroupKey = tuple[str | None, str, str]


def best_of(result: LiftResult) -> float:
    """Largest strictly positive slot value, or ``0``."""
    good = [weight for weight in result.attempts if weight > 0]
    return max(good) if good else 0.0


def derive_best_lifts(lifters: Mapping[str, Lifter]) -> dict[str, Lifter]:
    """Fill ``best`` for every discipline and ``total`` as their sum."""
    scored: dict[str, Lifter] = {}
    for lifter_id, lifter in lifters.items():
        update: dict[str, object] = {}
        total = 0.0
        for discipline in Discipline:
            result = lifter.result_for(discipline)
            best = best_of(result)
            update[discipline.value] = result.model_copy(update={"best": best})
            total += best
        update["total"] = total
        scored[lifter_id] = lifter.model_copy(update=update)
    return scored


def _ranking_key(lifter: Lifter) -> tuple[float, float, str]:
    # Higher total first, lighter bodyweight breaks ties, id keeps it stable.
    return (-lifter.total, lifter.bodyweight, lifter.id)


def group_lifters(lifters: Iterable[Lifter]) -> dict[GroupKey, list[Lifter]]:
    """Partition lifters by division, sex and weight class, ranked within each group."""
    groups: dict[GroupKey, list[Lifter]] = defaultdict(list)
    for lifter in lifters:
        groups[lifter.group_key].append(lifter)
    return {key: sorted(members, key=_ranking_key) for key, members in groups.items()}


def derive_placings(lifters: Mapping[str, Lifter]) -> dict[str, Lifter]:
    """Assign ``place`` by rank within each group.

    Lifters with a zero total keep their sort position but get no place.
    """
    placed: dict[str, Lifter] = {}
    for ranked in group_lifters(lifters.values()).values():
        for index, lifter in enumerate(ranked):
            place = index + 1 if lifter.total > 0 else None
            placed[lifter.id] = lifter.model_copy(update={"place": place})
    return {lifter_id: placed[lifter_id] for lifter_id in lifters}


def score_lifters(lifters: Mapping[str, Lifter]) -> dict[str, Lifter]:
    """Run both scoring passes."""
    return derive_placings(derive_best_lifts(lifters))
