from __future__ import annotations

from typing import Any

import pytest

from livemeet.federations import FederationRegistry, load_federations


def row(doc: dict[str, Any]) -> dict[str, Any]:
    """Wrap a document the way the bulk listing does."""
    return {"id": doc.get("_id"), "key": doc.get("_id"), "value": {"rev": "1-abc"}, "doc": doc}


def lifter_doc(
    lifter_id: str,
    *,
    name: str = "Lifter",
    gender: str = "MALE",
    body_weight: float | None = 80.0,
    division_id: str | None = "d-open",
    **extra: Any,
) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "_id": lifter_id,
        "_rev": "3-def",
        "name": name,
        "birthDate": "1990-01-01",
        "gender": gender,
        "bodyWeight": body_weight,
        "divisions": [{"divisionId": division_id}] if division_id else [],
    }
    doc.update(extra)
    return doc


def attempt_doc(
    lifter_id: str,
    lift_name: str,
    number: int,
    weight: float,
    result: str | None,
) -> dict[str, Any]:
    return {
        "_id": f"a{number}{lift_name[0]}-{lifter_id}",
        "lifterId": lifter_id,
        "liftName": lift_name,
        "attemptNumber": number,
        "weight": weight,
        "result": result,
        "createDate": 1771000000000,
    }


@pytest.fixture
def federations() -> FederationRegistry:
    return load_federations()


@pytest.fixture
def meet_rows() -> list[dict[str, Any]]:
    docs: list[dict[str, Any]] = [
        {"_id": "m745m8gkgmfv", "name": "Spring Open", "date": "2026-04-11", "federation": "IPF", "units": "KG"},
        {"_id": "e-sponsors", "text": "Thanks to our sponsors"},
        {"_id": "d-open", "name": "Open", "rawOrEquipped": "Raw", "lift": "ALL"},
        {"_id": "p6kby8k1v0nn", "name": "Platform A", "clockState": {"remaining": 42000}, "clockTimerLength": 60000},
        {"_id": "rleft-p6kby8k1v0nn", "platformId": "p6kby8k1v0nn", "position": "left", "decision": "good"},
        {"_id": "rhead-p6kby8k1v0nn", "platformId": "p6kby8k1v0nn", "position": "head", "decision": "bad"},
        {"_id": "rright-p6kby8k1v0nn", "platformId": "p6kby8k1v0nn", "position": "right", "decision": None},
        lifter_doc("l-alice", name="Alice", gender="FEMALE", body_weight=62.4),
        lifter_doc("l-bob", name="Bob", body_weight=82.0),
        lifter_doc("l-carl", name="Carl", body_weight=81.0),
        attempt_doc("l-alice", "squat", 1, 100, "good"),
        attempt_doc("l-alice", "squat", 2, 105, "bad"),
        attempt_doc("l-alice", "squat", 3, 105, "good"),
        attempt_doc("l-alice", "bench", 1, 60, None),
        attempt_doc("l-alice", "dead", 1, 150, "good"),
        attempt_doc("l-bob", "squat", 1, 200, "good"),
        attempt_doc("l-bob", "bench", 1, 120, "good"),
        attempt_doc("l-bob", "deadlift", 1, 230, "good"),
        attempt_doc("l-carl", "squat", 1, 210, "good"),
        attempt_doc("l-carl", "bench", 1, 110, "good"),
        attempt_doc("l-carl", "deadlift", 1, 230, "good"),
        {"_id": "_design/app", "views": {}},
        {"_id": "x-something-new", "foo": "bar"},
    ]
    return [row(doc) for doc in docs]
