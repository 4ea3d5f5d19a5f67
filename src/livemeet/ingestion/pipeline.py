"""Snapshot derivation pipeline.

This module centralizes the per-cycle transformation:

- project raw rows into typed entities
- link attempts into lifter slots
- derive best lifts, totals and placings
- derive platform lights and clocks
- assemble an immutable :class:`livemeet.models.snapshot.Snapshot`

Every step starts from the raw rows, so the result depends only on the
input listing and the federation.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from livemeet.federations import FederationConfig
from livemeet.ingestion.linker import link_attempts
from livemeet.ingestion.projector import project_documents
from livemeet.ingestion.weight_classes import WeightClassResolver
from livemeet.models.snapshot import Snapshot
from livemeet.scoring import score_lifters
from livemeet.state.live import aggregate_platforms

_logger = logging.getLogger(__name__)


def build_snapshot(
    rows: Iterable[Mapping[str, Any]],
    *,
    federation_code: str | None,
    federation: FederationConfig,
    updated_at: datetime | None = None,
) -> Snapshot:
    """Derive a complete snapshot from one document listing."""
    resolver = WeightClassResolver.for_federation(federation)
    projected = project_documents(rows, resolver)

    lifters = score_lifters(link_attempts(projected.lifters, projected.attempts))
    platforms = aggregate_platforms(projected.platforms, projected.referees)

    snapshot = Snapshot(
        lifters=lifters,
        attempts=projected.attempts,
        divisions=projected.divisions,
        platforms=platforms,
        referees=projected.referees,
        meet_info=projected.meet_info,
        federation=federation_code,
        last_update=updated_at,
    )
    _logger.debug("Built snapshot with %d lifters", len(lifters))
    return snapshot
