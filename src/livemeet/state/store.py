"""Snapshot store.

Holds the single authoritative snapshot. The poll cycle is the only
writer and replaces the snapshot wholesale; readers always see either the
previous or the new snapshot, never a mix.
"""

from __future__ import annotations

import logging

from livemeet.models.snapshot import Snapshot

_logger = logging.getLogger(__name__)


class SnapshotStore:
    """Swap-only holder of the current :class:`Snapshot`."""

    def __init__(self, initial: Snapshot | None = None) -> None:
        self._snapshot = initial if initial is not None else Snapshot()
        self._generation = 0

    @property
    def current(self) -> Snapshot:
        return self._snapshot

    @property
    def generation(self) -> int:
        """Number of snapshots installed since startup."""
        return self._generation

    def replace(self, snapshot: Snapshot) -> Snapshot:
        """Install *snapshot* and return the one it replaced."""
        previous = self._snapshot
        self._snapshot = snapshot
        self._generation += 1
        _logger.debug("Installed snapshot generation %d", self._generation)
        return previous
