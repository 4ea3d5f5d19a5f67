"""The competition snapshot: aggregate root pushed to viewers."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from livemeet.models._base import MeetBaseModel
from livemeet.models.attempt import Attempt
from livemeet.models.lifter import Lifter
from livemeet.models.meet import Division, MeetInfo
from livemeet.models.platform import Platform, Referee


class Snapshot(MeetBaseModel):
    """Every derived entity keyed by id, plus meet info and the update stamp.

    Snapshots are immutable and replaced wholesale; a fresh default
    snapshot has empty entity maps and no ``last_update``.
    """

    lifters: dict[str, Lifter] = Field(default_factory=dict)
    attempts: dict[str, Attempt] = Field(default_factory=dict)
    divisions: dict[str, Division] = Field(default_factory=dict)
    platforms: dict[str, Platform] = Field(default_factory=dict)
    referees: dict[str, Referee] = Field(default_factory=dict)
    meet_info: MeetInfo | None = None
    federation: str | None = None
    last_update: datetime | None = None

    @property
    def is_empty(self) -> bool:
        return self.last_update is None

    def stamped(self, when: datetime) -> Snapshot:
        return self.model_copy(update={"last_update": when})
