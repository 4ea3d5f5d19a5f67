"""Data models for meet documents and snapshots."""

from livemeet.models._base import MeetBaseModel
from livemeet.models.attempt import Attempt, Discipline, Outcome
from livemeet.models.lifter import LiftResult, Lifter, Sex
from livemeet.models.meet import Division, MeetInfo
from livemeet.models.platform import Platform, Referee
from livemeet.models.snapshot import Snapshot

__all__ = [
    "Attempt",
    "Discipline",
    "Division",
    "LiftResult",
    "Lifter",
    "MeetBaseModel",
    "MeetInfo",
    "Outcome",
    "Platform",
    "Referee",
    "Sex",
    "Snapshot",
]
