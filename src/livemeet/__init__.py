"""livemeet - Live powerlifting meet results pushed to viewers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("livemeet")
except PackageNotFoundError:
    __version__ = "0+local"
from livemeet.config import LiveMeetConfig
from livemeet.exceptions import LiveMeetConfigError, LiveMeetError, SourceError
from livemeet.federations import FederationConfig, FederationRegistry, load_federations
from livemeet.hub import BroadcastHub
from livemeet.ingestion.pipeline import build_snapshot
from livemeet.models import (
    Attempt,
    Discipline,
    Division,
    LiftResult,
    Lifter,
    MeetInfo,
    Outcome,
    Platform,
    Referee,
    Sex,
    Snapshot,
)
from livemeet.scheduler import MeetTarget, PollingScheduler
from livemeet.server import create_app
from livemeet.state.store import SnapshotStore

__all__ = [
    "__version__",
    "Attempt",
    "BroadcastHub",
    "Discipline",
    "Division",
    "FederationConfig",
    "FederationRegistry",
    "LiftResult",
    "Lifter",
    "LiveMeetConfig",
    "LiveMeetConfigError",
    "LiveMeetError",
    "MeetInfo",
    "MeetTarget",
    "Outcome",
    "Platform",
    "PollingScheduler",
    "Referee",
    "Sex",
    "Snapshot",
    "SnapshotStore",
    "SourceError",
    "build_snapshot",
    "create_app",
    "load_federations",
]
