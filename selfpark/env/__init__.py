from .env import ParkingEnv
from .episode import EpisodeState, Phase, TerminationReason
from .events import ParkingEvent
from .feedback import FeedbackTimer, FlagKind, VisualFlag
from .rewards import RewardModel
from .telemetry import TelemetrySnapshot, format_telemetry

__all__ = [
    "EpisodeState",
    "FeedbackTimer",
    "FlagKind",
    "ParkingEnv",
    "ParkingEvent",
    "Phase",
    "RewardModel",
    "TelemetrySnapshot",
    "TerminationReason",
    "VisualFlag",
    "format_telemetry",
]
