"""Application package exposing the stress-monitoring core."""

from .alerts import AlertBus, AlertEvent, NotificationLog, StateChangeDetector
from .heart_core import HeartRateSample, HistoryBuffer, StressState, classify, is_valid_reading
from .monitor import MonitorSnapshot, StressMonitor
from .playback import PlaybackScheduler, PlaybackSession, PlaybackStatus
from .recommendations import (
    PoseRecommendation,
    RecommendationCatalog,
    RecommendationSelector,
    TrackRecommendation,
    load_catalog,
)
from .scheduler import AsyncioClock, Clock, ManualClock
from .sources import (
    LiveTextSource,
    PushSource,
    SyntheticSource,
    available_sources,
    create_source,
    parse_line,
)

__all__ = [
    "AlertBus",
    "AlertEvent",
    "AsyncioClock",
    "Clock",
    "HeartRateSample",
    "HistoryBuffer",
    "LiveTextSource",
    "ManualClock",
    "MonitorSnapshot",
    "NotificationLog",
    "PlaybackScheduler",
    "PlaybackSession",
    "PlaybackStatus",
    "PoseRecommendation",
    "PushSource",
    "RecommendationCatalog",
    "RecommendationSelector",
    "StateChangeDetector",
    "StressMonitor",
    "StressState",
    "SyntheticSource",
    "TrackRecommendation",
    "available_sources",
    "classify",
    "create_source",
    "is_valid_reading",
    "load_catalog",
    "parse_line",
]
