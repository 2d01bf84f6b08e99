"""Session inactivity tracking with adaptive polling"""

from .clock import Clock, ManualClock, SystemClock
from .engine import InactivityEngine
from .models import (
    ActivityEvent,
    EventKind,
    InactivityCallbacks,
    InactivityConfig,
    InvalidConfigError,
    SessionState,
    TimeoutReason,
    TrackerPhase,
)
from .notifications import EventSubscription, NotificationChannel
from .throttle import ActivityThrottle

__all__ = [
    "ActivityEvent",
    "ActivityThrottle",
    "Clock",
    "EventKind",
    "EventSubscription",
    "InactivityCallbacks",
    "InactivityConfig",
    "InactivityEngine",
    "InvalidConfigError",
    "ManualClock",
    "NotificationChannel",
    "SessionState",
    "SystemClock",
    "TimeoutReason",
    "TrackerPhase",
]
