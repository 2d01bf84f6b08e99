"""Data models for inactivity policy, session state and events"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Optional


class InvalidConfigError(ValueError):
    """Raised when an inactivity policy cannot be scheduled"""


class TrackerPhase(Enum):
    """Observable state of the inactivity state machine"""
    IDLE = 'idle'
    ACTIVE = 'active'
    WARNED = 'warned'
    PAUSED = 'paused'
    TIMED_OUT = 'timed_out'


class EventKind(Enum):
    """Kinds of notifications produced for the host"""
    STARTED = 'started'
    ACTIVITY_DETECTED = 'activity_detected'
    WARNING = 'warning'
    TIMEOUT = 'timeout'


class TimeoutReason(Enum):
    """Why waiting for a timeout ended"""
    INACTIVITY_TIMEOUT = 'inactivity_timeout'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class InactivityConfig:
    """Inactivity policy: timeout, optional warning lead time and activity spacing"""
    timeout: timedelta = timedelta(minutes=30)
    warning_threshold: Optional[timedelta] = None
    min_activity_spacing: timedelta = timedelta(seconds=1)

    def __post_init__(self):
        if self.timeout <= timedelta(0):
            raise InvalidConfigError(f"Timeout must be positive, got {self.timeout}")

        if self.warning_threshold is not None:
            if self.warning_threshold <= timedelta(0):
                raise InvalidConfigError(
                    f"Warning threshold must be positive, got {self.warning_threshold}"
                )
            if self.warning_threshold >= self.timeout:
                raise InvalidConfigError(
                    f"Warning threshold {self.warning_threshold} must be shorter "
                    f"than timeout {self.timeout}"
                )

        if self.min_activity_spacing < timedelta(0):
            raise InvalidConfigError(
                f"Activity spacing cannot be negative, got {self.min_activity_spacing}"
            )

    @classmethod
    def from_seconds(
        cls,
        timeout: float,
        warning: Optional[float] = None,
        spacing: float = 1.0
    ) -> 'InactivityConfig':
        """Create config from plain second values"""
        return cls(
            timeout=timedelta(seconds=timeout),
            warning_threshold=timedelta(seconds=warning) if warning is not None else None,
            min_activity_spacing=timedelta(seconds=spacing)
        )

    @property
    def timeout_seconds(self) -> float:
        return self.timeout.total_seconds()

    @property
    def warning_starts_after(self) -> Optional[float]:
        """Seconds of inactivity after which the warning is due, if configured"""
        if self.warning_threshold is None:
            return None
        return (self.timeout - self.warning_threshold).total_seconds()


@dataclass
class SessionState:
    """Mutable tracking record owned by the inactivity engine"""
    tracking_enabled: bool = True
    last_activity_at: Optional[datetime] = None
    timer_active: bool = False
    seconds_since_last_activity: int = 0
    backgrounded_at: Optional[datetime] = None
    warning_issued: bool = False
    timed_out: bool = False

    @property
    def phase(self) -> TrackerPhase:
        """Derive the state machine phase from the flags"""
        if not self.tracking_enabled:
            return TrackerPhase.IDLE
        if self.timed_out:
            return TrackerPhase.TIMED_OUT
        if self.backgrounded_at is not None:
            return TrackerPhase.PAUSED
        if self.timer_active:
            return TrackerPhase.WARNED if self.warning_issued else TrackerPhase.ACTIVE
        return TrackerPhase.IDLE

    def has_live_window(self) -> bool:
        """Whether an activity window is running or paused in the background"""
        if self.timed_out or self.last_activity_at is None:
            return False
        return self.timer_active or self.backgrounded_at is not None

    def snapshot(self) -> 'SessionState':
        """Get a detached copy for observers"""
        return replace(self)


@dataclass(frozen=True)
class ActivityEvent:
    """Notification emitted to subscribers"""
    kind: EventKind
    at: Optional[datetime] = field(default=None, compare=False)
    seconds_remaining: Optional[int] = None

    @classmethod
    def started(cls, at: Optional[datetime] = None) -> 'ActivityEvent':
        return cls(EventKind.STARTED, at)

    @classmethod
    def activity_detected(cls, at: Optional[datetime] = None) -> 'ActivityEvent':
        return cls(EventKind.ACTIVITY_DETECTED, at)

    @classmethod
    def warning(cls, seconds_remaining: int, at: Optional[datetime] = None) -> 'ActivityEvent':
        return cls(EventKind.WARNING, at, seconds_remaining)

    @classmethod
    def timeout(cls, at: Optional[datetime] = None) -> 'ActivityEvent':
        return cls(EventKind.TIMEOUT, at)

    @property
    def is_terminal(self) -> bool:
        return self.kind is EventKind.TIMEOUT

    def describe(self) -> str:
        """Get a short human readable label"""
        if self.kind is EventKind.WARNING:
            return f"warning ({self.seconds_remaining}s remaining)"
        return self.kind.value.replace('_', ' ')


@dataclass
class InactivityCallbacks:
    """Optional synchronous hooks invoked alongside event emission"""
    on_warning: Optional[Callable[[int], None]] = None
    on_activity_detected: Optional[Callable[[], None]] = None
    on_timeout: Optional[Callable[[], None]] = None
