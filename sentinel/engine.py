"""Inactivity state machine with adaptive scheduling and background reconciliation"""

import asyncio
from datetime import datetime
from typing import Optional

from .clock import Clock, SystemClock
from .logger import get_logger
from .models import (
    ActivityEvent,
    InactivityCallbacks,
    InactivityConfig,
    InvalidConfigError,
    SessionState,
    TimeoutReason,
    TrackerPhase,
)
from .notifications import EventSubscription, NotificationChannel
from .scheduling import CheckScheduler, next_poll_interval, seconds_remaining


logger = get_logger()


class InactivityEngine:
    """
    Tracks user activity and tells the host when a session went idle for too long

    The engine owns its SessionState and is driven by the host through a small
    set of operations. All of them run synchronously on the event loop that
    owns the engine, which makes the loop the single writer of the state.
    Scheduled checks are the only code that suspends, inside the clock's
    sleep between ticks.

    The engine never ends a session itself: it publishes events (and invokes
    optional callbacks) and the host decides what to do with them.
    """

    def __init__(
        self,
        config: InactivityConfig,
        clock: Optional[Clock] = None,
        *,
        tracking_enabled: bool = True,
        callbacks: Optional[InactivityCallbacks] = None
    ):
        """
        Create an engine

        Args:
            config: Inactivity policy
            clock: Time source (defaults to the system clock)
            tracking_enabled: Initial value of the master switch
            callbacks: Optional hooks invoked alongside event emission

        Raises:
            InvalidConfigError: If config is not a valid InactivityConfig
        """
        self._config = self._validated(config)
        self.clock = clock or SystemClock()
        self.callbacks = callbacks or InactivityCallbacks()

        self._state = SessionState(tracking_enabled=tracking_enabled)
        self._scheduler = CheckScheduler(self.clock, self._tick)
        self._channel = NotificationChannel(on_last_cancelled=self._on_last_subscriber_cancelled)
        self._closed = False

    # Observation

    @property
    def config(self) -> InactivityConfig:
        return self._config

    @property
    def state(self) -> SessionState:
        """Detached copy of the current session state"""
        return self._state.snapshot()

    @property
    def phase(self) -> TrackerPhase:
        return self._state.phase

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def schedule_generation(self) -> int:
        return self._scheduler.generation

    @property
    def check_pending(self) -> bool:
        return self._scheduler.pending

    def seconds_until_timeout(self) -> Optional[int]:
        """Whole seconds left in the current window, None when no window is live"""
        if not self._state.has_live_window():
            return None

        # Background time counts as inactivity, so a paused window keeps aging
        elapsed = self._elapsed_seconds(self.clock.now())
        return seconds_remaining(self._config.timeout_seconds, elapsed)

    def events(self) -> EventSubscription:
        """
        Subscribe to events; the subscription ends after the next timeout

        Events queue up until they are consumed, so iterate the subscription,
        drain it with pending(), or cancel() it once it is no longer needed.
        Cancelling the last live subscription stops the timer.
        """
        return self._channel.subscribe()

    async def wait_for_timeout(self) -> TimeoutReason:
        """
        Wait until the current window times out

        Returns CANCELLED when the engine is closed or the waiting task is
        cancelled. Giving up the wait never stops the timer.
        """
        subscription = self.events()

        try:
            async for event in subscription:
                if event.is_terminal:
                    return TimeoutReason.INACTIVITY_TIMEOUT
        except asyncio.CancelledError:
            logger.debug("Wait for timeout cancelled")
        finally:
            subscription.cancel(stop_timer=False)

        return TimeoutReason.CANCELLED

    # Host operations

    def record_activity(self):
        """Register a (throttled) user interaction"""
        if self._closed or not self._state.tracking_enabled:
            return

        now = self.clock.now()
        state = self._state
        state.last_activity_at = now
        state.seconds_since_last_activity = 0
        state.warning_issued = False
        state.timed_out = False

        self._emit(ActivityEvent.activity_detected(now))
        self._run_callback('on_activity_detected')

        if not state.timer_active:
            self.start_timer()

    def start_timer(self):
        """Start a new activity window, re-arming if one is already running"""
        if self._closed or not self._state.tracking_enabled:
            return

        now = self.clock.now()
        state = self._state
        was_active = state.timer_active

        state.timer_active = True
        state.last_activity_at = now
        state.seconds_since_last_activity = 0
        state.warning_issued = False
        state.timed_out = False
        state.backgrounded_at = None

        self._schedule_next(now)

        if not was_active:
            logger.debug("Inactivity timer started (timeout {}s)", self._config.timeout_seconds)
            self._emit(ActivityEvent.started(now))

    def stop_timer(self):
        """Cancel the pending check and deactivate the timer"""
        if not self._state.timer_active:
            return

        self._halt()
        self._state.warning_issued = False
        logger.debug("Inactivity timer stopped")

    def pause_for_background(self):
        """Stop polling while the host is suspended; wall time keeps counting"""
        if self._closed or not self._state.tracking_enabled:
            return

        state = self._state
        if state.backgrounded_at is not None or not state.has_live_window():
            return

        state.backgrounded_at = self.clock.now()
        self._halt()
        logger.debug("Paused for background at {}", state.backgrounded_at)

    def resume(self):
        """Continue tracking after a pause, reconciling time spent in the background"""
        if self._closed or not self._state.tracking_enabled:
            return

        state = self._state
        now = self.clock.now()

        if state.backgrounded_at is not None:
            background_seconds = (now - state.backgrounded_at).total_seconds()
            state.backgrounded_at = None
            state.timer_active = True
            logger.debug("Resumed after {:.1f}s in background", background_seconds)
            self._evaluate(now)
            return

        if state.timed_out or state.timer_active:
            return

        if state.last_activity_at is None:
            self.start_timer()
            return

        state.timer_active = True
        self._evaluate(now)

    def set_tracking_enabled(self, enabled: bool):
        """Flip the master switch; disabling drops back to idle"""
        if self._closed:
            return

        state = self._state

        if enabled:
            state.tracking_enabled = True
            if not state.timer_active and state.backgrounded_at is None:
                self.start_timer()
            return

        state.tracking_enabled = False
        self._halt()
        state.backgrounded_at = None
        state.warning_issued = False
        logger.debug("Inactivity tracking disabled")

    def update_config(self, config: InactivityConfig):
        """Swap the policy; applies from the next check or activity"""
        self._config = self._validated(config)
        self._state.warning_issued = False
        logger.debug(
            "Config updated: timeout={}s warning_after={}",
            config.timeout_seconds,
            config.warning_starts_after
        )

    def close(self):
        """Dispose the engine: cancel scheduling and complete all subscriptions"""
        if self._closed:
            return

        self._closed = True
        self._halt()
        self._channel.close()

    async def __aenter__(self) -> 'InactivityEngine':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.close()

    # Scheduling

    def _tick(self, generation: int):
        """Fired by the scheduler; never called by the host"""
        if not self._scheduler.is_current(generation) or self._closed:
            return

        state = self._state
        if not state.tracking_enabled:
            self.stop_timer()
            return

        if not state.timer_active or state.last_activity_at is None:
            return

        self._evaluate(self.clock.now())

    def _evaluate(self, now: datetime):
        """Compare elapsed inactivity with the thresholds, then reschedule"""
        state = self._state
        elapsed = self._elapsed_seconds(now)
        state.seconds_since_last_activity = int(elapsed)

        if elapsed >= self._config.timeout_seconds:
            self._time_out(now)
            return

        warning_due = self._config.warning_starts_after
        warn = warning_due is not None and not state.warning_issued and elapsed >= warning_due

        if warn:
            state.warning_issued = True

        self._schedule_next(now)

        if warn:
            remaining = seconds_remaining(self._config.timeout_seconds, elapsed)
            logger.info("Inactivity warning: {}s until timeout", remaining)
            self._emit(ActivityEvent.warning(remaining, now))
            self._run_callback('on_warning', remaining)

    def _schedule_next(self, now: datetime):
        remaining = self._config.timeout_seconds - self._elapsed_seconds(now)
        self._scheduler.arm(next_poll_interval(remaining))

    def _time_out(self, now: datetime):
        state = self._state
        self._halt()
        state.timed_out = True
        state.warning_issued = False

        logger.info("Inactivity timeout after {}s", state.seconds_since_last_activity)
        self._emit(ActivityEvent.timeout(now))
        self._run_callback('on_timeout')

    def _halt(self):
        self._scheduler.cancel()
        self._state.timer_active = False

    def _elapsed_seconds(self, now: datetime) -> float:
        if self._state.last_activity_at is None:
            return 0.0
        return (now - self._state.last_activity_at).total_seconds()

    # Notification

    def _emit(self, event: ActivityEvent):
        self._channel.publish(event)

    def _run_callback(self, name: str, *args):
        callback = getattr(self.callbacks, name)
        if callback is None:
            return

        try:
            callback(*args)
        except Exception:
            logger.exception("Inactivity callback {} failed", name)

    def _on_last_subscriber_cancelled(self):
        self.stop_timer()

    @staticmethod
    def _validated(config: InactivityConfig) -> InactivityConfig:
        if not isinstance(config, InactivityConfig):
            raise InvalidConfigError(f"Expected InactivityConfig, got {type(config).__name__}")
        return config
