"""Host-side spacing of raw interaction signals before they reach the engine"""

from datetime import datetime, timedelta
from typing import Callable, Optional

from .clock import Clock, SystemClock


class ActivityThrottle:
    """Forwards at most one interaction per spacing interval"""

    def __init__(self, spacing: timedelta, clock: Optional[Clock] = None):
        if spacing < timedelta(0):
            raise ValueError(f"Spacing cannot be negative: {spacing}")

        self.spacing = spacing
        self.clock = clock or SystemClock()
        self.last_forwarded: Optional[datetime] = None
        self.dropped = 0

    def should_forward(self) -> bool:
        """Check whether an interaction happening now may be forwarded"""
        now = self.clock.now()

        if self.last_forwarded is not None and now - self.last_forwarded < self.spacing:
            self.dropped += 1
            return False

        self.last_forwarded = now
        return True

    def wrap(self, record: Callable[[], None]) -> Callable[[], None]:
        """Get a callable that only invokes record when the throttle allows it"""
        def forward():
            if self.should_forward():
                record()
        return forward

    def reset(self):
        self.last_forwarded = None
        self.dropped = 0
