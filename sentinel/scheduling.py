"""Adaptive polling intervals and the single outstanding inactivity check"""

import asyncio
import math
from typing import Callable, Optional

from .clock import Clock
from .logger import get_logger


logger = get_logger()

# (remaining seconds upper bound, poll interval seconds), checked in order
POLL_INTERVALS = (
    (10, 1),
    (60, 5),
    (300, 30),
    (600, 60),
)
DEFAULT_POLL_INTERVAL = 300


def next_poll_interval(remaining_seconds: float) -> int:
    """
    Choose how long to wait before the next inactivity check

    Polling gets finer as the deadline approaches, so the lateness of a
    warning or timeout is bounded by the interval in effect.

    Args:
        remaining_seconds: Seconds left until the inactivity timeout

    Returns:
        Poll interval in whole seconds
    """
    for upper_bound, interval in POLL_INTERVALS:
        if remaining_seconds <= upper_bound:
            return interval

    return DEFAULT_POLL_INTERVAL


def seconds_remaining(timeout_seconds: float, elapsed_seconds: float) -> int:
    """Whole seconds left until timeout, rounded up"""
    return max(0, math.ceil(timeout_seconds - elapsed_seconds))


class CheckScheduler:
    """
    Keeps at most one delayed check pending

    Every arm() bumps the generation and cancels the previous delay. A check
    that wakes up with an older generation is discarded instead of fired.
    """

    def __init__(self, clock: Clock, on_fire: Callable[[int], None]):
        self.clock = clock
        self.on_fire = on_fire
        self.generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, delay_seconds: float) -> int:
        """Schedule the next check, superseding any pending one"""
        self.cancel()
        generation = self.generation

        self._task = asyncio.get_running_loop().create_task(
            self._wait_and_fire(generation, delay_seconds)
        )
        logger.debug("Armed check #{} in {}s", generation, delay_seconds)
        return generation

    def cancel(self):
        """Cancel the pending check, if any"""
        self.generation += 1

        if self._task is not None and not self._task.done():
            # Cancelling from inside the firing task would abort its own callback
            if self._task is not asyncio.current_task():
                self._task.cancel()
        self._task = None

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    async def _wait_and_fire(self, generation: int, delay_seconds: float):
        await self.clock.sleep(delay_seconds)

        if not self.is_current(generation):
            logger.debug("Discarded stale check #{}", generation)
            return

        self.on_fire(generation)
