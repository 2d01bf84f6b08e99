"""Time sources for the inactivity engine"""

import asyncio
import heapq
import itertools
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Protocol, Tuple


class Clock(Protocol):
    """Supplies current time and a cancellable delay"""

    def now(self) -> datetime:
        ...

    async def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """UTC wall clock backed by asyncio timers"""

    def now(self) -> datetime:
        # Aware UTC so elapsed time is unaffected by DST changes
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class ManualClock:
    """
    Deterministic clock whose sleepers only wake when time is advanced

    Sleepers are kept in a heap ordered by deadline. advance() walks time
    forward deadline by deadline, letting the event loop run between wake-ups
    so that work scheduled by a woken task is registered before the next one
    is considered.
    """

    # Loop iterations granted to woken tasks before looking at the next deadline
    SETTLE_ROUNDS = 10

    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2025, 1, 1, 9, 0, 0, tzinfo=timezone.utc)
        self._sleepers: List[Tuple[datetime, int, asyncio.Future]] = []
        self._counter = itertools.count()

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        if seconds <= 0:
            await asyncio.sleep(0)
            return

        future = asyncio.get_running_loop().create_future()
        deadline = self._now + timedelta(seconds=seconds)
        heapq.heappush(self._sleepers, (deadline, next(self._counter), future))
        await future

    @property
    def pending_sleepers(self) -> int:
        """Number of sleepers still waiting (cancelled ones excluded)"""
        return sum(1 for _, _, future in self._sleepers if not future.done())

    def next_deadline(self) -> Optional[datetime]:
        """Get the earliest pending wake-up time"""
        self._drop_cancelled()
        if not self._sleepers:
            return None
        return self._sleepers[0][0]

    async def advance(self, seconds: float):
        """
        Move time forward, waking every sleeper whose deadline passes

        Args:
            seconds: How far to move the clock
        """
        target = self._now + timedelta(seconds=seconds)

        while True:
            await self.settle()
            self._drop_cancelled()

            if not self._sleepers or self._sleepers[0][0] > target:
                break

            deadline, _, future = heapq.heappop(self._sleepers)
            self._now = max(self._now, deadline)
            future.set_result(None)

        self._now = target
        await self.settle()

    async def advance_to(self, moment: datetime):
        """Move time forward to an absolute moment"""
        await self.advance(max(0.0, (moment - self._now).total_seconds()))

    async def settle(self):
        """Let ready tasks run until they block again"""
        for _ in range(self.SETTLE_ROUNDS):
            await asyncio.sleep(0)

    def _drop_cancelled(self):
        while self._sleepers and self._sleepers[0][2].done():
            heapq.heappop(self._sleepers)
