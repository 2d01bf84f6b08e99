"""Event subscriptions handed to the host application"""

import asyncio
from typing import Callable, List, Optional

from .logger import get_logger
from .models import ActivityEvent


logger = get_logger()

# Queue marker that ends a subscription without a timeout event
_CLOSED = object()


class EventSubscription:
    """
    One observer's view of the event stream

    Iterating yields events until a timeout is delivered, then the
    iteration completes. A finished subscription cannot be restarted;
    subscribe again for the next activity window.
    """

    def __init__(self, channel: 'NotificationChannel'):
        self._channel = channel
        self._queue: asyncio.Queue = asyncio.Queue()
        self._finished = False
        self._cancelled = False

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __aiter__(self):
        return self

    async def __anext__(self) -> ActivityEvent:
        if self._finished:
            raise StopAsyncIteration

        item = await self._queue.get()

        if item is _CLOSED:
            self._finished = True
            raise StopAsyncIteration

        if item.is_terminal:
            self._finish()

        return item

    async def __aenter__(self) -> 'EventSubscription':
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.cancel()

    def pending(self) -> List[ActivityEvent]:
        """Drain events already delivered without waiting"""
        events = []

        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                self._finished = True
                break
            events.append(item)
            if item.is_terminal:
                self._finish()
                break

        return events

    def cancel(self, stop_timer: bool = True):
        """
        Stop observing

        Args:
            stop_timer: Let the channel stop scheduling when this was the last
                live subscription
        """
        if self._cancelled:
            return

        self._cancelled = True
        was_finished = self._finished
        self._finished = True
        self._channel._detach(self, notify=stop_timer and not was_finished)

    def _deliver(self, event: ActivityEvent):
        self._queue.put_nowait(event)
        if event.is_terminal:
            # Events published after the terminal one belong to the next subscription
            self._channel._detach(self, notify=False)

    def _close(self):
        self._queue.put_nowait(_CLOSED)

    def _finish(self):
        self._finished = True


class NotificationChannel:
    """Fans engine events out to subscribers"""

    def __init__(self, on_last_cancelled: Optional[Callable[[], None]] = None):
        self._subscribers: List[EventSubscription] = []
        self._on_last_cancelled = on_last_cancelled
        self._closed = False

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self) -> EventSubscription:
        """Create a subscription receiving events from now on"""
        subscription = EventSubscription(self)

        if self._closed:
            subscription._close()
        else:
            self._subscribers.append(subscription)

        return subscription

    def publish(self, event: ActivityEvent):
        """Deliver an event to every current subscriber"""
        for subscription in list(self._subscribers):
            subscription._deliver(event)

    def close(self):
        """Complete every subscription without a timeout event"""
        self._closed = True

        for subscription in self._subscribers:
            subscription._close()

        self._subscribers.clear()

    def _detach(self, subscription: EventSubscription, notify: bool):
        if subscription not in self._subscribers:
            return

        self._subscribers.remove(subscription)

        if notify and not self._subscribers and self._on_last_cancelled:
            logger.debug("Last subscriber cancelled")
            self._on_last_cancelled()
