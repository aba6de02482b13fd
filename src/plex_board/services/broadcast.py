"""Lossy broadcast channel for payload-free wake-up notifications.

Every subscriber owns a bounded buffer. Sending never blocks: when a
buffer is full its oldest notification is dropped and the subscriber's
lag counter grows. This is not a delivery guarantee; receivers are
expected to re-read full state on every wake-up.
"""

import asyncio
import logging
from dataclasses import dataclass, field

DEFAULT_CAPACITY = 16

_logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Subscription:
    """Receiving end of a broadcast channel."""

    channel: "Broadcast"
    capacity: int
    lagged: int = 0
    _queue: asyncio.Queue[None] = field(init=False)

    def __post_init__(self) -> None:
        self._queue = asyncio.Queue(maxsize=self.capacity)

    def _push(self) -> None:
        try:
            self._queue.put_nowait(None)
        except asyncio.QueueFull:
            self._queue.get_nowait()
            self._queue.put_nowait(None)
            self.lagged += 1

    async def recv(self) -> int:
        """Wait for a notification; return how many were dropped before it."""
        await self._queue.get()
        lagged, self.lagged = self.lagged, 0
        return lagged

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        """Stop receiving notifications."""
        self.channel.unsubscribe(self)


@dataclass(eq=False)
class Broadcast:
    """Multi-producer, multi-consumer notification channel."""

    capacity: int = DEFAULT_CAPACITY
    _subscribers: list[Subscription] = field(default_factory=list)

    def subscribe(self) -> Subscription:
        """Create a new receiver that sees notifications sent from now on."""
        subscription = Subscription(channel=self, capacity=self.capacity)
        self._subscribers.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscribers:
            self._subscribers.remove(subscription)

    def send(self) -> int:
        """Notify every subscriber without blocking; return receiver count."""
        for subscription in self._subscribers:
            subscription._push()  # noqa: SLF001
        if not self._subscribers:
            _logger.debug("Notification sent with no subscribers")
        return len(self._subscribers)
