# sitehire/events.py
import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List

logger = logging.getLogger(__name__)


@dataclass
class ChangeEvent:
    table: str
    operation: str  # insert / update
    record: dict
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def matches(self, table: str, filters: Dict[str, str]) -> bool:
        if self.table != table:
            return False
        return all(str(self.record.get(k)) == str(v) for k, v in filters.items())


class Subscription:
    """Async iterator of ChangeEvent for one subscriber.

    Registered with the feed as soon as it is created, so events published
    before the first `__anext__` are queued rather than lost.
    """

    def __init__(self, feed: "ChangeFeed", table: str, filters: Dict[str, str], max_queue: int):
        self.table = table
        self.filters = filters
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self._feed = feed
        self._closed = False
        feed._subscribers.append(self)

    def __aiter__(self):
        return self

    async def __anext__(self) -> ChangeEvent:
        if self._closed:
            raise StopAsyncIteration
        return await self.queue.get()

    async def aclose(self):
        if not self._closed:
            self._closed = True
            self._feed._subscribers.remove(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    def offer(self, event: ChangeEvent):
        if not event.matches(self.table, self.filters):
            return
        try:
            self.queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"Dropping {event.table} change event for a slow subscriber")


class ChangeFeed:
    """In-process fan-out of store writes to subscribers.

    Subscribers get an async iterator of ChangeEvent filtered by table and
    record fields, and re-read whatever view they render when an event arrives.
    """

    def __init__(self, max_queue: int = 100):
        self._max_queue = max_queue
        self._subscribers: List[Subscription] = []

    def publish(self, table: str, operation: str, record: dict):
        event = ChangeEvent(table=table, operation=operation, record=dict(record))
        for subscription in list(self._subscribers):
            subscription.offer(event)

    def subscribe(self, table: str, **filters) -> Subscription:
        return Subscription(self, table, filters, self._max_queue)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
