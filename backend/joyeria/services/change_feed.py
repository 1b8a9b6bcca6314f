"""
In-process change notifications.

Services publish one event per committed mutation; open views subscribe to
the tables they display and reload when anything arrives.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from joyeria.config import Config
from joyeria.time_utils import utcnow, to_utc_z

logger = logging.getLogger(__name__)

EVENT_TYPES = {"INSERT", "UPDATE", "DELETE"}


@dataclass
class ChangeEvent:
    table: str
    event: str
    record_id: int | None = None
    at: str = field(default_factory=lambda: to_utc_z(utcnow()))

    def to_dict(self) -> dict:
        return {
            "table": self.table,
            "event": self.event,
            "record_id": self.record_id,
            "at": self.at,
        }


class Subscription:
    def __init__(self, tables: set[str], events: set[str], maxsize: int):
        self.tables = tables
        self.events = events
        self.queue: asyncio.Queue[ChangeEvent] = asyncio.Queue(maxsize=maxsize)

    def matches(self, change: ChangeEvent) -> bool:
        if self.tables and change.table not in self.tables:
            return False
        if self.events and change.event not in self.events:
            return False
        return True

    def offer(self, change: ChangeEvent):
        if self.queue.full():
            # Subscribers reload on any event, losing the oldest one is harmless
            self.queue.get_nowait()
        self.queue.put_nowait(change)

    async def get(self) -> ChangeEvent:
        return await self.queue.get()


class ChangeFeed:
    def __init__(self):
        self._subscriptions: list[Subscription] = []

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, table: str, event: str, record_id: int | None = None):
        if event not in EVENT_TYPES:
            raise ValueError(f"Unknown change event: {event}")
        change = ChangeEvent(table=table, event=event, record_id=record_id)
        for subscription in self._subscriptions:
            if subscription.matches(change):
                subscription.offer(change)
        logger.debug(f"{event} on {table} ({record_id}) -> {len(self._subscriptions)} subscribers")

    @asynccontextmanager
    async def subscribe(
        self,
        tables: set[str] | None = None,
        events: set[str] | None = None,
    ) -> AsyncIterator[Subscription]:
        """Subscribe to changes of the given tables (all when empty)."""
        subscription = Subscription(
            tables=set(tables or ()),
            events={e.upper() for e in (events or ())},
            maxsize=Config.CHANGE_QUEUE_SIZE,
        )
        self._subscriptions.append(subscription)
        try:
            yield subscription
        finally:
            self._subscriptions.remove(subscription)


change_feed = ChangeFeed()
