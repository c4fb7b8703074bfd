# Overview: In-process change notification bus (shop-scoped publish/subscribe).

"""
Change Notification Bus

Two channels exist: ITEMS_CHANGED and TRANSACTIONS_CHANGED. Subscribers
register for one channel and one shop (or every shop with shop_id=None).

Delivery rules:
- Synchronous and in publish order. An event published while another
  event on the same channel is being delivered is queued behind it, so a
  channel is always FIFO even when subscribers publish.
- Each subscriber is isolated: an exception is logged and delivery
  continues with the next subscriber.
"""

from __future__ import annotations

import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable

from flask import current_app

logger = logging.getLogger(__name__)

ITEMS_CHANGED = "items-changed"
TRANSACTIONS_CHANGED = "transactions-changed"
CHANNELS = (ITEMS_CHANGED, TRANSACTIONS_CHANGED)

EXTENSION_KEY = "shopledger.bus"


@dataclass(frozen=True)
class ChangeEvent:
    channel: str
    shop_id: int
    action: str
    entity_id: int | None = None
    payload: dict = field(default_factory=dict)


Handler = Callable[[ChangeEvent], Any]


class Subscription:
    def __init__(self, bus: "ChangeBus", sub_id: int, channel: str):
        self._bus = bus
        self.id = sub_id
        self.channel = channel

    def unsubscribe(self) -> None:
        self._bus._remove(self.channel, self.id)


class ChangeBus:
    def __init__(self):
        self._ids = itertools.count(1)
        self._subscribers: dict[str, dict[int, tuple[int | None, Handler]]] = {
            channel: {} for channel in CHANNELS
        }
        self._pending: dict[str, deque[ChangeEvent]] = {channel: deque() for channel in CHANNELS}
        self._delivering: set[str] = set()

    def init_app(self, app) -> None:
        app.extensions[EXTENSION_KEY] = self

    def subscribe(self, channel: str, shop_id: int | None, handler: Handler) -> Subscription:
        self._check_channel(channel)
        sub_id = next(self._ids)
        self._subscribers[channel][sub_id] = (shop_id, handler)
        return Subscription(self, sub_id, channel)

    def publish(
        self,
        channel: str,
        shop_id: int,
        action: str,
        entity_id: int | None = None,
        payload: dict | None = None,
    ) -> ChangeEvent:
        self._check_channel(channel)
        event = ChangeEvent(
            channel=channel,
            shop_id=shop_id,
            action=action,
            entity_id=entity_id,
            payload=payload or {},
        )
        self._pending[channel].append(event)
        if channel not in self._delivering:
            self._drain(channel)
        return event

    def subscriber_count(self, channel: str) -> int:
        self._check_channel(channel)
        return len(self._subscribers[channel])

    def _drain(self, channel: str) -> None:
        self._delivering.add(channel)
        try:
            queue = self._pending[channel]
            while queue:
                event = queue.popleft()
                # Snapshot: handlers may (un)subscribe during delivery
                for sub_id, (scope, handler) in list(self._subscribers[channel].items()):
                    if scope is not None and scope != event.shop_id:
                        continue
                    try:
                        handler(event)
                    except Exception:
                        logger.exception(
                            "Subscriber %s failed on %s (shop_id=%s, action=%s)",
                            sub_id, channel, event.shop_id, event.action,
                        )
        finally:
            self._delivering.discard(channel)

    def _remove(self, channel: str, sub_id: int) -> None:
        self._subscribers[channel].pop(sub_id, None)

    @staticmethod
    def _check_channel(channel: str) -> None:
        if channel not in CHANNELS:
            raise ValueError(f"Unknown channel: {channel}")


def get_bus() -> ChangeBus:
    """The bus bound to the current application."""
    return current_app.extensions[EXTENSION_KEY]
