# Overview: Inventory alert monitor; derives low-stock items from catalog state.

from __future__ import annotations

import logging
from typing import Iterable

from flask import current_app

from ..events import ITEMS_CHANGED, ChangeBus, ChangeEvent, Subscription
from ..models import Item
from .catalog_service import list_active_items

logger = logging.getLogger(__name__)

MONITOR_KEY = "shopledger.low_stock_monitor"


def is_low_stock(item: Item) -> bool:
    return item.stock_quantity <= item.min_stock_alert


def low_stock(items: Iterable[Item]) -> list[Item]:
    """Items at or below their alert threshold, in the order given."""
    return [item for item in items if is_low_stock(item)]


def low_stock_for_shop(shop_id: int) -> list[Item]:
    """Active catalog items needing restock, by name."""
    return low_stock(list_active_items(shop_id))


class LowStockMonitor:
    """
    Holds the current low-stock set per shop.

    Recomputed from the catalog on every ITEMS_CHANGED event for the shop;
    a shop that has not changed since start-up is computed on first read.
    """

    def __init__(self):
        self._alerts: dict[int, list[int]] = {}
        self._subscription: Subscription | None = None

    def attach(self, bus: ChangeBus) -> None:
        self._subscription = bus.subscribe(ITEMS_CHANGED, None, self._on_items_changed)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_items_changed(self, event: ChangeEvent) -> None:
        items = low_stock_for_shop(event.shop_id)
        self._alerts[event.shop_id] = [item.id for item in items]
        logger.debug("Low-stock set for shop %s: %s", event.shop_id, self._alerts[event.shop_id])

    def alert_ids(self, shop_id: int) -> list[int]:
        if shop_id not in self._alerts:
            self._alerts[shop_id] = [item.id for item in low_stock_for_shop(shop_id)]
        return list(self._alerts[shop_id])

    def alerts(self, shop_id: int) -> list[Item]:
        """Re-query: always reflects the catalog as of now."""
        items = low_stock_for_shop(shop_id)
        self._alerts[shop_id] = [item.id for item in items]
        return items


def get_low_stock_monitor() -> LowStockMonitor:
    return current_app.extensions[MONITOR_KEY]
