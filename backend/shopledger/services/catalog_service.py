# backend/shopledger/services/catalog_service.py
"""
Catalog Store

Single writer of Item records. Every successful mutation publishes an
ITEMS_CHANGED event for the item's shop after the write is committed.

Items that appear on a transaction are never hard-deleted; callers must
deactivate them instead.
"""
from __future__ import annotations

from flask import current_app

from .. import persistence
from ..errors import ConflictError, NotFound
from ..events import ITEMS_CHANGED, get_bus
from ..models import Item
from ..validation import ModelValidationPolicy, enforce_rules_item, validate_payload
from .shop_service import get_shop

ITEM_POLICY = ModelValidationPolicy(
    writable_fields={
        "name",
        "base_price",
        "stock_quantity",
        "min_stock_alert",
        "max_discount_percentage",
        "max_discount_fixed",
        "is_active",
    },
    required_on_create={"name", "base_price"},
)


def _publish(item: Item, action: str) -> None:
    get_bus().publish(ITEMS_CHANGED, item.shop_id, action, entity_id=item.id)


def get_item(shop_id: int, item_id: int) -> Item:
    item = persistence.get("items", item_id)
    if item is None or item.shop_id != shop_id:
        raise NotFound("Item not found", details={"item_id": item_id})
    return item


def list_items(shop_id: int) -> list[Item]:
    """All items of the shop, active or not, by name."""
    return persistence.query("items", {"shop_id": shop_id}, order=["name", "id"])


def list_active_items(shop_id: int) -> list[Item]:
    return persistence.query(
        "items",
        {"shop_id": shop_id, "is_active": True},
        order=["name", "id"],
    )


def upsert_item(shop_id: int, fields: dict) -> Item:
    """
    Create an item, or patch it when fields carries an "id".

    Raises ValidationError for negative price/quantities, a percentage
    outside [0, 100] or a negative fixed discount. Nothing is written on
    failure.
    """
    fields = dict(fields or {})
    item_id = fields.pop("id", None)

    if item_id is None:
        get_shop(shop_id)
        patch = validate_payload(model=Item, payload=fields, policy=ITEM_POLICY, partial=False)
        patch.setdefault("min_stock_alert", current_app.config["DEFAULT_MIN_STOCK_ALERT"])
        enforce_rules_item(patch)
        item = persistence.insert("items", {"shop_id": shop_id, **patch})
        _publish(item, "created")
        return item

    get_item(shop_id, item_id)
    patch = validate_payload(model=Item, payload=fields, policy=ITEM_POLICY, partial=True)
    enforce_rules_item(patch)
    item = persistence.update("items", item_id, patch)
    _publish(item, "updated")
    return item


def deactivate_item(shop_id: int, item_id: int) -> Item:
    item = get_item(shop_id, item_id)
    if not item.is_active:
        return item
    item = persistence.update("items", item_id, {"is_active": False})
    _publish(item, "deactivated")
    return item


def delete_item(shop_id: int, item_id: int) -> None:
    get_item(shop_id, item_id)
    references = persistence.count("transactions", {"inferred_item_id": item_id})
    if references:
        raise ConflictError(
            "Item is referenced by transactions; deactivate it instead",
            details={"item_id": item_id, "transaction_count": references},
        )
    persistence.delete("items", item_id)
    get_bus().publish(ITEMS_CHANGED, shop_id, "deleted", entity_id=item_id)
