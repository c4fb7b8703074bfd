from decimal import Decimal

import pytest

from shopledger import persistence
from shopledger.errors import ConflictError, NotFound, ValidationError
from shopledger.events import ITEMS_CHANGED
from shopledger.services import catalog_service, ledger_service
from shopledger.services.inventory_service import get_low_stock_monitor, low_stock


def _item_events(events):
    return [(e.action, e.entity_id) for e in events if e.channel == ITEMS_CHANGED]


class TestCatalog:
    def test_create_applies_defaults(self, app, shop, recorded):
        item = catalog_service.upsert_item(shop.id, {"name": "  Rice 1kg ", "base_price": 55.5})

        assert item.name == "Rice 1kg"
        assert item.base_price == Decimal("55.50")
        assert item.stock_quantity == 0
        assert item.min_stock_alert == app.config["DEFAULT_MIN_STOCK_ALERT"]
        assert item.max_discount_percentage == Decimal("0")
        assert item.is_active is True
        assert _item_events(recorded) == [("created", item.id)]

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "Bad", "base_price": "-1"},
            {"name": "Bad", "base_price": "1e40"},
            {"name": "Bad", "base_price": "1", "max_discount_fixed": "1e30"},
            {"name": "Bad", "base_price": "1", "stock_quantity": -1},
            {"name": "Bad", "base_price": "1", "min_stock_alert": -2},
            {"name": "Bad", "base_price": "1", "max_discount_percentage": "100.01"},
            {"name": "Bad", "base_price": "1", "max_discount_fixed": "-0.01"},
            {"name": "Bad", "base_price": "1", "stock_quantity": 2.5},
            {"name": "", "base_price": "1"},
            {"base_price": "1"},
            {"name": "Bad", "base_price": "1", "shop_id": 99},
        ],
    )
    def test_invalid_items_are_rejected(self, shop, recorded, fields):
        with pytest.raises(ValidationError):
            catalog_service.upsert_item(shop.id, fields)

        assert catalog_service.list_items(shop.id) == []
        assert _item_events(recorded) == []

    def test_update_patches_only_given_fields(self, shop, tea, recorded):
        updated = catalog_service.upsert_item(shop.id, {"id": tea.id, "stock_quantity": 3})

        assert updated.stock_quantity == 3
        assert updated.base_price == Decimal("100.00")
        assert _item_events(recorded) == [("updated", tea.id)]

    def test_update_unknown_item(self, shop):
        with pytest.raises(NotFound):
            catalog_service.upsert_item(shop.id, {"id": 999999, "name": "Ghost"})

    def test_items_are_scoped_to_shop(self, shop, other_shop, tea):
        with pytest.raises(NotFound):
            catalog_service.get_item(other_shop.id, tea.id)
        assert catalog_service.list_items(other_shop.id) == []

    def test_deactivate_is_idempotent(self, shop, tea, recorded):
        catalog_service.deactivate_item(shop.id, tea.id)
        catalog_service.deactivate_item(shop.id, tea.id)

        assert catalog_service.get_item(shop.id, tea.id).is_active is False
        assert catalog_service.list_active_items(shop.id) == []
        assert _item_events(recorded) == [("deactivated", tea.id)]

    def test_delete_unreferenced_item(self, shop, tea, recorded):
        catalog_service.delete_item(shop.id, tea.id)

        assert persistence.get("items", tea.id) is None
        assert _item_events(recorded) == [("deleted", tea.id)]

    def test_delete_referenced_item_conflicts(self, shop, cashier, tea):
        ledger_service.record_sale(shop.id, "100.00", cashier.id, "CASH", item_id=tea.id)

        with pytest.raises(ConflictError):
            catalog_service.delete_item(shop.id, tea.id)
        assert catalog_service.get_item(shop.id, tea.id) is not None


class TestLowStock:
    def test_threshold_is_inclusive(self, shop, tea, soap):
        catalog_service.upsert_item(shop.id, {"id": tea.id, "stock_quantity": 5})

        assert [i.name for i in low_stock(catalog_service.list_items(shop.id))] == [
            "Soap",
            "Tea Packet",
        ]

    def test_low_stock_keeps_input_order(self, shop, tea, soap):
        catalog_service.upsert_item(shop.id, {"id": tea.id, "stock_quantity": 0})

        assert low_stock([tea, soap]) == [tea, soap]
        assert low_stock([]) == []

    def test_monitor_follows_catalog_changes(self, shop, tea, soap):
        monitor = get_low_stock_monitor()
        assert monitor.alert_ids(shop.id) == [soap.id]

        catalog_service.upsert_item(shop.id, {"id": tea.id, "stock_quantity": 1})
        assert monitor.alert_ids(shop.id) == [soap.id, tea.id]

        catalog_service.upsert_item(shop.id, {"id": soap.id, "stock_quantity": 50})
        assert monitor.alert_ids(shop.id) == [tea.id]

        catalog_service.deactivate_item(shop.id, tea.id)
        assert monitor.alert_ids(shop.id) == []

    def test_monitor_alerts_serialize(self, shop, soap):
        items = get_low_stock_monitor().alerts(shop.id)

        assert [i.to_dict()["is_low_stock"] for i in items] == [True]
