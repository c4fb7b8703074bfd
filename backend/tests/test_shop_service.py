from decimal import Decimal

import pytest

from shopledger.errors import NotFound, ValidationError
from shopledger.services import shop_service
from shopledger.validation import to_money


class TestShops:
    def test_create_uses_configured_defaults(self, app, db_session):
        shop = shop_service.create_shop({"name": "Default Store"})

        assert shop.currency == app.config["SHOP_DEFAULT_CURRENCY"]
        assert shop.timezone == app.config["SHOP_DEFAULT_TIMEZONE"]

    def test_currency_is_normalized(self, db_session):
        shop = shop_service.create_shop({"name": "Euro Store", "currency": "eur"})
        assert shop.currency == "EUR"

    @pytest.mark.parametrize(
        "fields",
        [
            {"name": "Bad", "timezone": "Mars/Olympus"},
            {"name": "Bad", "currency": "RUPEES"},
            {"currency": "INR"},
        ],
    )
    def test_invalid_shops_are_rejected(self, db_session, fields):
        with pytest.raises(ValidationError):
            shop_service.create_shop(fields)

    def test_update_settings(self, shop):
        shop_service.update_shop_settings(
            shop.id, {"upi_id": "corner@upi", "timezone": "Asia/Kolkata"}
        )

        settings = shop_service.settings_for(shop.id)
        assert settings.upi_id == "corner@upi"
        assert settings.timezone == "Asia/Kolkata"
        assert settings.name == "Corner Store"

    def test_unknown_shop(self, db_session):
        with pytest.raises(NotFound):
            shop_service.get_shop(424242)


class TestMoney:
    def test_float_input_keeps_its_cents(self):
        assert to_money(19.99, "amount") == Decimal("19.99")
        assert to_money("7", "amount") == Decimal("7.00")

    @pytest.mark.parametrize("value", ["1.001", "NaN", "Infinity", True, None, "", "12,50"])
    def test_rejected_amounts(self, value):
        with pytest.raises(ValidationError):
            to_money(value, "amount")

    def test_upper_bound(self):
        with pytest.raises(ValidationError):
            to_money("10000000000.00", "amount")
