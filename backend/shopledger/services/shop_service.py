# Overview: Service-layer operations for shops and their settings.

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from .. import persistence
from ..errors import NotFound, ValidationError
from ..models import Shop
from ..time_utils import get_zone
from ..validation import ModelValidationPolicy, validate_payload

SHOP_POLICY = ModelValidationPolicy(
    writable_fields={"name", "currency", "upi_id", "upi_qr_url", "timezone"},
    required_on_create={"name"},
)


@dataclass(frozen=True)
class ShopSettings:
    """
    Immutable snapshot of a shop's configuration.

    Passed into report serialization; never stored inside the ledger.
    """
    shop_id: int
    name: str
    currency: str
    timezone: str
    upi_id: str | None = None
    upi_qr_url: str | None = None


def _enforce_rules_shop(patch: dict) -> None:
    currency = patch.get("currency")
    if currency is not None:
        if len(currency) != 3 or not currency.isalpha():
            raise ValidationError("currency must be a 3-letter ISO code")
        patch["currency"] = currency.upper()

    tz_name = patch.get("timezone")
    if tz_name is not None:
        try:
            get_zone(tz_name)
        except ValueError as exc:
            raise ValidationError(str(exc))


def get_shop(shop_id: int) -> Shop:
    shop = persistence.get("shops", shop_id)
    if shop is None:
        raise NotFound("Shop not found", details={"shop_id": shop_id})
    return shop


def list_shops() -> list[Shop]:
    return persistence.query("shops", order=["name", "id"])


def create_shop(fields: dict) -> Shop:
    patch = validate_payload(model=Shop, payload=fields, policy=SHOP_POLICY, partial=False)
    patch.setdefault("currency", current_app.config["SHOP_DEFAULT_CURRENCY"])
    patch.setdefault("timezone", current_app.config["SHOP_DEFAULT_TIMEZONE"])
    _enforce_rules_shop(patch)
    return persistence.insert("shops", patch)


def update_shop_settings(shop_id: int, fields: dict) -> Shop:
    get_shop(shop_id)
    patch = validate_payload(model=Shop, payload=fields, policy=SHOP_POLICY, partial=True)
    _enforce_rules_shop(patch)
    return persistence.update("shops", shop_id, patch)


def settings_for(shop_id: int) -> ShopSettings:
    shop = get_shop(shop_id)
    return ShopSettings(
        shop_id=shop.id,
        name=shop.name,
        currency=shop.currency,
        timezone=shop.timezone,
        upi_id=shop.upi_id,
        upi_qr_url=shop.upi_qr_url,
    )
