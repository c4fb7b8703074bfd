# Overview: Flask API routes for shops and shop settings; parses input and returns JSON responses.

from flask import Blueprint, jsonify

from ..decorators import json_body, json_errors
from ..services import shop_service


shops_bp = Blueprint("shops", __name__, url_prefix="/api/shops")


@shops_bp.get("/")
@json_errors("list shops")
def list_shops_route():
    shops = shop_service.list_shops()
    return jsonify({"items": [s.to_dict() for s in shops], "count": len(shops)}), 200


@shops_bp.post("/")
@json_errors("create shop")
def create_shop_route():
    shop = shop_service.create_shop(json_body())
    return jsonify({"shop": shop.to_dict()}), 201


@shops_bp.get("/<int:shop_id>")
@json_errors("load shop")
def get_shop_route(shop_id: int):
    return jsonify({"shop": shop_service.get_shop(shop_id).to_dict()}), 200


@shops_bp.patch("/<int:shop_id>/settings")
@json_errors("update shop settings")
def update_settings_route(shop_id: int):
    """
    Update name, currency, UPI details or timezone.

    Body: any subset of {"name", "currency", "upi_id", "upi_qr_url", "timezone"}
    """
    shop = shop_service.update_shop_settings(shop_id, json_body())
    return jsonify({"shop": shop.to_dict()}), 200
