# Overview: Flask API routes for catalog items; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import json_body, json_errors
from ..services import catalog_service
from ..services.inventory_service import get_low_stock_monitor


items_bp = Blueprint("items", __name__, url_prefix="/api/shops/<int:shop_id>/items")


@items_bp.get("/")
@json_errors("list items")
def list_items_route(shop_id: int):
    """All items by name; ?active=true restricts to active ones."""
    if request.args.get("active", "false").lower() == "true":
        items = catalog_service.list_active_items(shop_id)
    else:
        items = catalog_service.list_items(shop_id)
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200


@items_bp.post("/")
@json_errors("create item")
def create_item_route(shop_id: int):
    data = json_body()
    data.pop("id", None)
    item = catalog_service.upsert_item(shop_id, data)
    return jsonify({"item": item.to_dict()}), 201


@items_bp.get("/low-stock")
@json_errors("load low-stock items")
def low_stock_route(shop_id: int):
    items = get_low_stock_monitor().alerts(shop_id)
    return jsonify({"items": [i.to_dict() for i in items], "count": len(items)}), 200


@items_bp.get("/<int:item_id>")
@json_errors("load item")
def get_item_route(shop_id: int, item_id: int):
    return jsonify({"item": catalog_service.get_item(shop_id, item_id).to_dict()}), 200


@items_bp.patch("/<int:item_id>")
@json_errors("update item")
def update_item_route(shop_id: int, item_id: int):
    data = json_body()
    data["id"] = item_id
    item = catalog_service.upsert_item(shop_id, data)
    return jsonify({"item": item.to_dict()}), 200


@items_bp.post("/<int:item_id>/deactivate")
@json_errors("deactivate item")
def deactivate_item_route(shop_id: int, item_id: int):
    item = catalog_service.deactivate_item(shop_id, item_id)
    return jsonify({"item": item.to_dict()}), 200


@items_bp.delete("/<int:item_id>")
@json_errors("delete item")
def delete_item_route(shop_id: int, item_id: int):
    catalog_service.delete_item(shop_id, item_id)
    return jsonify({"deleted": True}), 200
