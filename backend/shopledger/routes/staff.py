# Overview: Flask API routes for the staff directory; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import json_body, json_errors
from ..services import staff_service


staff_bp = Blueprint("staff", __name__, url_prefix="/api/shops/<int:shop_id>/staff")


@staff_bp.get("/")
@json_errors("list staff")
def list_staff_route(shop_id: int):
    if request.args.get("active", "false").lower() == "true":
        members = staff_service.list_active_staff(shop_id)
    else:
        members = staff_service.list_staff(shop_id)
    return jsonify({"items": [m.to_dict() for m in members], "count": len(members)}), 200


@staff_bp.post("/")
@json_errors("create staff")
def create_staff_route(shop_id: int):
    data = json_body()
    data.pop("id", None)
    member = staff_service.upsert_staff(shop_id, data)
    return jsonify({"staff": member.to_dict()}), 201


@staff_bp.post("/lookup")
@json_errors("look up staff by passcode")
def lookup_staff_route(shop_id: int):
    """
    Resolve the active staff member for a counter passcode.

    Body: {"passcode": "129"}
    """
    data = json_body()
    member = staff_service.find_by_passcode(shop_id, data.get("passcode"))
    return jsonify({"staff": member.to_dict()}), 200


@staff_bp.patch("/<int:staff_id>")
@json_errors("update staff")
def update_staff_route(shop_id: int, staff_id: int):
    data = json_body()
    data["id"] = staff_id
    member = staff_service.upsert_staff(shop_id, data)
    return jsonify({"staff": member.to_dict()}), 200


@staff_bp.post("/<int:staff_id>/deactivate")
@json_errors("deactivate staff")
def deactivate_staff_route(shop_id: int, staff_id: int):
    member = staff_service.deactivate_staff(shop_id, staff_id)
    return jsonify({"staff": member.to_dict()}), 200


@staff_bp.delete("/<int:staff_id>")
@json_errors("delete staff")
def delete_staff_route(shop_id: int, staff_id: int):
    staff_service.delete_staff(shop_id, staff_id)
    return jsonify({"deleted": True}), 200
