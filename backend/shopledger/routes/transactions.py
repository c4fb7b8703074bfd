# Overview: Flask API routes for the transaction ledger; parses input and returns JSON responses.

from flask import Blueprint, jsonify, request

from ..decorators import json_body, json_errors
from ..errors import ValidationError
from ..services import ledger_service
from ..time_utils import parse_iso_date


transactions_bp = Blueprint(
    "transactions", __name__, url_prefix="/api/shops/<int:shop_id>/transactions"
)


def _int_arg(name: str, default=None):
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


@transactions_bp.post("/")
@json_errors("record sale")
def record_sale_route(shop_id: int):
    """
    Record one sale.

    Body:
        {
          "entered_amount": "100.00",   // required, > 0
          "staff_id": 3,                // required, active staff
          "payment_mode": "CASH",       // CASH | UPI | CREDIT
          "discount_amount": "0.00",    // optional
          "is_override": false,         // optional, authorizes discount above item limit
          "item_id": 7                  // optional inferred item
        }
    """
    data = json_body()
    is_override = data.get("is_override", False)
    if not isinstance(is_override, bool):
        raise ValidationError("is_override must be a boolean")

    txn = ledger_service.record_sale(
        shop_id,
        data.get("entered_amount"),
        data.get("staff_id"),
        data.get("payment_mode"),
        discount_amount=data.get("discount_amount"),
        is_override=is_override,
        item_id=data.get("item_id"),
    )
    return jsonify({"transaction": txn.to_dict()}), 201


@transactions_bp.get("/")
@json_errors("list transactions")
def list_transactions_route(shop_id: int):
    """
    Newest first. With any of ?date=YYYY-MM-DD, ?payment_mode=, ?staff_id=
    the filters are combined with AND; otherwise ?limit / ?offset page the
    recent list.
    """
    try:
        on_date = parse_iso_date(request.args.get("date"))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")
    payment_mode = request.args.get("payment_mode") or None
    staff_id = _int_arg("staff_id")
    limit = _int_arg("limit")

    if on_date is None and payment_mode is None and staff_id is None:
        txns = ledger_service.list_recent(shop_id, limit=limit, offset=_int_arg("offset", 0))
    else:
        txns = ledger_service.filter_transactions(
            shop_id,
            on_date=on_date,
            payment_mode=payment_mode,
            staff_id=staff_id,
            limit=limit,
        )
    return jsonify({"items": [t.to_dict() for t in txns], "count": len(txns)}), 200


@transactions_bp.get("/outstanding-credit")
@json_errors("load outstanding credit")
def outstanding_credit_route(shop_id: int):
    return jsonify(ledger_service.outstanding_credit(shop_id).to_dict()), 200


@transactions_bp.get("/<int:transaction_id>")
@json_errors("load transaction")
def get_transaction_route(shop_id: int, transaction_id: int):
    txn = ledger_service.get_transaction(shop_id, transaction_id)
    return jsonify({"transaction": txn.to_dict()}), 200


@transactions_bp.post("/<int:transaction_id>/settle")
@json_errors("settle credit")
def settle_credit_route(shop_id: int, transaction_id: int):
    txn = ledger_service.settle_credit(shop_id, transaction_id)
    return jsonify({"transaction": txn.to_dict()}), 200
