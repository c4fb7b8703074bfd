from flask import Blueprint, jsonify, request

from ..decorators import json_errors
from ..errors import ValidationError
from ..services import reporting_service
from ..services.reporting_service import get_report_monitor
from ..services.shop_service import settings_for
from ..time_utils import parse_iso_date


reports_bp = Blueprint("reports", __name__, url_prefix="/api/shops/<int:shop_id>/reports")


@reports_bp.get("/daily")
@json_errors("load daily report")
def daily_report_route(shop_id: int):
    try:
        on_date = parse_iso_date(request.args.get("date"))
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")

    settings = settings_for(shop_id)
    if on_date is None:
        report = get_report_monitor().latest(shop_id)
    else:
        report = reporting_service.daily_report(shop_id, on_date)
    return jsonify(report.to_dict(settings)), 200


@reports_bp.get("/overview")
@json_errors("load overview")
def overview_route(shop_id: int):
    return jsonify(reporting_service.owner_overview(shop_id)), 200
