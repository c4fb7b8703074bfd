# Overview: Flask API routes for service health.

from flask import Blueprint, jsonify
from sqlalchemy import text

from ..decorators import json_errors
from ..extensions import db


system_bp = Blueprint("system", __name__, url_prefix="/api")


@system_bp.get("/health")
@json_errors("check health")
def health():
    db.session.execute(text("SELECT 1"))
    return jsonify({"status": "ok"}), 200
