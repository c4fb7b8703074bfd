# backend/shopledger/__init__.py
from flask import Flask, request

from .config import Config
from .events import ChangeBus
from .extensions import db, migrate


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    bus = ChangeBus()
    bus.init_app(app)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Reactive derived state: both monitors recompute from storage on change
    from .services.inventory_service import LowStockMonitor, MONITOR_KEY as STOCK_MONITOR_KEY
    from .services.reporting_service import DailyReportMonitor, MONITOR_KEY as REPORT_MONITOR_KEY

    report_monitor = DailyReportMonitor()
    report_monitor.attach(bus)
    app.extensions[REPORT_MONITOR_KEY] = report_monitor

    stock_monitor = LowStockMonitor()
    stock_monitor.attach(bus)
    app.extensions[STOCK_MONITOR_KEY] = stock_monitor

    # Register blueprints
    from .routes.system import system_bp
    from .routes.shops import shops_bp
    from .routes.items import items_bp
    from .routes.staff import staff_bp
    from .routes.transactions import transactions_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(shops_bp)
    app.register_blueprint(items_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
