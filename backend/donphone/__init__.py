# backend/donphone/__init__.py
from __future__ import annotations

from datetime import datetime

from flask import Flask, request
from flask.json.provider import DefaultJSONProvider

from .config import Config
from .extensions import db, migrate
from .time_utils import to_utc_z


class DocumentJSONProvider(DefaultJSONProvider):
    """Render datetimes as ISO-8601 UTC with milliseconds (2024-05-01T13:45:10.123Z)."""

    @staticmethod
    def default(o):
        if isinstance(o, datetime):
            return to_utc_z(o)
        return DefaultJSONProvider.default(o)


def create_app(test_config: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    app.json = DocumentJSONProvider(app)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.clients import clients_bp
    from .routes.products import products_bp
    from .routes.providers import providers_bp
    from .routes.expenses import expenses_bp
    from .routes.users import users_bp
    from .routes.sales import sales_bp
    from .routes.service_orders import service_orders_bp
    from .routes.settings import settings_bp
    from .routes.backup import backup_bp
    from .routes.reports import reports_bp
    from .routes.diagnostics import diagnostics_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(clients_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(providers_bp)
    app.register_blueprint(expenses_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(sales_bp)
    app.register_blueprint(service_orders_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(backup_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(diagnostics_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in app.config.get("CORS_ALLOWED_ORIGINS", ()):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
