# backend/asset_tracker/__init__.py
import os

from flask import Flask, request, jsonify
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from .config import Config
from .errors import AssetTrackerError
from .extensions import db, migrate



def create_app(overrides: dict | None = None) -> Flask:
    """
    Application factory.

    `overrides` is applied on top of Config before any extension is bound,
    so a test can point SQLALCHEMY_DATABASE_URI at its own database.
    """
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])

    if not app.config.get("UPLOAD_FOLDER"):
        app.config["UPLOAD_FOLDER"] = os.path.join(app.instance_path, "uploads")
    os.makedirs(app.config["UPLOAD_FOLDER"], exist_ok=True)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp, uploads_bp
    from .routes.auth import auth_bp
    from .routes.assets import assets_bp
    from .routes.asset_history import history_bp
    from .routes.categories import categories_bp
    from .routes.employees import employees_bp
    from .routes.asset_requests import requests_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(uploads_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(assets_bp)
    app.register_blueprint(history_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(requests_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    register_error_handlers(app)

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def register_error_handlers(app: Flask) -> None:
    """JSON bodies for errors raised outside a route's own try/except."""

    @app.errorhandler(AssetTrackerError)
    def handle_domain_error(exc):
        db.session.rollback()
        return jsonify({"error": exc.message}), exc.status_code

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(exc):
        limit_mb = app.config["MAX_CONTENT_LENGTH"] // (1024 * 1024)
        return jsonify({"error": f"File size too large. Maximum allowed size is {limit_mb}MB"}), 413

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        db.session.rollback()
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        body = {"error": "Internal server error"}
        if app.config.get("EXPOSE_ERROR_DETAILS"):
            body["detail"] = str(exc)
        return jsonify(body), 500
