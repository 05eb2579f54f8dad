"""BillTracker application factory.
Registers extensions, middleware, error handlers, blueprints, scheduled jobs
and CLI commands.
"""
from __future__ import annotations
import os
from typing import Any, Mapping, Optional
from flask import Flask, jsonify
from .config import Config
from .extensions import cors, db, jwt, migrate, swagger
from .errors import register_error_handlers
from .utils.logging_utils import get_logger, setup_logging
from .utils.middleware import init_middleware

logger = get_logger("app")


def create_app(config_overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__, instance_relative_config=False)

    app.config.from_object(Config())
    if config_overrides:
        app.config.update(config_overrides)

    setup_logging(app.config["LOG_DIR"], app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    swagger.init_app(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}},
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        max_age=86400,
    )
    _register_jwt_callbacks()

    init_middleware(app)
    register_error_handlers(app)

    for key in ("DATA_DIR", "UPLOAD_FOLDER"):
        path = app.config.get(key)
        if path:
            os.makedirs(path, exist_ok=True)

    with app.app_context():
        from . import models  # noqa: F401
        db.create_all()

    from .blueprints import auth, bills, categories, documents, health, integrations, payment_methods
    app.register_blueprint(auth.bp)
    app.register_blueprint(bills.bp)
    app.register_blueprint(categories.bp)
    app.register_blueprint(payment_methods.bp)
    app.register_blueprint(documents.bp)
    app.register_blueprint(integrations.bp)
    app.register_blueprint(health.bp)

    from .cli import register_commands
    register_commands(app)

    from .tasks.jobs import start_scheduler
    start_scheduler(app)

    logger.info("BillTracker app created (db=%s)", app.config["SQLALCHEMY_DATABASE_URI"])
    return app


def _register_jwt_callbacks() -> None:
    # every auth failure looks the same to the client
    def unauthorized(*_args):
        return jsonify({"error": "Unauthorized"}), 401

    jwt.unauthorized_loader(unauthorized)
    jwt.invalid_token_loader(unauthorized)
    jwt.expired_token_loader(unauthorized)
    jwt.revoked_token_loader(unauthorized)
    jwt.user_lookup_error_loader(unauthorized)
