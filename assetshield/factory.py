# -*- coding: utf-8 -*-
from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager

from assetshield.config import Config
from assetshield.database import db

# Observability imports
from assetshield.services.metrics import init_metrics
from assetshield.services.request_context import init_request_context
from assetshield.services.structured_logging import get_logger, init_logging

BASE_DIR = Path(__file__).resolve().parent.parent


def _migrate_db(app: Flask):
    """Run Alembic migrations to head using the app's DB URL."""
    from alembic import command
    from alembic.config import Config as AlembicConfig

    cfg = AlembicConfig()  # in-memory config, no alembic.ini needed
    cfg.set_main_option("script_location", str(BASE_DIR / "migrations"))
    cfg.set_main_option("sqlalchemy.url", app.config["SQLALCHEMY_DATABASE_URI"])
    command.upgrade(cfg, "head")
    app.logger.info("Database migrations applied successfully")


def _init_jwt(app: Flask) -> JWTManager:
    jwt = JWTManager(app)
    auth_logger = get_logger("assetshield.auth")

    @jwt.unauthorized_loader
    def missing_token(reason):
        auth_logger.log_auth_event("jwt", success=False, reason=reason)
        return jsonify({"error": "Missing bearer token"}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        auth_logger.log_auth_event("jwt", success=False, reason=reason)
        return jsonify({"error": "Invalid token"}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        auth_logger.log_auth_event("jwt", success=False, reason="expired", sub=jwt_payload.get("sub"))
        return jsonify({"error": "Token has expired"}), 401

    return jwt


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    app = Flask(__name__)
    app.url_map.strict_slashes = False

    # --- Config ---
    app.config.update(Config.from_env())
    if overrides:
        app.config.update(overrides)

    db.init_app(app)
    _init_jwt(app)

    # --- CORS ---
    CORS(app, resources={
        r"/api/*": {
            "origins": app.config["CORS_ALLOWED_ORIGINS"],
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization", "X-AssetShield-API-Key"],
            "supports_credentials": False,
            "max_age": 600,
        }
    })

    # --- Observability ---
    init_logging(app)
    init_request_context(app)
    init_metrics(app)

    # --- Security / errors ---
    from assetshield.services.security_headers import apply_security_headers_to_app
    from assetshield.middleware.errors import register_error_handlers
    from assetshield.services.rate_limiter import init_rate_limiter
    apply_security_headers_to_app(app)
    register_error_handlers(app)
    init_rate_limiter(app)

    # --- Tenant services ---
    from assetshield.services.domain_resolver import init_domain_resolver
    from assetshield.services.domain_verification import init_domain_verifier
    from assetshield.services.notifications import init_notifier
    init_domain_resolver(app)
    init_domain_verifier(app)
    init_notifier(app)

    # --- Mount blueprints ---
    from assetshield.routes import (
        auth, checkout, dashboard, health, leads_api, marketing, provisioning, stripe_webhooks,
    )
    app.register_blueprint(health.health_bp)
    app.register_blueprint(marketing.marketing_bp)
    app.register_blueprint(checkout.checkout_bp)
    app.register_blueprint(stripe_webhooks.stripe_webhooks_bp)
    app.register_blueprint(auth.auth_bp)
    app.register_blueprint(dashboard.dashboard_bp)
    app.register_blueprint(leads_api.leads_api_bp)
    app.register_blueprint(provisioning.provisioning_bp)

    # --- DB init ---
    with app.app_context():
        import assetshield.models  # noqa: F401  (register tables)

        if app.config.get("TESTING") or app.config.get("DB_AUTOCREATE"):
            db.create_all()
        elif app.config.get("DB_MIGRATE_ON_START"):
            try:
                _migrate_db(app)
            except Exception as e:
                app.logger.error(f"Failed to run migrations: {e}")
                raise

    return app
