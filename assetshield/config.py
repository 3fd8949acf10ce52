# -*- coding: utf-8 -*-
"""
Environment-driven configuration for the AssetShield platform.

``Config.from_env()`` reads the environment once per app;
``create_app`` layers explicit overrides (tests, scripts) on top.
"""
import os
from datetime import timedelta
from typing import Any, Dict, List


def _csv(value: str) -> List[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


def normalize_db_url(url: str) -> str:
    """Standardise on the psycopg v3 driver for Postgres URLs."""
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://") and "+psycopg://" not in url:
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _default_db_url() -> str:
    db_path = os.path.join(os.path.dirname(__file__), "..", "instance", "assetshield.db")
    os.makedirs(os.path.dirname(db_path), exist_ok=True)
    return f"sqlite:///{os.path.abspath(db_path)}"


DEFAULT_CORS_ORIGINS = (
    "https://assetshield.app,https://www.assetshield.app,"
    "https://assetshieldapp.com,http://localhost:3000"
)


class Config:
    """Application settings. Keys mirror the environment variable names."""

    @classmethod
    def from_env(cls) -> Dict[str, Any]:
        secret_key = os.environ.get("SECRET_KEY", "dev-secret-key")
        db_url = os.environ.get("DATABASE_URL")

        return {
            "SECRET_KEY": secret_key,
            "TESTING": _flag("TESTING", "false"),

            # --- Database ---
            "SQLALCHEMY_DATABASE_URI": normalize_db_url(db_url) if db_url else _default_db_url(),
            "SQLALCHEMY_TRACK_MODIFICATIONS": False,
            "DB_MIGRATE_ON_START": _flag("ASSETSHIELD_DB_MIGRATE_ON_START", "true"),
            "DB_AUTOCREATE": _flag("ASSETSHIELD_DB_AUTOCREATE", "false"),

            # --- Dashboard tokens ---
            "JWT_SECRET_KEY": os.environ.get("JWT_SECRET_KEY") or secret_key,
            "JWT_ALGORITHM": "HS256",
            "JWT_TOKEN_LOCATION": ["headers"],
            "JWT_ACCESS_TOKEN_EXPIRES": timedelta(
                hours=int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES_HOURS", "12"))),

            # --- Stripe ---
            "STRIPE_SECRET_KEY": os.getenv("STRIPE_SECRET_KEY", "").strip() or None,
            "STRIPE_WEBHOOK_SECRET": os.getenv("STRIPE_WEBHOOK_SECRET", "").strip() or None,
            "STRIPE_WEBHOOK_TOLERANCE": int(os.getenv("STRIPE_WEBHOOK_TOLERANCE", "300")),

            # --- Email ---
            "SENDGRID_API_KEY": os.getenv("SENDGRID_API_KEY") or None,
            "SENDGRID_FROM_EMAIL": os.getenv("SENDGRID_FROM_EMAIL", "welcome@assetshield.app"),
            "SENDGRID_FROM_NAME": os.getenv("SENDGRID_FROM_NAME", "AssetShield"),
            "SUPPORT_EMAIL": os.getenv("SUPPORT_EMAIL", "support@assetshield.app"),
            "PLATFORM_BASE_URL": os.getenv("PLATFORM_BASE_URL", "https://assetshield.app").rstrip("/"),

            # --- Tenant routing ---
            "SYSTEM_HOSTS": _csv(os.getenv("SYSTEM_HOSTS", "localhost,127.0.0.1")),
            "PLATFORM_DOMAINS": _csv(os.getenv(
                "PLATFORM_DOMAINS", "assetshield.app,assetshieldapp.com,pages.dev")),
            "DOMAIN_VERIFICATION_MODE": os.getenv("DOMAIN_VERIFICATION_MODE", "dns").lower(),
            "DOMAIN_VERIFICATION_PREFIX": os.getenv("DOMAIN_VERIFICATION_PREFIX", "_assetshield"),
            "DNS_LOOKUP_TIMEOUT": float(os.getenv("DNS_LOOKUP_TIMEOUT", "10")),

            # --- Provisioning ---
            "PROVISION_SECRET": os.getenv("PROVISION_SECRET") or None,
            "TRIAL_DAYS": int(os.getenv("TRIAL_DAYS", "14")),

            # --- Public forms ---
            "RATELIMIT_ENABLED": _flag("RATELIMIT_ENABLED", "true"),
            "RATELIMIT_STORAGE_URI": os.getenv("RATELIMIT_STORAGE_URI", "memory://"),
            "PUBLIC_FORM_RATE_LIMIT": os.getenv("PUBLIC_FORM_RATE_LIMIT", "30/minute"),
            "CORS_ALLOWED_ORIGINS": [
                origin.strip()
                for origin in os.getenv("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS).split(",")
                if origin.strip()
            ],

            # --- Observability ---
            "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
            "LOG_JSON": _flag("ASSETSHIELD_LOG_JSON", "true"),
            "METRICS_ENABLED": _flag("ASSETSHIELD_METRICS_ENABLED", "true"),
        }
