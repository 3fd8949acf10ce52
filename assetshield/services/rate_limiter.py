# -*- coding: utf-8 -*-
"""
Per-IP rate limiting for the public lead and assessment forms.

Flask-Limiter reads ``RATELIMIT_ENABLED`` and ``RATELIMIT_STORAGE_URI`` from
the app config; the per-form limit comes from ``PUBLIC_FORM_RATE_LIMIT``.
"""
from flask import Flask, current_app, jsonify
from flask_limiter import Limiter

from assetshield.infra.log import get_logger
from assetshield.services.request_context import client_ip

logger = get_logger("assetshield.rate_limit")


def public_form_limit() -> str:
    return current_app.config.get("PUBLIC_FORM_RATE_LIMIT", "30/minute")


limiter = Limiter(
    key_func=client_ip,
    headers_enabled=True,
    strategy="fixed-window",
)


def init_rate_limiter(app: Flask) -> Limiter:
    limiter.init_app(app)

    @app.errorhandler(429)
    def rate_limit_exceeded(e):
        logger.warning("Rate limit exceeded", limit=str(e.description))
        return jsonify({"error": "Too many requests, please try again later"}), 429

    return limiter
