# -*- coding: utf-8 -*-
import time

from flask import Blueprint, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from assetshield.infra.db import db
from assetshield.infra.log import get_logger

health_bp = Blueprint("health", __name__)

SERVICE_NAME = "assetshield-platform"

logger = get_logger("assetshield.health")


@health_bp.route("/healthz", methods=["GET", "HEAD"])
def healthz():
    """Liveness probe; never touches the database."""
    return jsonify({
        "status": "healthy",
        "service": SERVICE_NAME,
        "timestamp": time.time(),
    }), 200


@health_bp.route("/readyz", methods=["GET", "HEAD"])
def readyz():
    """Readiness probe; fails when the database is unreachable."""
    try:
        db.session.execute(text("SELECT 1"))
        database_ok = True
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Readiness check failed", error=str(e))
        database_ok = False

    return jsonify({
        "status": "ready" if database_ok else "unavailable",
        "service": SERVICE_NAME,
        "timestamp": time.time(),
        "checks": {"database": database_ok},
    }), 200 if database_ok else 503
