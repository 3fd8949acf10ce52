# -*- coding: utf-8 -*-
"""
Operator API for provisioning runs, guarded by ``X-Provision-Secret``.
"""
import hmac
from functools import wraps

from flask import Blueprint, current_app, jsonify, request

from assetshield.errors import AuthenticationError, NotFoundError
from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import ProvisioningRun
from assetshield.services.provisioning import get_provisioning_pipeline

provisioning_bp = Blueprint("provisioning", __name__, url_prefix="/api/provisioning")

logger = get_logger("assetshield.provisioning")


def require_provision_secret(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = current_app.config.get("PROVISION_SECRET")
        provided = request.headers.get("X-Provision-Secret", "")
        if not expected or not hmac.compare_digest(provided.encode(), expected.encode()):
            logger.log_auth_event("provision_secret", success=False)
            raise AuthenticationError("Invalid provisioning secret")
        return f(*args, **kwargs)
    return decorated_function


@provisioning_bp.route("/runs", methods=["GET"])
@require_provision_secret
def list_runs():
    query = ProvisioningRun.query
    status = request.args.get("status")
    if status:
        query = query.filter_by(status=status)
    runs = query.order_by(ProvisioningRun.created_at.desc(), ProvisioningRun.id.desc()).limit(100).all()
    return jsonify({"runs": [run.to_dict() for run in runs]}), 200


@provisioning_bp.route("/runs/<int:run_id>", methods=["GET"])
@require_provision_secret
def get_run(run_id: int):
    run = db.session.get(ProvisioningRun, run_id)
    if run is None:
        raise NotFoundError("Provisioning run not found")
    return jsonify({"run": run.to_dict()}), 200


@provisioning_bp.route("/runs/<int:run_id>/retry", methods=["POST"])
@require_provision_secret
def retry_run(run_id: int):
    result = get_provisioning_pipeline().retry(run_id)
    return jsonify({
        "run": result.run.to_dict(),
        "customer_id": result.customer.id,
        "notified": result.notified,
    }), 200
