# -*- coding: utf-8 -*-
from flask import Blueprint, jsonify, request

from assetshield.schemas.dashboard import LoginRequest
from assetshield.services import accounts
from assetshield.services.request_context import client_ip

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/login", methods=["POST"])
def login():
    """Exchange dashboard credentials for a bearer token."""
    creds = LoginRequest.model_validate(request.get_json(silent=True) or {})
    customer, token = accounts.authenticate(
        creds.email,
        creds.password,
        ip_address=client_ip(),
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify({
        "access_token": token,
        "token_type": "Bearer",
        "customer": customer.to_dict(),
    }), 200
