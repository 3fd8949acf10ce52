# -*- coding: utf-8 -*-
"""
Public lead intake for customers' own sites and integrations, authenticated
with the customer's ``ask_`` API key.
"""
from flask import Blueprint, jsonify, request

from assetshield.infra.auth import require_api_key
from assetshield.models import Customer
from assetshield.schemas.dashboard import LeadCreateRequest
from assetshield.services import leads
from assetshield.services.rate_limiter import limiter, public_form_limit
from assetshield.services.request_context import client_ip

leads_api_bp = Blueprint("leads_api", __name__, url_prefix="/api/leads")


@leads_api_bp.route("", methods=["POST"])
@limiter.limit(public_form_limit)
@require_api_key
def create_lead(customer: Customer):
    payload = LeadCreateRequest.model_validate(request.get_json(silent=True) or {})
    lead = leads.record_lead(
        customer.id,
        payload,
        ip_address=client_ip(),
        user_agent=request.headers.get("User-Agent"),
    )
    return jsonify({"lead_id": lead.id, "status": lead.status}), 201
