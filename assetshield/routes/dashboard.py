# -*- coding: utf-8 -*-
"""
Customer dashboard API. Every route requires a bearer token issued by
``POST /api/auth/login``; the authenticated customer arrives as ``customer``.
"""
from flask import Blueprint, jsonify, request

from assetshield.errors import InvalidRequestError
from assetshield.infra.auth import require_customer
from assetshield.infra.db import db
from assetshield.models import ActivityLog, Customer, DocumentTemplate, Office
from assetshield.schemas.dashboard import (
    AddDomainRequest,
    BrandingPatch,
    LeadCreateRequest,
    LeadStatusUpdate,
    SettingsUpdate,
)
from assetshield.services import accounts, leads, tiers
from assetshield.services.request_context import client_ip
from assetshield.services.white_label import get_white_label_service

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


def _body() -> dict:
    return request.get_json(silent=True) or {}


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidRequestError(f"{name} must be an integer")


# ---- Account ------------------------------------------------------------------------

@dashboard_bp.route("/me", methods=["GET"])
@require_customer
def me(customer: Customer):
    tier = tiers.get_tier(customer.tier)
    return jsonify({
        "customer": customer.to_dict(include_api_key=True),
        "features": list(tier.features),
    }), 200


@dashboard_bp.route("/settings", methods=["PUT"])
@require_customer
def update_settings(customer: Customer):
    changes = SettingsUpdate.model_validate(_body()).model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(customer, field, value)
    if changes:
        ActivityLog.record(customer.id, "settings_updated", details={"fields": sorted(changes)},
                           user_email=customer.owner_email)
        db.session.commit()
    return jsonify({"customer": customer.to_dict()}), 200


@dashboard_bp.route("/api-key/rotate", methods=["POST"])
@require_customer
def rotate_api_key(customer: Customer):
    return jsonify({"api_key": accounts.rotate_api_key(customer)}), 200


# ---- Branding -----------------------------------------------------------------------

@dashboard_bp.route("/branding", methods=["GET"])
@require_customer
def get_branding(customer: Customer):
    config = get_white_label_service().get(customer.id)
    return jsonify({"branding": config.to_dict()}), 200


@dashboard_bp.route("/branding", methods=["PUT"])
@require_customer
def update_branding(customer: Customer):
    patch = BrandingPatch.model_validate(_body())
    config = get_white_label_service().update(customer.id, patch, actor_email=customer.owner_email)
    return jsonify({"branding": config.to_dict()}), 200


# ---- Domains ------------------------------------------------------------------------

@dashboard_bp.route("/domains", methods=["GET"])
@require_customer
def list_domains(customer: Customer):
    service = get_white_label_service()
    domains = []
    for row in service.list_domains(customer.id):
        data = row.to_dict()
        if not row.is_verified:
            data["verification"] = service.verification_instructions(row)
        domains.append(data)
    return jsonify({"domains": domains}), 200


@dashboard_bp.route("/domains", methods=["POST"])
@require_customer
def add_domain(customer: Customer):
    req = AddDomainRequest.model_validate(_body())
    row, instructions = get_white_label_service().add_domain(
        customer.id, req.domain, is_primary=req.is_primary, actor_email=customer.owner_email)
    return jsonify({"domain": row.to_dict(), "verification": instructions}), 201


@dashboard_bp.route("/domains/<domain>/verify", methods=["POST"])
@require_customer
def verify_domain(customer: Customer, domain: str):
    row, message = get_white_label_service().check_domain(
        customer.id, domain, actor_email=customer.owner_email)
    return jsonify({
        "verified": row.is_verified,
        "message": message,
        "domain": row.to_dict(),
    }), 200


@dashboard_bp.route("/domains/<domain>/primary", methods=["POST"])
@require_customer
def make_primary(customer: Customer, domain: str):
    row = get_white_label_service().set_primary_domain(
        customer.id, domain, actor_email=customer.owner_email)
    return jsonify({"domain": row.to_dict()}), 200


# ---- Offices and document templates ------------------------------------------------

@dashboard_bp.route("/offices", methods=["GET"])
@require_customer
def list_offices(customer: Customer):
    offices = (Office.query.filter_by(customer_id=customer.id)
               .order_by(Office.is_headquarters.desc(), Office.id).all())
    return jsonify({"offices": [office.to_dict() for office in offices]}), 200


@dashboard_bp.route("/templates", methods=["GET"])
@require_customer
def list_templates(customer: Customer):
    query = DocumentTemplate.query.filter_by(customer_id=customer.id)
    template_type = request.args.get("type")
    if template_type:
        query = query.filter_by(template_type=template_type)
    templates = query.order_by(DocumentTemplate.id).all()
    return jsonify({"templates": [template.to_dict() for template in templates]}), 200


# ---- Leads --------------------------------------------------------------------------

@dashboard_bp.route("/leads", methods=["GET"])
@require_customer
def list_leads(customer: Customer):
    items, total = leads.list_leads(
        customer.id,
        status=request.args.get("status") or None,
        limit=_int_arg("limit", 50),
        offset=_int_arg("offset", 0),
    )
    return jsonify({"leads": [lead.to_dict() for lead in items], "total": total}), 200


@dashboard_bp.route("/leads", methods=["POST"])
@require_customer
def create_lead(customer: Customer):
    """Manual entry from the dashboard."""
    payload = LeadCreateRequest.model_validate(_body())
    lead = leads.record_lead(customer.id, payload, ip_address=client_ip(),
                             user_agent=request.headers.get("User-Agent"))
    return jsonify({"lead": lead.to_dict()}), 201


@dashboard_bp.route("/leads/<int:lead_id>", methods=["GET"])
@require_customer
def get_lead(customer: Customer, lead_id: int):
    return jsonify({"lead": leads.get_lead(customer.id, lead_id).to_dict()}), 200


@dashboard_bp.route("/leads/<int:lead_id>", methods=["PUT"])
@require_customer
def update_lead(customer: Customer, lead_id: int):
    update = LeadStatusUpdate.model_validate(_body())
    lead = leads.update_lead_status(customer.id, lead_id, update.status, notes=update.notes,
                                    actor_email=customer.owner_email)
    return jsonify({"lead": lead.to_dict()}), 200


@dashboard_bp.route("/analytics", methods=["GET"])
@require_customer
def analytics(customer: Customer):
    return jsonify(leads.get_analytics(customer.id, _int_arg("days", 30))), 200
