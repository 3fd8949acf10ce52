# -*- coding: utf-8 -*-
"""
Public, domain-resolved pages: landing, assessment wizard, branded CSS and
manifest. Every view resolves the branding for its own request and hands it
to the template.
"""
from flask import Blueprint, Response, jsonify, render_template, request

from assetshield.infra.log import get_logger
from assetshield.schemas.dashboard import AssessmentSubmission, LeadCreateRequest
from assetshield.services import leads, tiers
from assetshield.services.branding_assets import white_label_css, white_label_manifest
from assetshield.services.domain_resolver import resolve_request_branding
from assetshield.services.rate_limiter import limiter, public_form_limit
from assetshield.services.request_context import client_ip
from assetshield.services.risk_assessment import score_assessment

marketing_bp = Blueprint("marketing", __name__)

logger = get_logger("assetshield.marketing")


@marketing_bp.route("/", methods=["GET"])
def landing():
    branding = resolve_request_branding()
    return render_template("landing.html", branding=branding, tiers=tiers.TIERS.values())


@marketing_bp.route("/assessment", methods=["GET"])
def assessment_form():
    branding = resolve_request_branding()
    return render_template("assessment.html", branding=branding)


@marketing_bp.route("/assessment", methods=["POST"])
@limiter.limit(public_form_limit)
def submit_assessment():
    """Score the wizard answers; record a lead when served on a tenant domain."""
    branding = resolve_request_branding()
    submission = AssessmentSubmission.model_validate(request.get_json(silent=True) or {})
    result = score_assessment(submission.answers())

    lead_id = None
    if branding.is_white_label:
        lead = leads.record_lead(
            branding.customer_id,
            LeadCreateRequest(
                client_name=submission.name,
                client_email=submission.email,
                client_phone=submission.phone,
                assessment_data=submission.answers(),
                risk_score=result.score,
                risk_level=result.level,
                source_domain=branding.domain,
                referrer=request.referrer,
                utm_source=submission.utm_source,
                utm_medium=submission.utm_medium,
                utm_campaign=submission.utm_campaign,
            ),
            ip_address=client_ip(),
            user_agent=request.headers.get("User-Agent"),
        )
        lead_id = lead.id

    body = result.to_dict()
    body.update({"leadId": lead_id, "firmName": branding.firm_name})
    return jsonify(body), 200


@marketing_bp.route("/branding.css", methods=["GET"])
def branding_css():
    branding = resolve_request_branding()
    return Response(white_label_css(branding), mimetype="text/css")


@marketing_bp.route("/manifest.json", methods=["GET"])
def manifest():
    branding = resolve_request_branding()
    return jsonify(white_label_manifest(branding))


@marketing_bp.route("/checkout/success", methods=["GET"])
def checkout_success():
    return render_template(
        "checkout_success.html",
        branding=resolve_request_branding(),
        session_id=request.args.get("session_id"),
    )
