"""
Stripe Checkout routes for platform subscription signup.
"""
from flask import Blueprint, current_app, jsonify, request, url_for

from assetshield.schemas.billing import CheckoutRequestSchema
from assetshield.services.checkout import create_checkout_session

checkout_bp = Blueprint("checkout", __name__, url_prefix="/api/checkout")


@checkout_bp.route("/<tier>", methods=["POST"])
def create_session(tier):
    """Create a subscription Checkout Session for ``tier``."""
    data = CheckoutRequestSchema().load(request.get_json(silent=True) or {})

    base = current_app.config["PLATFORM_BASE_URL"]
    success_url = data["success_url"] or f"{base}{url_for('marketing.checkout_success')}?session_id={{CHECKOUT_SESSION_ID}}"
    cancel_url = data["cancel_url"] or f"{base}/#pricing"

    session = create_checkout_session(
        secret_key=current_app.config.get("STRIPE_SECRET_KEY"),
        tier_name=tier,
        firm_name=data["firm_name"],
        lawyer_name=data["lawyer_name"],
        lawyer_email=data["lawyer_email"],
        lawyer_phone=data["lawyer_phone"],
        success_url=success_url,
        cancel_url=cancel_url,
        trial_days=current_app.config.get("TRIAL_DAYS", 14),
    )
    return jsonify(session.to_dict()), 200
