# -*- coding: utf-8 -*-
"""
Stripe webhook endpoint.

Events handled:
- checkout.session.completed: provision the tenant described by the session metadata
- customer.subscription.updated: map the Stripe status onto the customer status
- customer.subscription.deleted: cancel the customer
- invoice.payment_failed: record in the activity log
"""
from flask import Blueprint, current_app, jsonify, request

from assetshield.infra.log import get_logger
from assetshield.services.provisioning import get_provisioning_pipeline
from assetshield.services.stripe_events import StripeEventHandler, verify_event

stripe_webhooks_bp = Blueprint("stripe_webhooks", __name__)

logger = get_logger("assetshield.stripe")


@stripe_webhooks_bp.route("/webhooks/stripe", methods=["POST"])
def stripe_webhook():
    webhook_secret = current_app.config.get("STRIPE_WEBHOOK_SECRET")
    if not webhook_secret:
        logger.error("STRIPE_WEBHOOK_SECRET not configured")
        return jsonify({"error": "Webhook not configured"}), 500

    event = verify_event(
        request.get_data(as_text=True),
        request.headers.get("Stripe-Signature"),
        webhook_secret,
        tolerance=current_app.config.get("STRIPE_WEBHOOK_TOLERANCE", 300),
    )
    result = StripeEventHandler(get_provisioning_pipeline()).handle(event)
    return jsonify(result), 200
