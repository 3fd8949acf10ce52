# -*- coding: utf-8 -*-
"""
Stripe Checkout Session creation for platform subscriptions.

The session carries everything provisioning needs in its metadata, so the
``checkout.session.completed`` webhook can build the tenant without a second
lookup.
"""
from dataclasses import dataclass
from typing import Optional

import stripe

from assetshield.errors import AppError, InvalidRequestError, PaymentProviderError
from assetshield.infra.log import get_logger
from assetshield.services import tiers

logger = get_logger("assetshield.stripe")


@dataclass
class CheckoutSession:
    session_id: str
    checkout_url: Optional[str]

    def to_dict(self) -> dict:
        return {"session_id": self.session_id, "checkout_url": self.checkout_url}


def session_metadata(tier: tiers.Tier, firm_name: str, lawyer_name: str,
                     lawyer_email: str, lawyer_phone: Optional[str]) -> dict:
    # Stripe metadata values must be strings
    return {
        "tier": tier.name,
        "firmName": firm_name,
        "lawyerName": lawyer_name,
        "lawyerEmail": lawyer_email,
        "lawyerPhone": lawyer_phone or "",
        "setupFee": str(tier.setup_fee),
        "monthlyFee": str(tier.monthly_fee),
        "type": "saas_subscription",
    }


def create_checkout_session(*, secret_key: Optional[str], tier_name: str, firm_name: str,
                            lawyer_name: str, lawyer_email: str, lawyer_phone: Optional[str],
                            success_url: str, cancel_url: str, trial_days: int = 14) -> CheckoutSession:
    if not tiers.is_valid_tier(tier_name):
        raise InvalidRequestError(f"Unknown tier: {tier_name}")
    if not secret_key:
        logger.error("STRIPE_SECRET_KEY not configured")
        raise AppError("Billing service not configured")

    tier = tiers.get_tier(tier_name)
    metadata = session_metadata(tier, firm_name, lawyer_name, lawyer_email, lawyer_phone)
    stripe.api_key = secret_key

    try:
        session = stripe.checkout.Session.create(
            mode="subscription",
            customer_email=lawyer_email,
            line_items=[
                {
                    # one-off setup fee, billed with the first invoice
                    "price_data": {
                        "currency": "usd",
                        "product_data": {
                            "name": f"AssetShield {tier.display_name} Setup",
                            "description": f"One-time platform setup for {firm_name}",
                        },
                        "unit_amount": tier.setup_fee * 100,
                    },
                    "quantity": 1,
                },
                {
                    "price_data": {
                        "currency": "usd",
                        "product_data": {
                            "name": f"AssetShield {tier.display_name} Plan",
                            "description": ", ".join(tier.features),
                        },
                        "unit_amount": tier.monthly_fee * 100,
                        "recurring": {"interval": "month"},
                    },
                    "quantity": 1,
                },
            ],
            subscription_data={"trial_period_days": trial_days, "metadata": metadata},
            metadata=metadata,
            success_url=success_url,
            cancel_url=cancel_url,
            allow_promotion_codes=True,
            billing_address_collection="required",
        )
    except stripe.StripeError as e:
        msg = getattr(e, "user_message", None) or str(e)
        logger.error(f"Stripe error creating checkout session: {msg}", tier=tier.name)
        raise PaymentProviderError(f"Stripe error: {msg}")

    logger.info("Checkout session created", session_id=session.id, tier=tier.name)
    return CheckoutSession(session_id=session.id, checkout_url=getattr(session, "url", None))
