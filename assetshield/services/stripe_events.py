# -*- coding: utf-8 -*-
"""
Stripe webhook verification and event handling.

Signatures are checked with ``stripe.WebhookSignature`` against the endpoint
signing secret before the payload is parsed. Handlers return a small dict
that the webhook route echoes back to Stripe.
"""
import json
from typing import Callable, Dict, Optional

import stripe
from marshmallow import ValidationError

from assetshield.errors import InvalidRequestError
from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import ActivityLog, Customer
from assetshield.schemas.billing import CheckoutMetadataSchema
from assetshield.services.provisioning import ProvisioningPipeline, ProvisioningRequest

logger = get_logger("assetshield.stripe")

# Stripe subscription status -> customer status; unlisted statuses leave it unchanged
SUBSCRIPTION_STATUS_MAP = {
    "trialing": "trial",
    "active": "active",
    "canceled": "cancelled",
    "unpaid": "cancelled",
    "incomplete_expired": "cancelled",
}


class WebhookSignatureError(InvalidRequestError):
    pass


def verify_event(payload: str, sig_header: Optional[str], secret: str, tolerance: int = 300) -> dict:
    """Check the ``Stripe-Signature`` header and return the parsed event."""
    if not sig_header:
        raise WebhookSignatureError("Missing Stripe-Signature header")
    try:
        stripe.WebhookSignature.verify_header(payload, sig_header, secret, tolerance)
    except stripe.SignatureVerificationError:
        logger.warning("Invalid Stripe webhook signature")
        raise WebhookSignatureError("Invalid signature")

    try:
        event = json.loads(payload)
    except ValueError:
        raise InvalidRequestError("Invalid payload")
    if not isinstance(event, dict) or "type" not in event:
        raise InvalidRequestError("Invalid payload")
    return event


def _event_metadata(event: dict) -> dict:
    data = event.get("data") or {}
    obj = data.get("object") or {}
    return obj.get("metadata") or data.get("metadata") or {}


class StripeEventHandler:

    def __init__(self, pipeline: ProvisioningPipeline):
        self.pipeline = pipeline
        self.handlers: Dict[str, Callable[[dict], dict]] = {
            "checkout.session.completed": self.handle_checkout_completed,
            "customer.subscription.updated": self.handle_subscription_updated,
            "customer.subscription.deleted": self.handle_subscription_deleted,
            "invoice.payment_failed": self.handle_payment_failed,
        }

    def handle(self, event: dict) -> dict:
        event_type = event["type"]
        handler = self.handlers.get(event_type)
        if handler is None:
            logger.info(f"Unhandled Stripe event type: {event_type}", event_id=event.get("id"))
            return {"received": True, "handled": False}
        logger.info(f"Received Stripe webhook: {event_type}", event_id=event.get("id"))
        result = handler(event)
        result.setdefault("received", True)
        result.setdefault("handled", True)
        return result

    def handle_checkout_completed(self, event: dict) -> dict:
        obj = event["data"].get("object") or {}
        try:
            meta = CheckoutMetadataSchema().load(_event_metadata(event))
        except ValidationError as e:
            logger.warning("Checkout session metadata invalid", event_id=event.get("id"),
                           errors=e.messages)
            raise InvalidRequestError("Invalid checkout metadata", details=e.messages)

        result = self.pipeline.provision(ProvisioningRequest(
            firm_name=meta["firm_name"],
            lawyer_name=meta["lawyer_name"],
            lawyer_email=meta["lawyer_email"],
            lawyer_phone=meta.get("lawyer_phone") or None,
            tier=meta["tier"],
            stripe_customer_id=obj.get("customer"),
            subscription_id=obj.get("subscription"),
            setup_fee=meta.get("setup_fee"),
            monthly_fee=meta.get("monthly_fee"),
            event_id=event.get("id"),
        ))
        return {
            "customer_id": result.customer.id,
            "run_id": result.run.id,
            "status": result.run.status,
            "replayed": result.replayed,
        }

    def handle_subscription_updated(self, event: dict) -> dict:
        subscription = event["data"].get("object") or {}
        customer = self._find_customer(subscription)
        if customer is None:
            return {"handled": False}

        new_status = SUBSCRIPTION_STATUS_MAP.get(subscription.get("status"))
        if new_status and new_status != customer.status:
            self._set_status(customer, new_status, subscription)
        return {"customer_id": customer.id, "status": customer.status}

    def handle_subscription_deleted(self, event: dict) -> dict:
        subscription = event["data"].get("object") or {}
        customer = self._find_customer(subscription)
        if customer is None:
            return {"handled": False}
        if customer.status != "cancelled":
            self._set_status(customer, "cancelled", subscription)
        return {"customer_id": customer.id, "status": customer.status}

    def handle_payment_failed(self, event: dict) -> dict:
        invoice = event["data"].get("object") or {}
        customer = self._find_customer(invoice)
        if customer is None:
            return {"handled": False}
        ActivityLog.record(customer.id, "payment_failed", details={
            "invoice_id": invoice.get("id"),
            "amount_due": invoice.get("amount_due"),
            "attempt_count": invoice.get("attempt_count"),
        })
        db.session.commit()
        logger.warning("Stripe payment failed", customer_id=customer.id, invoice_id=invoice.get("id"))
        return {"customer_id": customer.id}

    @staticmethod
    def _find_customer(obj: dict) -> Optional[Customer]:
        subscription_id = obj.get("subscription") if obj.get("object") == "invoice" else obj.get("id")
        customer = None
        if subscription_id:
            customer = Customer.query.filter_by(subscription_id=subscription_id).first()
        if customer is None and obj.get("customer"):
            customer = Customer.query.filter_by(stripe_customer_id=obj["customer"]).first()
        if customer is None:
            logger.warning("No tenant found for Stripe object", stripe_object=obj.get("object"),
                           stripe_id=obj.get("id"))
        return customer

    @staticmethod
    def _set_status(customer: Customer, status: str, subscription: dict):
        previous = customer.status
        customer.status = status
        ActivityLog.record(customer.id, "subscription_status_changed", details={
            "from": previous,
            "to": status,
            "stripe_status": subscription.get("status"),
            "subscription_id": subscription.get("id"),
        })
        db.session.commit()
        logger.info("Customer status changed", customer_id=customer.id, previous=previous, status=status)
