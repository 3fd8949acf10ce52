# -*- coding: utf-8 -*-
"""
Tests for the Stripe webhook endpoint: signature checks and event handling.
"""
import hashlib
import hmac
import json
import time

import pytest

from assetshield.database import db
from assetshield.models import ActivityLog, Customer, ProvisioningRun


def sign(payload: str, secret: str, timestamp: int = None) -> dict:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return {"Stripe-Signature": f"t={timestamp},v1={signature}", "Content-Type": "application/json"}


@pytest.fixture
def post_event(client, app):
    def _post(event: dict, secret: str = None, timestamp: int = None):
        payload = json.dumps(event)
        headers = sign(payload, secret or app.config["STRIPE_WEBHOOK_SECRET"], timestamp)
        return client.post("/webhooks/stripe", data=payload, headers=headers)
    return _post


def checkout_completed(event_id="evt_checkout_1", tier="professional", email="john@smithlaw.com"):
    return {
        "id": event_id,
        "object": "event",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": "cs_test_123",
                "object": "checkout.session",
                "customer": "cus_test123",
                "subscription": "sub_test123",
                "metadata": {
                    "tier": tier,
                    "firmName": "Smith & Associates Law",
                    "lawyerName": "John Smith",
                    "lawyerEmail": email,
                    "lawyerPhone": "555-0100",
                    "setupFee": "10000",
                    "monthlyFee": "1200",
                    "type": "saas_subscription",
                },
            }
        },
    }


def subscription_event(event_type, status, event_id="evt_sub_1"):
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": "sub_test123",
                "object": "subscription",
                "customer": "cus_test123",
                "status": status,
            }
        },
    }


class TestSignatureVerification:

    def test_missing_signature(self, client):
        response = client.post("/webhooks/stripe", data="{}", content_type="application/json")
        assert response.status_code == 400
        assert response.get_json()["error"] == "Missing Stripe-Signature header"

    def test_wrong_secret(self, post_event):
        response = post_event(checkout_completed(), secret="whsec_wrong")
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid signature"
        assert Customer.query.count() == 0

    def test_stale_timestamp(self, post_event):
        response = post_event(checkout_completed(), timestamp=int(time.time()) - 3600)
        assert response.status_code == 400

    def test_tampered_payload(self, client, app):
        payload = json.dumps(checkout_completed())
        headers = sign(payload, app.config["STRIPE_WEBHOOK_SECRET"])
        tampered = payload.replace("professional", "enterprise")

        response = client.post("/webhooks/stripe", data=tampered, headers=headers)
        assert response.status_code == 400
        assert Customer.query.count() == 0

    def test_secret_not_configured(self, client, app):
        app.config["STRIPE_WEBHOOK_SECRET"] = None
        response = client.post("/webhooks/stripe", data="{}", headers={"Stripe-Signature": "t=1,v1=x"})
        assert response.status_code == 500
        assert response.get_json() == {"error": "Webhook not configured"}


class TestCheckoutCompleted:

    def test_provisions_tenant(self, post_event, notifier):
        response = post_event(checkout_completed())

        assert response.status_code == 200
        data = response.get_json()
        assert data["received"] is True
        assert data["status"] == "completed"
        assert data["replayed"] is False

        customer = Customer.query.filter_by(owner_email="john@smithlaw.com").one()
        assert customer.id == data["customer_id"]
        assert customer.tier == "professional"
        assert customer.stripe_customer_id == "cus_test123"
        assert customer.subscription_id == "sub_test123"
        assert customer.setup_fee_paid == 10000
        assert len(notifier.sent) == 1

    def test_redelivery_is_idempotent(self, post_event, notifier):
        first = post_event(checkout_completed())
        second = post_event(checkout_completed())

        assert second.status_code == 200
        assert second.get_json()["replayed"] is True
        assert second.get_json()["customer_id"] == first.get_json()["customer_id"]
        assert Customer.query.count() == 1
        assert ProvisioningRun.query.count() == 1
        assert len(notifier.sent) == 1

    def test_invalid_metadata(self, post_event):
        response = post_event(checkout_completed(tier="platinum"))
        assert response.status_code == 400
        assert "tier" in response.get_json()["details"]
        assert Customer.query.count() == 0

    def test_existing_email_conflicts(self, post_event, provisioned):
        response = post_event(checkout_completed(event_id="evt_checkout_2"))
        assert response.status_code == 409


class TestSubscriptionEvents:

    def test_subscription_activated(self, post_event, customer):
        response = post_event(subscription_event("customer.subscription.updated", "active"))

        assert response.status_code == 200
        assert response.get_json()["status"] == "active"
        assert db.session.get(Customer, customer.id).status == "active"

        entry = ActivityLog.query.filter_by(customer_id=customer.id,
                                            action="subscription_status_changed").one()
        assert entry.details["from"] == "trial"
        assert entry.details["to"] == "active"

    def test_unmapped_status_leaves_customer_unchanged(self, post_event, customer):
        post_event(subscription_event("customer.subscription.updated", "past_due"))
        assert db.session.get(Customer, customer.id).status == "trial"

    def test_subscription_deleted_cancels(self, post_event, client, provisioned):
        response = post_event(subscription_event("customer.subscription.deleted", "canceled"))
        assert response.status_code == 200
        assert db.session.get(Customer, provisioned.customer.id).status == "cancelled"

        login = client.post("/api/auth/login", json={
            "email": "john@smithlaw.com", "password": provisioned.password})
        assert login.status_code == 403

    def test_unknown_subscription(self, post_event, app):
        response = post_event(subscription_event("customer.subscription.deleted", "canceled"))
        assert response.status_code == 200
        assert response.get_json()["handled"] is False

    def test_payment_failed_is_logged(self, post_event, customer):
        response = post_event({
            "id": "evt_invoice_1",
            "object": "event",
            "type": "invoice.payment_failed",
            "data": {"object": {
                "id": "in_123",
                "object": "invoice",
                "customer": "cus_test123",
                "subscription": "sub_test123",
                "amount_due": 120000,
                "attempt_count": 2,
            }},
        })

        assert response.status_code == 200
        entry = ActivityLog.query.filter_by(customer_id=customer.id, action="payment_failed").one()
        assert entry.details == {"invoice_id": "in_123", "amount_due": 120000, "attempt_count": 2}

    def test_unhandled_event_type(self, post_event, app):
        response = post_event({"id": "evt_x", "type": "charge.refunded", "data": {"object": {}}})
        assert response.status_code == 200
        assert response.get_json() == {"received": True, "handled": False}
