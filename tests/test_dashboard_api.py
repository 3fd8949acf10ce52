# -*- coding: utf-8 -*-
"""
Tests for dashboard login and the authenticated dashboard API.
"""
from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token

from assetshield.database import db
from assetshield.models import ActivityLog, Customer, CustomerDomain
from assetshield.services import accounts, tiers
from assetshield.services.domain_verification import TrustVerifier


@pytest.fixture
def trust_domains(app):
    app.extensions["domain_verifier"] = TrustVerifier()


class TestLogin:

    def test_login_success(self, client, provisioned):
        response = client.post("/api/auth/login", json={
            "email": "John@SmithLaw.com", "password": provisioned.password})

        assert response.status_code == 200
        data = response.get_json()
        assert data["token_type"] == "Bearer"
        assert data["customer"]["firm_name"] == "Smith & Associates Law"
        assert "api_key" not in data["customer"]

        me = client.get("/api/dashboard/me", headers={"Authorization": f"Bearer {data['access_token']}"})
        assert me.status_code == 200

        customer = db.session.get(Customer, provisioned.customer.id)
        assert customer.last_login_at is not None
        assert ActivityLog.query.filter_by(customer_id=customer.id, action="login").count() == 1

    def test_wrong_password(self, client, provisioned):
        response = client.post("/api/auth/login", json={"email": "john@smithlaw.com", "password": "nope"})
        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid email or password"

    def test_unknown_email(self, client, provisioned):
        response = client.post("/api/auth/login", json={"email": "who@nowhere.com", "password": "x"})
        assert response.status_code == 401

    def test_malformed_body(self, client):
        response = client.post("/api/auth/login", json={"email": "not-an-email"})
        assert response.status_code == 400


class TestTokenChecks:

    def test_missing_token(self, client):
        response = client.get("/api/dashboard/me")
        assert response.status_code == 401
        assert response.get_json() == {"error": "Missing bearer token"}

    def test_garbage_token(self, client):
        response = client.get("/api/dashboard/me", headers={"Authorization": "Bearer not.a.token"})
        assert response.status_code == 401

    def test_expired_token(self, client, customer):
        token = create_access_token(identity=str(customer.id), expires_delta=timedelta(seconds=-10))
        response = client.get("/api/dashboard/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.get_json() == {"error": "Token has expired"}

    def test_token_for_deleted_customer(self, client, app):
        token = create_access_token(identity="9999")
        response = client.get("/api/dashboard/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_cancelled_customer(self, client, customer, auth_headers):
        customer.status = "cancelled"
        db.session.commit()
        assert client.get("/api/dashboard/me", headers=auth_headers).status_code == 403


class TestAccount:

    def test_me(self, client, customer, auth_headers):
        data = client.get("/api/dashboard/me", headers=auth_headers).get_json()
        assert data["customer"]["api_key"] == customer.api_key
        assert data["features"] == tiers.features_for("professional")

    def test_update_settings(self, client, customer, auth_headers):
        response = client.put("/api/dashboard/settings", json={"firmName": "Smith Law LLP"},
                              headers=auth_headers)
        assert response.status_code == 200
        assert response.get_json()["customer"]["firm_name"] == "Smith Law LLP"
        assert response.get_json()["customer"]["owner_name"] == "John Smith"

    def test_rotate_api_key(self, client, customer, auth_headers):
        old_key = customer.api_key
        response = client.post("/api/dashboard/api-key/rotate", headers=auth_headers)

        new_key = response.get_json()["api_key"]
        assert new_key != old_key
        assert new_key.startswith("ask_")

        stale = client.post("/api/leads", json={"clientName": "J", "clientEmail": "j@example.com"},
                            headers={"X-AssetShield-API-Key": old_key})
        assert stale.status_code == 401


class TestBranding:

    def test_get_branding(self, client, auth_headers):
        branding = client.get("/api/dashboard/branding", headers=auth_headers).get_json()["branding"]
        assert branding["hero_title"] == "Protect Your Assets with Smith & Associates Law"

    def test_partial_update(self, client, auth_headers):
        response = client.put("/api/dashboard/branding", headers=auth_headers, json={
            "heroTitle": "Welcome to Smith Law",
            "primaryColor": "#112233",
        })

        assert response.status_code == 200
        branding = response.get_json()["branding"]
        assert branding["hero_title"] == "Welcome to Smith Law"
        assert branding["primary_color"] == "#112233"
        assert branding["secondary_color"] == "#1d4ed8"

    def test_invalid_type(self, client, auth_headers):
        response = client.put("/api/dashboard/branding", headers=auth_headers,
                              json={"featuresEnabled": "everything"})
        assert response.status_code == 400


class TestDomains:

    def test_add_list_verify(self, client, auth_headers, trust_domains):
        response = client.post("/api/dashboard/domains", headers=auth_headers,
                               json={"domain": "SmithLaw.com", "isPrimary": True})
        assert response.status_code == 201
        data = response.get_json()
        assert data["domain"]["domain"] == "smithlaw.com"
        assert data["domain"]["is_primary"] is True
        assert data["verification"]["name"] == "_assetshield.smithlaw.com"

        listing = client.get("/api/dashboard/domains", headers=auth_headers).get_json()["domains"]
        assert listing[0]["verification_status"] == "pending"
        assert "verification" in listing[0]

        for _ in range(2):
            verified = client.post("/api/dashboard/domains/smithlaw.com/verify", headers=auth_headers)
            assert verified.status_code == 200
            assert verified.get_json()["verified"] is True

        listing = client.get("/api/dashboard/domains", headers=auth_headers).get_json()["domains"]
        assert listing[0]["verification_status"] == "verified"
        assert "verification" not in listing[0]

    def test_duplicate_domain(self, client, auth_headers):
        client.post("/api/dashboard/domains", headers=auth_headers, json={"domain": "smithlaw.com"})
        response = client.post("/api/dashboard/domains", headers=auth_headers, json={"domain": "smithlaw.com"})
        assert response.status_code == 409

    def test_invalid_domain(self, client, auth_headers):
        response = client.post("/api/dashboard/domains", headers=auth_headers, json={"domain": "not a domain"})
        assert response.status_code == 400

    def test_make_primary(self, client, customer, auth_headers):
        client.post("/api/dashboard/domains", headers=auth_headers,
                    json={"domain": "smithlaw.com", "isPrimary": True})
        client.post("/api/dashboard/domains", headers=auth_headers, json={"domain": "smith-law.com"})

        response = client.post("/api/dashboard/domains/smith-law.com/primary", headers=auth_headers)

        assert response.status_code == 200
        primaries = CustomerDomain.query.filter_by(customer_id=customer.id, is_primary=True).all()
        assert [d.domain for d in primaries] == ["smith-law.com"]

    def test_verify_unknown_domain(self, client, auth_headers):
        response = client.post("/api/dashboard/domains/nothere.com/verify", headers=auth_headers)
        assert response.status_code == 404


class TestOfficesAndTemplates:

    def test_headquarters_office(self, client, customer, auth_headers):
        response = client.get("/api/dashboard/offices", headers=auth_headers)

        assert response.status_code == 200
        offices = response.get_json()["offices"]
        assert len(offices) == 1
        assert offices[0]["name"] == "Smith & Associates Law - Headquarters"
        assert offices[0]["is_headquarters"] is True
        assert offices[0]["customer_id"] == customer.id

    def test_default_templates(self, client, auth_headers):
        templates = client.get("/api/dashboard/templates", headers=auth_headers).get_json()["templates"]

        assert sorted(t["template_type"] for t in templates) == ["checklist", "form", "letter"]
        letter = next(t for t in templates if t["template_type"] == "letter")
        assert "{{client_name}}" in letter["content"]
        assert letter["jurisdiction"] == "US"

    def test_filter_templates_by_type(self, client, auth_headers):
        templates = client.get("/api/dashboard/templates?type=form", headers=auth_headers).get_json()["templates"]
        assert [t["name"] for t in templates] == ["Initial Client Intake Form"]

    def test_scoped_to_customer(self, client, customer, other_customer):
        headers = {"Authorization": f"Bearer {accounts.issue_access_token(other_customer)}"}

        offices = client.get("/api/dashboard/offices", headers=headers).get_json()["offices"]
        templates = client.get("/api/dashboard/templates", headers=headers).get_json()["templates"]

        assert [o["name"] for o in offices] == ["Jones Legal Group - Headquarters"]
        assert len(templates) == 3
        assert {t["customer_id"] for t in templates} == {other_customer.id}

    def test_requires_token(self, client):
        assert client.get("/api/dashboard/offices").status_code == 401
        assert client.get("/api/dashboard/templates").status_code == 401


class TestLeadsEndpoints:

    def test_create_list_update(self, client, auth_headers):
        created = client.post("/api/dashboard/leads", headers=auth_headers, json={
            "clientName": "Jane Doe", "clientEmail": "jane@example.com", "riskScore": 8, "riskLevel": "high"})
        assert created.status_code == 201
        lead_id = created.get_json()["lead"]["id"]

        listing = client.get("/api/dashboard/leads?status=new", headers=auth_headers).get_json()
        assert listing["total"] == 1

        updated = client.put(f"/api/dashboard/leads/{lead_id}", headers=auth_headers,
                             json={"status": "consultation", "notes": "Booked for Monday"})
        assert updated.get_json()["lead"]["status"] == "consultation"

        fetched = client.get(f"/api/dashboard/leads/{lead_id}", headers=auth_headers).get_json()
        assert fetched["lead"]["notes"] == "Booked for Monday"

    def test_invalid_status(self, client, auth_headers):
        created = client.post("/api/dashboard/leads", headers=auth_headers, json={
            "clientName": "Jane Doe", "clientEmail": "jane@example.com"})
        lead_id = created.get_json()["lead"]["id"]

        response = client.put(f"/api/dashboard/leads/{lead_id}", headers=auth_headers, json={"status": "won"})
        assert response.status_code == 400

    def test_lead_not_found(self, client, auth_headers):
        assert client.get("/api/dashboard/leads/999", headers=auth_headers).status_code == 404

    def test_analytics(self, client, auth_headers):
        client.post("/api/dashboard/leads", headers=auth_headers, json={
            "clientName": "Jane Doe", "clientEmail": "jane@example.com", "riskScore": 8, "riskLevel": "high"})

        data = client.get("/api/dashboard/analytics?days=7", headers=auth_headers).get_json()
        assert data["totalLeads"] == 1
        assert data["period"] == "7 days"

    def test_analytics_bad_days(self, client, auth_headers):
        assert client.get("/api/dashboard/analytics?days=abc", headers=auth_headers).status_code == 400
        assert client.get("/api/dashboard/analytics?days=0", headers=auth_headers).status_code == 400
