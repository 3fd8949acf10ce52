# -*- coding: utf-8 -*-
"""
Tests for per-IP limits on the public forms.
"""
import os
import tempfile

import pytest

from assetshield.database import db
from assetshield.factory import create_app

LEAD = {"clientName": "Jane Doe", "clientEmail": "jane@example.com"}


@pytest.fixture
def limited_app(notifier):
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "JWT_SECRET_KEY": "test-jwt-secret-with-enough-length-for-hs256",
        "RATELIMIT_ENABLED": True,
        "RATELIMIT_STORAGE_URI": "memory://",
        "PUBLIC_FORM_RATE_LIMIT": "2/minute",
        "LOG_JSON": False,
        "NOTIFIER": notifier,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    os.close(db_fd)
    os.unlink(db_path)


class TestPublicFormLimits:

    def test_lead_api_limited_per_ip(self, limited_app):
        client = limited_app.test_client()
        headers = {"X-AssetShield-API-Key": "ask_unknown", "X-Forwarded-For": "203.0.113.50"}

        statuses = [client.post("/api/leads", json=LEAD, headers=headers).status_code for _ in range(3)]

        assert statuses == [401, 401, 429]

    def test_limit_response_is_json(self, limited_app):
        client = limited_app.test_client()
        headers = {"X-Forwarded-For": "203.0.113.51"}
        for _ in range(2):
            client.post("/api/leads", json=LEAD, headers=headers)

        response = client.post("/api/leads", json=LEAD, headers=headers)
        assert response.status_code == 429
        assert response.get_json() == {"error": "Too many requests, please try again later"}

    def test_other_clients_unaffected(self, limited_app):
        client = limited_app.test_client()
        for _ in range(3):
            client.post("/api/leads", json=LEAD, headers={"X-Forwarded-For": "203.0.113.52"})

        response = client.post("/api/leads", json=LEAD, headers={"X-Forwarded-For": "203.0.113.53"})
        assert response.status_code == 401

    def test_health_probe_not_limited(self, limited_app):
        client = limited_app.test_client()
        statuses = {client.get("/healthz").status_code for _ in range(5)}
        assert statuses == {200}
