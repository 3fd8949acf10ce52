import os
import tempfile

import pytest
from flask.testing import FlaskClient

from assetshield.database import db
from assetshield.errors import NotificationError
from assetshield.factory import create_app
from assetshield.models import CustomerDomain
from assetshield.services import accounts
from assetshield.services.provisioning import ProvisioningRequest, get_provisioning_pipeline

WEBHOOK_SECRET = "whsec_test_secret"
PROVISION_SECRET = "provision-test-secret"


class RecordingNotifier:
    """Keeps sent messages in memory; set ``fail`` to simulate a provider outage."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, message):
        if self.fail:
            raise NotificationError("SendGrid unavailable")
        self.sent.append(message)


class ExpiringClient(FlaskClient):
    """Expires the test's session after each request so assertions read committed rows."""

    def open(self, *args, **kwargs):
        response = super().open(*args, **kwargs)
        db.session.expire_all()
        return response


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(notifier):
    """Create and configure a new app instance for each test."""
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_path}",
        "SECRET_KEY": "test-secret",
        "JWT_SECRET_KEY": "test-jwt-secret-with-enough-length-for-hs256",
        "STRIPE_SECRET_KEY": "sk_test_dummy",
        "STRIPE_WEBHOOK_SECRET": WEBHOOK_SECRET,
        "PROVISION_SECRET": PROVISION_SECRET,
        "DOMAIN_VERIFICATION_MODE": "dns",
        "SYSTEM_HOSTS": ["localhost", "127.0.0.1"],
        "PLATFORM_DOMAINS": ["assetshield.app", "assetshieldapp.com"],
        "PLATFORM_BASE_URL": "https://assetshield.app",
        "RATELIMIT_ENABLED": False,
        "METRICS_ENABLED": True,
        "LOG_JSON": False,
        "NOTIFIER": notifier,
    })
    app.test_client_class = ExpiringClient
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()
    os.close(db_fd)
    os.unlink(db_path)


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


def provision(firm_name="Smith & Associates Law", lawyer_name="John Smith",
              lawyer_email="john@smithlaw.com", tier="professional", **kwargs):
    kwargs.setdefault("lawyer_phone", "555-0100")
    return get_provisioning_pipeline().provision(ProvisioningRequest(
        firm_name=firm_name,
        lawyer_name=lawyer_name,
        lawyer_email=lawyer_email,
        tier=tier,
        **kwargs,
    ))


@pytest.fixture
def provisioned(app):
    """A freshly provisioned professional-tier tenant."""
    return provision(
        stripe_customer_id="cus_test123",
        subscription_id="sub_test123",
        event_id="evt_test_checkout",
    )


@pytest.fixture
def customer(provisioned):
    return provisioned.customer


@pytest.fixture
def other_customer(app):
    return provision(
        firm_name="Jones Legal Group",
        lawyer_name="Mary Jones",
        lawyer_email="mary@joneslegal.com",
        tier="starter",
    ).customer


@pytest.fixture
def auth_headers(customer):
    return {"Authorization": f"Bearer {accounts.issue_access_token(customer)}"}


@pytest.fixture
def verified_domain(customer):
    """``smithlaw.com`` registered and verified for the tenant."""
    row = CustomerDomain(
        customer_id=customer.id,
        domain="smithlaw.com",
        is_primary=True,
        verification_status="verified",
        verification_token="tok123",
    )
    db.session.add(row)
    db.session.commit()
    return row


@pytest.fixture
def provision_tenant(app):
    """Factory for additional tenants inside a test."""
    return provision
