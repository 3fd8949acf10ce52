"""
Authentication decorators for routes.

``require_customer`` accepts a signed dashboard access token; ``require_api_key``
accepts a customer's integration key in ``X-AssetShield-API-Key``. Both load
the customer and hand it to the view as the ``customer`` keyword argument.
"""
from functools import wraps

from flask import request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from assetshield.errors import AuthenticationError, ForbiddenError
from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import Customer
from assetshield.services.request_context import set_auth_context

API_KEY_HEADER = "X-AssetShield-API-Key"

logger = get_logger("assetshield.auth")


def _active_or_forbidden(customer: Customer) -> Customer:
    if not customer.is_active:
        logger.log_auth_event("status_check", success=False, customer_id=customer.id,
                              status=customer.status)
        raise ForbiddenError("Account is cancelled")
    return customer


def require_customer(f):
    """Require a valid dashboard bearer token."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        identity = get_jwt_identity()
        try:
            customer_id = int(identity)
        except (TypeError, ValueError):
            raise AuthenticationError("Invalid token subject")

        customer = db.session.get(Customer, customer_id)
        if customer is None:
            raise AuthenticationError("Unknown customer")

        set_auth_context(customer_id=customer.id, auth_method="jwt")
        kwargs["customer"] = _active_or_forbidden(customer)
        return f(*args, **kwargs)
    return decorated_function


def require_api_key(f):
    """Require a customer integration key."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        api_key = request.headers.get(API_KEY_HEADER, "").strip()
        if not api_key:
            raise AuthenticationError(f"Missing {API_KEY_HEADER} header")

        customer = Customer.query.filter_by(api_key=api_key).first()
        if customer is None:
            logger.log_auth_event("api_key", success=False, key_prefix=api_key[:8])
            raise AuthenticationError("Invalid API key")

        set_auth_context(customer_id=customer.id, auth_method="api_key")
        kwargs["customer"] = _active_or_forbidden(customer)
        return f(*args, **kwargs)
    return decorated_function
