# -*- coding: utf-8 -*-
"""
Customer credentials: integration API keys, generated passwords, bcrypt
hashing, dashboard login and access token issuance.
"""
import secrets
import string
from typing import Tuple

import bcrypt
from flask_jwt_extended import create_access_token

from assetshield.errors import AuthenticationError, ForbiddenError
from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import ActivityLog, Customer
from assetshield.utils.clock import utcnow

logger = get_logger("assetshield.auth")

API_KEY_PREFIX = "ask_"
API_KEY_RANDOM_BYTES = 24
PASSWORD_LENGTH = 16
PASSWORD_ALPHABET = string.ascii_letters + string.digits


def generate_api_key() -> str:
    """``ask_`` followed by 48 hex characters."""
    return f"{API_KEY_PREFIX}{secrets.token_hex(API_KEY_RANDOM_BYTES)}"


def generate_password(length: int = PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False


def generate_credentials() -> Tuple[str, str, str]:
    """Returns (plaintext password, password hash, api key)."""
    password = generate_password()
    return password, hash_password(password), generate_api_key()


def issue_access_token(customer: Customer) -> str:
    """Signed HS256 token; ``sub`` is the customer id."""
    return create_access_token(
        identity=str(customer.id),
        additional_claims={"firm_name": customer.firm_name, "tier": customer.tier},
    )


def authenticate(email: str, password: str, ip_address=None, user_agent=None) -> Tuple[Customer, str]:
    """Check dashboard credentials and return (customer, access token)."""
    email = (email or "").strip().lower()
    customer = Customer.query.filter_by(owner_email=email).first()
    if customer is None or not verify_password(password, customer.password_hash):
        logger.log_auth_event("login", success=False, email=email)
        raise AuthenticationError("Invalid email or password")
    if not customer.is_active:
        logger.log_auth_event("login", success=False, email=email, status=customer.status)
        raise ForbiddenError("Account is cancelled")

    customer.last_login_at = utcnow()
    ActivityLog.record(customer.id, "login", user_email=email,
                       ip_address=ip_address, user_agent=user_agent)
    db.session.commit()

    logger.log_auth_event("login", success=True, customer_id=customer.id)
    return customer, issue_access_token(customer)


def rotate_api_key(customer: Customer) -> str:
    customer.api_key = generate_api_key()
    customer.api_key_created_at = utcnow()
    ActivityLog.record(customer.id, "api_key_rotated", user_email=customer.owner_email)
    db.session.commit()
    return customer.api_key
