# -*- coding: utf-8 -*-
# assetshield/models/customer.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship

from assetshield.infra.db import db
from assetshield.models._types import iso
from assetshield.utils.clock import utcnow

TIERS = ("starter", "professional", "enterprise")
CUSTOMER_STATUSES = ("trial", "active", "cancelled")


class Customer(db.Model):
    """A paying law firm (tenant). Never hard-deleted; status transitions instead."""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)

    # Identity
    firm_name = Column(String(255), nullable=False)
    owner_name = Column(String(255), nullable=False)
    owner_email = Column(String(255), unique=True, nullable=False, index=True)
    owner_phone = Column(String(50))
    password_hash = Column(String(128), nullable=False)

    # Subscription
    tier = Column(String(32), nullable=False)
    status = Column(String(32), nullable=False, default="trial", index=True)
    stripe_customer_id = Column(String(64), index=True)
    subscription_id = Column(String(64), index=True)
    setup_fee_paid = Column(Integer, default=0, nullable=False)
    monthly_fee = Column(Integer, default=0, nullable=False)
    trial_ends_at = Column(DateTime)

    # Integration key for the public lead API
    api_key = Column(String(64), unique=True, nullable=False, index=True)
    api_key_created_at = Column(DateTime, default=utcnow, nullable=False)

    last_login_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    white_label_config = relationship(
        "WhiteLabelConfig", back_populates="customer", uselist=False)
    domains = relationship("CustomerDomain", back_populates="customer", lazy="dynamic")

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Customer {self.id} {self.firm_name!r} ({self.tier}/{self.status})>"

    @property
    def is_active(self) -> bool:
        return self.status in ("trial", "active")

    def to_dict(self, include_api_key: bool = False) -> dict:
        data = {
            "id": self.id,
            "firm_name": self.firm_name,
            "owner_name": self.owner_name,
            "owner_email": self.owner_email,
            "owner_phone": self.owner_phone,
            "tier": self.tier,
            "status": self.status,
            "stripe_customer_id": self.stripe_customer_id,
            "subscription_id": self.subscription_id,
            "setup_fee_paid": self.setup_fee_paid,
            "monthly_fee": self.monthly_fee,
            "trial_ends_at": iso(self.trial_ends_at),
            "last_login_at": iso(self.last_login_at),
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
        if include_api_key:
            data["api_key"] = self.api_key
        return data
