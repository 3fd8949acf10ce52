# -*- coding: utf-8 -*-
# assetshield/models/white_label.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship

from assetshield.infra.db import db
from assetshield.models._types import JSONType, iso
from assetshield.utils.clock import utcnow

VERIFICATION_STATUSES = ("pending", "verified", "failed")


class WhiteLabelConfig(db.Model):
    """Branding for one customer. Exactly one row per customer."""
    __tablename__ = "white_label_configs"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), unique=True, nullable=False)

    # Color tokens
    primary_color = Column(String(32))
    secondary_color = Column(String(32))
    accent_color = Column(String(32))

    # Textual branding
    logo_url = Column(String(512))
    firm_address = Column(Text)
    firm_website = Column(String(255))
    firm_phone = Column(String(50))
    firm_description = Column(Text)
    hero_title = Column(String(255))
    hero_subtitle = Column(Text)
    about_content = Column(Text)
    services_content = Column(Text)

    features_enabled = Column(JSONType, nullable=False, default=list)

    # Notification addresses
    from_email = Column(String(255))
    reply_to_email = Column(String(255))

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="white_label_config")

    # Columns the dashboard branding editor may write
    EDITABLE_FIELDS = (
        "primary_color", "secondary_color", "accent_color", "logo_url",
        "firm_address", "firm_website", "firm_phone", "firm_description",
        "hero_title", "hero_subtitle", "about_content", "services_content",
        "features_enabled", "from_email", "reply_to_email",
    )

    def to_dict(self) -> dict:
        data = {"id": self.id, "customer_id": self.customer_id}
        for field in self.EDITABLE_FIELDS:
            data[field] = getattr(self, field)
        data["created_at"] = iso(self.created_at)
        data["updated_at"] = iso(self.updated_at)
        return data


class CustomerDomain(db.Model):
    """A host name a customer serves their branded site on."""
    __tablename__ = "customer_domains"
    __table_args__ = (
        # at most one primary domain per customer
        Index(
            "uq_customer_domains_primary",
            "customer_id",
            unique=True,
            sqlite_where=text("is_primary = 1"),
            postgresql_where=text("is_primary"),
        ),
    )

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    domain = Column(String(255), unique=True, nullable=False, index=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    verification_status = Column(String(16), nullable=False, default="pending", index=True)
    verification_token = Column(String(64), nullable=False)
    verified_at = Column(DateTime)
    last_checked_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="domains")

    @property
    def is_verified(self) -> bool:
        return self.verification_status == "verified"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "domain": self.domain,
            "is_primary": self.is_primary,
            "verification_status": self.verification_status,
            "verified_at": iso(self.verified_at),
            "last_checked_at": iso(self.last_checked_at),
            "created_at": iso(self.created_at),
        }
