# -*- coding: utf-8 -*-
# assetshield/models/lead.py
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text

from assetshield.infra.db import db
from assetshield.models._types import JSONType, iso
from assetshield.utils.clock import utcnow

LEAD_STATUSES = ("new", "contacted", "consultation", "converted")
RISK_LEVELS = ("low", "medium", "high")


class ClientLead(db.Model):
    """A prospective client captured by the assessment form or lead API."""
    __tablename__ = "client_leads"
    __table_args__ = (
        Index("ix_client_leads_customer_created", "customer_id", "created_at"),
    )

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)

    # Contact
    client_name = Column(String(255), nullable=False)
    client_email = Column(String(255), nullable=False)
    client_phone = Column(String(50))

    # Assessment
    assessment_data = Column(JSONType)
    risk_score = Column(Integer)
    risk_level = Column(String(16), nullable=False, default="low")

    # Acquisition
    source_domain = Column(String(255))
    ip_address = Column(String(64))
    user_agent = Column(Text)
    referrer = Column(Text)
    utm_source = Column(String(255))
    utm_medium = Column(String(255))
    utm_campaign = Column(String(255))

    status = Column(String(32), nullable=False, default="new", index=True)
    notes = Column(Text)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "client_name": self.client_name,
            "client_email": self.client_email,
            "client_phone": self.client_phone,
            "assessment_data": self.assessment_data,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level,
            "source_domain": self.source_domain,
            "referrer": self.referrer,
            "utm_source": self.utm_source,
            "utm_medium": self.utm_medium,
            "utm_campaign": self.utm_campaign,
            "status": self.status,
            "notes": self.notes,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
        }
