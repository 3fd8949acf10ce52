# -*- coding: utf-8 -*-
# assetshield/models/provisioning_run.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from assetshield.infra.db import db
from assetshield.models._types import JSONType, iso
from assetshield.utils.clock import utcnow

# pending -> completed | failed | incomplete ; incomplete -> completed via retry
RUN_STATUSES = ("pending", "completed", "failed", "incomplete")


class ProvisioningRun(db.Model):
    """One attempt to turn a payment event into a tenant."""
    __tablename__ = "provisioning_runs"

    id = Column(Integer, primary_key=True)
    stripe_event_id = Column(String(255), unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), index=True)
    owner_email = Column(String(255), nullable=False)
    tier = Column(String(32), nullable=False)
    request_data = Column(JSONType)
    status = Column(String(16), nullable=False, default="pending", index=True)
    failed_step = Column(String(32))
    error = Column(Text)
    attempts = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    completed_at = Column(DateTime)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "stripe_event_id": self.stripe_event_id,
            "customer_id": self.customer_id,
            "owner_email": self.owner_email,
            "tier": self.tier,
            "status": self.status,
            "failed_step": self.failed_step,
            "error": self.error,
            "attempts": self.attempts,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
            "completed_at": iso(self.completed_at),
        }
