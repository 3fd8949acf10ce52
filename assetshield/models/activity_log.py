# -*- coding: utf-8 -*-
# assetshield/models/activity_log.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from assetshield.infra.db import db
from assetshield.models._types import JSONType, iso
from assetshield.utils.clock import utcnow


class ActivityLog(db.Model):
    """Append-only audit trail per customer."""
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    user_email = Column(String(255))
    # e.g. "account_created", "domain_added", "config_updated", "lead_captured"
    action = Column(String(64), nullable=False, index=True)
    details = Column(JSONType)
    ip_address = Column(String(64))
    user_agent = Column(Text)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)

    @classmethod
    def record(cls, customer_id: int, action: str, details=None, user_email=None,
               ip_address=None, user_agent=None) -> "ActivityLog":
        """Add an entry to the current session. The caller commits."""
        entry = cls(
            customer_id=customer_id,
            action=action,
            details=details,
            user_email=user_email,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        db.session.add(entry)
        return entry

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "user_email": self.user_email,
            "action": self.action,
            "details": self.details,
            "created_at": iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<ActivityLog {self.id} customer={self.customer_id} action={self.action}>"
