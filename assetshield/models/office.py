# -*- coding: utf-8 -*-
# assetshield/models/office.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from assetshield.infra.db import db
from assetshield.models._types import JSONType, iso
from assetshield.utils.clock import utcnow


class Office(db.Model):
    __tablename__ = "offices"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address = Column(Text)
    phone = Column(String(50))
    email = Column(String(255))
    timezone = Column(String(64), nullable=False, default="America/New_York")
    is_headquarters = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "name": self.name,
            "address": self.address,
            "phone": self.phone,
            "email": self.email,
            "timezone": self.timezone,
            "is_headquarters": self.is_headquarters,
            "created_at": iso(self.created_at),
        }


class DocumentTemplate(db.Model):
    __tablename__ = "document_templates"

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    template_type = Column(String(32), nullable=False)  # letter | form | checklist
    content = Column(Text, nullable=False)
    variables = Column(JSONType, nullable=False, default=list)
    jurisdiction = Column(String(16), nullable=False, default="US")
    language = Column(String(8), nullable=False, default="en")
    created_at = Column(DateTime, default=utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customer_id": self.customer_id,
            "name": self.name,
            "template_type": self.template_type,
            "content": self.content,
            "variables": self.variables,
            "jurisdiction": self.jurisdiction,
            "language": self.language,
            "created_at": iso(self.created_at),
        }
