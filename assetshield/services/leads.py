# -*- coding: utf-8 -*-
"""
Lead capture and per-customer lead analytics.
"""
from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import func, select

from assetshield.errors import InvalidRequestError, NotFoundError
from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import ActivityLog, ClientLead
from assetshield.models.lead import LEAD_STATUSES, RISK_LEVELS
from assetshield.schemas.dashboard import LeadCreateRequest
from assetshield.services.metrics import get_metrics_service
from assetshield.utils.clock import utcnow

logger = get_logger("assetshield.leads")

MAX_PAGE_SIZE = 200
MAX_ANALYTICS_DAYS = 3650


def record_lead(customer_id: int, lead: LeadCreateRequest, ip_address: Optional[str] = None,
                user_agent: Optional[str] = None) -> ClientLead:
    """Insert a lead and its ``lead_captured`` activity entry; returns the new row."""
    row = ClientLead(
        customer_id=customer_id,
        client_name=lead.client_name,
        client_email=lead.client_email,
        client_phone=lead.client_phone,
        # an empty answer set counts as no assessment
        assessment_data=lead.assessment_data or None,
        risk_score=lead.risk_score,
        risk_level=lead.risk_level,
        source_domain=lead.source_domain,
        referrer=lead.referrer,
        utm_source=lead.utm_source,
        utm_medium=lead.utm_medium,
        utm_campaign=lead.utm_campaign,
        ip_address=ip_address,
        user_agent=user_agent,
        status="new",
    )
    db.session.add(row)
    db.session.flush()
    ActivityLog.record(customer_id, "lead_captured", details={
        "lead_id": row.id,
        "risk_level": row.risk_level,
        "source_domain": row.source_domain,
    }, ip_address=ip_address, user_agent=user_agent)
    db.session.commit()

    metrics = get_metrics_service()
    if metrics:
        metrics.record_lead()
    logger.info("Lead recorded", customer_id=customer_id, lead_id=row.id, risk_level=row.risk_level)
    return row


def list_leads(customer_id: int, status: Optional[str] = None, limit: int = 50,
               offset: int = 0) -> Tuple[List[ClientLead], int]:
    if status is not None and status not in LEAD_STATUSES:
        raise InvalidRequestError(f"Unknown lead status: {status}")
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)

    query = ClientLead.query.filter_by(customer_id=customer_id)
    if status:
        query = query.filter_by(status=status)
    total = query.count()
    items = (query.order_by(ClientLead.created_at.desc(), ClientLead.id.desc())
             .limit(limit).offset(offset).all())
    return items, total


def get_lead(customer_id: int, lead_id: int) -> ClientLead:
    lead = ClientLead.query.filter_by(customer_id=customer_id, id=lead_id).first()
    if lead is None:
        raise NotFoundError("Lead not found")
    return lead


def update_lead_status(customer_id: int, lead_id: int, status: str, notes: Optional[str] = None,
                       actor_email: Optional[str] = None) -> ClientLead:
    if status not in LEAD_STATUSES:
        raise InvalidRequestError(f"Unknown lead status: {status}")
    lead = get_lead(customer_id, lead_id)
    previous = lead.status
    lead.status = status
    if notes is not None:
        lead.notes = notes
    ActivityLog.record(customer_id, "lead_status_updated", user_email=actor_email,
                       details={"lead_id": lead.id, "from": previous, "to": status})
    db.session.commit()
    return lead


def get_analytics(customer_id: int, days: int = 30) -> dict:
    """Lead counts for the trailing ``days`` window."""
    if days < 1 or days > MAX_ANALYTICS_DAYS:
        raise InvalidRequestError(f"days must be between 1 and {MAX_ANALYTICS_DAYS}")
    since = utcnow() - timedelta(days=days)
    in_window = (ClientLead.customer_id == customer_id, ClientLead.created_at >= since)

    def count(*criteria) -> int:
        stmt = select(func.count(ClientLead.id)).where(*in_window, *criteria)
        return db.session.execute(stmt).scalar_one()

    average = db.session.execute(
        select(func.avg(ClientLead.risk_score)).where(*in_window)
    ).scalar_one()

    distribution = {level: 0 for level in RISK_LEVELS}
    rows = db.session.execute(
        select(ClientLead.risk_level, func.count(ClientLead.id))
        .where(*in_window)
        .group_by(ClientLead.risk_level)
    ).all()
    for level, n in rows:
        distribution[level] = n

    return {
        "totalLeads": count(),
        "completedAssessments": count(ClientLead.assessment_data.is_not(None)),
        "scheduledConsultations": count(ClientLead.status == "consultation"),
        "averageRiskScore": round(float(average), 1) if average is not None else None,
        "riskDistribution": distribution,
        "period": f"{days} days",
    }
