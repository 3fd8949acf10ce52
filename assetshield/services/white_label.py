# -*- coding: utf-8 -*-
"""
White-label configuration and custom domain management for a customer.
"""
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from assetshield.errors import ConflictError, InvalidRequestError, NotFoundError
from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import ActivityLog, Customer, CustomerDomain, WhiteLabelConfig
from assetshield.schemas.dashboard import DOMAIN_RE, BrandingPatch
from assetshield.services.domain_resolver import DomainResolver, get_domain_resolver, normalize_host
from assetshield.services.domain_verification import generate_verification_token, get_domain_verifier
from assetshield.utils.clock import utcnow

logger = get_logger("assetshield.white_label")


class WhiteLabelService:
    """Branding and domain operations, scoped to one customer per call."""

    def __init__(self, resolver: DomainResolver, verifier):
        self.resolver = resolver
        self.verifier = verifier

    # ---- Branding -------------------------------------------------------------------

    def get(self, customer_id: int) -> WhiteLabelConfig:
        config = WhiteLabelConfig.query.filter_by(customer_id=customer_id).first()
        if config is None:
            raise NotFoundError("White-label configuration not found")
        return config

    def update(self, customer_id: int, patch: BrandingPatch,
               actor_email: Optional[str] = None) -> WhiteLabelConfig:
        """Write only the fields present in ``patch``; an empty patch is a no-op."""
        changes = patch.changes()
        config = self.get(customer_id)
        if not changes:
            return config

        # single UPDATE naming only the sent columns; commit expires the loaded row
        db.session.execute(
            update(WhiteLabelConfig)
            .where(WhiteLabelConfig.id == config.id)
            .values(**changes, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        ActivityLog.record(customer_id, "config_updated",
                           details={"fields": sorted(changes)}, user_email=actor_email)
        db.session.commit()

        logger.info("White-label config updated", customer_id=customer_id, fields=sorted(changes))
        return self.get(customer_id)

    # ---- Domains --------------------------------------------------------------------

    def list_domains(self, customer_id: int) -> List[CustomerDomain]:
        return (CustomerDomain.query
                .filter_by(customer_id=customer_id)
                .order_by(CustomerDomain.is_primary.desc(), CustomerDomain.created_at, CustomerDomain.id)
                .all())

    def add_domain(self, customer_id: int, domain: str, is_primary: bool = False,
                   actor_email: Optional[str] = None) -> Tuple[CustomerDomain, dict]:
        """Register a domain; returns the row and the DNS record to publish.

        Unsetting the previous primary and inserting the new row commit together.
        """
        host = self._validated_host(domain)
        if db.session.get(Customer, customer_id) is None:
            raise NotFoundError("Customer not found")

        existing = CustomerDomain.query.filter_by(domain=host).first()
        if existing is not None:
            if existing.customer_id == customer_id:
                raise ConflictError("Domain already added to this account")
            raise ConflictError("Domain is already in use by another account")

        try:
            if is_primary:
                self._clear_primary(customer_id)
            row = CustomerDomain(
                customer_id=customer_id,
                domain=host,
                is_primary=is_primary,
                verification_status="pending",
                verification_token=generate_verification_token(),
            )
            db.session.add(row)
            ActivityLog.record(customer_id, "domain_added",
                               details={"domain": host, "is_primary": is_primary},
                               user_email=actor_email)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.warning("Domain insert conflicted", customer_id=customer_id, domain=host)
            raise ConflictError("Domain is already in use by another account")

        logger.info("Domain added", customer_id=customer_id, domain=host, is_primary=is_primary)
        return row, self.verifier.instructions(host, row.verification_token)

    def set_primary_domain(self, customer_id: int, domain: str,
                           actor_email: Optional[str] = None) -> CustomerDomain:
        row = self._owned_domain(customer_id, domain)
        if row.is_primary:
            return row
        self._clear_primary(customer_id)
        row.is_primary = True
        ActivityLog.record(customer_id, "domain_primary_changed",
                           details={"domain": row.domain}, user_email=actor_email)
        db.session.commit()
        return row

    def verification_instructions(self, row: CustomerDomain) -> dict:
        return self.verifier.instructions(row.domain, row.verification_token)

    def check_domain(self, customer_id: int, domain: str,
                     actor_email: Optional[str] = None) -> Tuple[CustomerDomain, str]:
        """Run the ownership check; returns the updated row and a status message."""
        row = self._owned_domain(customer_id, domain)
        if row.is_verified:
            return row, "Domain already verified"

        result = self.verifier.check(row.domain, row.verification_token)
        row.last_checked_at = utcnow()
        if result.verified:
            row.verification_status = "verified"
            row.verified_at = row.last_checked_at
            ActivityLog.record(customer_id, "domain_verified",
                               details={"domain": row.domain, "mode": self.verifier.mode},
                               user_email=actor_email)
        else:
            row.verification_status = "failed"
            ActivityLog.record(customer_id, "domain_verification_failed",
                               details={"domain": row.domain, "reason": result.message},
                               user_email=actor_email)
        db.session.commit()

        logger.info("Domain verification checked", customer_id=customer_id, domain=row.domain,
                    verified=result.verified, reason=result.message)
        return row, result.message

    def verify_domain(self, customer_id: int, domain: str,
                      actor_email: Optional[str] = None) -> bool:
        row, _ = self.check_domain(customer_id, domain, actor_email=actor_email)
        return row.is_verified

    # ---- Helpers --------------------------------------------------------------------

    def _validated_host(self, domain: str) -> str:
        host = normalize_host(domain)
        if not DOMAIN_RE.match(host):
            raise InvalidRequestError("Invalid domain name")
        if self.resolver.is_system_host(host):
            raise InvalidRequestError("Platform domains cannot be added")
        return host

    def _owned_domain(self, customer_id: int, domain: str) -> CustomerDomain:
        row = CustomerDomain.query.filter_by(
            customer_id=customer_id, domain=normalize_host(domain)).first()
        if row is None:
            raise NotFoundError("Domain not found")
        return row

    @staticmethod
    def _clear_primary(customer_id: int):
        db.session.execute(
            update(CustomerDomain)
            .where(CustomerDomain.customer_id == customer_id)
            .where(CustomerDomain.is_primary.is_(True))
            .values(is_primary=False)
            .execution_options(synchronize_session="fetch")
        )


def get_white_label_service() -> WhiteLabelService:
    return WhiteLabelService(get_domain_resolver(), get_domain_verifier())
