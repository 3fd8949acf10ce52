# -*- coding: utf-8 -*-
"""
Maps an inbound host name to a tenant's branding.

``DomainResolver.resolve(host, path)`` returns a ``Branding`` for a verified
customer domain, or ``None`` when the request should use default AssetShield
branding (platform hosts, excluded paths, unknown or unverified domains, and
any lookup failure). Views call the resolver and pass the resulting value to
templates themselves; nothing is stashed on the request.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from flask import Flask, current_app, request
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import Customer, CustomerDomain, WhiteLabelConfig
from assetshield.services.metrics import get_metrics_service

logger = get_logger("assetshield.domains")

DEFAULT_PRIMARY_COLOR = "#2563eb"
DEFAULT_SECONDARY_COLOR = "#1d4ed8"
DEFAULT_ACCENT_COLOR = "#10b981"
DEFAULT_HERO_SUBTITLE = "Professional asset protection strategies tailored for your unique situation"

# Platform surfaces that are never tenant-branded
EXCLUDED_PATH_PREFIXES = (
    "/dashboard",
    "/api/",
    "/static/",
    "/webhooks/",
    "/healthz",
    "/readyz",
    "/metrics",
)


@dataclass(frozen=True)
class Branding:
    """Everything a page needs to render a firm's (or the default) look."""

    firm_name: str
    primary_color: str
    secondary_color: str
    accent_color: str
    hero_title: str
    hero_subtitle: str
    is_white_label: bool = False
    customer_id: Optional[int] = None
    domain: Optional[str] = None
    logo_url: Optional[str] = None
    firm_address: Optional[str] = None
    firm_website: Optional[str] = None
    firm_phone: Optional[str] = None
    firm_description: Optional[str] = None
    about_content: Optional[str] = None
    services_content: Optional[str] = None
    features_enabled: Tuple[str, ...] = field(default_factory=tuple)
    from_email: Optional[str] = None
    reply_to_email: Optional[str] = None

    @classmethod
    def from_tenant(cls, customer: Customer, config: Optional[WhiteLabelConfig],
                    domain: str) -> "Branding":
        """Assemble branding, filling unset fields with fallbacks."""
        def value(name):
            return getattr(config, name) if config is not None else None

        return cls(
            firm_name=customer.firm_name,
            primary_color=value("primary_color") or DEFAULT_PRIMARY_COLOR,
            secondary_color=value("secondary_color") or DEFAULT_SECONDARY_COLOR,
            accent_color=value("accent_color") or DEFAULT_ACCENT_COLOR,
            hero_title=value("hero_title") or f"Protect Your Assets with {customer.firm_name}",
            hero_subtitle=value("hero_subtitle") or DEFAULT_HERO_SUBTITLE,
            is_white_label=True,
            customer_id=customer.id,
            domain=domain,
            logo_url=value("logo_url"),
            firm_address=value("firm_address"),
            firm_website=value("firm_website"),
            firm_phone=value("firm_phone") or customer.owner_phone,
            firm_description=value("firm_description"),
            about_content=value("about_content"),
            services_content=value("services_content"),
            features_enabled=tuple(value("features_enabled") or ()),
            from_email=value("from_email"),
            reply_to_email=value("reply_to_email"),
        )

    def has_feature(self, name: str) -> bool:
        return name in self.features_enabled


DEFAULT_BRANDING = Branding(
    firm_name="AssetShield",
    primary_color="#1e40af",
    secondary_color=DEFAULT_SECONDARY_COLOR,
    accent_color=DEFAULT_ACCENT_COLOR,
    hero_title="Complete Asset Protection Platform",
    hero_subtitle=(
        "Discover your asset protection risk level, explore tailored strategies, "
        "and access comprehensive educational resources to safeguard your wealth."
    ),
)


def normalize_host(host: Optional[str]) -> str:
    """Lowercase, drop the port and any trailing dot."""
    host = (host or "").strip().lower()
    if host.startswith("["):
        # IPv6 literal, e.g. [::1]:5000
        return host[1:].split("]", 1)[0]
    if host.count(":") == 1:
        host = host.split(":", 1)[0]
    return host.rstrip(".")


class DomainResolver:
    def __init__(self, system_hosts: Iterable[str], platform_domains: Iterable[str],
                 excluded_prefixes: Iterable[str] = EXCLUDED_PATH_PREFIXES):
        self.system_hosts = frozenset(h.lower() for h in system_hosts)
        self.platform_domains = tuple(d.lower().lstrip(".") for d in platform_domains)
        self.excluded_prefixes = tuple(excluded_prefixes)

    @classmethod
    def from_config(cls, config) -> "DomainResolver":
        return cls(config.get("SYSTEM_HOSTS", ()), config.get("PLATFORM_DOMAINS", ()))

    def is_system_host(self, host: str) -> bool:
        if not host or host in self.system_hosts:
            return True
        return any(host == d or host.endswith("." + d) for d in self.platform_domains)

    def is_excluded_path(self, path: str) -> bool:
        return any((path or "/").startswith(prefix) for prefix in self.excluded_prefixes)

    def resolve(self, host: Optional[str], path: str = "/") -> Optional[Branding]:
        host = normalize_host(host)
        if self.is_system_host(host) or self.is_excluded_path(path):
            self._record("skipped")
            return None

        try:
            branding = self._lookup(host)
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning("Domain lookup failed; using default branding", host=host, error=str(e))
            self._record("error")
            return None
        except Exception:
            # e.g. a JSON column that no longer decodes
            db.session.rollback()
            logger.exception("Domain branding failed; using default branding", host=host)
            self._record("error")
            return None

        self._record("matched" if branding else "unmatched")
        return branding

    def branding_for(self, host: Optional[str], path: str = "/") -> Branding:
        return self.resolve(host, path) or DEFAULT_BRANDING

    def _lookup(self, host: str) -> Optional[Branding]:
        stmt = (
            select(Customer, WhiteLabelConfig)
            .join(CustomerDomain, CustomerDomain.customer_id == Customer.id)
            .outerjoin(WhiteLabelConfig, WhiteLabelConfig.customer_id == Customer.id)
            .where(CustomerDomain.domain == host)
            .where(CustomerDomain.verification_status == "verified")
        )
        row = db.session.execute(stmt).first()
        if row is None:
            return None
        customer, config = row
        return Branding.from_tenant(customer, config, host)

    @staticmethod
    def _record(outcome: str):
        metrics = get_metrics_service()
        if metrics:
            metrics.record_domain_resolution(outcome)


def init_domain_resolver(app: Flask) -> None:
    app.extensions["domain_resolver"] = DomainResolver.from_config(app.config)


def get_domain_resolver() -> DomainResolver:
    return current_app.extensions["domain_resolver"]


def resolve_request_branding() -> Branding:
    """Branding for the current request's Host header and path."""
    return get_domain_resolver().branding_for(request.host, request.path)


__all__ = [
    "Branding",
    "DEFAULT_BRANDING",
    "DomainResolver",
    "normalize_host",
    "init_domain_resolver",
    "get_domain_resolver",
    "resolve_request_branding",
]
