# -*- coding: utf-8 -*-
"""
Domain ownership checks.

A customer proves control of a domain by publishing

    _assetshield.<domain>  TXT  "assetshield-verification=<token>"

``DnsTxtVerifier`` looks that record up with dnspython. ``TrustVerifier``
accepts every domain and is meant for local development only
(``DOMAIN_VERIFICATION_MODE=trust``).
"""
import secrets
from dataclasses import dataclass
from typing import Optional

import dns.exception
import dns.resolver
from flask import Flask, current_app

from assetshield.infra.log import get_logger

logger = get_logger("assetshield.domains")

TOKEN_PREFIX = "assetshield-verification="


def generate_verification_token() -> str:
    return secrets.token_hex(16)


@dataclass(frozen=True)
class DomainCheckResult:
    verified: bool
    message: str
    found: Optional[str] = None


class DnsTxtVerifier:
    mode = "dns"

    def __init__(self, record_prefix: str = "_assetshield", lifetime: float = 10.0):
        self.record_prefix = record_prefix
        self.lifetime = lifetime

    def record_name(self, domain: str) -> str:
        return f"{self.record_prefix}.{domain}"

    def instructions(self, domain: str, token: str) -> dict:
        """What the customer has to publish in DNS."""
        return {
            "type": "TXT",
            "name": self.record_name(domain),
            "value": f"{TOKEN_PREFIX}{token}",
        }

    def check(self, domain: str, token: str) -> DomainCheckResult:
        name = self.record_name(domain)
        expected = f"{TOKEN_PREFIX}{token}"
        try:
            answers = dns.resolver.resolve(name, "TXT", lifetime=self.lifetime)
        except dns.resolver.NXDOMAIN:
            return DomainCheckResult(False, f"No DNS record found at {name}")
        except dns.resolver.NoAnswer:
            return DomainCheckResult(False, f"No TXT record found at {name}")
        except dns.exception.DNSException as e:
            logger.warning("DNS lookup failed", record=name, error=str(e))
            return DomainCheckResult(False, f"DNS lookup failed: {type(e).__name__}")

        found = None
        for rdata in answers:
            txt = b"".join(rdata.strings).decode("utf-8", errors="replace")
            found = txt
            if txt.strip() == expected:
                return DomainCheckResult(True, "Domain ownership verified", txt)
        return DomainCheckResult(False, "Verification token does not match", found)


class TrustVerifier:
    """Marks every domain verified without a lookup."""
    mode = "trust"

    def __init__(self, record_prefix: str = "_assetshield"):
        self._dns = DnsTxtVerifier(record_prefix)

    def instructions(self, domain: str, token: str) -> dict:
        return self._dns.instructions(domain, token)

    def check(self, domain: str, token: str) -> DomainCheckResult:
        return DomainCheckResult(True, "Verification skipped (trust mode)")


def init_domain_verifier(app: Flask) -> None:
    prefix = app.config.get("DOMAIN_VERIFICATION_PREFIX", "_assetshield")
    mode = app.config.get("DOMAIN_VERIFICATION_MODE", "dns")
    if mode == "trust":
        logger.warning("Domain verification running in trust mode; domains are not checked")
        app.extensions["domain_verifier"] = TrustVerifier(prefix)
    elif mode == "dns":
        app.extensions["domain_verifier"] = DnsTxtVerifier(
            prefix, lifetime=float(app.config.get("DNS_LOOKUP_TIMEOUT", 10)))
    else:
        raise ValueError(f"Unknown DOMAIN_VERIFICATION_MODE: {mode}")


def get_domain_verifier():
    return current_app.extensions["domain_verifier"]
