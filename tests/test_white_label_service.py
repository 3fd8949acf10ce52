# -*- coding: utf-8 -*-
"""
Tests for branding updates and custom domain management.
"""
from unittest.mock import MagicMock

import pytest

from assetshield.database import db
from assetshield.errors import ConflictError, InvalidRequestError, NotFoundError
from assetshield.models import ActivityLog, CustomerDomain, WhiteLabelConfig
from assetshield.schemas.dashboard import BrandingPatch
from assetshield.services.domain_resolver import get_domain_resolver
from assetshield.services.domain_verification import DomainCheckResult, DnsTxtVerifier
from assetshield.services.white_label import WhiteLabelService, get_white_label_service


@pytest.fixture
def service(app):
    return get_white_label_service()


@pytest.fixture
def stub_verifier():
    verifier = MagicMock(spec=DnsTxtVerifier)
    verifier.mode = "dns"
    verifier.instructions.side_effect = DnsTxtVerifier().instructions
    verifier.check.return_value = DomainCheckResult(True, "Domain ownership verified")
    return verifier


@pytest.fixture
def stubbed_service(app, stub_verifier):
    return WhiteLabelService(get_domain_resolver(), stub_verifier)


def _actions(customer_id, action):
    return ActivityLog.query.filter_by(customer_id=customer_id, action=action).all()


class TestBrandingUpdate:

    def test_only_sent_fields_are_written(self, service, customer):
        before = service.get(customer.id).to_dict()

        config = service.update(customer.id, BrandingPatch.model_validate({"heroTitle": "Shield Your Legacy"}))

        after = config.to_dict()
        assert after["hero_title"] == "Shield Your Legacy"
        for field in ("hero_title", "updated_at"):
            before.pop(field)
            after.pop(field)
        assert after == before

    def test_update_logs_changed_fields(self, service, customer):
        service.update(customer.id, BrandingPatch(primary_color="#112233", logo_url="https://x.test/l.png"),
                       actor_email="john@smithlaw.com")

        entries = _actions(customer.id, "config_updated")
        assert len(entries) == 1
        assert entries[0].details == {"fields": ["logo_url", "primary_color"]}
        assert entries[0].user_email == "john@smithlaw.com"

    def test_explicit_null_clears_field(self, service, customer):
        service.update(customer.id, BrandingPatch(logo_url="https://x.test/l.png"))
        config = service.update(customer.id, BrandingPatch.model_validate({"logoUrl": None}))
        assert config.logo_url is None

    def test_empty_patch_is_a_no_op(self, service, customer):
        before = service.get(customer.id).updated_at
        config = service.update(customer.id, BrandingPatch())

        assert config.updated_at == before
        assert _actions(customer.id, "config_updated") == []

    def test_update_bumps_updated_at(self, service, customer):
        before = service.get(customer.id).updated_at
        config = service.update(customer.id, BrandingPatch(hero_subtitle="New subtitle"))
        assert config.updated_at >= before

    def test_unknown_customer(self, service, app):
        with pytest.raises(NotFoundError):
            service.update(9999, BrandingPatch(hero_title="x"))
        with pytest.raises(NotFoundError):
            service.get(9999)

    def test_unknown_keys_are_ignored(self, customer):
        patch = BrandingPatch.model_validate({"heroTitle": "Hi", "customer_id": 42, "isAdmin": True})
        assert patch.changes() == {"hero_title": "Hi"}


class TestAddDomain:

    def test_add_domain_returns_instructions(self, service, customer):
        row, instructions = service.add_domain(customer.id, "SmithLaw.com")

        assert row.domain == "smithlaw.com"
        assert row.verification_status == "pending"
        assert row.is_primary is False
        assert instructions["type"] == "TXT"
        assert instructions["name"] == "_assetshield.smithlaw.com"
        assert instructions["value"] == f"assetshield-verification={row.verification_token}"
        assert len(_actions(customer.id, "domain_added")) == 1

    def test_duplicate_domain_same_customer(self, service, customer):
        service.add_domain(customer.id, "smithlaw.com")
        with pytest.raises(ConflictError, match="already added"):
            service.add_domain(customer.id, "smithlaw.com")

    def test_domain_owned_by_another_customer(self, service, customer, other_customer):
        service.add_domain(other_customer.id, "smithlaw.com")
        with pytest.raises(ConflictError, match="another account"):
            service.add_domain(customer.id, "smithlaw.com")

    @pytest.mark.parametrize("domain", ["not a domain", "localhost", "-bad-.com", "smithlaw"])
    def test_invalid_domain(self, service, customer, domain):
        with pytest.raises(InvalidRequestError):
            service.add_domain(customer.id, domain)

    def test_platform_domain_rejected(self, service, customer):
        with pytest.raises(InvalidRequestError, match="Platform domains"):
            service.add_domain(customer.id, "smith.assetshield.app")

    def test_unknown_customer(self, service, app):
        with pytest.raises(NotFoundError):
            service.add_domain(9999, "smithlaw.com")


class TestPrimaryDomain:

    def _primaries(self, customer_id):
        return [d.domain for d in CustomerDomain.query.filter_by(customer_id=customer_id, is_primary=True)]

    def test_new_primary_replaces_old(self, service, customer):
        service.add_domain(customer.id, "smithlaw.com", is_primary=True)
        service.add_domain(customer.id, "smith-law.com", is_primary=True)

        assert self._primaries(customer.id) == ["smith-law.com"]

    def test_set_primary_swaps(self, service, customer):
        service.add_domain(customer.id, "smithlaw.com", is_primary=True)
        service.add_domain(customer.id, "smith-law.com")

        row = service.set_primary_domain(customer.id, "smith-law.com")

        assert row.is_primary is True
        assert self._primaries(customer.id) == ["smith-law.com"]
        assert len(_actions(customer.id, "domain_primary_changed")) == 1

    def test_primary_is_per_customer(self, service, customer, other_customer):
        service.add_domain(customer.id, "smithlaw.com", is_primary=True)
        service.add_domain(other_customer.id, "joneslegal.com", is_primary=True)

        assert self._primaries(customer.id) == ["smithlaw.com"]
        assert self._primaries(other_customer.id) == ["joneslegal.com"]

    def test_list_domains_primary_first(self, service, customer):
        service.add_domain(customer.id, "smith-law.com")
        service.add_domain(customer.id, "smithlaw.com", is_primary=True)

        assert [d.domain for d in service.list_domains(customer.id)] == ["smithlaw.com", "smith-law.com"]

    def test_set_primary_on_foreign_domain(self, service, customer, other_customer):
        service.add_domain(other_customer.id, "joneslegal.com")
        with pytest.raises(NotFoundError):
            service.set_primary_domain(customer.id, "joneslegal.com")


class TestDomainVerification:

    def test_successful_check_marks_verified(self, stubbed_service, stub_verifier, customer):
        row, _ = stubbed_service.add_domain(customer.id, "smithlaw.com")

        row, message = stubbed_service.check_domain(customer.id, "smithlaw.com")

        assert row.verification_status == "verified"
        assert row.verified_at is not None
        assert row.last_checked_at is not None
        assert message == "Domain ownership verified"
        stub_verifier.check.assert_called_once_with("smithlaw.com", row.verification_token)
        assert len(_actions(customer.id, "domain_verified")) == 1

    def test_verify_twice_stays_true(self, stubbed_service, stub_verifier, customer):
        stubbed_service.add_domain(customer.id, "smithlaw.com")

        assert stubbed_service.verify_domain(customer.id, "smithlaw.com") is True
        assert stubbed_service.verify_domain(customer.id, "smithlaw.com") is True
        assert stub_verifier.check.call_count == 1

    def test_failed_check_marks_failed_then_recovers(self, stubbed_service, stub_verifier, customer):
        stubbed_service.add_domain(customer.id, "smithlaw.com")
        stub_verifier.check.return_value = DomainCheckResult(False, "No TXT record found")

        assert stubbed_service.verify_domain(customer.id, "smithlaw.com") is False
        row = CustomerDomain.query.filter_by(domain="smithlaw.com").one()
        assert row.verification_status == "failed"
        assert len(_actions(customer.id, "domain_verification_failed")) == 1

        stub_verifier.check.return_value = DomainCheckResult(True, "Domain ownership verified")
        assert stubbed_service.verify_domain(customer.id, "smithlaw.com") is True

    def test_verified_domain_starts_resolving(self, stubbed_service, customer):
        stubbed_service.add_domain(customer.id, "smithlaw.com")
        assert get_domain_resolver().resolve("smithlaw.com", "/") is None

        stubbed_service.verify_domain(customer.id, "smithlaw.com")
        assert get_domain_resolver().resolve("smithlaw.com", "/").customer_id == customer.id

    def test_check_unknown_domain(self, stubbed_service, customer):
        with pytest.raises(NotFoundError):
            stubbed_service.check_domain(customer.id, "nothere.com")


class TestWhiteLabelConfigRow:

    def test_one_config_per_customer(self, customer):
        assert WhiteLabelConfig.query.filter_by(customer_id=customer.id).count() == 1

    def test_second_config_rejected(self, customer):
        from sqlalchemy.exc import IntegrityError

        db.session.add(WhiteLabelConfig(customer_id=customer.id, features_enabled=[]))
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()
