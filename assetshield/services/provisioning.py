# -*- coding: utf-8 -*-
"""
Tenant provisioning pipeline.

A confirmed payment becomes a usable tenant in six steps:

    1. customer              Customer row with hashed password and ``ask_`` API key
    2. white_label_config    default branding with the tier's feature list
    3. office                "<firm> - Headquarters"
    4. document_templates    three starter templates
    5. activity_log          ``account_created`` entry
    6. notify                welcome email (best effort)

Steps 1-5 commit as one transaction; if any of them fails nothing is kept and
the ``ProvisioningRun`` is marked ``failed`` with the step name. A failed
welcome email leaves the tenant in place and the run ``incomplete`` so it can
be retried. Runs are keyed by the Stripe event id, which makes webhook
redelivery of an already provisioned event a no-op.
"""
from dataclasses import asdict, dataclass
from datetime import timedelta
from typing import Optional

from flask import current_app

from assetshield.errors import ConflictError, InvalidRequestError, NotFoundError, ProvisioningError
from assetshield.infra.db import db
from assetshield.infra.log import get_logger
from assetshield.models import (
    ActivityLog,
    Customer,
    DocumentTemplate,
    Office,
    ProvisioningRun,
    WhiteLabelConfig,
)
from assetshield.services import accounts, tiers
from assetshield.services.domain_resolver import (
    DEFAULT_ACCENT_COLOR,
    DEFAULT_HERO_SUBTITLE,
    DEFAULT_PRIMARY_COLOR,
    DEFAULT_SECONDARY_COLOR,
)
from assetshield.services.metrics import get_metrics_service
from assetshield.services.notifications import build_welcome_email, get_notifier
from assetshield.utils.clock import utcnow

logger = get_logger("assetshield.provisioning")

STEPS = ("customer", "white_label_config", "office", "document_templates", "activity_log", "notify")

TEMPLATE_VARIABLES = ["client_name", "risk_score", "recommendations", "attorney_name"]
HQ_TIMEZONE = "America/New_York"
HQ_ADDRESS_PLACEHOLDER = "Address to be updated in settings"


@dataclass
class ProvisioningRequest:
    firm_name: str
    lawyer_name: str
    lawyer_email: str
    tier: str
    lawyer_phone: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    subscription_id: Optional[str] = None
    setup_fee: Optional[int] = None
    monthly_fee: Optional[int] = None
    event_id: Optional[str] = None

    def __post_init__(self):
        self.lawyer_email = (self.lawyer_email or "").strip().lower()
        if not tiers.is_valid_tier(self.tier):
            raise InvalidRequestError(f"Unknown tier: {self.tier}")
        if not self.firm_name or not self.lawyer_name or not self.lawyer_email:
            raise InvalidRequestError("firm_name, lawyer_name and lawyer_email are required")
        tier = tiers.get_tier(self.tier)
        if self.setup_fee is None:
            self.setup_fee = tier.setup_fee
        if self.monthly_fee is None:
            self.monthly_fee = tier.monthly_fee

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ProvisioningResult:
    run: ProvisioningRun
    customer: Customer
    notified: bool
    replayed: bool = False
    # plaintext credentials are only available on the run that generated them
    password: Optional[str] = None


def document_templates_for(firm_name: str):
    """The three templates every new tenant starts with."""
    return [
        {
            "name": "Asset Protection Consultation Letter",
            "template_type": "letter",
            "content": (
                "Dear {{client_name}},\n\n"
                f"Thank you for your interest in asset protection services from {firm_name}.\n\n"
                "Based on your risk assessment score of {{risk_score}}, we recommend the "
                "following strategies:\n\n{{recommendations}}\n\n"
                "Please contact us to schedule your consultation.\n\n"
                f"Best regards,\n{{{{attorney_name}}}}\n{firm_name}"
            ),
        },
        {
            "name": "Initial Client Intake Form",
            "template_type": "form",
            "content": "Standard intake form template with asset protection focus...",
        },
        {
            "name": "Trust Formation Checklist",
            "template_type": "checklist",
            "content": "Comprehensive checklist for trust establishment process...",
        },
    ]


class ProvisioningPipeline:

    def __init__(self, notifier, trial_days: int = 14,
                 dashboard_url: str = "https://assetshield.app/dashboard",
                 support_email: str = "support@assetshield.app"):
        self.notifier = notifier
        self.trial_days = trial_days
        self.dashboard_url = dashboard_url
        self.support_email = support_email

    # ---- Entry points ---------------------------------------------------------------

    def provision(self, req: ProvisioningRequest) -> ProvisioningResult:
        run = self._start_run(req)
        if run.status in ("completed", "incomplete"):
            logger.info("Provisioning event already processed", run_id=run.id,
                        stripe_event_id=req.event_id, status=run.status)
            return ProvisioningResult(run=run, customer=db.session.get(Customer, run.customer_id),
                                      notified=run.status == "completed", replayed=True)
        return self._execute(run, req)

    def _execute(self, run: ProvisioningRun, req: ProvisioningRequest) -> ProvisioningResult:
        if Customer.query.filter_by(owner_email=req.lawyer_email).first() is not None:
            self._fail(run, "customer", "owner email already registered")
            raise ConflictError("An account already exists for this email")

        customer, password = self._create_tenant(run, req)
        notified = self._notify(run, customer, password)
        return ProvisioningResult(run=run, customer=customer, notified=notified, password=password)

    def retry(self, run_id: int) -> ProvisioningResult:
        """Finish an incomplete run, or re-run a failed one from its stored request."""
        run = db.session.get(ProvisioningRun, run_id)
        if run is None:
            raise NotFoundError("Provisioning run not found")
        if run.status == "completed":
            raise ConflictError("Provisioning run already completed")
        if run.status == "pending":
            raise ConflictError("Provisioning run is still in progress")

        run.attempts += 1
        if run.status == "failed":
            run.status = "pending"
            run.failed_step = None
            run.error = None
            db.session.commit()
            return self._execute(run, ProvisioningRequest(**run.request_data))

        # incomplete: tenant exists, credentials were never delivered
        customer = db.session.get(Customer, run.customer_id)
        password = accounts.generate_password()
        customer.password_hash = accounts.hash_password(password)
        ActivityLog.record(customer.id, "credentials_reissued",
                           details={"run_id": run.id}, user_email=customer.owner_email)
        db.session.commit()

        notified = self._notify(run, customer, password)
        return ProvisioningResult(run=run, customer=customer, notified=notified, password=password)

    # ---- Steps ----------------------------------------------------------------------

    def _start_run(self, req: ProvisioningRequest) -> ProvisioningRun:
        run = None
        if req.event_id:
            run = ProvisioningRun.query.filter_by(stripe_event_id=req.event_id).first()
        if run is None:
            run = ProvisioningRun(
                stripe_event_id=req.event_id,
                owner_email=req.lawyer_email,
                tier=req.tier,
                request_data=req.to_dict(),
                status="pending",
            )
            db.session.add(run)
        elif run.status == "failed":
            run.status = "pending"
            run.failed_step = None
            run.error = None
        db.session.commit()
        return run

    def _create_tenant(self, run: ProvisioningRun, req: ProvisioningRequest):
        run_id = run.id
        tier = tiers.get_tier(req.tier)
        password, password_hash, api_key = accounts.generate_credentials()
        step = STEPS[0]

        try:
            now = utcnow()
            customer = Customer(
                firm_name=req.firm_name,
                owner_name=req.lawyer_name,
                owner_email=req.lawyer_email,
                owner_phone=req.lawyer_phone,
                password_hash=password_hash,
                tier=tier.name,
                status="trial",
                stripe_customer_id=req.stripe_customer_id,
                subscription_id=req.subscription_id,
                setup_fee_paid=req.setup_fee,
                monthly_fee=req.monthly_fee,
                trial_ends_at=now + timedelta(days=self.trial_days),
                api_key=api_key,
                api_key_created_at=now,
                created_at=now,
                updated_at=now,
            )
            db.session.add(customer)
            db.session.flush()

            step = STEPS[1]
            db.session.add(WhiteLabelConfig(
                customer_id=customer.id,
                primary_color=DEFAULT_PRIMARY_COLOR,
                secondary_color=DEFAULT_SECONDARY_COLOR,
                accent_color=DEFAULT_ACCENT_COLOR,
                hero_title=f"Protect Your Assets with {req.firm_name}",
                hero_subtitle=DEFAULT_HERO_SUBTITLE,
                firm_phone=req.lawyer_phone,
                features_enabled=list(tier.features),
                from_email=req.lawyer_email,
                reply_to_email=req.lawyer_email,
            ))
            db.session.flush()

            step = STEPS[2]
            db.session.add(Office(
                customer_id=customer.id,
                name=f"{req.firm_name} - Headquarters",
                address=HQ_ADDRESS_PLACEHOLDER,
                phone=req.lawyer_phone,
                email=req.lawyer_email,
                timezone=HQ_TIMEZONE,
                is_headquarters=True,
            ))
            db.session.flush()

            step = STEPS[3]
            for template in document_templates_for(req.firm_name):
                db.session.add(DocumentTemplate(
                    customer_id=customer.id,
                    variables=list(TEMPLATE_VARIABLES),
                    jurisdiction="US",
                    language="en",
                    **template,
                ))
            db.session.flush()

            step = STEPS[4]
            ActivityLog.record(customer.id, "account_created", user_email=req.lawyer_email, details={
                "tier": tier.name,
                "stripe_customer_id": req.stripe_customer_id,
                "subscription_id": req.subscription_id,
                "run_id": run_id,
            })
            run.customer_id = customer.id
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.exception("Provisioning step failed", step=step, run_id=run_id,
                             owner_email=req.lawyer_email)
            self._fail(db.session.get(ProvisioningRun, run_id), step, str(e))
            raise ProvisioningError(f"Provisioning failed at step '{step}'", step=step,
                                    run_id=run_id) from e

        metrics = get_metrics_service()
        if metrics:
            metrics.record_tenant_provisioned(tier.name)
        logger.info("Tenant created", customer_id=customer.id, tier=tier.name, run_id=run_id)
        return customer, password

    def _notify(self, run: ProvisioningRun, customer: Customer, password: str) -> bool:
        tier = tiers.get_tier(customer.tier)
        message = build_welcome_email(
            to_email=customer.owner_email,
            lawyer_name=customer.owner_name,
            firm_name=customer.firm_name,
            tier_name=tier.display_name,
            dashboard_url=self.dashboard_url,
            admin_password=password,
            api_key=customer.api_key,
            trial_ends_at=customer.trial_ends_at,
            monthly_fee=customer.monthly_fee,
            features=list(tier.features),
            support_email=self.support_email,
        )
        try:
            self.notifier.send(message)
        except Exception as e:
            logger.warning("Welcome email failed; run left incomplete", run_id=run.id,
                           customer_id=customer.id, error=str(e))
            run.status = "incomplete"
            run.failed_step = "notify"
            run.error = str(e)
            db.session.commit()
            metrics = get_metrics_service()
            if metrics:
                metrics.record_provisioning_failure("notify")
            return False

        run.status = "completed"
        run.failed_step = None
        run.error = None
        run.completed_at = utcnow()
        ActivityLog.record(customer.id, "welcome_email_sent", user_email=customer.owner_email,
                           details={"run_id": run.id})
        db.session.commit()
        return True

    @staticmethod
    def _fail(run: ProvisioningRun, step: str, error: str):
        run.status = "failed"
        run.failed_step = step
        run.error = error
        db.session.commit()
        metrics = get_metrics_service()
        if metrics:
            metrics.record_provisioning_failure(step)


def get_provisioning_pipeline() -> ProvisioningPipeline:
    config = current_app.config
    return ProvisioningPipeline(
        notifier=get_notifier(),
        trial_days=config.get("TRIAL_DAYS", 14),
        dashboard_url=f"{config.get('PLATFORM_BASE_URL', 'https://assetshield.app')}/dashboard",
        support_email=config.get("SUPPORT_EMAIL", "support@assetshield.app"),
    )
