# -*- coding: utf-8 -*-
# assetshield/schemas/billing.py
from marshmallow import EXCLUDE, Schema, fields, validate

from assetshield.services.tiers import TIERS

TIER_CHOICES = validate.OneOf(sorted(TIERS))


class CheckoutRequestSchema(Schema):
    """Body of POST /api/checkout/<tier>."""

    class Meta:
        unknown = EXCLUDE

    lawyer_name = fields.Str(required=True, data_key="lawyerName", validate=validate.Length(min=1, max=255))
    lawyer_email = fields.Email(required=True, data_key="lawyerEmail")
    lawyer_phone = fields.Str(load_default=None, data_key="lawyerPhone")
    firm_name = fields.Str(required=True, data_key="firmName", validate=validate.Length(min=1, max=255))
    success_url = fields.Url(load_default=None, data_key="successUrl", require_tld=False)
    cancel_url = fields.Url(load_default=None, data_key="cancelUrl", require_tld=False)


class CheckoutMetadataSchema(Schema):
    """Metadata attached to the Checkout Session; drives provisioning."""

    class Meta:
        unknown = EXCLUDE

    tier = fields.Str(required=True, validate=TIER_CHOICES)
    firm_name = fields.Str(required=True, data_key="firmName", validate=validate.Length(min=1, max=255))
    lawyer_name = fields.Str(required=True, data_key="lawyerName", validate=validate.Length(min=1, max=255))
    lawyer_email = fields.Email(required=True, data_key="lawyerEmail")
    lawyer_phone = fields.Str(load_default=None, allow_none=True, data_key="lawyerPhone")
    # Stripe metadata values are always strings
    setup_fee = fields.Integer(load_default=None, allow_none=True, data_key="setupFee")
    monthly_fee = fields.Integer(load_default=None, allow_none=True, data_key="monthlyFee")
    type = fields.Str(load_default=None, allow_none=True)
