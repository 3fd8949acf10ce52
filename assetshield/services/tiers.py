# -*- coding: utf-8 -*-
"""
Subscription tier table.

Fees are whole US dollars. The feature lists are copied verbatim into a new
tenant's white-label config at provisioning time and shown in the welcome
email and on the pricing page.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class Tier:
    name: str
    display_name: str
    setup_fee: int
    monthly_fee: int
    features: Tuple[str, ...]


TIERS: Dict[str, Tier] = {
    "starter": Tier(
        name="starter",
        display_name="Starter",
        setup_fee=5000,
        monthly_fee=500,
        features=(
            "White-label branding",
            "Risk assessment tool",
            "Lead capture & management",
            "Basic analytics",
            "Email templates",
            "Up to 100 leads/month",
        ),
    ),
    "professional": Tier(
        name="professional",
        display_name="Professional",
        setup_fee=10000,
        monthly_fee=1200,
        features=(
            "Everything in Starter",
            "Custom domain support",
            "Advanced analytics",
            "Team member access",
            "Email automation",
            "Priority support",
            "Up to 500 leads/month",
        ),
    ),
    "enterprise": Tier(
        name="enterprise",
        display_name="Enterprise",
        setup_fee=25000,
        monthly_fee=2500,
        features=(
            "Everything in Professional",
            "Multiple domains",
            "Advanced customization",
            "API access",
            "Custom integrations",
            "Dedicated support",
            "Unlimited leads",
        ),
    ),
}


def is_valid_tier(name: str) -> bool:
    return name in TIERS


def get_tier(name: str) -> Tier:
    """Look up a tier; raises KeyError for unknown names."""
    return TIERS[name]


def features_for(name: str) -> List[str]:
    return list(TIERS[name].features)
