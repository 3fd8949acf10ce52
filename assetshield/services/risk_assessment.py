# -*- coding: utf-8 -*-
"""
Scoring for the public asset protection risk assessment.

Points are added per risk factor; the total maps to a level and to the share
of the estimated net worth considered exposed.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

NET_WORTH_ESTIMATES = {
    "under_500k": 250000,
    "500k_1m": 750000,
    "1m_5m": 3000000,
    "5m_10m": 7500000,
    "over_10m": 15000000,
}
HIGH_RISK_PROFESSIONS = ("doctor", "lawyer", "business_owner")

# (max score, level, share of net worth at risk)
RISK_BANDS = (
    (3, "low", 0.1),
    (7, "medium", 0.3),
    (None, "high", 0.6),
)

RECOMMENDATIONS = {
    "high": [
        "Establish a Domestic Asset Protection Trust immediately",
        "Consider offshore asset protection structures",
        "Maximize liability insurance coverage",
    ],
    "medium": [
        "Form an LLC for business assets",
        "Establish a basic asset protection trust",
        "Review and increase liability insurance",
    ],
    "low": [
        "Maintain adequate liability insurance",
        "Consider an LLC for real estate holdings",
        "Regular review of asset protection strategies",
    ],
}


@dataclass(frozen=True)
class RiskResult:
    score: int
    level: str
    wealth_at_risk: int
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "riskScore": self.score,
            "riskLevel": self.level,
            "wealthAtRisk": self.wealth_at_risk,
            "recommendations": list(self.recommendations),
        }


def score_assessment(answers: Dict[str, Any]) -> RiskResult:
    """Score wizard answers (snake_case keys as produced by AssessmentSubmission)."""
    score = 0
    net_worth = NET_WORTH_ESTIMATES.get(answers.get("net_worth"), NET_WORTH_ESTIMATES["under_500k"])

    if answers.get("profession") in HIGH_RISK_PROFESSIONS:
        score += 3

    threats = answers.get("legal_threats")
    if threats == "active":
        score += 4
    elif threats == "potential":
        score += 2

    if answers.get("has_real_estate"):
        score += 2

    history = answers.get("legal_history") or []
    if "lawsuit" in history or "divorce" in history:
        score += 3
    if "bankruptcy" in history:
        score += 4

    protection: Optional[list] = answers.get("current_protection")
    if not protection or "none" in protection:
        score += 2

    for max_score, level, share in RISK_BANDS:
        if max_score is None or score <= max_score:
            break

    return RiskResult(
        score=score,
        level=level,
        wealth_at_risk=round(net_worth * share),
        recommendations=list(RECOMMENDATIONS[level]),
    )
