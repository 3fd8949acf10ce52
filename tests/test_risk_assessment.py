# -*- coding: utf-8 -*-
"""
Tests for risk assessment scoring.
"""
import pytest

from assetshield.services.risk_assessment import RECOMMENDATIONS, score_assessment


def answers(**overrides):
    data = {
        "profession": "other",
        "net_worth": "under_500k",
        "legal_threats": "none",
        "has_real_estate": False,
        "legal_history": [],
        "current_protection": ["trust"],
    }
    data.update(overrides)
    return data


class TestScoring:

    def test_minimal_risk(self):
        result = score_assessment(answers())
        assert result.score == 0
        assert result.level == "low"
        assert result.wealth_at_risk == 25000
        assert result.recommendations == RECOMMENDATIONS["low"]

    def test_high_risk_profile(self):
        result = score_assessment(answers(
            profession="doctor",
            net_worth="1m_5m",
            legal_threats="active",
            has_real_estate=True,
            legal_history=["lawsuit"],
            current_protection=[],
        ))
        assert result.score == 14
        assert result.level == "high"
        assert result.wealth_at_risk == 1800000

    @pytest.mark.parametrize("overrides, score, level", [
        ({"profession": "business_owner"}, 3, "low"),
        ({"legal_threats": "potential", "has_real_estate": True}, 4, "medium"),
        ({"profession": "lawyer", "legal_threats": "active"}, 7, "medium"),
        ({"legal_history": ["bankruptcy"], "legal_threats": "potential", "current_protection": ["none"]}, 8, "high"),
    ])
    def test_level_boundaries(self, overrides, score, level):
        result = score_assessment(answers(**overrides))
        assert result.score == score
        assert result.level == level

    def test_lawsuit_and_divorce_count_once(self):
        assert score_assessment(answers(legal_history=["lawsuit", "divorce"])).score == 3

    def test_missing_protection_counts_as_unprotected(self):
        assert score_assessment(answers(current_protection=None)).score == 2

    def test_unknown_net_worth_uses_lowest_band(self):
        result = score_assessment(answers(net_worth="a lot", profession="doctor",
                                          legal_threats="active"))
        assert result.level == "medium"
        assert result.wealth_at_risk == 75000

    def test_to_dict_uses_camel_case(self):
        data = score_assessment(answers(net_worth="over_10m")).to_dict()
        assert set(data) == {"riskScore", "riskLevel", "wealthAtRisk", "recommendations"}
        assert data["wealthAtRisk"] == 1500000
