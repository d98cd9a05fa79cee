"""Tests for the recession-risk scoring engine."""
from __future__ import annotations

import pytest

from recession_monitor.models import CountryProfile
from recession_monitor.score.risk import (
    calculate_risk_score,
    classify,
    describe_country,
    interpolate_color,
    rank_countries,
    score_breakdown,
)
from recession_monitor.score.rules import SCORING_RULES


def _all_at(index: int) -> dict[str, str]:
    return {rule.id: rule.options[index].value for rule in SCORING_RULES}


# ---------------------------------------------------------------------------
# calculate_risk_score
# ---------------------------------------------------------------------------

class TestCalculateRiskScore:
    def test_best_middle_worst(self):
        assert calculate_risk_score(_all_at(0)) == 0
        assert calculate_risk_score(_all_at(1)) == 50
        assert calculate_risk_score(_all_at(2)) == 100

    def test_weighted_sum(self):
        indicators = _all_at(0)
        indicators["realGdpGrowth"] = "negative"  # 1 * 20
        indicators["retailSales"] = "flat"  # 0.5 * 15
        indicators["capacityUtilization"] = "falling"  # 1 * 5
        assert calculate_risk_score(indicators) == 32.5

    def test_missing_rules_contribute_zero(self):
        assert calculate_risk_score({}) == 0
        assert calculate_risk_score({"inflation": "rising"}) == 10

    def test_unknown_values_and_ids_ignored(self):
        indicators = {"inflation": "hyper", "notARule": "negative", "housingActivity": "declining"}
        assert calculate_risk_score(indicators) == 10

    def test_matches_severity_times_weight_for_every_rule(self):
        for rule in SCORING_RULES:
            for option in rule.options:
                score = calculate_risk_score({rule.id: option.value})
                assert score == option.severity * rule.weight
                assert 0 <= score <= 100

    def test_custom_catalog(self):
        rules = SCORING_RULES[:2]
        assert calculate_risk_score(_all_at(2), rules) == 35


# ---------------------------------------------------------------------------
# classify / interpolate_color
# ---------------------------------------------------------------------------

class TestClassify:
    @pytest.mark.parametrize("score,label", [
        (0, "Expansion"),
        (29.9, "Expansion"),
        (30, "Warning"),
        (59.9, "Warning"),
        (60, "Recession"),
        (100, "Recession"),
        (-5, "Expansion"),
        (130, "Recession"),
    ])
    def test_tiers(self, score, label):
        assert classify(score).label == label

    def test_color_stops_exact(self):
        assert classify(0).color == (16, 185, 129)
        assert classify(50).color == (245, 158, 11)
        assert classify(100).color == (239, 68, 68)

    def test_css(self):
        assert classify(0).css == "rgb(16, 185, 129)"

    def test_rounds_half_up(self):
        # 130.5, 171.5 and 39.5 round up, not to even.
        assert interpolate_color(25) == (131, 172, 70)
        assert interpolate_color(75) == (242, 113, 40)

    def test_out_of_range_is_clamped(self):
        assert interpolate_color(150) == (239, 68, 68)
        assert interpolate_color(-20) == (16, 185, 129)

    def test_green_channel_monotonic(self):
        greens = [interpolate_color(s)[1] for s in range(0, 101)]
        assert greens == sorted(greens, reverse=True)


# ---------------------------------------------------------------------------
# Breakdown and ranking
# ---------------------------------------------------------------------------

def _profile(iso3: str, indicators: dict[str, str], rank: int = 1) -> CountryProfile:
    return CountryProfile(id=iso3, geo_id="000", name=iso3.title(), rank=rank, indicators=indicators)


def test_score_breakdown_sums_to_score():
    indicators = _all_at(1)
    indicators["inflation"] = "bogus"
    rows = score_breakdown(indicators)
    assert len(rows) == 8
    assert sum(r["points"] for r in rows) == calculate_risk_score(indicators)
    inflation = next(r for r in rows if r["rule_id"] == "inflation")
    assert inflation["value"] is None
    assert inflation["points"] == 0


def test_describe_country():
    detail = describe_country(_profile("AAA", _all_at(2)))
    assert detail["score"] == 100
    assert detail["tier"] == "Recession"
    assert detail["color"] == "rgb(239, 68, 68)"
    assert detail["iso3"] == "AAA"


def test_rank_countries_descending_with_stable_ties():
    countries = [
        _profile("AAA", _all_at(0), rank=1),
        _profile("BBB", _all_at(2), rank=2),
        _profile("CCC", _all_at(0), rank=3),
    ]
    ranked = rank_countries(countries)
    assert [r["iso3"] for r in ranked] == ["BBB", "AAA", "CCC"]
    assert [r["rank"] for r in ranked] == [1, 2, 3]
    assert ranked[0]["tier"] == "Recession"
