"""Deterministic recession-risk scoring engine.

The score is a plain weighted sum over the rule catalog and is recomputed
from the current indicator map on every call. Nothing here is cached.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping

from recession_monitor.models import CountryProfile
from recession_monitor.score.rules import SCORING_RULES, IndicatorRule
from recession_monitor.score.versions import (
    AMBER,
    COLOR_MIDPOINT,
    GREEN,
    RED,
    RISK_CALC_VERSION,
    TIER_BANDS,
)

RGB = tuple[int, int, int]


@dataclass(frozen=True)
class RiskStatus:
    label: str
    color: RGB

    @property
    def css(self) -> str:
        r, g, b = self.color
        return f"rgb({r}, {g}, {b})"


def calculate_risk_score(
    indicators: Mapping[str, str],
    rules: Iterable[IndicatorRule] = SCORING_RULES,
) -> float:
    """Sum severity * weight over the catalog.

    Rules with no recorded value, or a value that matches none of the rule's
    options, contribute 0. Keys that are not rule ids are ignored.
    """
    total = 0.0
    for rule in rules:
        option = rule.find_option(indicators.get(rule.id))
        if option is not None:
            total += option.severity * rule.weight
    return total


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def _lerp(start: RGB, end: RGB, t: float) -> RGB:
    return tuple(_round_half_up(a + (b - a) * t) for a, b in zip(start, end))  # type: ignore[return-value]


def interpolate_color(score: float) -> RGB:
    """Green -> amber over [0, 50], amber -> red over (50, 100].

    t is clamped to [0, 1], so out-of-range scores pin to the end colors.
    """
    if score <= COLOR_MIDPOINT:
        t = score / COLOR_MIDPOINT
        start, end = GREEN, AMBER
    else:
        t = (score - COLOR_MIDPOINT) / COLOR_MIDPOINT
        start, end = AMBER, RED
    return _lerp(start, end, min(max(t, 0.0), 1.0))


def classify(score: float) -> RiskStatus:
    """Map a score to its tier label and color. Boundaries go to the higher tier."""
    label = TIER_BANDS[-1][1]
    for lower_bound, tier in TIER_BANDS:
        if score >= lower_bound:
            label = tier
            break
    return RiskStatus(label=label, color=interpolate_color(score))


def score_breakdown(
    indicators: Mapping[str, str],
    rules: Iterable[IndicatorRule] = SCORING_RULES,
) -> list[dict]:
    """Per-rule contribution, in catalog order."""
    rows = []
    for rule in rules:
        value = indicators.get(rule.id)
        option = rule.find_option(value)
        severity = option.severity if option is not None else 0.0
        rows.append({
            "rule_id": rule.id,
            "label": rule.label,
            "weight": rule.weight,
            "value": option.value if option is not None else None,
            "value_label": option.label if option is not None else None,
            "severity": severity,
            "points": severity * rule.weight,
        })
    return rows


def describe_country(profile: CountryProfile) -> dict:
    """Score, tier and breakdown for one country."""
    score = calculate_risk_score(profile.indicators)
    status = classify(score)
    return {
        **profile.to_dict(),
        "score": score,
        "tier": status.label,
        "color": status.css,
        "breakdown": score_breakdown(profile.indicators),
        "calc_version": RISK_CALC_VERSION,
    }


def rank_countries(countries: Iterable[CountryProfile]) -> list[dict]:
    """Rank by score descending; ties keep roster order."""
    scored = [(calculate_risk_score(c.indicators), c) for c in countries]
    scored.sort(key=lambda pair: pair[0], reverse=True)

    items = []
    for rank, (score, country) in enumerate(scored, 1):
        status = classify(score)
        items.append({
            "rank": rank,
            "iso3": country.id,
            "geo_id": country.geo_id,
            "name": country.name,
            "gdp_rank": country.rank,
            "score": score,
            "tier": status.label,
            "color": status.css,
        })
    return items
