"""Indicator rule catalog: the weighted, categorical recession-risk model.

Each rule lists its options best-first. Rule ids are the join key used by
the baseline generator, the reconciliation mapper and any stored country
data, so renaming one is a breaking change.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

SEVERITIES = (0.0, 0.5, 1.0)


@dataclass(frozen=True)
class RuleOption:
    value: str
    label: str
    severity: float


@dataclass(frozen=True)
class IndicatorRule:
    id: str
    label: str
    weight: float
    options: tuple[RuleOption, ...]

    def find_option(self, value: str | None) -> RuleOption | None:
        for option in self.options:
            if option.value == value:
                return option
        return None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "weight": self.weight,
            "options": [
                {"value": o.value, "label": o.label, "severity": o.severity}
                for o in self.options
            ],
        }


def validate_catalog(rules: Iterable[IndicatorRule]) -> tuple[IndicatorRule, ...]:
    """Check catalog invariants and return the rules as a tuple.

    Raises ValueError on duplicate rule ids, empty option lists, duplicate
    option values, severities outside {0, 0.5, 1}, or a rule that does not
    span the full 0..1 severity range.
    """
    rules = tuple(rules)
    seen_ids: set[str] = set()
    for rule in rules:
        if rule.id in seen_ids:
            raise ValueError(f"Duplicate rule id: {rule.id}")
        seen_ids.add(rule.id)

        if not rule.options:
            raise ValueError(f"Rule {rule.id} has no options")
        values = [o.value for o in rule.options]
        if len(set(values)) != len(values):
            raise ValueError(f"Rule {rule.id} has duplicate option values")
        severities = {o.severity for o in rule.options}
        if not severities <= set(SEVERITIES):
            raise ValueError(f"Rule {rule.id} has a severity outside {SEVERITIES}")
        if 0.0 not in severities or 1.0 not in severities:
            raise ValueError(f"Rule {rule.id} must include severity 0 and severity 1 options")
        if rule.weight < 0:
            raise ValueError(f"Rule {rule.id} has a negative weight")
    return rules


def _rule(rule_id: str, label: str, weight: float, *options: tuple[str, str]) -> IndicatorRule:
    return IndicatorRule(
        id=rule_id,
        label=label,
        weight=weight,
        options=tuple(
            RuleOption(value=value, label=opt_label, severity=severity)
            for (value, opt_label), severity in zip(options, SEVERITIES)
        ),
    )


SCORING_RULES: tuple[IndicatorRule, ...] = validate_catalog([
    _rule(
        "realGdpGrowth", "Real GDP Growth", 20,
        ("strong", "YoY > 1%"),
        ("slow", "0-1% or 1 negative quarter"),
        ("negative", "2 consecutive negative quarters"),
    ),
    _rule(
        "unemploymentRateTrend", "Unemployment Rate Trend", 15,
        ("stable", "Stable / falling"),
        ("rising_slow", "Rising < 0.5%"),
        ("rising_fast", "Rising >= 0.5% (3-6 months)"),
    ),
    _rule(
        "industrialProduction", "Industrial Production", 10,
        ("growing", "Growing"),
        ("flat", "Flat"),
        ("contracting", "Contracting"),
    ),
    _rule(
        "retailSales", "Real Retail Sales", 15,
        ("growing", "Growing"),
        ("flat", "Flat"),
        ("declining", "Declining"),
    ),
    _rule(
        "inflation", "Inflation Pressure (CPI Momentum)", 10,
        ("stable", "Inflation falling / stable"),
        ("elevated", "Elevated but stable"),
        ("rising", "Rising sharply"),
    ),
    _rule(
        "capacityUtilization", "Capacity Utilization", 5,
        ("high", "High / rising"),
        ("flat", "Flat"),
        ("falling", "Falling"),
    ),
    _rule(
        "bankCreditGrowth", "Bank Credit Growth", 15,
        ("expanding", "Expanding"),
        ("slowing", "Slowing"),
        ("contracting", "Contracting"),
    ),
    _rule(
        "housingActivity", "Housing Activity", 10,
        ("rising", "Rising"),
        ("flat", "Flat"),
        ("declining", "Declining"),
    ),
])

_RULES_BY_ID = {rule.id: rule for rule in SCORING_RULES}


def get_rule(rule_id: str) -> IndicatorRule | None:
    return _RULES_BY_ID.get(rule_id)


def max_score(rules: Iterable[IndicatorRule] = SCORING_RULES) -> float:
    """Highest reachable score: every rule at its most severe option."""
    return sum(rule.weight * max(o.severity for o in rule.options) for rule in rules)
