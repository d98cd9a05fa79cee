"""Deterministic simulated baseline for the country roster.

Every (country, rule) pair gets an option chosen from a seeded 32-bit
string hash, so the same roster and catalog always produce the same
indicator maps. A few major economies carry hand-written overrides on top
of the generic draw.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping

from recession_monitor.models import CountryProfile
from recession_monitor.score.rules import SCORING_RULES, IndicatorRule

_ROSTER_PATH = Path(__file__).resolve().parent / "countries_top50_v1.json"

# r must exceed each threshold to move one option further down the list.
DEFAULT_THRESHOLDS = (0.5, 0.85)


@dataclass(frozen=True)
class NarrativeOverride:
    """Hand-crafted scenario for one country.

    `forced` pins option indices per rule id. Rules not in `forced` take
    `fallback` when set, otherwise a draw against `thresholds` when set,
    otherwise keep the generic draw.
    """
    forced: Mapping[str, int] = field(default_factory=dict)
    fallback: int | None = None
    thresholds: tuple[float, ...] | None = None

    def resolve(self, rule_id: str, r: float, generic_index: int) -> int:
        if rule_id in self.forced:
            return self.forced[rule_id]
        if self.fallback is not None:
            return self.fallback
        if self.thresholds is not None:
            return sum(1 for t in self.thresholds if r > t)
        return generic_index


NARRATIVE_OVERRIDES: dict[str, NarrativeOverride] = {
    # Strong growth with sticky inflation; otherwise a stricter draw.
    "USA": NarrativeOverride(
        forced={"realGdpGrowth": 0, "inflation": 1},
        thresholds=(0.7,),
    ),
    # Industrial recession.
    "DEU": NarrativeOverride(
        forced={"realGdpGrowth": 2, "industrialProduction": 2},
        fallback=1,
    ),
    # Broad expansion, inflation somewhat elevated.
    "IND": NarrativeOverride(
        forced={"inflation": 1},
        fallback=0,
    ),
}


def load_roster(path: Path = _ROSTER_PATH) -> list[dict]:
    """Load the bundled country roster (iso3, geo_id, name, gdp_rank)."""
    return json.loads(path.read_text())["countries"]


def seed_hash(seed: str) -> int:
    """32-bit signed `hash * 31 + code` string hash with two's-complement wraparound."""
    h = 0
    for ch in seed:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def seed_fraction(country_id: str, rule_id: str) -> float:
    """Uniform-ish value in [0, 1) derived from country id + rule id."""
    return (abs(seed_hash(country_id + rule_id)) % 100) / 100


def draw_option_index(
    r: float,
    n_options: int,
    thresholds: tuple[float, ...] = DEFAULT_THRESHOLDS,
) -> int:
    index = sum(1 for t in thresholds if r > t)
    return clamp_index(index, n_options)


def clamp_index(index: int, n_options: int) -> int:
    return max(0, min(index, n_options - 1))


def baseline_indicators(
    country_id: str,
    rules: Iterable[IndicatorRule] = SCORING_RULES,
    overrides: Mapping[str, NarrativeOverride] = NARRATIVE_OVERRIDES,
) -> dict[str, str]:
    indicators: dict[str, str] = {}
    override = overrides.get(country_id)

    for rule in rules:
        n = len(rule.options)
        r = seed_fraction(country_id, rule.id)
        index = draw_option_index(r, n)
        if override is not None:
            index = clamp_index(override.resolve(rule.id, r, index), n)
        indicators[rule.id] = rule.options[index].value

    return indicators


def generate_baseline(
    roster: Iterable[Mapping] | None = None,
    rules: Iterable[IndicatorRule] = SCORING_RULES,
    overrides: Mapping[str, NarrativeOverride] = NARRATIVE_OVERRIDES,
) -> list[CountryProfile]:
    """Build one CountryProfile per roster entry with every rule populated.

    Pure: no RNG, no clock. Defaults to the bundled 50-country roster.
    """
    if roster is None:
        roster = load_roster()
    rules = tuple(rules)

    return [
        CountryProfile(
            id=entry["iso3"],
            geo_id=entry["geo_id"],
            name=entry["name"],
            rank=entry["gdp_rank"],
            indicators=baseline_indicators(entry["iso3"], rules, overrides),
        )
        for entry in roster
    ]
