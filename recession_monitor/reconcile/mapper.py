"""Map raw World Bank series onto categorical indicators and merge over the baseline.

Only rules with enough provider data get an update; anything else keeps
its baseline value. Trend rules need at least two observations and never
fall back to a single-point guess. `bankCreditGrowth` has no provider
measure and is never updated here.
"""
from __future__ import annotations

import dataclasses
from typing import Callable, Iterable, Mapping

from recession_monitor.ingest.world_bank import ExternalData
from recession_monitor.models import CountryProfile, RawSeriesPoint


def latest_series(points: Iterable[RawSeriesPoint], iso3: str) -> list[RawSeriesPoint]:
    """Points for one country with a value, most recent period first."""
    series = [p for p in points if p.area_code == iso3 and p.value is not None]
    series.sort(key=lambda p: int(p.period), reverse=True)
    return series


def _latest_value(points: Iterable[RawSeriesPoint], iso3: str) -> float | None:
    series = latest_series(points, iso3)
    return series[0].value if series else None


def classify_growth(value: float) -> str:
    if value > 1.5:
        return "strong"
    if value >= 0:
        return "slow"
    return "negative"


def classify_unemployment_trend(current: float, previous: float) -> str:
    delta = current - previous
    if delta <= 0:
        return "stable"
    if delta < 0.5:
        return "rising_slow"
    return "rising_fast"


def classify_inflation(current: float, previous: float) -> str:
    if current < previous and current < 4:
        return "stable"
    if current < 6:
        return "elevated"
    return "rising"


def classify_industry(value: float) -> str:
    if value > 2:
        return "growing"
    if value > -1:
        return "flat"
    return "contracting"


def classify_consumption(value: float) -> str:
    if value > 2:
        return "growing"
    if value > 0:
        return "flat"
    return "declining"


def classify_investment(value: float) -> str:
    if value > 2:
        return "rising"
    if value > -1:
        return "flat"
    return "declining"


def classify_manufacturing(value: float) -> str:
    if value > 1.5:
        return "high"
    if value > -0.5:
        return "flat"
    return "falling"


# measure -> (rule id, classifier on the latest value)
_LEVEL_RULES: dict[str, tuple[str, Callable[[float], str]]] = {
    "growth": ("realGdpGrowth", classify_growth),
    "industry": ("industrialProduction", classify_industry),
    "consumption": ("retailSales", classify_consumption),
    "investment": ("housingActivity", classify_investment),
    "manufacturing": ("capacityUtilization", classify_manufacturing),
}

# measure -> (rule id, classifier on (latest, previous))
_TREND_RULES: dict[str, tuple[str, Callable[[float, float], str]]] = {
    "unemployment": ("unemploymentRateTrend", classify_unemployment_trend),
    "inflation": ("inflation", classify_inflation),
}


def map_external_to_indicators(iso3: str, external: ExternalData) -> dict[str, str]:
    """Partial indicator update for one country from the raw provider series."""
    updates: dict[str, str] = {}

    for measure, (rule_id, classify_fn) in _LEVEL_RULES.items():
        value = _latest_value(getattr(external, measure), iso3)
        if value is not None:
            updates[rule_id] = classify_fn(value)

    for measure, (rule_id, classify_fn) in _TREND_RULES.items():
        series = latest_series(getattr(external, measure), iso3)
        if len(series) >= 2:
            updates[rule_id] = classify_fn(series[0].value, series[1].value)

    return updates


def merge_indicators(indicators: Mapping[str, str], update: Mapping[str, str]) -> dict[str, str]:
    """Overlay `update` on `indicators` without touching either. Idempotent."""
    return {**indicators, **update}


def apply_update(profile: CountryProfile, update: Mapping[str, str]) -> CountryProfile:
    if not update:
        return profile
    return dataclasses.replace(profile, indicators=merge_indicators(profile.indicators, update))


def reconcile_roster(
    countries: Iterable[CountryProfile],
    external: ExternalData,
) -> tuple[list[CountryProfile], frozenset[str]]:
    """Merge live readings into every country.

    Returns the new roster (same order, same countries) and the ids of the
    countries that received at least one live reading.
    """
    merged: list[CountryProfile] = []
    live_ids: set[str] = set()

    for country in countries:
        update = map_external_to_indicators(country.id, external)
        if update:
            live_ids.add(country.id)
        merged.append(apply_update(country, update))

    return merged, frozenset(live_ids)
