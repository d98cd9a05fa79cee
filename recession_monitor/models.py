"""Core value types shared by the baseline, reconciliation and scoring code."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple


@dataclass(frozen=True)
class CountryProfile:
    """One roster entry with its categorical indicator readings.

    `indicators` maps rule id -> option value. It is copied on construction
    and exposed read-only, so a profile never shares state with the mapping
    it was built from. Updates produce a new profile via `dataclasses.replace`.
    """
    id: str  # ISO3
    geo_id: str  # M49 numeric code, join key into map geometry
    name: str
    rank: int  # GDP ranking
    indicators: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "indicators", MappingProxyType(dict(self.indicators)))

    def __hash__(self) -> int:
        return hash((self.id, self.geo_id, self.name, self.rank, frozenset(self.indicators.items())))

    def to_dict(self) -> dict:
        return {
            "iso3": self.id,
            "geo_id": self.geo_id,
            "name": self.name,
            "gdp_rank": self.rank,
            "indicators": dict(self.indicators),
        }


class RawSeriesPoint(NamedTuple):
    """A single provider observation: {countryiso3code, date, value}."""
    area_code: str
    period: str
    value: float | None
