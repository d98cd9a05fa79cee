"""Roster snapshot store: the single published view of all countries.

Each publish replaces the whole snapshot, so readers always see a complete
roster. Everything runs on one event loop; there is no locking.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from recession_monitor.models import CountryProfile

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass(frozen=True)
class RosterSnapshot:
    version: int
    countries: tuple[CountryProfile, ...]
    is_live: bool = False
    live_country_ids: frozenset[str] = frozenset()
    published_at: datetime = field(default_factory=_utcnow)

    def get(self, iso3: str) -> CountryProfile | None:
        iso3 = iso3.upper()
        for country in self.countries:
            if country.id == iso3:
                return country
        return None

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "is_live": self.is_live,
            "live_countries": sorted(self.live_country_ids),
            "published_at": self.published_at.isoformat(),
        }


class RosterStore:
    """Holds the current snapshot and fans new ones out to subscribers."""

    def __init__(self, baseline: Iterable[CountryProfile]) -> None:
        self._snapshot = RosterSnapshot(version=1, countries=tuple(baseline))
        self._subscribers: set[asyncio.Queue[RosterSnapshot]] = set()
        self.refreshing = False

    @property
    def snapshot(self) -> RosterSnapshot:
        return self._snapshot

    def publish(
        self,
        countries: Iterable[CountryProfile],
        *,
        is_live: bool,
        live_country_ids: Iterable[str] = (),
    ) -> RosterSnapshot:
        """Replace the current snapshot and notify subscribers."""
        snapshot = RosterSnapshot(
            version=self._snapshot.version + 1,
            countries=tuple(countries),
            is_live=is_live,
            live_country_ids=frozenset(live_country_ids),
        )
        self._snapshot = snapshot
        logger.info(
            "Published roster v%d (%d countries, live=%s, %d subscribers)",
            snapshot.version, len(snapshot.countries), snapshot.is_live, self.subscriber_count,
        )
        for q in self._subscribers:
            q.put_nowait(snapshot)
        return snapshot

    @asynccontextmanager
    async def subscribe(self) -> AsyncIterator[asyncio.Queue[RosterSnapshot]]:
        """Yield a queue that receives every snapshot published while subscribed."""
        q: asyncio.Queue[RosterSnapshot] = asyncio.Queue()
        self._subscribers.add(q)
        try:
            yield q
        finally:
            self._subscribers.discard(q)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
