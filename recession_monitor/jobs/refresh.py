"""Live refresh: fetch World Bank data -> reconcile -> publish a new snapshot."""
from __future__ import annotations

import logging
from typing import Callable

import httpx

from recession_monitor.config import Settings
from recession_monitor.ingest.world_bank import fetch_external_data
from recession_monitor.reconcile.mapper import reconcile_roster
from recession_monitor.roster.store import RosterSnapshot, RosterStore

logger = logging.getLogger(__name__)


async def refresh_live_data(
    store: RosterStore,
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
    log_fn: Callable[[str], None] = logger.info,
) -> RosterSnapshot:
    """Run one fetch-and-merge pass against the current snapshot.

    Returns the snapshot that is current when the pass ends. If another
    refresh is already running, nothing is fetched.
    """
    if store.refreshing:
        log_fn("Refresh already running, skipping")
        return store.snapshot

    store.refreshing = True
    try:
        base = store.snapshot
        log_fn(f"Live refresh: {len(base.countries)} countries (roster v{base.version})")

        external = await fetch_external_data(base.countries, client=client, settings=settings)
        log_fn(f"Fetched {external.point_count()} raw points across {len(external)} measures")

        countries, live_ids = reconcile_roster(base.countries, external)
        if not live_ids:
            log_fn("No usable live data; keeping simulated baseline")
            return store.snapshot

        snapshot = store.publish(
            countries,
            is_live=True,
            live_country_ids=live_ids | base.live_country_ids,
        )
        log_fn(f"Live data merged for {len(live_ids)} countries (roster v{snapshot.version})")
        return snapshot
    except Exception:
        logger.exception("Live refresh failed; previous snapshot stays published")
        return store.snapshot
    finally:
        store.refreshing = False
