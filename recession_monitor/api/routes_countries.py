"""Country, methodology and refresh endpoints."""
from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, HTTPException

from recession_monitor.jobs.refresh import refresh_live_data
from recession_monitor.roster.store import RosterStore
from recession_monitor.score.risk import describe_country, rank_countries
from recession_monitor.score.rules import SCORING_RULES, get_rule, max_score
from recession_monitor.score.versions import RISK_CALC_VERSION, TIER_BANDS

router = APIRouter(prefix="/v1", tags=["countries"])

# Set during app startup (see main.py lifespan).
_store: RosterStore | None = None


def init_roster_store(store: RosterStore) -> None:
    global _store
    _store = store


def get_store() -> RosterStore:
    if _store is None:
        raise HTTPException(status_code=503, detail="Roster not initialised")
    return _store


@router.get("/countries")
async def list_countries():
    """Return all countries ranked by recession-risk score, highest first."""
    return rank_countries(get_store().snapshot.countries)


@router.get("/country/{iso3}")
async def country_detail(iso3: str):
    """Return one country's indicators, score, tier and per-rule breakdown."""
    snapshot = get_store().snapshot
    country = snapshot.get(iso3)
    if country is None:
        raise HTTPException(status_code=404, detail=f"Country '{iso3}' not found")

    detail = describe_country(country)
    detail["live"] = country.id in snapshot.live_country_ids
    return detail


@router.get("/methodology")
async def methodology():
    """Return the rule catalog and tier bands."""
    bands = []
    upper = max_score()
    for lower, label in TIER_BANDS:
        bands.append({"label": label, "min": lower, "max": upper})
        upper = lower
    return {
        "calc_version": RISK_CALC_VERSION,
        "max_score": max_score(),
        "rules": [rule.to_dict() for rule in SCORING_RULES],
        "tiers": bands,
    }


@router.get("/methodology/{rule_id}")
async def methodology_rule(rule_id: str):
    """Return one rule with its options and severities."""
    rule = get_rule(rule_id)
    if rule is None:
        raise HTTPException(status_code=404, detail=f"Rule '{rule_id}' not found")
    return rule.to_dict()


@router.get("/status")
async def status():
    """Live vs simulated data status of the current roster snapshot."""
    store = get_store()
    return {
        **store.snapshot.to_dict(),
        "refreshing": store.refreshing,
        "subscribers": store.subscriber_count,
        "calc_version": RISK_CALC_VERSION,
    }


@router.post("/refresh", status_code=202)
async def refresh(background_tasks: BackgroundTasks):
    """Schedule a live World Bank refresh."""
    store = get_store()
    if store.refreshing:
        raise HTTPException(status_code=409, detail="A refresh is already running")
    background_tasks.add_task(refresh_live_data, store)
    return {"ok": True, "version": store.snapshot.version}
