"""Tests for country API routes."""
from __future__ import annotations

import asyncio
import threading
import time
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from recession_monitor.api.routes_countries import get_store, init_roster_store
from recession_monitor.config import Settings
from recession_monitor.ingest.world_bank import ExternalData
from recession_monitor.main import app
from recession_monitor.models import RawSeriesPoint
from recession_monitor.roster.baseline import generate_baseline
from recession_monitor.roster.store import RosterStore

client = TestClient(app)


@pytest.fixture
def store():
    s = RosterStore(generate_baseline())
    init_roster_store(s)
    return s


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_list_countries_ranked(store):
    r = client.get("/v1/countries")
    assert r.status_code == 200
    items = r.json()
    assert len(items) == 50
    assert [i["rank"] for i in items] == list(range(1, 51))
    scores = [i["score"] for i in items]
    assert scores == sorted(scores, reverse=True)

    deu = next(i for i in items if i["iso3"] == "DEU")
    assert deu["score"] == 65
    assert deu["tier"] == "Recession"
    assert deu["geo_id"] == "276"
    assert deu["color"].startswith("rgb(")


def test_country_detail(store):
    r = client.get("/v1/country/gbr")
    assert r.status_code == 200
    body = r.json()
    assert body["iso3"] == "GBR"
    assert body["score"] == 30
    assert body["tier"] == "Warning"
    assert body["live"] is False
    assert len(body["breakdown"]) == 8
    assert sum(row["points"] for row in body["breakdown"]) == body["score"]


def test_country_detail_not_found(store):
    r = client.get("/v1/country/XXX")
    assert r.status_code == 404


def test_methodology():
    r = client.get("/v1/methodology")
    assert r.status_code == 200
    body = r.json()
    assert body["max_score"] == 100
    assert len(body["rules"]) == 8
    assert [t["label"] for t in body["tiers"]] == ["Recession", "Warning", "Expansion"]
    assert body["tiers"][1] == {"label": "Warning", "min": 30.0, "max": 60.0}


def test_methodology_rule():
    r = client.get("/v1/methodology/realGdpGrowth")
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == "realGdpGrowth"
    assert body["weight"] == 20
    assert [o["value"] for o in body["options"]] == ["strong", "slow", "negative"]
    assert [o["severity"] for o in body["options"]] == [0, 0.5, 1]


def test_methodology_rule_not_found():
    r = client.get("/v1/methodology/yieldCurve")
    assert r.status_code == 404


def test_status_reflects_live_flag(store):
    r = client.get("/v1/status")
    assert r.json()["is_live"] is False
    assert r.json()["version"] == 1

    store.publish(store.snapshot.countries, is_live=True, live_country_ids=["USA"])
    body = client.get("/v1/status").json()
    assert body["is_live"] is True
    assert body["version"] == 2
    assert body["live_countries"] == ["USA"]


def test_status_counts_stream_subscribers(store):
    assert client.get("/v1/status").json()["subscribers"] == 0

    async def hold_subscription():
        async with store.subscribe():
            return client.get("/v1/status").json()

    body = asyncio.run(hold_subscription())
    assert body["subscribers"] == 1
    assert client.get("/v1/status").json()["subscribers"] == 0


def test_refresh_conflict_when_running(store):
    store.refreshing = True
    r = client.post("/v1/refresh")
    assert r.status_code == 409


def test_refresh_schedules_background_task(store):
    with patch("recession_monitor.api.routes_countries.refresh_live_data", new_callable=AsyncMock) as mock_refresh:
        r = client.post("/v1/refresh")
    assert r.status_code == 202
    assert r.json() == {"ok": True, "version": 1}
    mock_refresh.assert_called_once_with(store)


# ---------------------------------------------------------------------------
# Startup: baseline first, then the live refresh
# ---------------------------------------------------------------------------

def _wait_for(condition, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return False


def _startup_settings(fetch_live: bool) -> Settings:
    return Settings(fetch_live_on_startup=fetch_live)


def test_startup_serves_baseline_while_fetch_is_pending():
    gate = threading.Event()

    async def blocked_fetch(*args, **kwargs):
        # The app loop runs in the TestClient's thread, so poll a thread-safe flag.
        while not gate.is_set():
            await asyncio.sleep(0.01)
        return ExternalData.empty()

    with patch("recession_monitor.main.get_settings", return_value=_startup_settings(True)), \
            patch("recession_monitor.jobs.refresh.fetch_external_data", side_effect=blocked_fetch):
        with TestClient(app) as c:
            assert _wait_for(lambda: c.get("/v1/status").json()["refreshing"])
            body = c.get("/v1/status").json()
            assert body["version"] == 1
            assert body["is_live"] is False
            assert len(c.get("/v1/countries").json()) == 50
        store = get_store()

    # Shutdown cancels the pending fetch and waits for it to unwind.
    assert store.refreshing is False
    assert store.snapshot.version == 1


def test_startup_publishes_live_snapshot():
    shock = ExternalData.empty()._replace(growth=[RawSeriesPoint("USA", "2024", -2.0)])

    with patch("recession_monitor.main.get_settings", return_value=_startup_settings(True)), \
            patch("recession_monitor.jobs.refresh.fetch_external_data", new_callable=AsyncMock) as mock_fetch:
        mock_fetch.return_value = shock
        with TestClient(app) as c:
            assert _wait_for(lambda: c.get("/v1/status").json()["version"] == 2)
            body = c.get("/v1/status").json()
            assert body["is_live"] is True
            assert body["live_countries"] == ["USA"]
            usa = c.get("/v1/country/USA").json()
            assert usa["indicators"]["realGdpGrowth"] == "negative"
            assert usa["live"] is True


def test_startup_without_live_fetch():
    with patch("recession_monitor.main.get_settings", return_value=_startup_settings(False)), \
            patch("recession_monitor.jobs.refresh.fetch_external_data", new_callable=AsyncMock) as mock_fetch:
        with TestClient(app) as c:
            body = c.get("/v1/status").json()
            assert body["version"] == 1
            assert body["refreshing"] is False
            assert body["is_live"] is False

    mock_fetch.assert_not_awaited()
