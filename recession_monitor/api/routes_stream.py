"""SSE channel announcing new roster snapshots."""
from __future__ import annotations

import asyncio
import json

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse

from recession_monitor.api.routes_countries import get_store
from recession_monitor.roster.store import RosterSnapshot, RosterStore

router = APIRouter(prefix="/v1", tags=["stream"])

_PING_SECONDS = 15.0


def _snapshot_event(snapshot: RosterSnapshot) -> dict:
    return {"event": "snapshot", "data": json.dumps(snapshot.to_dict())}


async def snapshot_events(store: RosterStore, ping_seconds: float = _PING_SECONDS):
    """Current snapshot first, then one event per publish, with keepalive pings."""
    async with store.subscribe() as updates:
        yield _snapshot_event(store.snapshot)
        while True:
            try:
                snapshot = await asyncio.wait_for(updates.get(), timeout=ping_seconds)
            except asyncio.TimeoutError:
                # Keepalive to prevent proxy/browser timeout.
                yield {"event": "ping", "data": ""}
                continue
            yield _snapshot_event(snapshot)


@router.get("/stream")
async def stream_snapshots():
    return EventSourceResponse(snapshot_events(get_store()))
