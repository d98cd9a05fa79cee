"""World Bank Indicators API ingest."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, NamedTuple

import httpx

from recession_monitor.config import Settings, get_settings
from recession_monitor.models import CountryProfile, RawSeriesPoint

logger = logging.getLogger(__name__)

# Measure name -> World Bank indicator code, in ExternalData field order.
WB_INDICATORS: dict[str, str] = {
    "growth": "NY.GDP.MKTP.KD.ZG",
    "unemployment": "SL.UEM.TOTL.ZS",
    "inflation": "FP.CPI.TOTL.ZG",
    "industry": "NV.IND.TOTL.KD.ZG",  # industrial production proxy
    "consumption": "NE.CON.PRVT.KD.ZG",  # retail sales proxy
    "investment": "NE.GDI.FTOT.KD.ZG",  # housing proxy (gross fixed capital formation)
    "manufacturing": "NV.IND.MANF.KD.ZG",  # capacity utilization proxy
}


class ExternalData(NamedTuple):
    growth: list[RawSeriesPoint]
    unemployment: list[RawSeriesPoint]
    inflation: list[RawSeriesPoint]
    industry: list[RawSeriesPoint]
    consumption: list[RawSeriesPoint]
    investment: list[RawSeriesPoint]
    manufacturing: list[RawSeriesPoint]

    @classmethod
    def empty(cls) -> ExternalData:
        return cls(*([] for _ in cls._fields))

    def point_count(self) -> int:
        return sum(len(series) for series in self)


async def fetch_world_bank_indicator(
    client: httpx.AsyncClient,
    iso3_codes: list[str],
    indicator: str,
    settings: Settings,
) -> list[RawSeriesPoint]:
    """Fetch one indicator for many countries in a single request.

    Raises httpx.HTTPError on transport/status failures and ValueError,
    KeyError or TypeError on malformed payloads.
    """
    url = f"{settings.world_bank_base_url}/{';'.join(iso3_codes)}/indicator/{indicator}"
    params = {
        "source": str(settings.world_bank_source),
        "date": f"{settings.world_bank_start_year}:{settings.world_bank_end_year}",
        "format": "json",
        "per_page": str(settings.world_bank_per_page),
    }
    resp = await client.get(url, params=params, timeout=settings.world_bank_timeout)
    resp.raise_for_status()
    data = resp.json()

    # World Bank returns [metadata, data_array]
    if not isinstance(data, list) or len(data) < 2 or data[1] is None:
        return []

    points = []
    for item in data[1]:
        value = item["value"]
        points.append(RawSeriesPoint(
            area_code=item["countryiso3code"],
            period=str(int(item["date"])),  # annual series only
            value=float(value) if value is not None else None,
        ))
    return points


async def _fetch_measure(
    client: httpx.AsyncClient,
    iso3_codes: list[str],
    measure: str,
    settings: Settings,
) -> list[RawSeriesPoint]:
    indicator = WB_INDICATORS[measure]
    try:
        points = await fetch_world_bank_indicator(client, iso3_codes, indicator, settings)
    except Exception as e:
        logger.warning("Failed to fetch %s (%s): %s", measure, indicator, e)
        return []
    logger.info("World Bank %s (%s): %d points", measure, indicator, len(points))
    return points


async def fetch_external_data(
    countries: Iterable[CountryProfile],
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
) -> ExternalData:
    """Fetch all 7 measures concurrently for the roster.

    Never raises: a failed measure comes back as an empty list.
    """
    settings = settings or get_settings()
    iso3_codes = [c.id for c in countries]
    if not iso3_codes:
        return ExternalData.empty()

    async def _gather(c: httpx.AsyncClient) -> ExternalData:
        results = await asyncio.gather(*(
            _fetch_measure(c, iso3_codes, measure, settings)
            for measure in ExternalData._fields
        ))
        return ExternalData(*results)

    if client is not None:
        return await _gather(client)
    async with httpx.AsyncClient() as owned_client:
        return await _gather(owned_client)
