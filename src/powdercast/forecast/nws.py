"""NWS gridpoint snowfall, used as the external ground-truth signal.

Two requests per location:

- GET /points/{lat},{lon} -> grid metadata (``properties.forecastGridData``)
- GET the grid URL -> ``properties.snowfallAmount.values``

Grid values look like ``{"validTime": "2025-01-10T06:00:00+00:00/PT6H",
"value": 12.7}``. Each amount is attributed to the resort-local date of its
interval start.

The external source is optional: any failure is logged and an empty map is
returned so the forecast continues without a blend.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from powdercast.aggregate.stats import round2
from powdercast.config import NWS_URL
from powdercast.fetch.client import FetchClient, RetryPolicy, get_fetch_client
from powdercast.fetch.errors import FetchError, PayloadError
from powdercast.utils.dates import iso_date_in_timezone

logger = logging.getLogger(__name__)

NWS_HEADERS = {"Accept": "application/geo+json"}

# Grid metadata for a point never changes
POINTS_TTL_MS = 24 * 60 * 60 * 1000

# Unit of measure -> cm
UOM_TO_CM = {
    "wmoUnit:mm": 0.1,
    "wmoUnit:cm": 1.0,
    "wmoUnit:m": 100.0,
}


def _parse_interval_start(valid_time: str) -> Optional[datetime]:
    start = valid_time.split("/")[0]
    if start.endswith("Z"):
        start = start[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(start)
    except ValueError:
        return None


def parse_snowfall_amounts(grid: Any, tz_name: Optional[str] = None) -> dict[str, float]:
    """Daily snowfall totals (cm) from a gridpoint response.

    Args:
        grid: Decoded /gridpoints response
        tz_name: IANA timezone used to pick each value's date (UTC if None)

    Returns:
        Date -> snowfall (cm)

    Raises:
        PayloadError: If the response has no ``properties`` object or the
            snowfall layer is not an object
    """
    props = grid.get("properties") if isinstance(grid, dict) else None
    if not isinstance(props, dict):
        raise PayloadError("NWS gridpoints: missing properties", "NWS gridpoints")

    layer = props.get("snowfallAmount")
    if layer is None:
        return {}
    if not isinstance(layer, dict):
        raise PayloadError("NWS gridpoints: snowfallAmount is not an object", "NWS gridpoints")
    uom = layer.get("uom") or "wmoUnit:mm"
    factor = UOM_TO_CM.get(uom) if isinstance(uom, str) else None
    if factor is None:
        raise PayloadError(f"NWS gridpoints: unsupported snowfall unit {uom}", "NWS gridpoints")

    totals: dict[str, float] = {}
    for item in layer.get("values") or []:
        if not isinstance(item, dict):
            continue
        valid_time = item.get("validTime")
        value = item.get("value")
        if not isinstance(valid_time, str) or not valid_time:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            if value is not None:
                logger.debug(f"Skipping non-numeric snowfall value {value!r}")
            continue
        start = _parse_interval_start(valid_time)
        if start is None:
            logger.debug(f"Skipping unparsable validTime {valid_time!r}")
            continue
        day = iso_date_in_timezone(start, tz_name)
        totals[day] = totals.get(day, 0.0) + float(value) * factor

    return {day: round2(cm) for day, cm in totals.items()}


class NWSSnowSource:
    """Daily snowfall from the US National Weather Service.

    Args:
        client: Fetch client (the shared one by default)
        base_url: API root
    """

    def __init__(self, client: Optional[FetchClient] = None, base_url: str = NWS_URL):
        self.client = client or get_fetch_client()
        self.base_url = base_url.rstrip("/")

    async def daily_snowfall(
        self,
        lat: float,
        lon: float,
        tz_name: Optional[str] = None,
    ) -> dict[str, float]:
        """Date -> snowfall (cm) for a point; empty when unavailable."""
        try:
            return await self._fetch(lat, lon, tz_name)
        except FetchError as e:
            logger.warning(f"NWS snowfall unavailable for ({lat:.4f}, {lon:.4f}): {e}")
            return {}

    async def _fetch(self, lat: float, lon: float, tz_name: Optional[str]) -> dict[str, float]:
        points = await self.client.fetch_json(
            f"{self.base_url}/points/{lat:.4f},{lon:.4f}",
            headers=NWS_HEADERS,
            policy=RetryPolicy(label="NWS points", max_retries=3, cache_ttl_ms=POINTS_TTL_MS),
        )
        props = points.get("properties") if isinstance(points, dict) else None
        grid_url = props.get("forecastGridData") if isinstance(props, dict) else None
        if not grid_url:
            raise PayloadError("NWS points: missing forecastGridData", "NWS points")

        grid = await self.client.fetch_json(
            grid_url,
            headers=NWS_HEADERS,
            policy=RetryPolicy(label="NWS gridpoints", max_retries=3),
        )
        totals = parse_snowfall_amounts(grid, tz_name)
        logger.info(f"NWS snowfall for ({lat:.4f}, {lon:.4f}): {len(totals)} days")
        return totals
