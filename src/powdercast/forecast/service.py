"""Forecast orchestration: request, merge, recalculate, blend.

Flow for one elevation band::

    combined multi-model request
      -> split per model -> merge (median / mode / circular mean / mean)
      -> per-hour snow/rain recalculation at the band elevation
      -> daily roll-up -> optional blend with NWS snowfall

If the combined request fails, or no model returns usable data, the band falls
back to a single best-match request. This is the only place where a fetch
failure turns into a change of strategy; everywhere else errors propagate.

Example:
    >>> resort = get_resort("mammoth")
    >>> forecast = asyncio.run(fetch_resort_forecast(resort))
    >>> forecast.bands[ElevationBand.TOP].daily[0].snowfall_sum
"""

import asyncio
import logging
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Mapping, Optional, Sequence

from powdercast.aggregate.merge import concat_series, merge_daily, merge_hourly
from powdercast.config import (
    ARCHIVE_URL,
    BEST_MATCH_MODEL,
    DEFAULT_FORECAST_DAYS,
    DEFAULT_TIMEZONE,
    EXTERNAL_BLEND_WEIGHT,
    EXTERNAL_SOURCE_COUNTRIES,
    FORECAST_URL,
)
from powdercast.fetch.client import FetchClient, RetryPolicy, get_fetch_client
from powdercast.fetch.errors import FetchError, PayloadError
from powdercast.forecast.nws import NWSSnowSource
from powdercast.forecast.openmeteo import (
    build_archive_params,
    build_forecast_params,
    is_archive_payload,
    is_forecast_payload,
    is_multi_model_payload,
    map_daily,
    map_historical,
    map_hourly,
    models_for_country,
    split_multi_model,
)
from powdercast.models import (
    DAILY_FIELDS,
    HOURLY_FIELDS,
    BandForecast,
    ElevationBand,
    HistoricalSnowDay,
    RawSeries,
    Resort,
    ResortForecast,
)
from powdercast.recalc.blend import apply_blend

logger = logging.getLogger(__name__)


def _label(kind: str, band: Optional[ElevationBand]) -> str:
    return f"Open-Meteo {kind} ({band.value})" if band else f"Open-Meteo {kind}"


def build_band_forecast(
    band: ElevationBand,
    elevation: float,
    hourly: RawSeries,
    daily: Optional[RawSeries],
    models: Sequence[str],
) -> BandForecast:
    """Recalculate merged raw series into a band forecast."""
    hourly_metrics = map_hourly(hourly, elevation)
    daily_metrics = map_daily(daily, hourly_metrics) if daily is not None else []
    return BandForecast(
        band=band,
        elevation=elevation,
        hourly=hourly_metrics,
        daily=daily_metrics,
        models=list(models),
    )


def blend_band(
    forecast: BandForecast,
    external_days: Mapping[str, float],
    external_weight: float = EXTERNAL_BLEND_WEIGHT,
) -> BandForecast:
    """Band forecast with daily snowfall blended against an external source."""
    if not external_days or not any(d.date in external_days for d in forecast.daily):
        return forecast
    return replace(
        forecast,
        daily=apply_blend(forecast.daily, external_days, external_weight),
        blended=True,
    )


async def fetch_forecast(
    lat: float,
    lon: float,
    elevation: float,
    band: ElevationBand = ElevationBand.MID,
    forecast_days: int = DEFAULT_FORECAST_DAYS,
    past_days: int = 0,
    timezone_name: str = DEFAULT_TIMEZONE,
    client: Optional[FetchClient] = None,
) -> BandForecast:
    """Single-model (best match) forecast for one station elevation.

    Raises:
        FetchError: If the request fails or the response is malformed
    """
    client = client or get_fetch_client()
    label = _label("forecast", band)
    params = build_forecast_params(lat, lon, elevation, forecast_days, past_days, timezone_name)

    data = await client.fetch_json(FORECAST_URL, params=params, policy=RetryPolicy(label=label))
    if not is_forecast_payload(data):
        raise PayloadError(f"{label}: unexpected response shape", label)

    hourly = RawSeries.from_payload(data["hourly"], HOURLY_FIELDS)
    daily = RawSeries.from_payload(data["daily"], DAILY_FIELDS)
    return build_band_forecast(band, elevation, hourly, daily, [BEST_MATCH_MODEL])


async def _fetch_merged_window(
    client: FetchClient,
    params: dict,
    models: Sequence[str],
    label: str,
) -> Optional[tuple[RawSeries, Optional[RawSeries], list[str]]]:
    """Fetch one multi-model window and merge it; None when no model has data."""
    data = await client.fetch_json(FORECAST_URL, params=params, policy=RetryPolicy(label=label))
    if not is_multi_model_payload(data):
        raise PayloadError(f"{label}: unexpected response shape", label)

    hourly_models, daily_models, contributing = split_multi_model(data, models)
    if not hourly_models:
        return None
    hourly = merge_hourly(hourly_models)
    daily = merge_daily(daily_models) if daily_models else None
    return hourly, daily, contributing


async def fetch_multi_model_forecast(
    lat: float,
    lon: float,
    elevation: float,
    models: Sequence[str],
    band: ElevationBand = ElevationBand.MID,
    forecast_days: int = DEFAULT_FORECAST_DAYS,
    past_days: int = 0,
    timezone_name: str = DEFAULT_TIMEZONE,
    client: Optional[FetchClient] = None,
) -> BandForecast:
    """Multi-model consensus forecast, falling back to best match.

    With ``past_days > 0`` the past and future windows are fetched
    concurrently. A failed past window is dropped; the future window wins
    where both cover the same timestamp.

    Args:
        lat: Latitude
        lon: Longitude
        elevation: Station elevation (m)
        models: Open-Meteo model identifiers
        band: Elevation band tag for the result
        forecast_days: Days of forecast
        past_days: Days of recent past to include
        timezone_name: Timezone for timestamps ("auto" or IANA)
        client: Fetch client (the shared one by default)

    Returns:
        BandForecast; ``models`` is ``["best_match"]`` after a fallback
    """
    client = client or get_fetch_client()
    label = _label("multi-model", band)

    future_params = build_forecast_params(
        lat, lon, elevation, forecast_days, 0, timezone_name, models
    )
    requests = [_fetch_merged_window(client, future_params, models, label)]
    if past_days > 0:
        past_params = build_forecast_params(lat, lon, elevation, 0, past_days, timezone_name, models)
        requests.append(_fetch_merged_window(client, past_params, models, f"{label} past"))

    results = await asyncio.gather(*requests, return_exceptions=True)
    future = results[0]

    if isinstance(future, FetchError) or future is None:
        reason = future if future is not None else "no model returned usable data"
        logger.warning(f"{label} unavailable ({reason}); falling back to best match")
        return await fetch_forecast(
            lat, lon, elevation, band, forecast_days, past_days, timezone_name, client
        )
    if isinstance(future, BaseException):
        raise future

    hourly, daily, contributing = future

    if past_days > 0:
        past = results[1]
        if isinstance(past, FetchError):
            logger.warning(f"{label} past window dropped: {past}")
        elif isinstance(past, BaseException):
            raise past
        elif past is not None:
            past_hourly, past_daily, _ = past
            hourly = concat_series(past_hourly, hourly)
            if past_daily is not None:
                daily = concat_series(past_daily, daily) if daily is not None else past_daily

    logger.debug(f"{label}: merged {len(contributing)} models over {len(hourly)} hours")
    return build_band_forecast(band, elevation, hourly, daily, contributing)


async def fetch_band_forecast(
    resort: Resort,
    band: ElevationBand,
    forecast_days: int = DEFAULT_FORECAST_DAYS,
    past_days: int = 0,
    external_days: Optional[Mapping[str, float]] = None,
    client: Optional[FetchClient] = None,
) -> BandForecast:
    """Corrected forecast for one elevation band of a resort."""
    forecast = await fetch_multi_model_forecast(
        resort.lat,
        resort.lon,
        resort.elevation(band),
        models_for_country(resort.country),
        band=band,
        forecast_days=forecast_days,
        past_days=past_days,
        timezone_name=resort.timezone,
        client=client,
    )
    if external_days:
        forecast = blend_band(forecast, external_days)
    return forecast


async def fetch_resort_forecast(
    resort: Resort,
    forecast_days: int = DEFAULT_FORECAST_DAYS,
    past_days: int = 0,
    blend_external: bool = True,
    client: Optional[FetchClient] = None,
    external_source: Optional[NWSSnowSource] = None,
) -> ResortForecast:
    """Forecasts for every elevation band of a resort.

    Bands are fetched concurrently and fail independently: a failed band is
    recorded in ``errors`` while the others are still returned. For resorts
    covered by the external source, its snowfall is fetched alongside and
    blended into every band.
    """
    client = client or get_fetch_client()
    bands = list(ElevationBand)

    tasks = [
        fetch_band_forecast(resort, band, forecast_days, past_days, client=client)
        for band in bands
    ]
    use_external = blend_external and resort.country.upper() in EXTERNAL_SOURCE_COUNTRIES
    if use_external:
        source = external_source or NWSSnowSource(client)
        tasks.append(source.daily_snowfall(resort.lat, resort.lon, resort.timezone))

    results = await asyncio.gather(*tasks, return_exceptions=True)

    external_days: Mapping[str, float] = {}
    if use_external:
        external = results[len(bands)]
        if isinstance(external, Exception):
            logger.warning(f"{resort.name}: NWS snowfall discarded ({external!r}); skipping blend")
        elif isinstance(external, BaseException):
            raise external
        else:
            external_days = external

    forecast = ResortForecast(resort=resort, fetched_at=datetime.now(timezone.utc))
    for band, result in zip(bands, results):
        if isinstance(result, Exception):
            logger.error(f"{resort.name} {band.value} forecast failed: {result}")
            forecast.errors[band] = str(result) or type(result).__name__
        elif isinstance(result, BaseException):
            raise result
        else:
            forecast.bands[band] = blend_band(result, external_days)

    logger.info(
        f"{resort.name}: {len(forecast.bands)}/{len(bands)} bands"
        f"{', blended with NWS' if any(b.blended for b in forecast.bands.values()) else ''}"
    )
    return forecast


async def fetch_historical(
    lat: float,
    lon: float,
    elevation: float,
    start_date: str,
    end_date: str,
    timezone_name: str = DEFAULT_TIMEZONE,
    client: Optional[FetchClient] = None,
) -> list[HistoricalSnowDay]:
    """Archived daily snowfall for a point.

    Args:
        start_date: First date (YYYY-MM-DD)
        end_date: Last date (YYYY-MM-DD), inclusive

    Raises:
        ValueError: If the dates are malformed or out of order
        FetchError: If the request fails or the response is malformed
    """
    if date.fromisoformat(start_date) > date.fromisoformat(end_date):
        raise ValueError(f"start_date {start_date} is after end_date {end_date}")

    client = client or get_fetch_client()
    label = "Open-Meteo archive"
    params = build_archive_params(lat, lon, elevation, start_date, end_date, timezone_name)

    data = await client.fetch_json(ARCHIVE_URL, params=params, policy=RetryPolicy(label=label))
    if not is_archive_payload(data):
        raise PayloadError(f"{label}: unexpected response shape", label)
    return map_historical(data)
