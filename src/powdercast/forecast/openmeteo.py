"""Open-Meteo request building, payload checks and response mapping.

Multi-model requests return every variable suffixed with the model name
(``temperature_2m_gfs_seamless``). ``split_multi_model`` treats each suffix as
an explicit (field, model) pair over the enumerated field lists rather than
probing keys dynamically.
"""

import logging
from typing import Any, Optional, Sequence

from powdercast.aggregate.stats import round2
from powdercast.config import BASELINE_MODELS, REGIONAL_MODELS
from powdercast.models import (
    ARCHIVE_DAILY_FIELDS,
    DAILY_FIELDS,
    HOURLY_FIELDS,
    OPTIONAL_HOURLY_FIELDS,
    DailyMetric,
    HistoricalSnowDay,
    HourlyMetric,
    RawSeries,
)
from powdercast.recalc.rollup import group_by_date, recalc_daily_from_hourly
from powdercast.recalc.snow import HourlyInputs, recalc_hourly

logger = logging.getLogger(__name__)

REQUIRED_HOURLY_FIELDS = [f for f in HOURLY_FIELDS if f not in OPTIONAL_HOURLY_FIELDS]
REQUIRED_ARCHIVE_FIELDS = ["snowfall_sum", "temperature_2m_max", "temperature_2m_min"]


def models_for_country(country: str) -> list[str]:
    """Models to request for a resort in ``country`` (ISO 3166 alpha-2).

    Every region gets the global GFS + ECMWF pair; some countries add a
    regional high-resolution model.
    """
    models = list(BASELINE_MODELS)
    regional = REGIONAL_MODELS.get(country.upper())
    if regional and regional not in models:
        models.append(regional)
    return models


def build_forecast_params(
    lat: float,
    lon: float,
    elevation: float,
    forecast_days: int,
    past_days: int = 0,
    timezone: str = "auto",
    models: Optional[Sequence[str]] = None,
) -> dict[str, Any]:
    """Query parameters for a forecast request."""
    params: dict[str, Any] = {
        "latitude": lat,
        "longitude": lon,
        "elevation": elevation,
        "hourly": ",".join(HOURLY_FIELDS),
        "daily": ",".join(DAILY_FIELDS),
        "timezone": timezone,
        "forecast_days": forecast_days,
    }
    if past_days > 0:
        params["past_days"] = past_days
    if models:
        params["models"] = ",".join(models)
    return params


def build_archive_params(
    lat: float,
    lon: float,
    elevation: float,
    start_date: str,
    end_date: str,
    timezone: str = "auto",
) -> dict[str, Any]:
    """Query parameters for an archive request."""
    return {
        "latitude": lat,
        "longitude": lon,
        "elevation": elevation,
        "start_date": start_date,
        "end_date": end_date,
        "daily": ",".join(ARCHIVE_DAILY_FIELDS),
        "timezone": timezone,
    }


# ---------------------------------------------------------------------------
# Payload shape checks
# ---------------------------------------------------------------------------

def _time_axis(section: Any) -> Optional[int]:
    """Length of a section's ``time`` array, or None if it is not a valid section."""
    if not isinstance(section, dict):
        return None
    time = section.get("time")
    if not isinstance(time, list):
        return None
    if not all(isinstance(t, str) for t in time):
        return None
    return len(time)


def _is_value(v: Any) -> bool:
    return v is None or (isinstance(v, (int, float)) and not isinstance(v, bool))


def _values_numeric(section: dict) -> bool:
    """Every array besides ``time`` holds only numbers and nulls."""
    return all(
        all(_is_value(v) for v in arr)
        for key, arr in section.items()
        if key != "time" and isinstance(arr, list)
    )


def _has_arrays(section: dict, keys: Sequence[str], length: int) -> bool:
    for key in keys:
        arr = section.get(key)
        if not isinstance(arr, list) or len(arr) != length:
            return False
    return True


def _optional_arrays_ok(section: dict, keys: Sequence[str], length: int) -> bool:
    return all(
        isinstance(section[key], list) and len(section[key]) == length
        for key in keys
        if key in section
    )


def is_forecast_payload(data: Any) -> bool:
    """True if ``data`` is a complete single-model forecast response."""
    if not isinstance(data, dict) or data.get("error"):
        return False
    hourly, daily = data.get("hourly"), data.get("daily")
    n_hours, n_days = _time_axis(hourly), _time_axis(daily)
    if n_hours is None or n_days is None:
        return False
    return (
        _has_arrays(hourly, REQUIRED_HOURLY_FIELDS, n_hours)
        and _optional_arrays_ok(hourly, OPTIONAL_HOURLY_FIELDS, n_hours)
        and _has_arrays(daily, DAILY_FIELDS, n_days)
        and _values_numeric(hourly)
        and _values_numeric(daily)
    )


def is_multi_model_payload(data: Any) -> bool:
    """True if ``data`` has the section layout of a multi-model response.

    Every array in a section must be as long as that section's ``time`` axis
    and hold only numbers or nulls. The daily section is optional.
    """
    if not isinstance(data, dict) or data.get("error"):
        return False
    n_hours = _time_axis(data.get("hourly"))
    if n_hours is None:
        return False
    sections = [(data["hourly"], n_hours)]
    if "daily" in data:
        n_days = _time_axis(data["daily"])
        if n_days is None:
            return False
        sections.append((data["daily"], n_days))
    for section, length in sections:
        for key, arr in section.items():
            if isinstance(arr, list) and len(arr) != length:
                return False
        if not _values_numeric(section):
            return False
    return True


def is_archive_payload(data: Any) -> bool:
    """True if ``data`` is a complete archive (historical) response."""
    if not isinstance(data, dict) or data.get("error"):
        return False
    daily = data.get("daily")
    n_days = _time_axis(daily)
    if n_days is None:
        return False
    return (
        _has_arrays(daily, REQUIRED_ARCHIVE_FIELDS, n_days)
        and _optional_arrays_ok(daily, ["snow_depth_max"], n_days)
        and _values_numeric(daily)
    )


# ---------------------------------------------------------------------------
# Multi-model split
# ---------------------------------------------------------------------------

def _usable(arr: Any) -> bool:
    return isinstance(arr, list) and any(v is not None for v in arr)


def _model_series(section: dict, fields: Sequence[str], model: str, plain: bool) -> Optional[RawSeries]:
    values = {}
    for field in fields:
        key = field if plain else f"{field}_{model}"
        arr = section.get(key)
        if _usable(arr):
            values[field] = list(arr)
    if not values:
        return None
    return RawSeries(time=list(section["time"]), values=values)


def split_multi_model(
    data: dict,
    models: Sequence[str],
) -> tuple[list[RawSeries], list[RawSeries], list[str]]:
    """Split a multi-model response into per-model series.

    A model with no usable (non-null) field in a section is left out of that
    section. With a single requested model, unsuffixed keys are accepted too.

    Returns:
        Tuple of (hourly series, daily series, models with usable hourly data)
    """
    hourly_models: list[RawSeries] = []
    daily_models: list[RawSeries] = []
    contributing: list[str] = []
    plain_allowed = len(models) == 1

    hourly = data.get("hourly") or {}
    daily = data.get("daily") or {}

    for model in models:
        if _time_axis(hourly) is not None:
            series = _model_series(hourly, HOURLY_FIELDS, model, plain=False)
            if series is None and plain_allowed:
                series = _model_series(hourly, HOURLY_FIELDS, model, plain=True)
            if series is not None:
                hourly_models.append(series)
                contributing.append(model)
            else:
                logger.info(f"Model {model} returned no usable hourly data")

        if _time_axis(daily) is not None:
            series = _model_series(daily, DAILY_FIELDS, model, plain=False)
            if series is None and plain_allowed:
                series = _model_series(daily, DAILY_FIELDS, model, plain=True)
            if series is not None:
                daily_models.append(series)

    return hourly_models, daily_models, contributing


# ---------------------------------------------------------------------------
# Mapping to corrected metrics
# ---------------------------------------------------------------------------

def _number(series: RawSeries, name: str, i: int, default: float = 0.0) -> float:
    value = series.get(name, i)
    return default if value is None else float(value)


def map_hourly(raw: RawSeries, elevation: float) -> list[HourlyMetric]:
    """Corrected hourly metrics for a station at ``elevation``.

    Snowfall and rain are recalculated; the provider's own split is only an
    input.
    """
    metrics = []
    for i, t in enumerate(raw.time):
        split = recalc_hourly(
            HourlyInputs(
                precipitation=raw.get("precipitation", i),
                rain=raw.get("rain", i),
                snowfall=raw.get("snowfall", i),
                temperature=raw.get("temperature_2m", i),
                freezing_level_height=raw.get("freezing_level_height", i),
                relative_humidity=raw.get("relative_humidity_2m", i),
                wind_speed=raw.get("wind_speed_10m", i),
            ),
            elevation,
        )
        temperature = _number(raw, "temperature_2m", i)
        metrics.append(
            HourlyMetric(
                time=t,
                temperature=temperature,
                apparent_temperature=_number(raw, "apparent_temperature", i, temperature),
                relative_humidity=_number(raw, "relative_humidity_2m", i),
                precipitation=split.precipitation,
                rain=split.rain,
                snowfall=split.snowfall,
                precipitation_probability=_number(raw, "precipitation_probability", i),
                weather_code=int(_number(raw, "weather_code", i)),
                wind_speed=_number(raw, "wind_speed_10m", i),
                wind_direction=_number(raw, "wind_direction_10m", i),
                wind_gusts=_number(raw, "wind_gusts_10m", i),
                freezing_level_height=raw.get("freezing_level_height", i),
                snow_depth=raw.get("snow_depth", i),
            )
        )
    return metrics


def map_daily(raw: RawSeries, hourly: Sequence[HourlyMetric]) -> list[DailyMetric]:
    """Daily metrics with snow/rain sums re-derived from corrected hours.

    The provider's ``snowfall_sum`` and ``rain_sum`` used the uncorrected
    ratio and are ignored. ``precipitation_sum`` is the total of the same
    hours, so it always equals rain plus snow liquid; a day with no hourly
    coverage keeps the provider total.
    """
    by_date = group_by_date(hourly)
    metrics = []
    for i, day in enumerate(raw.time):
        hours = by_date.get(day, [])
        snowfall_sum, rain_sum = recalc_daily_from_hourly(
            [h.snowfall for h in hours], [h.rain for h in hours]
        )
        if hours:
            precipitation_sum = round2(sum(h.precipitation for h in hours))
        else:
            precipitation_sum = _number(raw, "precipitation_sum", i)
        temperature_max = _number(raw, "temperature_2m_max", i)
        temperature_min = _number(raw, "temperature_2m_min", i, temperature_max)
        metrics.append(
            DailyMetric(
                date=day,
                weather_code=int(_number(raw, "weather_code", i)),
                temperature_max=temperature_max,
                temperature_min=temperature_min,
                apparent_temperature_max=_number(raw, "apparent_temperature_max", i, temperature_max),
                apparent_temperature_min=_number(raw, "apparent_temperature_min", i, temperature_min),
                uv_index_max=_number(raw, "uv_index_max", i),
                precipitation_sum=precipitation_sum,
                rain_sum=rain_sum,
                snowfall_sum=snowfall_sum,
                precipitation_probability_max=_number(raw, "precipitation_probability_max", i),
                wind_speed_max=_number(raw, "wind_speed_10m_max", i),
                wind_gusts_max=_number(raw, "wind_gusts_10m_max", i),
            )
        )
    return metrics


def map_historical(data: dict) -> list[HistoricalSnowDay]:
    """Historical snow days from an archive response."""
    daily = RawSeries.from_payload(data["daily"], ARCHIVE_DAILY_FIELDS)
    return [
        HistoricalSnowDay(
            date=day,
            snowfall=round2(_number(daily, "snowfall_sum", i)),
            snow_depth=round2(_number(daily, "snow_depth_max", i)),
            temperature_max=daily.get("temperature_2m_max", i),
            temperature_min=daily.get("temperature_2m_min", i),
        )
        for i, day in enumerate(daily.time)
    ]
