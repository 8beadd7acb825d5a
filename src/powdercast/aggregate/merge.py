"""Multi-model consensus of raw forecast series.

Given N raw series (one per weather model), builds one series over the sorted
union of their timestamps. Each field is merged independently from the models
that reported a non-null value for it:

- precipitation-like fields: median (resists a single outlier model)
- weather code: mode
- wind direction: circular mean
- everything else: arithmetic mean

Short-range models contribute where they have coverage and longer-range models
cover the rest.
"""

import logging
from typing import Callable, Optional, Sequence

import numpy as np
import pandas as pd

from powdercast.aggregate.stats import circular_mean, mean, median, mode, round2
from powdercast.models import DAILY_FIELDS, HOURLY_FIELDS, OPTIONAL_HOURLY_FIELDS, RawSeries

logger = logging.getLogger(__name__)

HOURLY_PRIMARY = "temperature_2m"
DAILY_PRIMARY = "temperature_2m_max"

MEDIAN_FIELDS = {
    "precipitation",
    "rain",
    "snowfall",
    "precipitation_sum",
    "rain_sum",
    "snowfall_sum",
}
MODE_FIELDS = {"weather_code"}
CIRCULAR_FIELDS = {"wind_direction_10m"}
INTEGER_FIELDS = {"weather_code"}

# Missing secondary field -> field it falls back to (applied in order)
HOURLY_FALLBACKS = {
    "apparent_temperature": "temperature_2m",
}
DAILY_FALLBACKS = {
    "temperature_2m_min": "temperature_2m_max",
    "apparent_temperature_max": "temperature_2m_max",
    "apparent_temperature_min": "temperature_2m_min",
}


def merge_rule(field: str) -> Callable[[Sequence[float]], float]:
    """Statistic used to merge ``field`` across models."""
    if field in MEDIAN_FIELDS:
        return median
    elif field in MODE_FIELDS:
        return mode
    elif field in CIRCULAR_FIELDS:
        return circular_mean
    return mean


def _to_float_array(values: Sequence[Optional[float]]) -> np.ndarray:
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def _stack(series: Sequence[RawSeries], fields: list[str]) -> pd.DataFrame:
    """Long frame with one row per (model, timestamp), in model order."""
    frames = []
    for order, s in enumerate(series):
        n = len(s.time)
        data = {"time": s.time, "model": np.full(n, order)}
        for field in fields:
            data[field] = _to_float_array(s.values.get(field, [None] * n))
        frames.append(pd.DataFrame(data))
    return pd.concat(frames, ignore_index=True)


def _aggregate(rule: Callable[[Sequence[float]], float]) -> Callable[[pd.Series], float]:
    def apply(column: pd.Series) -> float:
        values = column.dropna().tolist()
        if not values:
            return np.nan
        return rule(values)

    return apply


def merge_series(
    series: Sequence[RawSeries],
    fields: list[str],
    primary: str,
    fallbacks: dict[str, str],
) -> RawSeries:
    """Merge N series field by field.

    Args:
        series: Raw series, in model order
        fields: Fields to merge (the primary field included)
        primary: Field whose absence drops a timestamp
        fallbacks: Secondary field -> field used when no model reported it

    Returns:
        Merged series over the sorted union of timestamps

    Raises:
        ValueError: If ``series`` is empty
    """
    if len(series) == 0:
        raise ValueError("No model data to merge")
    if len(series) == 1:
        return series[0]

    stacked = _stack(series, fields)
    grouped = stacked.groupby("time", sort=True)
    merged = pd.DataFrame(
        {field: grouped[field].agg(_aggregate(merge_rule(field))) for field in fields}
    )

    dropped = int(merged[primary].isna().sum())
    if dropped:
        logger.debug(f"Dropping {dropped} timestamps with no {primary} from any model")
    merged = merged[merged[primary].notna()].copy()

    for field, source in fallbacks.items():
        if field in merged.columns and source in merged.columns:
            merged[field] = merged[field].fillna(merged[source])
    merged = merged.fillna(0.0)

    values: dict[str, list[Optional[float]]] = {}
    for field in fields:
        column = merged[field].tolist()
        if field in INTEGER_FIELDS:
            values[field] = [int(round(v)) for v in column]
        elif field in CIRCULAR_FIELDS:
            values[field] = [round2(v) % 360.0 for v in column]
        else:
            values[field] = [round2(v) for v in column]

    return RawSeries(time=[str(t) for t in merged.index], values=values)


def _reported_fields(series: Sequence[RawSeries], fields: list[str], optional: set[str]) -> list[str]:
    """Required fields plus optional ones that at least one model reports."""
    present = []
    for field in fields:
        if field not in optional:
            present.append(field)
        elif any(len(s.values.get(field) or []) > 0 for s in series):
            present.append(field)
    return present


def merge_hourly(series: Sequence[RawSeries]) -> RawSeries:
    """Merge N hourly series into one consensus series.

    Timestamps without any model temperature are dropped. Missing apparent
    temperature falls back to the merged temperature; other missing fields
    become 0. ``snow_depth`` is emitted only if some model reports it.
    """
    fields = _reported_fields(series, HOURLY_FIELDS, OPTIONAL_HOURLY_FIELDS)
    return merge_series(series, fields, HOURLY_PRIMARY, HOURLY_FALLBACKS)


def merge_daily(series: Sequence[RawSeries]) -> RawSeries:
    """Merge N daily series into one consensus series.

    Days without any model max temperature are dropped. Missing minimum fields
    fall back to the corresponding maximum; other missing fields become 0.
    """
    return merge_series(series, DAILY_FIELDS, DAILY_PRIMARY, DAILY_FALLBACKS)


def concat_series(earlier: RawSeries, later: RawSeries) -> RawSeries:
    """Join two time windows of the same variables.

    Rows of ``later`` win where both windows share a timestamp. Fields missing
    from one window are null there.
    """
    rows: dict[str, tuple[RawSeries, int]] = {}
    for s in (earlier, later):
        for i, t in enumerate(s.time):
            rows[t] = (s, i)

    times = sorted(rows)
    fields = list(dict.fromkeys([*earlier.values, *later.values]))
    values = {
        field: [rows[t][0].get(field, rows[t][1]) for t in times]
        for field in fields
    }
    return RawSeries(time=times, values=values)
