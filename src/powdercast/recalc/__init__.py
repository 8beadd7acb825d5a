"""Physical recalculation of snowfall for a station elevation.

Pure, deterministic functions; no I/O.
"""

from powdercast.recalc.blend import apply_blend, blend_snowfall
from powdercast.recalc.rollup import (
    PeriodSnow,
    group_by_date,
    recalc_daily_from_hourly,
    snow_days,
    split_day_periods,
)
from powdercast.recalc.snow import (
    HourlyInputs,
    PrecipType,
    SnowSplit,
    adjusted_slr,
    base_slr,
    liquid_total,
    recalc_hourly,
    snow_fraction,
)

__all__ = [
    "HourlyInputs",
    "PeriodSnow",
    "PrecipType",
    "SnowSplit",
    "adjusted_slr",
    "apply_blend",
    "base_slr",
    "blend_snowfall",
    "group_by_date",
    "liquid_total",
    "recalc_daily_from_hourly",
    "recalc_hourly",
    "snow_days",
    "snow_fraction",
    "split_day_periods",
]
