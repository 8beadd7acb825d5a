"""Daily roll-up of corrected hourly snowfall and rain."""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from powdercast.aggregate.stats import round2
from powdercast.config import SNOW_DAY_THRESHOLD_CM
from powdercast.models import DailyMetric, HourlyMetric


@dataclass(frozen=True)
class PeriodSnow:
    """Snowfall (cm) for the parts of a day.

    Attributes:
        am: 06:00-11:59 on the day
        pm: 12:00-17:59 on the day
        overnight: 18:00-23:59 on the day plus 00:00-05:59 the next day
    """

    am: float
    pm: float
    overnight: float

    @property
    def total(self) -> float:
        return round2(self.am + self.pm + self.overnight)


def recalc_daily_from_hourly(
    snowfall: Sequence[Optional[float]],
    rain: Sequence[Optional[float]],
) -> tuple[float, float]:
    """Sum one date's corrected hourly snowfall and rain.

    Args:
        snowfall: Corrected hourly snowfall for the date (cm)
        rain: Corrected hourly rain for the date (mm)

    Returns:
        Tuple of (snowfall_sum, rain_sum), rounded to two decimals
    """
    snowfall_sum = sum(v for v in snowfall if v is not None)
    rain_sum = sum(v for v in rain if v is not None)
    return round2(snowfall_sum), round2(rain_sum)


def group_by_date(hourly: Sequence[HourlyMetric]) -> dict[str, list[HourlyMetric]]:
    """Bucket hourly metrics by the date part of their timestamp.

    Every hour lands in exactly one bucket; bucket order follows input order.
    """
    buckets: dict[str, list[HourlyMetric]] = {}
    for metric in hourly:
        buckets.setdefault(metric.date, []).append(metric)
    return buckets


def split_day_periods(day: str, hourly: Sequence[HourlyMetric]) -> PeriodSnow:
    """Split a day's snowfall into AM / PM / overnight buckets.

    Args:
        day: Date as YYYY-MM-DD
        hourly: Corrected hourly metrics (may span several days)

    Returns:
        PeriodSnow for ``day``
    """
    next_day = (date.fromisoformat(day) + timedelta(days=1)).isoformat()

    am = pm = overnight = 0.0
    for metric in hourly:
        try:
            hour = int(metric.time[11:13])
        except ValueError:
            continue
        if hour < 0 or hour > 23:
            continue

        if metric.date == day:
            if 6 <= hour < 12:
                am += metric.snowfall
            elif 12 <= hour < 18:
                pm += metric.snowfall
            elif hour >= 18:
                overnight += metric.snowfall
        elif metric.date == next_day and hour < 6:
            overnight += metric.snowfall

    return PeriodSnow(am=round2(am), pm=round2(pm), overnight=round2(overnight))


def snow_days(
    daily: Sequence[DailyMetric],
    threshold_cm: float = SNOW_DAY_THRESHOLD_CM,
) -> list[str]:
    """Dates whose corrected snowfall meets ``threshold_cm``."""
    return [d.date for d in daily if d.snowfall_sum >= threshold_cm]
