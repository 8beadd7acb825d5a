"""Tests for daily roll-up of corrected hours."""

from powdercast.models import DailyMetric, HourlyMetric
from powdercast.recalc import (
    PeriodSnow,
    group_by_date,
    recalc_daily_from_hourly,
    snow_days,
    split_day_periods,
)


def hour(time: str, snowfall: float = 0.0, rain: float = 0.0) -> HourlyMetric:
    return HourlyMetric(
        time=time,
        temperature=-5.0,
        apparent_temperature=-10.0,
        relative_humidity=80.0,
        precipitation=rain + snowfall,
        rain=rain,
        snowfall=snowfall,
        precipitation_probability=50.0,
        weather_code=73,
        wind_speed=10.0,
        wind_direction=270.0,
        wind_gusts=20.0,
        freezing_level_height=1500.0,
    )


def day(date: str, snowfall_sum: float) -> DailyMetric:
    return DailyMetric(
        date=date,
        weather_code=73,
        temperature_max=-2.0,
        temperature_min=-9.0,
        apparent_temperature_max=-6.0,
        apparent_temperature_min=-15.0,
        uv_index_max=1.0,
        precipitation_sum=10.0,
        rain_sum=0.0,
        snowfall_sum=snowfall_sum,
        precipitation_probability_max=80.0,
        wind_speed_max=20.0,
        wind_gusts_max=35.0,
    )


class TestRecalcDaily:
    """Tests for summing one date's hours."""

    def test_sums(self):
        assert recalc_daily_from_hourly([1.0, 2.5, 0.25], [0.0, 1.0, 0.5]) == (3.75, 1.5)

    def test_nulls_ignored(self):
        assert recalc_daily_from_hourly([1.0, None], [None, 2.0]) == (1.0, 2.0)

    def test_rounded(self):
        snowfall, _ = recalc_daily_from_hourly([0.1] * 3, [])
        assert snowfall == 0.3

    def test_idempotent(self):
        hours = [hour(f"2025-01-10T{h:02d}:00", snowfall=0.37 * h) for h in range(24)]
        snow = [h.snowfall for h in hours]
        rain = [h.rain for h in hours]
        assert recalc_daily_from_hourly(snow, rain) == recalc_daily_from_hourly(snow, rain)


class TestGroupByDate:
    """Tests for bucketing hours by date."""

    def test_each_hour_in_one_bucket(self):
        hours = [hour(f"2025-01-10T{h:02d}:00") for h in range(24)] + [hour("2025-01-11T00:00")]
        buckets = group_by_date(hours)

        assert list(buckets) == ["2025-01-10", "2025-01-11"]
        assert len(buckets["2025-01-10"]) == 24
        assert sum(len(b) for b in buckets.values()) == len(hours)


class TestSplitDayPeriods:
    """Tests for AM / PM / overnight buckets."""

    def test_periods(self):
        hours = [
            hour("2025-01-10T05:00", snowfall=9.0),  # previous night, not counted
            hour("2025-01-10T06:00", snowfall=1.0),
            hour("2025-01-10T11:00", snowfall=1.0),
            hour("2025-01-10T12:00", snowfall=2.0),
            hour("2025-01-10T17:00", snowfall=2.0),
            hour("2025-01-10T18:00", snowfall=3.0),
            hour("2025-01-11T05:00", snowfall=3.0),
            hour("2025-01-11T06:00", snowfall=9.0),  # next day's AM
        ]

        periods = split_day_periods("2025-01-10", hours)

        assert periods == PeriodSnow(am=2.0, pm=4.0, overnight=6.0)
        assert periods.total == 12.0

    def test_month_boundary(self):
        hours = [hour("2025-01-31T22:00", snowfall=1.0), hour("2025-02-01T02:00", snowfall=1.5)]
        assert split_day_periods("2025-01-31", hours).overnight == 2.5


class TestSnowDays:
    """Tests for big-snow day detection."""

    def test_threshold_inclusive(self):
        daily = [day("2025-01-10", 7.62), day("2025-01-11", 7.61), day("2025-01-12", 20.0)]
        assert snow_days(daily) == ["2025-01-10", "2025-01-12"]

    def test_custom_threshold(self):
        assert snow_days([day("2025-01-10", 5.0)], threshold_cm=5.0) == ["2025-01-10"]

    def test_none(self):
        assert snow_days([day("2025-01-10", 0.0)]) == []
