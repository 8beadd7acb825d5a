"""Tests for multi-model merging."""

import pytest

from powdercast.aggregate import concat_series, merge_daily, merge_hourly, merge_rule
from powdercast.aggregate.stats import circular_mean, mean, median, mode
from powdercast.models import RawSeries


def hourly(times, **values):
    """Hourly series with every value given as a list."""
    return RawSeries(time=list(times), values={k: list(v) for k, v in values.items()})


class TestMergeRule:
    """Tests for the field -> statistic mapping."""

    def test_rules(self):
        assert merge_rule("precipitation") is median
        assert merge_rule("snowfall_sum") is median
        assert merge_rule("weather_code") is mode
        assert merge_rule("wind_direction_10m") is circular_mean
        assert merge_rule("temperature_2m") is mean
        assert merge_rule("uv_index_max") is mean


class TestMergeHourly:
    """Tests for hourly consensus."""

    def test_empty_input_raises(self):
        with pytest.raises(ValueError):
            merge_hourly([])

    def test_single_series_returned_unchanged(self):
        s = hourly(["2025-01-10T00:00"], temperature_2m=[-3.14159], precipitation=[None])
        assert merge_hourly([s]) is s

    def test_union_of_timestamps(self):
        """A short-range model adds hours; a long-range model covers the rest."""
        short = hourly(["2025-01-10T00:00", "2025-01-10T01:00"], temperature_2m=[-2.0, -3.0])
        long = hourly(
            ["2025-01-10T01:00", "2025-01-10T02:00", "2025-01-10T03:00"],
            temperature_2m=[-5.0, -6.0, -7.0],
        )

        merged = merge_hourly([short, long])

        assert merged.time == [
            "2025-01-10T00:00",
            "2025-01-10T01:00",
            "2025-01-10T02:00",
            "2025-01-10T03:00",
        ]
        assert merged.values["temperature_2m"] == [-2.0, -4.0, -6.0, -7.0]

    def test_field_rules_applied(self):
        t = ["2025-01-10T00:00"]
        models = [
            hourly(t, temperature_2m=[-4.0], precipitation=[1.0], weather_code=[73], wind_direction_10m=[350]),
            hourly(t, temperature_2m=[-6.0], precipitation=[2.0], weather_code=[73], wind_direction_10m=[10]),
            hourly(t, temperature_2m=[-8.0], precipitation=[30.0], weather_code=[3], wind_direction_10m=[0]),
        ]

        merged = merge_hourly(models)

        assert merged.values["temperature_2m"] == [-6.0]
        assert merged.values["precipitation"] == [2.0]
        assert merged.values["weather_code"] == [73]
        assert isinstance(merged.values["weather_code"][0], int)
        assert merged.values["wind_direction_10m"][0] == pytest.approx(0.0, abs=0.01)

    def test_nulls_excluded_per_field(self):
        t = ["2025-01-10T00:00"]
        a = hourly(t, temperature_2m=[-4.0], snowfall=[None])
        b = hourly(t, temperature_2m=[None], snowfall=[1.5])

        merged = merge_hourly([a, b])

        assert merged.values["temperature_2m"] == [-4.0]
        assert merged.values["snowfall"] == [1.5]

    def test_timestamp_without_temperature_dropped(self):
        a = hourly(["2025-01-10T00:00", "2025-01-10T01:00"], temperature_2m=[-4.0, None], precipitation=[1.0, 2.0])
        b = hourly(["2025-01-10T00:00", "2025-01-10T01:00"], temperature_2m=[-6.0, None], precipitation=[1.0, 2.0])

        merged = merge_hourly([a, b])

        assert merged.time == ["2025-01-10T00:00"]

    def test_defaults_when_no_model_reports(self):
        t = ["2025-01-10T00:00"]
        merged = merge_hourly([hourly(t, temperature_2m=[-4.0]), hourly(t, temperature_2m=[-6.0])])

        assert merged.values["apparent_temperature"] == [-5.0]
        assert merged.values["precipitation"] == [0.0]
        assert merged.values["weather_code"] == [0]

    def test_snow_depth_only_when_reported(self):
        t = ["2025-01-10T00:00"]
        without = merge_hourly([hourly(t, temperature_2m=[-4.0]), hourly(t, temperature_2m=[-6.0])])
        with_depth = merge_hourly(
            [hourly(t, temperature_2m=[-4.0], snow_depth=[1.2]), hourly(t, temperature_2m=[-6.0])]
        )

        assert "snow_depth" not in without.values
        assert with_depth.values["snow_depth"] == [1.2]

    def test_values_rounded(self):
        t = ["2025-01-10T00:00"]
        merged = merge_hourly(
            [hourly(t, temperature_2m=[-4.111]), hourly(t, temperature_2m=[-4.0]), hourly(t, temperature_2m=[-4.0])]
        )
        assert merged.values["temperature_2m"] == [-4.04]


class TestMergeDaily:
    """Tests for daily consensus."""

    def test_min_defaults_to_max(self):
        d = ["2025-01-10"]
        a = RawSeries(time=d, values={"temperature_2m_max": [-2.0]})
        b = RawSeries(time=d, values={"temperature_2m_max": [-4.0]})

        merged = merge_daily([a, b])

        assert merged.values["temperature_2m_min"] == [-3.0]
        assert merged.values["apparent_temperature_max"] == [-3.0]
        assert merged.values["apparent_temperature_min"] == [-3.0]
        assert merged.values["uv_index_max"] == [0.0]

    def test_reported_min_kept(self):
        d = ["2025-01-10"]
        a = RawSeries(time=d, values={"temperature_2m_max": [-2.0], "temperature_2m_min": [-9.0]})
        b = RawSeries(time=d, values={"temperature_2m_max": [-4.0], "temperature_2m_min": [-11.0]})

        merged = merge_daily([a, b])

        assert merged.values["temperature_2m_min"] == [-10.0]
        assert merged.values["apparent_temperature_min"] == [-10.0]

    def test_day_without_max_dropped(self):
        d = ["2025-01-10", "2025-01-11"]
        a = RawSeries(time=d, values={"temperature_2m_max": [-2.0, None], "snowfall_sum": [5.0, 8.0]})
        b = RawSeries(time=d, values={"temperature_2m_max": [-4.0, None], "snowfall_sum": [7.0, 9.0]})

        merged = merge_daily([a, b])

        assert merged.time == ["2025-01-10"]
        assert merged.values["snowfall_sum"] == [6.0]


class TestConcatSeries:
    """Tests for joining past and future windows."""

    def test_later_window_wins_overlap(self):
        past = hourly(["2025-01-09T23:00", "2025-01-10T00:00"], temperature_2m=[-1.0, -2.0])
        future = hourly(["2025-01-10T00:00", "2025-01-10T01:00"], temperature_2m=[-5.0, -6.0])

        joined = concat_series(past, future)

        assert joined.time == ["2025-01-09T23:00", "2025-01-10T00:00", "2025-01-10T01:00"]
        assert joined.values["temperature_2m"] == [-1.0, -5.0, -6.0]

    def test_missing_field_is_null(self):
        past = hourly(["2025-01-09T23:00"], temperature_2m=[-1.0])
        future = hourly(["2025-01-10T00:00"], temperature_2m=[-5.0], snow_depth=[1.0])

        joined = concat_series(past, future)

        assert joined.values["snow_depth"] == [None, 1.0]
