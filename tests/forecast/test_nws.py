"""Tests for the NWS snowfall source."""

import asyncio

import httpx
import pytest

from powdercast.fetch import PayloadError
from powdercast.forecast import NWSSnowSource, parse_snowfall_amounts


def grid(values, uom="wmoUnit:mm"):
    return {"properties": {"snowfallAmount": {"uom": uom, "values": values}}}


class TestParseSnowfallAmounts:
    """Tests for gridpoint parsing."""

    def test_sums_by_date_in_cm(self):
        data = grid(
            [
                {"validTime": "2025-01-10T12:00:00+00:00/PT6H", "value": 25.4},
                {"validTime": "2025-01-10T18:00:00+00:00/PT6H", "value": 50.8},
                {"validTime": "2025-01-11T12:00:00+00:00/PT6H", "value": 0.0},
            ]
        )

        assert parse_snowfall_amounts(data) == {"2025-01-10": 7.62, "2025-01-11": 0.0}

    def test_local_date_of_interval_start(self):
        """03:00 UTC is the previous evening in Denver."""
        data = grid([{"validTime": "2025-01-10T03:00:00+00:00/PT6H", "value": 10.0}])

        assert parse_snowfall_amounts(data, "America/Denver") == {"2025-01-09": 1.0}
        assert parse_snowfall_amounts(data) == {"2025-01-10": 1.0}

    def test_skips_missing_and_bad_entries(self):
        data = grid(
            [
                {"validTime": "2025-01-10T12:00:00+00:00/PT6H", "value": None},
                {"validTime": "not-a-time/PT6H", "value": 5.0},
                {"value": 5.0},
                "junk",
                {"validTime": "2025-01-10T18:00:00Z/PT1H", "value": 5.0},
            ]
        )

        assert parse_snowfall_amounts(data) == {"2025-01-10": 0.5}

    def test_unit_conversion(self):
        data = grid([{"validTime": "2025-01-10T12:00:00+00:00/PT6H", "value": 0.1}], uom="wmoUnit:m")
        assert parse_snowfall_amounts(data) == {"2025-01-10": 10.0}

    def test_no_snowfall_layer(self):
        assert parse_snowfall_amounts({"properties": {}}) == {}

    def test_missing_properties(self):
        with pytest.raises(PayloadError):
            parse_snowfall_amounts({"type": "Feature"})

    def test_unknown_unit(self):
        with pytest.raises(PayloadError):
            parse_snowfall_amounts(grid([], uom="wmoUnit:in"))

    def test_layer_not_an_object(self):
        with pytest.raises(PayloadError):
            parse_snowfall_amounts({"properties": {"snowfallAmount": "unavailable"}})

    def test_non_numeric_values_skipped(self):
        data = grid(
            [
                {"validTime": "2025-01-10T12:00:00+00:00/PT6H", "value": "n/a"},
                {"validTime": "2025-01-10T13:00:00+00:00/PT1H", "value": True},
                {"validTime": 20250110, "value": 5.0},
                {"validTime": "2025-01-10T18:00:00+00:00/PT6H", "value": 20},
            ]
        )

        assert parse_snowfall_amounts(data) == {"2025-01-10": 2.0}


class TestNWSSnowSource:
    """Tests for the two-step NWS lookup."""

    def test_points_then_grid(self, make_fetch_client):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.path.startswith("/points/"):
                return httpx.Response(
                    200,
                    json={"properties": {"forecastGridData": "https://api.weather.gov/gridpoints/SLC/97,175"}},
                )
            return httpx.Response(
                200, json=grid([{"validTime": "2025-01-10T18:00:00+00:00/PT6H", "value": 30.0}])
            )

        source = NWSSnowSource(make_fetch_client(handler))

        result = asyncio.run(source.daily_snowfall(40.58841, -111.63861, "America/Denver"))

        assert result == {"2025-01-10": 3.0}
        assert seen[0].url.path == "/points/40.5884,-111.6386"
        assert seen[1].url.path == "/gridpoints/SLC/97,175"
        assert seen[0].headers["Accept"] == "application/geo+json"

    def test_failure_yields_empty(self, make_fetch_client):
        handler = lambda request: httpx.Response(404, json={"title": "Data Unavailable For Requested Point"})
        source = NWSSnowSource(make_fetch_client(handler))

        assert asyncio.run(source.daily_snowfall(46.0, 7.7)) == {}

    def test_malformed_grid_yields_empty(self, make_fetch_client):
        def handler(request):
            if request.url.path.startswith("/points/"):
                return httpx.Response(
                    200,
                    json={"properties": {"forecastGridData": "https://api.weather.gov/gridpoints/SLC/97,175"}},
                )
            return httpx.Response(200, json={"properties": {"snowfallAmount": ["bad"]}})

        source = NWSSnowSource(make_fetch_client(handler))

        assert asyncio.run(source.daily_snowfall(40.5, -111.6)) == {}

    def test_missing_grid_link_yields_empty(self, make_fetch_client):
        handler = lambda request: httpx.Response(200, json={"properties": {}})
        source = NWSSnowSource(make_fetch_client(handler))

        assert asyncio.run(source.daily_snowfall(40.5, -111.6)) == {}
