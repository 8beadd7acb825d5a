"""Live smoke tests against the real weather services.

These tests verify that the upstream response shapes still match what the
parsers expect. They are slow and require network access. Skip by default.

Run with: pytest tests/live/ -v --run-live
"""

import asyncio
from datetime import date, timedelta

import pytest

from powdercast.fetch import FetchClient
from powdercast.forecast import NWSSnowSource, fetch_historical, fetch_resort_forecast
from powdercast.models import ElevationBand
from powdercast.resorts import get_resort

# All tests in this file are live tests
pytestmark = pytest.mark.live


class TestOpenMeteoLive:
    """Smoke tests for Open-Meteo - no auth required."""

    def test_resort_forecast(self):
        """Every band of a Canadian resort comes back from the multi-model request."""
        resort = get_resort("whistler")

        async def run():
            async with FetchClient() as client:
                return await fetch_resort_forecast(resort, forecast_days=3, client=client)

        forecast = asyncio.run(run())

        assert forecast.complete, forecast.errors
        mid = forecast.bands[ElevationBand.MID]
        assert len(mid.daily) == 3
        assert len(mid.hourly) == 72
        assert all(d.snowfall_sum >= 0 for d in mid.daily)

    def test_historical(self):
        resort = get_resort("alta")
        end = date.today() - timedelta(days=10)
        start = end - timedelta(days=6)

        async def run():
            async with FetchClient() as client:
                return await fetch_historical(
                    resort.lat, resort.lon, resort.mid_elevation,
                    start.isoformat(), end.isoformat(), resort.timezone, client=client,
                )

        days = asyncio.run(run())
        assert len(days) == 7


class TestNWSLive:
    """Smoke test for the NWS gridpoint lookup."""

    def test_daily_snowfall(self):
        resort = get_resort("alta")

        async def run():
            async with FetchClient() as client:
                return await NWSSnowSource(client).daily_snowfall(resort.lat, resort.lon, resort.timezone)

        result = asyncio.run(run())
        assert isinstance(result, dict)
        assert all(v >= 0 for v in result.values())
