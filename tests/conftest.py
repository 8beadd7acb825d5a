"""Shared pytest fixtures for powdercast tests.

Test Tiers:
- unit: Fast tests with fixtures, no network (default)
- integration: Tests wiring several layers together over a mock transport
- live: Real API tests, slow, requires network

Run live tests with: pytest -m live --run-live
"""

from typing import Callable, Optional

import httpx
import pytest

from powdercast.fetch.client import FetchClient
from powdercast.resorts import get_resort

HOURS = [f"2025-01-10T{h:02d}:00" for h in range(24)] + [f"2025-01-11T{h:02d}:00" for h in range(24)]
DAYS = ["2025-01-10", "2025-01-11"]

# A cold, snowy hour at a high station
BASE_HOURLY = {
    "temperature_2m": -8.0,
    "apparent_temperature": -14.0,
    "relative_humidity_2m": 70.0,
    "precipitation": 1.0,
    "rain": 0.0,
    "snowfall": 0.7,
    "precipitation_probability": 80.0,
    "weather_code": 73,
    "wind_speed_10m": 12.0,
    "wind_direction_10m": 270.0,
    "wind_gusts_10m": 25.0,
    "freezing_level_height": 1500.0,
    "snow_depth": 1.2,
}

BASE_DAILY = {
    "weather_code": 73,
    "temperature_2m_max": -5.0,
    "temperature_2m_min": -12.0,
    "apparent_temperature_max": -10.0,
    "apparent_temperature_min": -19.0,
    "uv_index_max": 1.5,
    "precipitation_sum": 24.0,
    "rain_sum": 0.0,
    "snowfall_sum": 16.8,
    "precipitation_probability_max": 90.0,
    "wind_speed_10m_max": 20.0,
    "wind_gusts_10m_max": 40.0,
}


def _section(times: list[str], base: dict, overrides: Optional[dict], suffix: str = "") -> dict:
    values = {**base, **(overrides or {})}
    section = {"time": list(times)}
    for name, value in values.items():
        key = f"{name}_{suffix}" if suffix else name
        section[key] = list(value) if isinstance(value, list) else [value] * len(times)
    return section


def pytest_addoption(parser):
    """Add command line options for test configuration."""
    parser.addoption(
        "--run-live",
        action="store_true",
        default=False,
        help="Run live API tests (slow, requires network)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: fast unit tests using fixtures")
    config.addinivalue_line("markers", "integration: tests wiring several layers over a mock transport")
    config.addinivalue_line("markers", "live: real API tests (slow, requires network)")


def pytest_collection_modifyitems(config, items):
    """Skip live tests unless --run-live is specified."""
    if config.getoption("--run-live"):
        # --run-live given: don't skip live tests
        return

    skip_live = pytest.mark.skip(reason="need --run-live option to run")
    for item in items:
        if "live" in item.keywords:
            item.add_marker(skip_live)


@pytest.fixture
def hours() -> list[str]:
    """48 hourly timestamps over two days."""
    return list(HOURS)


@pytest.fixture
def days() -> list[str]:
    """The two dates covered by ``hours``."""
    return list(DAYS)


@pytest.fixture
def make_forecast_payload() -> Callable[..., dict]:
    """Build a single-model forecast response.

    Overrides replace a field with a scalar (repeated) or a full list.
    """
    def factory(hourly: Optional[dict] = None, daily: Optional[dict] = None) -> dict:
        return {
            "latitude": 40.59,
            "longitude": -111.64,
            "timezone": "America/Denver",
            "hourly": _section(HOURS, BASE_HOURLY, hourly),
            "daily": _section(DAYS, BASE_DAILY, daily),
        }
    return factory


@pytest.fixture
def make_multi_model_payload() -> Callable[..., dict]:
    """Build a multi-model forecast response.

    ``models`` maps model id -> (hourly overrides, daily overrides); a model
    mapped to None contributes no keys at all.
    """
    def factory(models: dict, hours: Optional[list[str]] = None, days: Optional[list[str]] = None) -> dict:
        hours = hours or HOURS
        days = days or DAYS
        hourly = {"time": list(hours)}
        daily = {"time": list(days)}
        for model, overrides in models.items():
            if overrides is None:
                continue
            hourly_overrides, daily_overrides = overrides
            hourly.update(_section(hours, BASE_HOURLY, hourly_overrides, suffix=model))
            daily.update(_section(days, BASE_DAILY, daily_overrides, suffix=model))
        return {"latitude": 40.59, "longitude": -111.64, "hourly": hourly, "daily": daily}
    return factory


@pytest.fixture
def make_fetch_client() -> Callable[..., FetchClient]:
    """Build a FetchClient over ``httpx.MockTransport``.

    Backoff sleeps are recorded into ``sleeps`` (seconds) instead of waiting.
    """
    def factory(handler, sleeps: Optional[list] = None, clock=None) -> FetchClient:
        async def fake_sleep(seconds: float) -> None:
            if sleeps is not None:
                sleeps.append(seconds)

        kwargs = {"sleep": fake_sleep}
        if clock is not None:
            kwargs["clock"] = clock
        transport = httpx.MockTransport(handler)
        return FetchClient(httpx.AsyncClient(transport=transport), **kwargs)
    return factory


@pytest.fixture
def alta():
    """A US resort (gets the NWS blend)."""
    return get_resort("alta")


@pytest.fixture
def whistler():
    """A Canadian resort (regional GEM model, no NWS)."""
    return get_resort("whistler")
