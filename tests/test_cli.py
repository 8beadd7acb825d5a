"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import httpx
import pytest

from powdercast.cli import main

ARCHIVE = {
    "daily": {
        "time": ["2025-01-01"],
        "snowfall_sum": [12.0],
        "snow_depth_max": [1.5],
        "temperature_2m_max": [-3.0],
        "temperature_2m_min": [-12.0],
    }
}


@pytest.fixture
def patched_client(make_fetch_client, make_multi_model_payload):
    """Route the CLI's fetch client through a mock transport."""
    forecast = make_multi_model_payload(
        {"gfs_seamless": ({}, {}), "ecmwf_ifs025": ({}, {})}
    )

    def handler(request):
        if request.url.host == "archive-api.open-meteo.com":
            return httpx.Response(200, json=ARCHIVE)
        return httpx.Response(200, json=forecast)

    with patch("powdercast.cli.FetchClient", lambda: make_fetch_client(handler)):
        yield


class TestResortsCommand:
    """Tests for 'resorts'."""

    def test_lists_resorts(self, capsys):
        assert main(["resorts"]) == 0
        out = capsys.readouterr().out
        assert "alta" in out
        assert "Whistler Blackcomb" in out


class TestForecastCommand:
    """Tests for 'forecast'."""

    def test_tables(self, patched_client, capsys):
        assert main(["-q", "forecast", "whistler"]) == 0
        out = capsys.readouterr().out
        assert "Whistler Blackcomb (CA)" in out
        assert "TOP (2284 m)" in out
        assert "2025-01-10" in out

    def test_single_band(self, patched_client, capsys):
        assert main(["-q", "forecast", "whistler", "--band", "mid"]) == 0
        out = capsys.readouterr().out
        assert "MID" in out
        assert "TOP" not in out

    def test_json(self, patched_client, capsys):
        assert main(["-q", "forecast", "whistler", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["resort"] == "whistler"
        assert set(data["bands"]) == {"base", "mid", "top"}

    def test_unknown_resort(self, patched_client):
        assert main(["-q", "forecast", "nowhere"]) == 2


class TestHistoryCommand:
    """Tests for 'history'."""

    def test_history(self, patched_client, capsys):
        assert main(["-q", "history", "alta", "--start", "2025-01-01", "--end", "2025-01-01"]) == 0
        out = capsys.readouterr().out
        assert "12.0" in out

    def test_bad_range(self, patched_client):
        assert main(["-q", "history", "alta", "--start", "2025-02-01", "--end", "2025-01-01"]) == 1
