"""Forecast orchestration over Open-Meteo and the NWS snowfall source."""

from powdercast.forecast.nws import NWSSnowSource, parse_snowfall_amounts
from powdercast.forecast.openmeteo import (
    build_archive_params,
    build_forecast_params,
    is_archive_payload,
    is_forecast_payload,
    is_multi_model_payload,
    map_daily,
    map_historical,
    map_hourly,
    models_for_country,
    split_multi_model,
)
from powdercast.forecast.service import (
    blend_band,
    build_band_forecast,
    fetch_band_forecast,
    fetch_forecast,
    fetch_historical,
    fetch_multi_model_forecast,
    fetch_resort_forecast,
)

__all__ = [
    "NWSSnowSource",
    "blend_band",
    "build_archive_params",
    "build_band_forecast",
    "build_forecast_params",
    "fetch_band_forecast",
    "fetch_forecast",
    "fetch_historical",
    "fetch_multi_model_forecast",
    "fetch_resort_forecast",
    "is_archive_payload",
    "is_forecast_payload",
    "is_multi_model_payload",
    "map_daily",
    "map_historical",
    "map_hourly",
    "models_for_country",
    "parse_snowfall_amounts",
    "split_multi_model",
]
