"""Pydantic schemas for API responses.

Mirrors the domain dataclasses in ``powdercast.models`` for JSON output.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from powdercast.models import (
    BandForecast,
    DailyMetric,
    HistoricalSnowDay,
    HourlyMetric,
    Resort,
    ResortForecast,
)
from powdercast.recalc.rollup import snow_days


class ResortInfo(BaseModel):
    """Resort reference data.

    Attributes:
        slug: URL identifier
        name: Display name
        lat: Latitude
        lon: Longitude
        country: ISO 3166 alpha-2 country code
        base_elevation: Base elevation in meters
        mid_elevation: Mid-mountain elevation in meters
        top_elevation: Summit elevation in meters
        timezone: IANA timezone
    """

    slug: str
    name: str
    lat: float
    lon: float
    country: str
    base_elevation: float
    mid_elevation: float
    top_elevation: float
    timezone: str

    @classmethod
    def from_domain(cls, resort: Resort) -> "ResortInfo":
        return cls(
            slug=resort.slug,
            name=resort.name,
            lat=resort.lat,
            lon=resort.lon,
            country=resort.country,
            base_elevation=resort.base_elevation,
            mid_elevation=resort.mid_elevation,
            top_elevation=resort.top_elevation,
            timezone=resort.timezone,
        )


class HourlyOut(BaseModel):
    """One corrected hour."""

    time: str
    temperature: float
    apparent_temperature: float
    relative_humidity: float
    precipitation: float
    rain: float
    snowfall: float = Field(..., ge=0, description="Corrected snowfall in cm")
    precipitation_probability: float
    weather_code: int
    wind_speed: float
    wind_direction: float
    wind_gusts: float
    freezing_level_height: Optional[float] = None
    snow_depth: Optional[float] = None

    @classmethod
    def from_domain(cls, metric: HourlyMetric) -> "HourlyOut":
        return cls(
            time=metric.time,
            temperature=metric.temperature,
            apparent_temperature=metric.apparent_temperature,
            relative_humidity=metric.relative_humidity,
            precipitation=round(metric.precipitation, 2),
            rain=round(metric.rain, 2),
            snowfall=round(metric.snowfall, 2),
            precipitation_probability=metric.precipitation_probability,
            weather_code=metric.weather_code,
            wind_speed=metric.wind_speed,
            wind_direction=metric.wind_direction,
            wind_gusts=metric.wind_gusts,
            freezing_level_height=metric.freezing_level_height,
            snow_depth=metric.snow_depth,
        )


class DailyOut(BaseModel):
    """One corrected day."""

    date: str
    weather_code: int
    temperature_max: float
    temperature_min: float
    apparent_temperature_max: float
    apparent_temperature_min: float
    uv_index_max: float
    precipitation_sum: float
    rain_sum: float
    snowfall_sum: float = Field(..., ge=0, description="Corrected snowfall in cm")
    precipitation_probability_max: float
    wind_speed_max: float
    wind_gusts_max: float

    @classmethod
    def from_domain(cls, metric: DailyMetric) -> "DailyOut":
        return cls(**{name: getattr(metric, name) for name in cls.model_fields})


class BandForecastOut(BaseModel):
    """Forecast for one elevation band.

    Attributes:
        band: base, mid or top
        elevation: Station elevation used for the recalculation (m)
        models: Models that contributed to the consensus
        blended: Whether daily snowfall was blended with NWS
        total_snowfall: Sum of daily snowfall (cm)
        snow_days: Dates with at least 7.62 cm (3 in) of snow
        hourly: Corrected hourly series
        daily: Corrected daily series
    """

    band: str
    elevation: float
    models: list[str]
    blended: bool
    total_snowfall: float
    snow_days: list[str] = Field(default_factory=list)
    hourly: list[HourlyOut]
    daily: list[DailyOut]

    @classmethod
    def from_domain(cls, forecast: BandForecast) -> "BandForecastOut":
        return cls(
            band=forecast.band.value,
            elevation=forecast.elevation,
            models=forecast.models,
            blended=forecast.blended,
            total_snowfall=forecast.total_snowfall,
            snow_days=snow_days(forecast.daily),
            hourly=[HourlyOut.from_domain(h) for h in forecast.hourly],
            daily=[DailyOut.from_domain(d) for d in forecast.daily],
        )


class ResortForecastOut(BaseModel):
    """Forecasts for every band of a resort; failed bands appear in ``errors``."""

    resort: ResortInfo
    fetched_at: datetime
    bands: dict[str, BandForecastOut]
    errors: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def from_domain(cls, forecast: ResortForecast) -> "ResortForecastOut":
        return cls(
            resort=ResortInfo.from_domain(forecast.resort),
            fetched_at=forecast.fetched_at,
            bands={band.value: BandForecastOut.from_domain(b) for band, b in forecast.bands.items()},
            errors={band.value: message for band, message in forecast.errors.items()},
        )


class HistoryDayOut(BaseModel):
    """One archived day."""

    date: str
    snowfall: float
    snow_depth: float
    temperature_max: Optional[float] = None
    temperature_min: Optional[float] = None

    @classmethod
    def from_domain(cls, day: HistoricalSnowDay) -> "HistoryDayOut":
        return cls(
            date=day.date,
            snowfall=day.snowfall,
            snow_depth=day.snow_depth,
            temperature_max=day.temperature_max,
            temperature_min=day.temperature_min,
        )


class HistoryResponse(BaseModel):
    """Archived snowfall for a resort band."""

    resort: str
    band: str
    start: str
    end: str
    days: list[HistoryDayOut]


class HealthResponse(BaseModel):
    """Health check response.

    Attributes:
        status: Service status
        version: API version
        cache_size: Cached upstream responses
        inflight: Upstream requests currently on the wire
    """

    status: str = Field(default="healthy", description="Service status")
    version: str = Field(default="0.1.0", description="API version")
    cache_size: int = Field(default=0, description="Cached upstream responses")
    inflight: int = Field(default=0, description="Upstream requests in flight")


class ErrorResponse(BaseModel):
    """Error response schema.

    Attributes:
        error: Error type/code
        message: Human-readable error message
        detail: Additional error details
    """

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Additional details")
