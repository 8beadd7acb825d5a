"""Domain data models for powdercast.

Raw and merged model output is carried as ``RawSeries`` (parallel arrays keyed
by Open-Meteo variable name). Corrected output is carried as immutable
``HourlyMetric`` / ``DailyMetric`` records grouped into a ``BandForecast``.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

# Hourly variables requested from the forecast API
HOURLY_FIELDS = [
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "precipitation",
    "rain",
    "snowfall",
    "precipitation_probability",
    "weather_code",
    "wind_speed_10m",
    "wind_direction_10m",
    "wind_gusts_10m",
    "freezing_level_height",
    "snow_depth",
]

# Daily variables requested from the forecast API
DAILY_FIELDS = [
    "weather_code",
    "temperature_2m_max",
    "temperature_2m_min",
    "apparent_temperature_max",
    "apparent_temperature_min",
    "uv_index_max",
    "precipitation_sum",
    "rain_sum",
    "snowfall_sum",
    "precipitation_probability_max",
    "wind_speed_10m_max",
    "wind_gusts_10m_max",
]

# Hourly variables some models never report
OPTIONAL_HOURLY_FIELDS = {"snow_depth"}

# Daily variables requested from the archive API
ARCHIVE_DAILY_FIELDS = [
    "snowfall_sum",
    "snow_depth_max",
    "temperature_2m_max",
    "temperature_2m_min",
]


class ElevationBand(Enum):
    """Reference elevation of a forecast within a resort."""
    BASE = "base"
    MID = "mid"
    TOP = "top"


@dataclass
class RawSeries:
    """One model's output: timestamps plus one parallel array per variable.

    Attributes:
        time: ISO-8601 timestamps (hourly) or dates (daily), never null
        values: Variable name -> values aligned with ``time`` (entries may be None)
    """

    time: list[str]
    values: dict[str, list[Optional[float]]] = field(default_factory=dict)

    def __post_init__(self):
        if any(t is None for t in self.time):
            raise ValueError("RawSeries timestamps must not be null")
        for name, arr in self.values.items():
            if len(arr) != len(self.time):
                raise ValueError(
                    f"Field {name} has {len(arr)} values for {len(self.time)} timestamps"
                )

    def __len__(self) -> int:
        return len(self.time)

    def get(self, name: str, index: int) -> Optional[float]:
        """Value of ``name`` at ``index``, or None when the field is absent."""
        arr = self.values.get(name)
        if arr is None:
            return None
        return arr[index]

    @classmethod
    def from_payload(cls, section: dict, fields: list[str]) -> "RawSeries":
        """Build a series from an API ``hourly``/``daily`` section.

        Only the listed fields present in the section are kept.
        """
        return cls(
            time=list(section["time"]),
            values={name: list(section[name]) for name in fields if name in section},
        )


@dataclass(frozen=True)
class HourlyMetric:
    """One corrected hourly observation.

    Units follow Open-Meteo: degrees C, %, mm (precipitation, rain),
    cm (snowfall), km/h, degrees, metres (freezing level, snow depth).
    """

    time: str
    temperature: float
    apparent_temperature: float
    relative_humidity: float
    precipitation: float
    rain: float
    snowfall: float
    precipitation_probability: float
    weather_code: int
    wind_speed: float
    wind_direction: float
    wind_gusts: float
    freezing_level_height: Optional[float]
    snow_depth: Optional[float] = None

    @property
    def date(self) -> str:
        """Calendar date (YYYY-MM-DD) this hour belongs to."""
        return self.time[:10]


@dataclass(frozen=True)
class DailyMetric:
    """One corrected daily summary.

    ``rain_sum`` and ``snowfall_sum`` come from the corrected hourly series,
    not from the provider's daily aggregate.
    """

    date: str
    weather_code: int
    temperature_max: float
    temperature_min: float
    apparent_temperature_max: float
    apparent_temperature_min: float
    uv_index_max: float
    precipitation_sum: float
    rain_sum: float
    snowfall_sum: float
    precipitation_probability_max: float
    wind_speed_max: float
    wind_gusts_max: float


@dataclass
class BandForecast:
    """Forecast for one elevation band.

    Attributes:
        band: Elevation band tag
        elevation: Station elevation used for the recalculation (m)
        hourly: Corrected hourly metrics
        daily: Corrected daily metrics
        models: Model identifiers that contributed to the consensus
        blended: Whether daily snowfall was blended with the external source
    """

    band: ElevationBand
    elevation: float
    hourly: list[HourlyMetric]
    daily: list[DailyMetric]
    models: list[str] = field(default_factory=list)
    blended: bool = False

    @property
    def total_snowfall(self) -> float:
        """Sum of daily snowfall in cm."""
        return round(sum(d.snowfall_sum for d in self.daily), 2)


@dataclass(frozen=True)
class Resort:
    """Ski resort reference data."""

    slug: str
    name: str
    lat: float
    lon: float
    country: str
    base_elevation: float
    mid_elevation: float
    top_elevation: float
    timezone: str = "auto"

    def elevation(self, band: ElevationBand) -> float:
        """Station elevation (m) for a band."""
        if band == ElevationBand.BASE:
            return self.base_elevation
        elif band == ElevationBand.MID:
            return self.mid_elevation
        return self.top_elevation


@dataclass
class ResortForecast:
    """All band forecasts for a resort.

    Bands that failed are absent from ``bands`` and listed in ``errors`` so a
    caller can render them as unavailable without losing the others.
    """

    resort: Resort
    fetched_at: datetime
    bands: dict[ElevationBand, BandForecast] = field(default_factory=dict)
    errors: dict[ElevationBand, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        """True when every band succeeded."""
        return not self.errors and len(self.bands) == len(ElevationBand)


@dataclass(frozen=True)
class HistoricalSnowDay:
    """One day of archived snowfall at a point."""

    date: str
    snowfall: float
    snow_depth: float
    temperature_max: Optional[float]
    temperature_min: Optional[float]
