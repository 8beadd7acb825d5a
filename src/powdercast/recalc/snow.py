"""Snow/rain recalculation for a station elevation.

Forecast providers split precipitation with a fixed ~7:1 snow-to-liquid ratio
(SLR) evaluated at the grid cell's elevation. Both assumptions understate
snowfall at cold, high stations. This module recomputes the split per hour:

1. Snow fraction from the station's position relative to the freezing level,
   with a linear rain/snow transition band below it.
2. Temperature-dependent SLR: 10:1 at 0C rising linearly to 20:1 at -15C.
3. SLR +10% when relative humidity >= 80% (dendritic crystals).
4. SLR -15% when wind >= 30 km/h (compaction and sublimation).
5. snowfall = snow liquid * SLR; rain = remaining liquid, so liquid is conserved.

Units follow Open-Meteo: precipitation and rain in mm, snowfall in cm.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from powdercast.config import (
    FREEZING_TRANSITION_BAND_M,
    HUMIDITY_SLR_BOOST,
    HUMIDITY_THRESHOLD_PCT,
    PROVIDER_SLR,
    RAIN_THRESHOLD_C,
    SLR_COLD,
    SLR_COLD_TEMP_C,
    SLR_WARM,
    SLR_WARM_TEMP_C,
    SNOW_THRESHOLD_C,
    WIND_SLR_PENALTY,
    WIND_THRESHOLD_KMH,
)

MM_PER_CM = 10.0


class PrecipType(Enum):
    """Precipitation phase of one corrected hour."""
    SNOW = "snow"
    MIXED = "mixed"
    RAIN = "rain"
    NONE = "none"


@dataclass(frozen=True)
class HourlyInputs:
    """Raw inputs for one hour.

    Attributes:
        precipitation: Total precipitation (mm liquid)
        rain: Provider rain (mm)
        snowfall: Provider snowfall (cm, at the provider's 7:1 ratio)
        temperature: Air temperature (C)
        freezing_level_height: Freezing level (m above sea level)
        relative_humidity: Relative humidity (%), optional
        wind_speed: Wind speed (km/h), optional
    """

    precipitation: Optional[float]
    rain: Optional[float]
    snowfall: Optional[float]
    temperature: Optional[float]
    freezing_level_height: Optional[float]
    relative_humidity: Optional[float] = None
    wind_speed: Optional[float] = None


@dataclass(frozen=True)
class SnowSplit:
    """Corrected split of one hour's precipitation.

    Attributes:
        snowfall: Snow depth (cm)
        rain: Liquid falling as rain (mm)
        snow_liquid: Liquid equivalent of the snow (mm)
        slr: Snow-liquid ratio applied to the snow portion
    """

    snowfall: float
    rain: float
    snow_liquid: float
    slr: float

    @property
    def precipitation(self) -> float:
        """Total liquid (mm); equals the input precipitation."""
        return self.rain + self.snow_liquid

    @property
    def precip_type(self) -> PrecipType:
        if self.rain <= 0 and self.snow_liquid <= 0:
            return PrecipType.NONE
        elif self.rain <= 0:
            return PrecipType.SNOW
        elif self.snow_liquid <= 0:
            return PrecipType.RAIN
        return PrecipType.MIXED


def _non_negative(value: Optional[float]) -> float:
    if value is None:
        return 0.0
    return max(0.0, float(value))


def liquid_total(inputs: HourlyInputs) -> float:
    """Total liquid precipitation for the hour (mm).

    Uses ``precipitation`` when available, otherwise reconstructs it from the
    provider's rain and snowfall by undoing the provider's fixed ratio.
    """
    if inputs.precipitation is not None:
        return _non_negative(inputs.precipitation)
    provider_snow_liquid = _non_negative(inputs.snowfall) * MM_PER_CM / PROVIDER_SLR
    return _non_negative(inputs.rain) + provider_snow_liquid


def _temperature_fraction(temperature: float) -> float:
    if temperature <= SNOW_THRESHOLD_C:
        return 1.0
    elif temperature >= RAIN_THRESHOLD_C:
        return 0.0
    return (RAIN_THRESHOLD_C - temperature) / (RAIN_THRESHOLD_C - SNOW_THRESHOLD_C)


def snow_fraction(
    station_elevation: float,
    freezing_level_height: Optional[float],
    temperature: Optional[float] = None,
    transition_band_m: float = FREEZING_TRANSITION_BAND_M,
) -> Optional[float]:
    """Fraction (0-1) of precipitation falling as snow at the station.

    At or above the freezing level everything is snow; more than
    ``transition_band_m`` below it everything is rain; in between the split is
    linear in the distance below the freezing level. Without a freezing level
    the air temperature decides. Returns None when neither is known.
    """
    if freezing_level_height is None:
        if temperature is None:
            return None
        return _temperature_fraction(temperature)

    if station_elevation >= freezing_level_height:
        return 1.0
    depth_below = freezing_level_height - station_elevation
    if transition_band_m <= 0 or depth_below >= transition_band_m:
        return 0.0
    return 1.0 - depth_below / transition_band_m


def base_slr(temperature: Optional[float]) -> float:
    """Temperature-dependent SLR, linear between the warm and cold anchors."""
    if temperature is None or temperature >= SLR_WARM_TEMP_C:
        return SLR_WARM
    if temperature <= SLR_COLD_TEMP_C:
        return SLR_COLD
    position = (SLR_WARM_TEMP_C - temperature) / (SLR_WARM_TEMP_C - SLR_COLD_TEMP_C)
    return SLR_WARM + position * (SLR_COLD - SLR_WARM)


def adjusted_slr(
    temperature: Optional[float],
    relative_humidity: Optional[float] = None,
    wind_speed: Optional[float] = None,
) -> float:
    """SLR with humidity and wind adjustments; absent inputs apply none."""
    slr = base_slr(temperature)
    if relative_humidity is not None and relative_humidity >= HUMIDITY_THRESHOLD_PCT:
        slr *= 1.0 + HUMIDITY_SLR_BOOST
    if wind_speed is not None and wind_speed >= WIND_THRESHOLD_KMH:
        slr *= 1.0 - WIND_SLR_PENALTY
    return slr


def recalc_hourly(inputs: HourlyInputs, station_elevation: float) -> SnowSplit:
    """Recompute one hour's snow/rain split at ``station_elevation``.

    Args:
        inputs: Raw hourly inputs
        station_elevation: Station elevation (m)

    Returns:
        SnowSplit with ``rain + snow_liquid == total liquid``
    """
    liquid = liquid_total(inputs)
    slr = adjusted_slr(inputs.temperature, inputs.relative_humidity, inputs.wind_speed)

    fraction = snow_fraction(station_elevation, inputs.freezing_level_height, inputs.temperature)
    if fraction is None:
        # Nothing to decide the phase with: keep the provider's split
        provider_snow_liquid = _non_negative(inputs.snowfall) * MM_PER_CM / PROVIDER_SLR
        fraction = min(1.0, provider_snow_liquid / liquid) if liquid > 0 else 0.0

    snow_liquid = liquid * fraction
    rain = liquid - snow_liquid
    snowfall = snow_liquid * slr / MM_PER_CM

    return SnowSplit(snowfall=snowfall, rain=rain, snow_liquid=snow_liquid, slr=slr)
