"""Static configuration for powdercast.

All values are module-level constants. Deployment overrides for endpoints and
cache lifetime are read once from the environment at import time.
"""

import os

# Upstream endpoints
FORECAST_URL = os.environ.get("POWDERCAST_FORECAST_URL", "https://api.open-meteo.com/v1/forecast")
ARCHIVE_URL = os.environ.get("POWDERCAST_ARCHIVE_URL", "https://archive-api.open-meteo.com/v1/archive")
NWS_URL = os.environ.get("POWDERCAST_NWS_URL", "https://api.weather.gov")

# api.weather.gov rejects requests without a User-Agent
USER_AGENT = os.environ.get("POWDERCAST_USER_AGENT", "powdercast/0.1 (github.com/powdercast)")

# Retry / cache defaults
DEFAULT_MAX_RETRIES = 8
DEFAULT_BASE_DELAY_MS = 400
DEFAULT_MAX_DELAY_MS = 30_000
DEFAULT_CACHE_TTL_MS = int(os.environ.get("POWDERCAST_CACHE_TTL_MS", 5 * 60 * 1000))
HTTP_TIMEOUT_S = 30.0

# Forecast request defaults
DEFAULT_FORECAST_DAYS = 7
DEFAULT_TIMEZONE = "auto"
BEST_MATCH_MODEL = "best_match"

# Model selection: baseline global pair plus a regional model per country
BASELINE_MODELS = ["gfs_seamless", "ecmwf_ifs025"]
REGIONAL_MODELS = {
    "CA": "gem_seamless",
    "JP": "jma_seamless",
    "AT": "icon_seamless",
    "CH": "icon_seamless",
    "DE": "icon_seamless",
    "FR": "icon_seamless",
    "IT": "icon_seamless",
}

# Countries covered by the NWS gridpoint snowfall source
EXTERNAL_SOURCE_COUNTRIES = {"US"}

# Snow-liquid ratio (SLR) anchors: linear between warm and cold anchors
SLR_WARM = 10.0
SLR_WARM_TEMP_C = 0.0
SLR_COLD = 20.0
SLR_COLD_TEMP_C = -15.0

# SLR adjustments
HUMIDITY_THRESHOLD_PCT = 80.0
HUMIDITY_SLR_BOOST = 0.10
WIND_THRESHOLD_KMH = 30.0
WIND_SLR_PENALTY = 0.15

# Width of the mixed rain/snow zone below the freezing level (tunable)
FREEZING_TRANSITION_BAND_M = 300.0

# Temperature thresholds used when no freezing level is available
SNOW_THRESHOLD_C = -1.0
RAIN_THRESHOLD_C = 2.0

# Open-Meteo splits precipitation with a fixed 7:1 ratio (cm of snow per cm of water)
PROVIDER_SLR = 7.0

# Weight of the external ground-truth signal in the daily snowfall blend
EXTERNAL_BLEND_WEIGHT = 0.3

# 3 inches
SNOW_DAY_THRESHOLD_CM = 7.62
