"""HTTP API for powdercast.

This module provides:

- create_app: Factory function to create the FastAPI application
- Response schemas for resorts, forecasts, history and errors

Note: create_app is lazy-loaded to allow importing schemas without FastAPI
installed.
"""

# Schemas can be imported directly (only depend on pydantic)
from powdercast.api.schemas import (
    BandForecastOut,
    DailyOut,
    ErrorResponse,
    HealthResponse,
    HistoryDayOut,
    HistoryResponse,
    HourlyOut,
    ResortForecastOut,
    ResortInfo,
)


# Lazy imports for FastAPI-dependent components
def __getattr__(name):
    """Lazy load FastAPI-dependent components."""
    if name == "create_app":
        from powdercast.api.app import create_app
        return create_app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "create_app",
    "BandForecastOut",
    "DailyOut",
    "ErrorResponse",
    "HealthResponse",
    "HistoryDayOut",
    "HistoryResponse",
    "HourlyOut",
    "ResortForecastOut",
    "ResortInfo",
]
