"""Shared utilities for powdercast."""

from .dates import date_range_back, iso_date_in_timezone, resolve_timezone, today_iso_in_timezone

__all__ = [
    "date_range_back",
    "iso_date_in_timezone",
    "resolve_timezone",
    "today_iso_in_timezone",
]
