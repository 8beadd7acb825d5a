"""Multi-model statistical aggregation.

Pure functions over arrays; no I/O.
"""

from powdercast.aggregate.merge import (
    concat_series,
    merge_daily,
    merge_hourly,
    merge_rule,
    merge_series,
)
from powdercast.aggregate.stats import circular_mean, mean, median, mode, round2

__all__ = [
    "circular_mean",
    "concat_series",
    "mean",
    "median",
    "merge_daily",
    "merge_hourly",
    "merge_rule",
    "merge_series",
    "mode",
    "round2",
]
