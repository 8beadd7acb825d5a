"""Blend of model daily snowfall with an independent ground-truth source.

The external signal corroborates the model ensemble rather than replacing it,
so it carries the smaller weight. Dates the external source does not cover
pass through unchanged.
"""

from dataclasses import replace
from typing import Iterable, Mapping, Sequence

from powdercast.aggregate.stats import round2
from powdercast.config import EXTERNAL_BLEND_WEIGHT
from powdercast.models import DailyMetric


def blend_snowfall(
    model_days: Iterable[tuple[str, float]],
    external_days: Mapping[str, float],
    external_weight: float = EXTERNAL_BLEND_WEIGHT,
) -> dict[str, float]:
    """Blend model daily snowfall with the external source.

    Args:
        model_days: (date, snowfall_sum) pairs from the model ensemble
        external_days: Sparse date -> snowfall map from the external source
        external_weight: Weight of the external value (0-1)

    Returns:
        Date -> blended snowfall, for every model day

    Raises:
        ValueError: If ``external_weight`` is outside [0, 1]
    """
    if not 0.0 <= external_weight <= 1.0:
        raise ValueError(f"external_weight must be within [0, 1], got {external_weight}")

    model_weight = 1.0 - external_weight
    result = {}
    for day, snowfall in model_days:
        external = external_days.get(day)
        if external is None:
            result[day] = snowfall
        else:
            result[day] = round2(model_weight * snowfall + external_weight * external)
    return result


def apply_blend(
    daily: Sequence[DailyMetric],
    external_days: Mapping[str, float],
    external_weight: float = EXTERNAL_BLEND_WEIGHT,
) -> list[DailyMetric]:
    """Daily metrics with snowfall sums replaced by the blended values."""
    blended = blend_snowfall(
        ((d.date, d.snowfall_sum) for d in daily), external_days, external_weight
    )
    return [replace(d, snowfall_sum=blended[d.date]) for d in daily]
