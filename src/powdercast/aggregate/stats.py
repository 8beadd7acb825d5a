"""Per-field merge statistics."""

from collections import Counter
from typing import Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean; 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


def median(values: Sequence[float]) -> float:
    """Median (average of the two middle values for even counts); 0.0 when empty."""
    if len(values) == 0:
        return 0.0
    return float(np.median(values))


def mode(values: Sequence[float]) -> float:
    """Most frequent value. Ties go to the value seen first."""
    if len(values) == 0:
        return 0.0
    counts = Counter(values)
    best = max(counts.values())
    for value in values:
        if counts[value] == best:
            return value
    return values[0]


def circular_mean(degrees: Sequence[float]) -> float:
    """Mean of compass angles in degrees, normalised to [0, 360).

    Averages the sine and cosine components separately so that 350 and 10
    average to 0 rather than 180.
    """
    if len(degrees) == 0:
        return 0.0
    radians = np.radians(np.asarray(degrees, dtype=float))
    angle = np.degrees(np.arctan2(np.sin(radians).mean(), np.cos(radians).mean()))
    return float(angle % 360.0) % 360.0


def round2(value: float) -> float:
    """Round to two decimals to drop floating-point averaging noise."""
    return round(float(value), 2)
