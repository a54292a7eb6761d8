"""Per-interval deltas for monotonically increasing counters."""

from __future__ import annotations

import math
from typing import Iterable, List, Optional

from models.records import ChartValuePoint


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def derive_differential_series(
    points: Iterable[ChartValuePoint], clamp_negative: bool = True
) -> List[ChartValuePoint]:
    """Turn a running counter into the increment observed at each reading.

    Points are processed in the given order. The first reading, and the first
    one after a gap, have no delta and come out as ``None``. A negative delta
    means the counter was reset: with ``clamp_negative`` the post-reset value
    itself (floored at zero) is emitted, otherwise the negative delta is kept.
    """
    previous: Optional[float] = None
    deltas: List[ChartValuePoint] = []

    for point in points:
        current = point.value
        if not _is_finite(current):
            previous = current
            deltas.append(ChartValuePoint(timestamp=point.timestamp, value=None))
            continue

        if not _is_finite(previous):
            previous = current
            deltas.append(ChartValuePoint(timestamp=point.timestamp, value=None))
            continue

        delta = current - previous
        if delta < 0 and clamp_negative:
            delta = max(0.0, current)

        previous = current
        deltas.append(ChartValuePoint(timestamp=point.timestamp, value=delta))

    return deltas
