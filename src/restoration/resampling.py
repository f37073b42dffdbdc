"""
Resampling of irregularly noted measurements onto a uniform distance grid.
"""

from typing import Optional

import numpy as np

from restoration.core import MeasurementSeries
from restoration.errors import InvalidInput


def resample(series: MeasurementSeries, target_interval: float) -> MeasurementSeries:
    """
    Linear interpolation onto ``start, start + Δ, ...`` inside the input range.
    No extrapolation: the output grid stops at the last input distance.
    """
    if len(series) < 2:
        raise InvalidInput("at least two points are required for resampling", "series", len(series))
    if not target_interval > 0:
        raise InvalidInput("target interval must be positive", "target_interval", target_interval)

    start, stop = float(series.distance[0]), float(series.distance[-1])
    # small slack so an end point that is an exact multiple survives rounding
    count = int(np.floor((stop - start) / target_interval + 1e-9)) + 1
    grid = start + np.arange(count) * target_interval
    values = np.interp(grid, series.distance, series.values)
    return MeasurementSeries(grid, values)


def ensure_uniform(
    series: MeasurementSeries,
    interval: Optional[float] = None,
    tolerance: float = 1e-6,
) -> MeasurementSeries:
    """
    Return ``series`` untouched when it is already uniform at ``interval``
    (or at its own spacing when ``interval`` is None), otherwise resample it.
    """
    if len(series) < 2:
        raise InvalidInput("at least two points are required", "series", len(series))
    if interval is None:
        if series.is_uniform(tolerance):
            return series
        interval = series.interval
    elif series.is_uniform(tolerance) and abs(series.interval - interval) <= tolerance * interval:
        return series
    return resample(series, interval)
